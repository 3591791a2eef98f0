"""Platform-specific desktop notifiers."""

import sys

from miniflux_notify.core import Settings
from miniflux_notify.notifiers.base import Notifier


def get_notifier(settings: Settings) -> Notifier:
    """Return the appropriate notifier for the current platform."""
    if sys.platform == "linux":
        from miniflux_notify.notifiers.linux import LinuxNotifier

        return LinuxNotifier(
            app_name=settings.app_name, timeout=settings.notification_timeout
        )
    elif sys.platform == "win32":
        from miniflux_notify.notifiers.windows import WindowsNotifier

        return WindowsNotifier(app_name=settings.app_name)
    else:
        raise RuntimeError(f"Unsupported platform: {sys.platform}")


__all__ = ["Notifier", "get_notifier"]
