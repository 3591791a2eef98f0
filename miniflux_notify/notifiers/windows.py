"""Windows WinRT toast notifier."""

import logging
from xml.sax.saxutils import escape, quoteattr

from miniflux_notify.core import Notice, NotificationError

logger = logging.getLogger(__name__)

# AppUserModelID of PowerShell, registered on every Windows install. Unpackaged
# apps cannot show toasts under an unregistered id.
POWERSHELL_APP_ID = (
    "{1AC14E77-02E7-4E5D-B744-2EB1AE5198B7}\\WindowsPowerShell\\v1.0\\powershell.exe"
)


def build_toast_xml(notice: Notice, app_name: str) -> str:
    """Render a notice as a ToastGeneric XML document."""
    launch = ""
    actions = ""
    if notice.url:
        launch = f" activationType='protocol' launch={quoteattr(notice.url)}"
        actions = (
            "<actions>"
            "<action content='Open in web browser' activationType='protocol' "
            f"arguments={quoteattr(notice.url)}/>"
            "</actions>"
        )
    return (
        f"<toast{launch}>"
        "<visual><binding template='ToastGeneric'>"
        f"<text>{escape(notice.summary)}</text>"
        f"<text>{escape(notice.body)}</text>"
        f"<text placement='attribution'>{escape(app_name)}</text>"
        "</binding></visual>"
        f"{actions}"
        "</toast>"
    )


class WindowsNotifier:
    """Windows notifier using WinRT ToastNotificationManager."""

    def __init__(self, app_name: str = "Miniflux", app_id: str = POWERSHELL_APP_ID):
        self.app_name = app_name
        self.app_id = app_id
        self._running = False
        self._notifier = None
        self._xml_document = None
        self._toast_notification = None

    @property
    def is_running(self) -> bool:
        """Whether the notifier is currently active."""
        return self._running

    async def start(self) -> None:
        """Create the toast notifier.

        Raises:
            RuntimeError: If the winrt packages are not installed.
        """
        # Windows-specific imports are done lazily to avoid import errors on Linux
        try:
            from winrt.windows.data.xml.dom import XmlDocument
            from winrt.windows.ui.notifications import (
                ToastNotification,
                ToastNotificationManager,
            )
        except ImportError as e:
            raise RuntimeError(
                "Windows notification support requires winrt packages. "
                "Install with: pip install 'miniflux-notify[windows]'"
            ) from e

        self._xml_document = XmlDocument
        self._toast_notification = ToastNotification
        self._notifier = ToastNotificationManager.create_toast_notifier_with_id(
            self.app_id
        )
        self._running = True
        logger.info("Created Windows toast notifier")

    async def stop(self) -> None:
        """Release the toast notifier."""
        self._running = False
        self._notifier = None
        logger.info("Stopped Windows toast notifier")

    async def notify(self, notice: Notice) -> None:
        """Show a toast notification."""
        if self._notifier is None:
            raise NotificationError("Notifier is not started")

        try:
            document = self._xml_document()
            document.load_xml(build_toast_xml(notice, self.app_name))
            self._notifier.show(self._toast_notification(document))
        except OSError as e:
            raise NotificationError(f"Failed to show toast: {e}") from e

        logger.info(f"Sent notification: {notice.summary}")
