"""Base notifier protocol definition."""

from typing import Protocol

from miniflux_notify.core import Notice


class Notifier(Protocol):
    """Platform-agnostic desktop notification interface."""

    async def start(self) -> None:
        """Connect to the platform notification service."""
        ...

    async def notify(self, notice: Notice) -> None:
        """Display a notification.

        Args:
            notice: The notification to show.

        Raises:
            NotificationError: If the platform refused or failed to show it.
        """
        ...

    async def stop(self) -> None:
        """Disconnect and clean up resources."""
        ...

    @property
    def is_running(self) -> bool:
        """Whether the notifier is currently connected."""
        ...
