"""Linux D-Bus notifier."""

import contextlib
import logging
import webbrowser

from dbus_fast import BusType, Message, MessageType
from dbus_fast.aio import MessageBus
from dbus_fast.errors import AuthError, InvalidAddressError

from miniflux_notify.core import Notice, NotificationError

logger = logging.getLogger(__name__)

NOTIFICATIONS_BUS_NAME = "org.freedesktop.Notifications"
NOTIFICATIONS_PATH = "/org/freedesktop/Notifications"
NOTIFICATIONS_INTERFACE = "org.freedesktop.Notifications"

OPEN_ACTIONS = ("default", "open")


class LinuxNotifier:
    """Linux notifier using the freedesktop notification service over D-Bus."""

    def __init__(self, app_name: str = "Miniflux", timeout: int = -1) -> None:
        self.app_name = app_name
        self.timeout = timeout
        self._bus: MessageBus | None = None
        self._running = False
        self._started = False
        self._subscribed = False
        # notification id -> url opened when an action is invoked
        self._pending: dict[int, str] = {}

    @property
    def is_running(self) -> bool:
        """Whether the notifier is currently connected."""
        return self._running

    async def start(self) -> None:
        """Connect to the session bus and subscribe to notification signals.

        Raises:
            RuntimeError: If the session bus is unavailable.
        """
        self._started = True
        await self._connect()

    async def _connect(self) -> None:
        match_rule = f"type='signal',interface='{NOTIFICATIONS_INTERFACE}'"
        try:
            self._bus = await MessageBus(bus_type=BusType.SESSION).connect()
            reply = await self._bus.call(
                Message(
                    destination="org.freedesktop.DBus",
                    path="/org/freedesktop/DBus",
                    interface="org.freedesktop.DBus",
                    member="AddMatch",
                    signature="s",
                    body=[match_rule],
                )
            )
        except (InvalidAddressError, AuthError, OSError, EOFError) as e:
            self._drop_connection()
            raise RuntimeError(f"Cannot connect to the D-Bus session bus: {e}") from e

        self._running = True

        if reply.message_type == MessageType.ERROR:
            logger.error(f"Failed to add match rule, actions disabled: {reply.body}")
            return

        self._bus.add_message_handler(self._handle_message)
        self._subscribed = True
        logger.info("Connected to D-Bus notification service")

    def _drop_connection(self) -> None:
        bus, self._bus = self._bus, None
        self._running = False
        self._subscribed = False
        self._pending.clear()
        if bus:
            # The socket may already be gone
            with contextlib.suppress(OSError):
                bus.disconnect()

    async def stop(self) -> None:
        """Disconnect from D-Bus."""
        self._started = False
        if self._bus:
            self._drop_connection()
            logger.info("Disconnected from D-Bus")

    async def notify(self, notice: Notice) -> None:
        """Send a Notify call to the notification server.

        Reconnects first if an earlier call lost the bus connection.
        """
        if not self._started:
            raise NotificationError("Notifier is not started")

        if self._bus is None:
            logger.info("Reconnecting to D-Bus")
            try:
                await self._connect()
            except RuntimeError as e:
                raise NotificationError(str(e)) from e

        actions: list[str] = []
        if notice.url:
            actions = ["default", "Open", "open", "Open in web browser"]

        # Signature: susssasa{sv}i
        # app_name, replaces_id, icon, summary, body, actions, hints, timeout
        try:
            reply = await self._bus.call(
                Message(
                    destination=NOTIFICATIONS_BUS_NAME,
                    path=NOTIFICATIONS_PATH,
                    interface=NOTIFICATIONS_INTERFACE,
                    member="Notify",
                    signature="susssasa{sv}i",
                    body=[
                        self.app_name,
                        0,
                        "",
                        notice.summary,
                        notice.body,
                        actions,
                        {},
                        self.timeout,
                    ],
                )
            )
        except (OSError, EOFError) as e:
            self._drop_connection()
            raise NotificationError(f"Lost connection to D-Bus: {e}") from e

        if reply.message_type == MessageType.ERROR:
            raise NotificationError(f"Notify call failed: {reply.body}")

        notification_id = reply.body[0]
        # Without the signal subscription nothing would ever remove the entry
        if notice.url and self._subscribed:
            self._pending[notification_id] = notice.url
        logger.info(f"Sent notification {notification_id}: {notice.summary}")

    def _handle_message(self, msg: Message) -> bool:
        """Handle ActionInvoked and NotificationClosed signals."""
        if (
            msg.message_type != MessageType.SIGNAL
            or msg.interface != NOTIFICATIONS_INTERFACE
        ):
            return False

        if msg.member == "ActionInvoked":
            notification_id, action_key = msg.body[:2]
            logger.debug(f"Action {action_key!r} on notification {notification_id}")
            url = self._pending.pop(notification_id, None)
            if url and action_key in OPEN_ACTIONS:
                self._open(url)
        elif msg.member == "NotificationClosed":
            logger.debug(f"Notification {msg.body[0]} closed")
            self._pending.pop(msg.body[0], None)

        return False  # Don't consume the message

    def _open(self, url: str) -> None:
        try:
            if not webbrowser.open(url):
                logger.error(f"No web browser available to open {url}")
        except webbrowser.Error as e:
            logger.error(f"Failed to open {url}: {e}")
