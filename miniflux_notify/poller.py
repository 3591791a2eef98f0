"""Poller: checks Miniflux on a timer and notifies about new unread entries."""

import asyncio
import logging
from dataclasses import dataclass

from miniflux_notify.client import MinifluxClient
from miniflux_notify.core import (
    Entries,
    MinifluxError,
    Notice,
    NotificationError,
    Settings,
)
from miniflux_notify.notifiers.base import Notifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollState:
    """Result of the last successful poll.

    ``unread_count`` is None until the first successful poll establishes a
    baseline.
    """

    unread_count: int | None = None
    seen_hashes: frozenset[str] = frozenset()

    @classmethod
    def from_entries(cls, entries: Entries) -> "PollState":
        return cls(
            unread_count=entries.total,
            seen_hashes=frozenset(entry.hash for entry in entries.entries),
        )


def build_notices(
    entries: Entries, previous: PollState, settings: Settings
) -> list[Notice]:
    """Build the notifications for an increased unread count.

    One notice per new entry while there are few enough of them, otherwise
    a single notice summarizing how many entries arrived.
    """
    delta = entries.total - (previous.unread_count or 0)
    new_entries = [e for e in entries.entries if e.hash not in previous.seen_hashes]

    if 0 < len(new_entries) <= settings.max_entry_notifications:
        return [
            Notice(
                summary=f"New RSS Entry from {entry.source or settings.app_name}",
                body=entry.title,
                url=entry.url or None,
            )
            for entry in new_entries
        ]

    noun = "entry" if delta == 1 else "entries"
    return [
        Notice(
            summary=f"{delta} new unread {noun}",
            body=f"{entries.total} unread entries on Miniflux",
            url=f"{settings.miniflux_url}/unread",
        )
    ]


class Poller:
    """Polls the unread entries endpoint and notifies when the count grows."""

    def __init__(self, client: MinifluxClient, notifier: Notifier, settings: Settings):
        self.client = client
        self.notifier = notifier
        self.settings = settings
        self.state = PollState()
        self._stop_event = asyncio.Event()
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether the polling loop is active."""
        return self._running

    async def poll_once(self) -> Entries:
        """Fetch the current unread entries; ``total`` is the unread count.

        Raises:
            MinifluxError: If the server could not be queried.
        """
        return await self.client.get_unread_entries()

    async def run_cycle(self) -> list[Notice]:
        """Poll once, update the state and show notifications.

        Returns:
            The notices that were triggered by this cycle.
        """
        try:
            entries = await self.poll_once()
        except MinifluxError as e:
            logger.error(f"Failed to get unread entries: {e}")
            return []

        previous = self.state
        notices: list[Notice] = []
        if previous.unread_count is None:
            logger.info(f"Baseline established at {entries.total} unread entries")
        elif entries.total > previous.unread_count:
            notices = build_notices(entries, previous, self.settings)

        self.state = PollState.from_entries(entries)

        for notice in notices:
            await self._send(notice)
        return notices

    async def _send(self, notice: Notice) -> None:
        try:
            await self.notifier.notify(notice)
        except NotificationError as e:
            logger.error(f"Failed to show notification {notice.summary!r}: {e}")
        except Exception as e:
            logger.exception(f"Error showing notification {notice.summary!r}: {e}")

    async def run(self) -> None:
        """Poll until stop() is called.

        The first poll happens immediately, then one poll per interval.
        """
        self._running = True
        logger.info(
            f"Polling {self.settings.miniflux_url} "
            f"every {self.settings.poll_interval}s"
        )
        try:
            while not self._stop_event.is_set():
                await self.run_cycle()
                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(), timeout=self.settings.poll_interval
                    )
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            logger.info("Stopped polling")

    def stop(self) -> None:
        """Ask the polling loop to exit."""
        self._stop_event.set()
