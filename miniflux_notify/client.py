"""Miniflux REST API client."""

import logging

import httpx
from pydantic import ValidationError

from miniflux_notify.core import Entries, MinifluxError, Settings

logger = logging.getLogger(__name__)


class MinifluxClient:
    """Queries a Miniflux server for unread entries."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings):
        self.client = client
        self.settings = settings

    @property
    def _headers(self) -> dict[str, str]:
        return {"X-Auth-Token": self.settings.miniflux_api_key}

    async def healthcheck(self) -> bool:
        """Check that the server is reachable and the URL points at Miniflux.

        Returns:
            True if the server answered the healthcheck with a success status.
        """
        logger.info("Checking for server existence")
        try:
            response = await self.client.get(
                f"{self.settings.miniflux_url}/healthcheck",
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Healthcheck failed for {self.settings.miniflux_url}: {e}")
            return False
        return True

    async def get_unread_entries(self) -> Entries:
        """Fetch unread entries, newest first.

        Raises:
            MinifluxError: On transport errors, non-2xx responses or a
                payload that does not look like an entries listing.
        """
        try:
            response = await self.client.get(
                f"{self.settings.miniflux_url}/v1/entries",
                params={
                    "status": "unread",
                    "direction": "desc",
                    "limit": self.settings.entry_limit,
                },
                headers=self._headers,
                timeout=self.settings.request_timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MinifluxError(
                f"Miniflux returned {e.response.status_code} for unread entries"
            ) from e
        except httpx.HTTPError as e:
            raise MinifluxError(f"Failed to fetch unread entries: {e}") from e

        try:
            entries = Entries.model_validate_json(response.content)
        except ValidationError as e:
            raise MinifluxError(f"Invalid entries payload from Miniflux: {e}") from e

        logger.info(f"Found {entries.total} unread entries")
        return entries
