"""
Miniflux Notify - Entry point.

Polls a Miniflux server for unread entries and shows a desktop notification
when new ones arrive. Supports Linux (D-Bus) and Windows (WinRT).
"""

import argparse
import asyncio
import logging
import signal
import sys

import httpx
from pydantic import ValidationError

from miniflux_notify.client import MinifluxClient
from miniflux_notify.core import Settings
from miniflux_notify.notifiers import get_notifier
from miniflux_notify.poller import Poller

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="miniflux-notify",
        description="Desktop notifications for new unread Miniflux entries.",
    )
    parser.add_argument(
        "server",
        nargs="?",
        help="The fully qualified URL to the Miniflux server (default: $MINIFLUX_URL).",
    )
    parser.add_argument(
        "--interval",
        type=float,
        help="Seconds between polls (default: $POLL_INTERVAL or 10).",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: $LOG_LEVEL or INFO).",
    )
    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from the environment, with CLI values taking precedence."""
    overrides = {
        "miniflux_url": args.server,
        "poll_interval": args.interval,
        "log_level": args.log_level,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


async def serve(settings: Settings) -> None:
    """Run the poller until a stop signal arrives."""
    notifier = get_notifier(settings)

    async with httpx.AsyncClient() as http:
        client = MinifluxClient(client=http, settings=settings)
        if not await client.healthcheck():
            print(
                "Server was not found! Make sure it is running and the "
                "specified URL is correct.",
                file=sys.stderr,
            )

        poller = Poller(client=client, notifier=notifier, settings=settings)
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, poller.stop)

        await notifier.start()
        try:
            await poller.run()
        finally:
            await notifier.stop()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        settings = load_settings(args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass
    except (RuntimeError, OSError) as e:
        logger.debug("Fatal error", exc_info=True)
        print(f"miniflux-notify: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
