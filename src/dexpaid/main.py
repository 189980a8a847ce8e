"""DexPaid Alert - main entry point.

Usage:
    # Run the monitor until interrupted
    dexpaid-alert

    # Run a single pass and exit
    dexpaid-alert --once
"""

import argparse
import asyncio
import contextlib
import signal
import sys
from dataclasses import dataclass
from datetime import timedelta

import structlog
from pydantic import ValidationError

from dexpaid.config import Settings, get_settings
from dexpaid.config.logging import configure_logging
from dexpaid.core.details import DetailFetcher
from dexpaid.core.exceptions import ConfigurationError
from dexpaid.core.ledger import InMemoryAlertLedger
from dexpaid.core.monitor import DexPaidMonitor
from dexpaid.core.payment import PaymentChecker
from dexpaid.scheduler.runner import MonitorRunner
from dexpaid.services.dexscreener.client import DexScreenerClient
from dexpaid.services.discord.notifier import DiscordNotifier

log = structlog.get_logger()

EXIT_OK = 0
EXIT_PASS_ABORTED = 1
EXIT_CONFIG_ERROR = 2


@dataclass
class Components:
    """Wired application components sharing one set of HTTP clients."""

    dex_client: DexScreenerClient
    notifier: DiscordNotifier
    monitor: DexPaidMonitor

    async def close(self) -> None:
        await self.dex_client.close()
        await self.notifier.close()


def build_components(settings: Settings) -> Components:
    """Wire clients, checkers and the monitor from settings."""
    dex_client = DexScreenerClient(
        base_url=settings.dexscreener_base_url,
        timeout=settings.http_timeout_seconds,
    )
    notifier = DiscordNotifier(
        settings.discord_webhook_url,
        title=settings.alert_title,
        timeout=settings.http_timeout_seconds,
    )

    window = None
    if settings.approval_window_minutes is not None:
        window = timedelta(minutes=settings.approval_window_minutes)

    monitor = DexPaidMonitor(
        dex_client,
        notifier,
        InMemoryAlertLedger(),
        chain=settings.target_chain,
        payment_checker=PaymentChecker(
            dex_client, chain=settings.target_chain, approval_window=window
        ),
        detail_fetcher=DetailFetcher(dex_client, chain=settings.target_chain),
    )
    return Components(dex_client=dex_client, notifier=notifier, monitor=monitor)


def load_settings() -> Settings:
    """Load settings, converting validation failures to ConfigurationError."""
    try:
        return get_settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


async def run_once(settings: Settings) -> int:
    """Run a single pass and return an exit code."""
    components = build_components(settings)
    try:
        result = await components.monitor.run_pass()
    finally:
        await components.close()
    return EXIT_OK if result.status == "completed" else EXIT_PASS_ABORTED


async def run_forever(settings: Settings) -> int:
    """Run passes on the configured interval until SIGINT or SIGTERM."""
    components = build_components(settings)
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    log.info(
        "dexpaid_starting",
        chain=settings.target_chain,
        poll_interval_ms=settings.poll_interval_ms,
        approval_window_minutes=settings.approval_window_minutes,
    )

    runner = MonitorRunner(components.monitor, settings.poll_interval_seconds)
    runner.start()

    try:
        await stop.wait()
    finally:
        # Clients stay open until the in-flight pass has finished
        await runner.stop()
        await components.close()
        log.info(
            "shutdown_complete",
            passes=runner.passes,
            alerted=len(components.monitor.ledger),
        )
    return EXIT_OK


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="dexpaid-alert",
        description="Post Discord alerts for tokens whose Dex payment was approved.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single pass and exit (exit code 1 if the listing fetch failed)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Console script entry point."""
    args = parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(settings)

    try:
        if args.once:
            return asyncio.run(run_once(settings))
        return asyncio.run(run_forever(settings))
    except KeyboardInterrupt:
        log.info("interrupted_by_user")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
