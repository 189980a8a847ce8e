"""Dex paid monitor: one fetch, filter, check, notify pass.

Architecture:
    Scheduler job (scheduler/jobs.py)
        │
        ▼
    DexPaidMonitor.run_pass (this module)
        │
        ├──► DexScreenerClient.fetch_latest_profiles
        ├──► is_target_chain
        ├──► AlertLedger (skip already alerted)
        ├──► PaymentChecker.has_approved_payment
        ├──► DetailFetcher.fetch_token_detail
        ├──► DiscordNotifier.notify
        └──► AlertLedger.record
"""

import time
from typing import Literal

import structlog
from pydantic import BaseModel

from dexpaid.core.chain_filter import DEFAULT_CHAIN, is_target_chain
from dexpaid.core.details import DetailFetcher
from dexpaid.core.ledger import AlertLedger
from dexpaid.core.payment import PaymentChecker
from dexpaid.services.dexscreener.client import DexScreenerClient
from dexpaid.services.dexscreener.models import TokenProfile
from dexpaid.services.discord.notifier import DiscordNotifier

log = structlog.get_logger(__name__)


class PassResult(BaseModel):
    """Summary of one monitoring pass.

    Attributes:
        listed: Profiles returned by the listing endpoint.
        on_chain: Profiles that passed the chain filter.
        already_alerted: Profiles skipped because the ledger had them.
        paid: Tokens with an approved order.
        notified: Alerts delivered.
        failed: Tokens whose processing raised.
        status: "completed", or "aborted" when the listing fetch failed.
        error_message: Error description if status is aborted.
        elapsed_seconds: Wall-clock duration of the pass.
    """

    listed: int = 0
    on_chain: int = 0
    already_alerted: int = 0
    paid: int = 0
    notified: int = 0
    failed: int = 0
    status: Literal["completed", "aborted"] = "completed"
    error_message: str | None = None
    elapsed_seconds: float = 0.0


class DexPaidMonitor:
    """Runs monitoring passes over the latest DexScreener profiles.

    The ledger is owned by the caller and injected, so tests can pass a
    pre-populated one and inspect it afterwards.

    Example:
        dex_client = DexScreenerClient()
        notifier = DiscordNotifier(webhook_url)
        monitor = DexPaidMonitor(dex_client, notifier, InMemoryAlertLedger())
        try:
            result = await monitor.run_pass()
        finally:
            await dex_client.close()
            await notifier.close()
    """

    def __init__(
        self,
        dex_client: DexScreenerClient,
        notifier: DiscordNotifier,
        ledger: AlertLedger,
        chain: str = DEFAULT_CHAIN,
        payment_checker: PaymentChecker | None = None,
        detail_fetcher: DetailFetcher | None = None,
    ) -> None:
        """Initialize monitor.

        Args:
            dex_client: DexScreenerClient instance.
            notifier: DiscordNotifier instance.
            ledger: Dedup ledger of alerted token addresses.
            chain: Target chain id.
            payment_checker: Defaults to an all-time PaymentChecker.
            detail_fetcher: Defaults to a DetailFetcher on the same client.
        """
        self._dex_client = dex_client
        self._notifier = notifier
        self._ledger = ledger
        self.chain = chain
        self._payment_checker = payment_checker or PaymentChecker(dex_client, chain=chain)
        self._detail_fetcher = detail_fetcher or DetailFetcher(dex_client, chain=chain)

    @property
    def ledger(self) -> AlertLedger:
        return self._ledger

    async def run_pass(self) -> PassResult:
        """Execute one monitoring pass.

        Workflow:
            1. Fetch latest profiles (failure aborts the pass)
            2. Keep profiles on the target chain
            3. Skip addresses already in the ledger
            4. Check for an approved order
            5. Fetch details, notify, record in the ledger

        Returns:
            PassResult with counts and status.

        Note:
            Does not raise. Failures of a single token are logged and
            counted; the remaining tokens still run.
        """
        log.debug("monitor_pass_started", chain=self.chain)
        started = time.monotonic()
        result = PassResult()

        try:
            profiles = await self._dex_client.fetch_latest_profiles()
        except Exception as e:
            log.error("monitor_listing_failed", error=str(e), error_type=type(e).__name__)
            result.status = "aborted"
            result.error_message = str(e)
            result.elapsed_seconds = time.monotonic() - started
            return result

        result.listed = len(profiles)
        handled: set[str] = set()

        for profile in profiles:
            if not is_target_chain(profile, self.chain):
                continue
            result.on_chain += 1

            address = profile.token_address
            if address in self._ledger or address in handled:
                result.already_alerted += 1
                continue
            handled.add(address)

            try:
                await self._process_token(profile, result)
            except Exception as e:
                result.failed += 1
                log.warning(
                    "monitor_token_failed",
                    token_address=address,
                    error=str(e),
                    error_type=type(e).__name__,
                )

        result.elapsed_seconds = time.monotonic() - started
        log.info(
            "monitor_pass_completed",
            listed=result.listed,
            on_chain=result.on_chain,
            already_alerted=result.already_alerted,
            paid=result.paid,
            notified=result.notified,
            failed=result.failed,
            ledger_size=len(self._ledger),
            elapsed_seconds=round(result.elapsed_seconds, 3),
        )
        return result

    async def _process_token(self, profile: TokenProfile, result: PassResult) -> None:
        address = profile.token_address

        if not await self._payment_checker.has_approved_payment(address):
            return
        result.paid += 1
        log.info("dex_paid_detected", token_address=address)

        detail = await self._detail_fetcher.fetch_token_detail(address)

        # A failed delivery is not recorded so the next pass tries again
        if await self._notifier.notify(detail, profile):
            self._ledger.record(address)
            result.notified += 1
