"""Unit tests for DexPaidMonitor.run_pass.

Tests cover:
- A full pass against mocked DexScreener and Discord endpoints
- Deduplication across and within passes
- Isolation of per-token failures
- Aborting on listing failure
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from httpx import Response

from dexpaid.core.exceptions import EmptyResultError, FetchError
from dexpaid.core.ledger import InMemoryAlertLedger
from dexpaid.core.monitor import DexPaidMonitor
from dexpaid.services.dexscreener.models import TokenDetail, TokenProfile
from tests.fixtures.dexscreener_mock import (
    APPROVED_ORDER,
    DEX_BASE_URL,
    ETH_TOKEN,
    PENDING_ORDER,
    SOL_TOKEN,
    SOL_TOKEN_2,
    WEBHOOK_URL,
    make_pair_payload,
    make_profile_payload,
    orders_url,
)

PROFILES_URL = f"{DEX_BASE_URL}/token-profiles/latest/v1"


class TestRunPass:
    """End-to-end pass against respx-mocked endpoints."""

    @pytest.mark.asyncio
    async def test_notifies_paid_tokens_on_target_chain(self, monitor, ledger, mock_dexscreener):
        result = await monitor.run_pass()

        assert result.status == "completed"
        assert result.listed == 3
        assert result.on_chain == 2
        assert result.paid == 2
        assert result.notified == 2
        assert result.failed == 0
        assert SOL_TOKEN in ledger
        assert SOL_TOKEN_2 in ledger
        assert ETH_TOKEN not in ledger
        assert mock_dexscreener["orders"].call_count == 2
        assert mock_dexscreener["webhook"].call_count == 2

    @pytest.mark.asyncio
    async def test_second_pass_sends_nothing(self, monitor, mock_dexscreener):
        await monitor.run_pass()
        second = await monitor.run_pass()

        assert second.notified == 0
        assert second.already_alerted == 2
        assert mock_dexscreener["webhook"].call_count == 2
        # Already alerted tokens are not checked again
        assert mock_dexscreener["orders"].call_count == 2
        assert mock_dexscreener["pairs"].call_count == 2

    @pytest.mark.asyncio
    async def test_ledger_entries_skip_lookups(self, dex_client, notifier, mock_dexscreener):
        ledger = InMemoryAlertLedger({SOL_TOKEN})
        monitor = DexPaidMonitor(dex_client, notifier, ledger)

        result = await monitor.run_pass()

        assert result.already_alerted == 1
        assert result.notified == 1
        called_paths = [call.request.url.path for call in mock_dexscreener.calls]
        assert f"/orders/v1/solana/{SOL_TOKEN}" not in called_paths
        assert f"/token-pairs/v1/solana/{SOL_TOKEN}" not in called_paths
        assert f"/orders/v1/solana/{SOL_TOKEN_2}" in called_paths

    @pytest.mark.asyncio
    async def test_listing_failure_aborts_pass(self, monitor, ledger, mock_api):
        mock_api.get(PROFILES_URL).mock(return_value=Response(502))

        result = await monitor.run_pass()

        assert result.status == "aborted"
        assert "Bad Gateway" in (result.error_message or "")
        assert len(ledger) == 0
        assert len(mock_api.calls) == 1

    @pytest.mark.asyncio
    async def test_unpaid_token_not_notified(self, monitor, ledger, mock_api):
        mock_api.get(PROFILES_URL).mock(return_value=Response(200, json=[make_profile_payload()]))
        mock_api.get(orders_url(SOL_TOKEN)).mock(return_value=Response(200, json=[PENDING_ORDER]))
        webhook = mock_api.post(WEBHOOK_URL).mock(return_value=Response(204))

        result = await monitor.run_pass()

        assert result.paid == 0
        assert result.notified == 0
        assert not webhook.called
        assert SOL_TOKEN not in ledger

    @pytest.mark.asyncio
    async def test_empty_pairs_isolated_to_one_token(self, monitor, ledger, mock_dexscreener):
        def _pairs(request: httpx.Request) -> Response:
            if request.url.path.endswith(SOL_TOKEN):
                return Response(200, json=[])
            return Response(200, json=[make_pair_payload(SOL_TOKEN_2)])

        mock_dexscreener["pairs"].mock(side_effect=_pairs)

        result = await monitor.run_pass()

        assert result.failed == 1
        assert result.notified == 1
        assert SOL_TOKEN not in ledger
        assert SOL_TOKEN_2 in ledger
        assert mock_dexscreener["webhook"].call_count == 1

    @pytest.mark.asyncio
    async def test_malformed_orders_isolated_to_one_token(self, monitor, ledger, mock_dexscreener):
        def _orders(request: httpx.Request) -> Response:
            if request.url.path.endswith(SOL_TOKEN):
                return Response(200, json={"unexpected": True})
            return Response(200, json=[APPROVED_ORDER])

        mock_dexscreener["orders"].mock(side_effect=_orders)

        result = await monitor.run_pass()

        assert result.failed == 1
        assert result.notified == 1
        assert SOL_TOKEN_2 in ledger

    @pytest.mark.asyncio
    async def test_failed_delivery_retried_next_pass(self, monitor, ledger, mock_dexscreener):
        mock_dexscreener["webhook"].mock(return_value=Response(500))

        first = await monitor.run_pass()

        assert first.paid == 2
        assert first.notified == 0
        assert len(ledger) == 0

        mock_dexscreener["webhook"].mock(return_value=Response(204))
        second = await monitor.run_pass()

        assert second.notified == 2
        assert len(ledger) == 2

    @pytest.mark.asyncio
    async def test_duplicate_listing_entries_notified_once(self, monitor, mock_api):
        mock_api.get(PROFILES_URL).mock(
            return_value=Response(200, json=[make_profile_payload(), make_profile_payload()])
        )
        orders = mock_api.get(orders_url(SOL_TOKEN)).mock(return_value=Response(500))

        result = await monitor.run_pass()

        assert result.on_chain == 2
        assert result.already_alerted == 1
        assert orders.call_count == 1

    @pytest.mark.asyncio
    async def test_url_prefix_profile_is_processed(self, monitor, ledger, mock_dexscreener):
        profile = make_profile_payload(SOL_TOKEN)
        del profile["chainId"]
        mock_dexscreener["profiles"].mock(return_value=Response(200, json=[profile]))

        result = await monitor.run_pass()

        assert result.on_chain == 1
        assert SOL_TOKEN in ledger


class TestRunPassWithFakes:
    """Pass wiring checked against mocked collaborators."""

    def _monitor(self, profiles, ledger, paid=True, detail=None, detail_error=None, sent=True):
        dex_client = MagicMock()
        dex_client.fetch_latest_profiles = AsyncMock(return_value=profiles)
        notifier = MagicMock()
        notifier.notify = AsyncMock(return_value=sent)
        payment_checker = MagicMock()
        payment_checker.has_approved_payment = AsyncMock(return_value=paid)
        detail_fetcher = MagicMock()
        detail_fetcher.fetch_token_detail = AsyncMock(
            return_value=detail or TokenDetail(name="Foo", symbol="FOO"),
            side_effect=detail_error,
        )
        monitor = DexPaidMonitor(
            dex_client,
            notifier,
            ledger,
            payment_checker=payment_checker,
            detail_fetcher=detail_fetcher,
        )
        return monitor, notifier, payment_checker, detail_fetcher

    @pytest.mark.asyncio
    async def test_ledger_hit_never_reaches_checker_or_fetcher(self):
        profiles = [TokenProfile.model_validate(make_profile_payload(SOL_TOKEN))]
        monitor, notifier, checker, fetcher = self._monitor(
            profiles, InMemoryAlertLedger({SOL_TOKEN})
        )

        await monitor.run_pass()

        checker.has_approved_payment.assert_not_called()
        fetcher.fetch_token_detail.assert_not_called()
        notifier.notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_notify_receives_detail_and_profile(self):
        profile = TokenProfile.model_validate(make_profile_payload(SOL_TOKEN))
        detail = TokenDetail(name="Foo", symbol="FOO", market_cap=1000)
        ledger = InMemoryAlertLedger()
        monitor, notifier, _, _ = self._monitor([profile], ledger, detail=detail)

        await monitor.run_pass()

        notifier.notify.assert_awaited_once_with(detail, profile)
        assert SOL_TOKEN in ledger

    @pytest.mark.asyncio
    async def test_detail_error_skips_notify(self):
        profiles = [TokenProfile.model_validate(make_profile_payload(SOL_TOKEN))]
        ledger = InMemoryAlertLedger()
        monitor, notifier, _, _ = self._monitor(
            profiles, ledger, detail_error=EmptyResultError(SOL_TOKEN)
        )

        result = await monitor.run_pass()

        assert result.failed == 1
        notifier.notify.assert_not_called()
        assert len(ledger) == 0

    @pytest.mark.asyncio
    async def test_fetch_error_on_detail_does_not_stop_pass(self):
        profiles = [
            TokenProfile.model_validate(make_profile_payload(SOL_TOKEN)),
            TokenProfile.model_validate(make_profile_payload(SOL_TOKEN_2)),
        ]
        ledger = InMemoryAlertLedger()
        monitor, notifier, _, fetcher = self._monitor(profiles, ledger)
        fetcher.fetch_token_detail.side_effect = [
            FetchError(service="dexscreener", reason="Internal Server Error", status_code=500),
            TokenDetail(name="Bar", symbol="BAR"),
        ]

        result = await monitor.run_pass()

        assert result.failed == 1
        assert result.notified == 1
        assert list(ledger) == [SOL_TOKEN_2]

    @pytest.mark.asyncio
    async def test_unexpected_listing_error_aborts(self):
        ledger = InMemoryAlertLedger()
        monitor, notifier, checker, _ = self._monitor([], ledger)
        monitor._dex_client.fetch_latest_profiles.side_effect = RuntimeError("boom")

        result = await monitor.run_pass()

        assert result.status == "aborted"
        assert result.error_message == "boom"
        checker.has_approved_payment.assert_not_called()
