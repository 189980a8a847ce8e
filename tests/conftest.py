"""Shared pytest fixtures for DexPaid tests.

This module provides fixtures for:
- Environment configuration (webhook URL, cleared settings cache)
- DexScreener and Discord mocking (tests/fixtures/dexscreener_mock.py)
- Real clients and models wired to the mocked endpoints

Usage:
    async def test_something(dex_client, mock_api):
        mock_api.get(...).mock(return_value=Response(200, json=[]))
"""

import os
from collections.abc import AsyncGenerator, Generator

import pytest

from dexpaid.config.settings import get_settings
from dexpaid.core.ledger import InMemoryAlertLedger
from dexpaid.core.monitor import DexPaidMonitor
from dexpaid.services.dexscreener.client import DexScreenerClient
from dexpaid.services.dexscreener.models import TokenDetail, TokenProfile
from dexpaid.services.discord.notifier import DiscordNotifier
from tests.fixtures.dexscreener_mock import (
    DEX_BASE_URL,
    FIXED_NOW,
    WEBHOOK_URL,
    make_profile_payload,
    mock_api,  # noqa: F401  (fixture)
    mock_dexscreener,  # noqa: F401  (fixture)
)


# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Set up test environment variables."""
    original_env = os.environ.copy()

    os.environ.setdefault("DISCORD_WEBHOOK_URL", WEBHOOK_URL)

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Drop the cached Settings so each test sees its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sol_profile() -> TokenProfile:
    """Solana token profile."""
    return TokenProfile.model_validate(make_profile_payload())


@pytest.fixture
def token_detail() -> TokenDetail:
    """Detail matching make_pair_payload() defaults."""
    return TokenDetail(
        name="Foo",
        symbol="FOO",
        image_url="http://x/i.png",
        market_cap=1000,
        m5_buys=5,
        m5_sells=2,
        m5_price_change=12.345,
    )


# =============================================================================
# Clients
# =============================================================================


@pytest.fixture
async def dex_client() -> AsyncGenerator[DexScreenerClient, None]:
    """DexScreener client, closed after the test."""
    client = DexScreenerClient(base_url=DEX_BASE_URL)
    yield client
    await client.close()


@pytest.fixture
async def notifier() -> AsyncGenerator[DiscordNotifier, None]:
    """Discord notifier with a frozen clock, closed after the test."""
    client = DiscordNotifier(WEBHOOK_URL, clock=lambda: FIXED_NOW)
    yield client
    await client.close()


@pytest.fixture
def ledger() -> InMemoryAlertLedger:
    """Empty dedup ledger."""
    return InMemoryAlertLedger()


@pytest.fixture
def monitor(
    dex_client: DexScreenerClient,
    notifier: DiscordNotifier,
    ledger: InMemoryAlertLedger,
) -> DexPaidMonitor:
    """Monitor wired to real clients (mock the HTTP layer with respx)."""
    return DexPaidMonitor(dex_client, notifier, ledger, chain="solana")
