"""DexScreener API client for token profiles, orders and pairs.

This module provides a client for the three DexScreener endpoints a
monitoring pass needs. Responses are validated into pydantic models; an
unexpected shape raises MappingError instead of leaking partial data.

API Documentation: https://docs.dexscreener.com/api/reference
Rate Limits: 60 requests/minute for profiles, 300 for orders and pairs
"""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from dexpaid.core.exceptions import MappingError
from dexpaid.services.base import BaseAPIClient
from dexpaid.services.dexscreener.models import Order, TokenPair, TokenProfile

log = structlog.get_logger(__name__)


class DexScreenerClient(BaseAPIClient):
    """DexScreener API client.

    Every method makes exactly one request. A non-success status raises
    FetchError (from BaseAPIClient); deciding whether that is fatal is
    left to the caller.

    Endpoints used:
        - GET /token-profiles/latest/v1 - Latest token profiles
        - GET /orders/v1/{chainId}/{tokenAddress} - Paid orders for a token
        - GET /token-pairs/v1/{chainId}/{tokenAddress} - Pairs for a token

    Example:
        client = DexScreenerClient()
        try:
            profiles = await client.fetch_latest_profiles()
            for profile in profiles:
                print(f"Found: {profile.token_address}")
        finally:
            await client.close()
    """

    BASE_URL = "https://api.dexscreener.com"
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        base_url: str = BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize DexScreener client.

        Args:
            base_url: API base URL (overridable for tests and proxies).
            timeout: Request timeout in seconds.
        """
        super().__init__(
            service="dexscreener",
            base_url=base_url,
            timeout=timeout,
            headers={"Accept": "application/json"},
        )
        log.info("dexscreener_client_initialized", base_url=base_url)

    async def fetch_latest_profiles(self) -> list[TokenProfile]:
        """Fetch the latest token profiles across all chains.

        Entries that fail validation are logged and skipped so one
        malformed profile does not hide the others.

        Returns:
            List of TokenProfile models in upstream order.

        Raises:
            FetchError: If the API responds with a non-success status.
            MappingError: If the body is not a JSON array.
        """
        log.debug("fetching_latest_profiles")

        response = await self.get("/token-profiles/latest/v1")
        data = _json_list(response, "token profiles")

        profiles = []
        for item in data:
            try:
                profiles.append(TokenProfile.model_validate(item))
            except ValidationError as e:
                log.warning("token_profile_parse_error", error=str(e), item=item)

        log.info("token_profiles_fetched", total=len(data), parsed=len(profiles))
        return profiles

    async def fetch_orders(self, chain_id: str, token_address: str) -> list[Order]:
        """Fetch paid orders for a token.

        Args:
            chain_id: Chain identifier (e.g., "solana").
            token_address: Token contract/mint address.

        Returns:
            List of Order models, possibly empty.

        Raises:
            FetchError: If the API responds with a non-success status.
            MappingError: If the body or an order has an unexpected shape.
        """
        log.debug("fetching_orders", chain_id=chain_id, token_address=token_address)

        response = await self.get(f"/orders/v1/{chain_id}/{token_address}")
        data = _json_list(response, "orders")

        try:
            orders = [Order.model_validate(item) for item in data]
        except ValidationError as e:
            raise MappingError(f"orders for {token_address}: {e}") from e

        log.debug("orders_fetched", token_address=token_address, count=len(orders))
        return orders

    async def fetch_token_pairs(self, chain_id: str, token_address: str) -> list[TokenPair]:
        """Fetch trading pairs for a token.

        Args:
            chain_id: Chain identifier (e.g., "solana").
            token_address: Token contract/mint address.

        Returns:
            List of TokenPair models in upstream order, possibly empty.

        Raises:
            FetchError: If the API responds with a non-success status.
            MappingError: If the body or a pair has an unexpected shape.
        """
        log.debug("fetching_token_pairs", chain_id=chain_id, token_address=token_address)

        response = await self.get(f"/token-pairs/v1/{chain_id}/{token_address}")
        data = _json_list(response, "token pairs")

        try:
            pairs = [TokenPair.model_validate(item) for item in data]
        except ValidationError as e:
            raise MappingError(f"token pairs for {token_address}: {e}") from e

        log.debug("token_pairs_fetched", token_address=token_address, count=len(pairs))
        return pairs


def _json_list(response: httpx.Response, what: str) -> list[Any]:
    """Decode a response body and ensure it is a JSON array."""
    try:
        data = response.json()
    except ValueError as e:
        raise MappingError(f"{what}: response body is not valid JSON") from e
    if not isinstance(data, list):
        raise MappingError(f"{what}: expected a JSON array, got {type(data).__name__}")
    return data
