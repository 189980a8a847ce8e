"""Token detail lookup from the pairs endpoint."""

import structlog
from pydantic import ValidationError

from dexpaid.core.exceptions import EmptyResultError, MappingError
from dexpaid.services.dexscreener.client import DexScreenerClient
from dexpaid.services.dexscreener.models import TokenDetail

log = structlog.get_logger(__name__)


class DetailFetcher:
    """Builds a TokenDetail from the first pair returned for a token.

    The first pair is used as-is: there is no ranking by liquidity or
    volume, so the chosen pair is not guaranteed to be the most
    representative one.
    """

    def __init__(self, dex_client: DexScreenerClient, chain: str = "solana") -> None:
        self._dex_client = dex_client
        self.chain = chain

    async def fetch_token_detail(self, token_address: str) -> TokenDetail:
        """Fetch and normalize token details.

        Args:
            token_address: Token contract/mint address.

        Returns:
            TokenDetail built from the first pair.

        Raises:
            FetchError: If the pairs endpoint responds with a non-success status.
            EmptyResultError: If no pairs are returned.
            MappingError: If the first pair lacks a name or symbol.
        """
        pairs = await self._dex_client.fetch_token_pairs(self.chain, token_address)
        if not pairs:
            raise EmptyResultError(token_address)

        pair = pairs[0]
        try:
            detail = TokenDetail.from_pair(pair)
        except ValidationError as e:
            raise MappingError(f"pair {pair.pair_address} for {token_address}: {e}") from e

        log.debug(
            "token_detail_fetched",
            token_address=token_address,
            pair_address=pair.pair_address,
            dex_id=pair.dex_id,
            pairs=len(pairs),
        )
        return detail
