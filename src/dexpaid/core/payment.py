"""Dex paid check for a token.

A notification cannot be taken back, so anything short of a confirmed
approved order counts as "not paid": upstream failures return False
instead of raising.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import structlog

from dexpaid.core.exceptions import FetchError
from dexpaid.services.dexscreener.client import DexScreenerClient
from dexpaid.services.dexscreener.models import Order

log = structlog.get_logger(__name__)


class PaymentChecker:
    """Checks the orders endpoint for an approved paid placement.

    Attributes:
        chain: Chain id used in the orders path.
        approval_window: When set, only orders paid within this window
            count. None counts any approved order.

    Example:
        checker = PaymentChecker(dex_client, chain="solana")
        if await checker.has_approved_payment(address):
            ...
    """

    def __init__(
        self,
        dex_client: DexScreenerClient,
        chain: str = "solana",
        approval_window: timedelta | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize payment checker.

        Args:
            dex_client: DexScreenerClient instance.
            chain: Chain id used in the orders path.
            approval_window: Recency window for approved orders, or None.
            clock: Returns the current UTC time (injectable for tests).
        """
        self._dex_client = dex_client
        self.chain = chain
        self.approval_window = approval_window
        self._clock = clock or (lambda: datetime.now(UTC))

    async def has_approved_payment(self, token_address: str) -> bool:
        """Check whether a token has an approved order.

        Args:
            token_address: Token contract/mint address.

        Returns:
            True if at least one order is approved (and recent enough when
            a window is configured). False on a non-success response.

        Raises:
            MappingError: If the orders response has an unexpected shape.
        """
        try:
            orders = await self._dex_client.fetch_orders(self.chain, token_address)
        except FetchError as e:
            log.warning(
                "orders_fetch_failed",
                token_address=token_address,
                status_code=e.status_code,
                reason=e.reason,
            )
            return False

        paid = any(self._counts(order) for order in orders)
        log.debug(
            "payment_checked",
            token_address=token_address,
            orders=len(orders),
            paid=paid,
        )
        return paid

    def _counts(self, order: Order) -> bool:
        if not order.is_approved:
            return False
        if self.approval_window is None:
            return True

        paid_at = order.paid_at
        if paid_at is None:
            return False
        return self._clock() - paid_at <= self.approval_window
