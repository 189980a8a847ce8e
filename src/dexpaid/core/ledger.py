"""Dedup ledger of token addresses that were already alerted."""

from collections.abc import Iterator
from typing import Protocol

import structlog

log = structlog.get_logger(__name__)


class AlertLedger(Protocol):
    """Set of token addresses already notified.

    Once an address is recorded it must never be notified again for the
    lifetime of the ledger.
    """

    def __contains__(self, token_address: object) -> bool: ...

    def record(self, token_address: str) -> None: ...

    def __len__(self) -> int: ...


class InMemoryAlertLedger:
    """Unbounded in-memory ledger. Never evicts, lost on restart.

    Only mutated from the event loop thread, so no lock is taken.
    """

    def __init__(self, token_addresses: set[str] | None = None) -> None:
        self._seen: set[str] = set(token_addresses or ())

    def __contains__(self, token_address: object) -> bool:
        return token_address in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __iter__(self) -> Iterator[str]:
        return iter(self._seen)

    def record(self, token_address: str) -> None:
        """Mark a token address as alerted."""
        if token_address not in self._seen:
            self._seen.add(token_address)
            log.debug("ledger_recorded", token_address=token_address, size=len(self._seen))
