"""Ports for fetching deal data from external providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(slots=True, frozen=True)
class IndexedDeal:
    """A deal as reported by the deal-index API."""

    deal_id: int
    piece_cid: str
    provider: str
    client: str


@dataclass(slots=True)
class DealIndexPage:
    """One page of index results, newest deal first.

    ``deals`` is ``None`` when the provider returned no result array at all,
    which means there is nothing (more) to sync for the account.
    """

    deals: list[IndexedDeal] | None = field(default_factory=list[IndexedDeal])
    total: int | None = None

    @property
    def has_results(self) -> bool:
        return self.deals is not None


@dataclass(slots=True, frozen=True)
class ChainDealState:
    """Authoritative on-chain state of a published deal."""

    deal_id: int
    piece_cid: str
    end_epoch: int
    slash_epoch: int

    @property
    def slashed(self) -> bool:
        return self.slash_epoch > 0


@runtime_checkable
class DealIndexSource(Protocol):
    """Paginated deal-index provider; each call is retried by the implementation."""

    async def fetch_page(self, client: str, page: int, page_size: int) -> DealIndexPage: ...


@runtime_checkable
class ChainStateSource(Protocol):
    """Point lookup of chain state; each call is retried by the implementation.

    Returns ``None`` when the chain does not know the deal id.
    """

    async def get_deal(self, deal_id: int) -> ChainDealState | None: ...


__all__ = [
    "ChainDealState",
    "ChainStateSource",
    "DealIndexPage",
    "DealIndexSource",
    "IndexedDeal",
]
