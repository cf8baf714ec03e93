"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import (
    ChainDealState,
    ChainStateSource,
    DealIndexPage,
    DealIndexSource,
    IndexedDeal,
)
from .persistence import DealStateRepository, Repository, WatchListRepository
from .unit_of_work import (
    DealTrackingRepositories,
    DealTrackingUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ChainDealState",
    "ChainStateSource",
    "DealIndexPage",
    "DealIndexSource",
    "DealStateRepository",
    "DealTrackingRepositories",
    "DealTrackingUnitOfWork",
    "IndexedDeal",
    "Repository",
    "RepositoryCollection",
    "UnitOfWork",
    "WatchListRepository",
]
