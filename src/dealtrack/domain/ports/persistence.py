"""Ports for persisting deal records and the watch list."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from dealtrack.domain.model import DealState, DealStatus, TrackedAccount

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class DealStateRepository(Repository[DealState], Protocol):
    """Persistence contract for deal records."""

    def get(self, record_id: UUID) -> DealState | None: ...

    def latest_deal_id(self, client: str) -> int:
        """Largest stored deal id for the client, ``0`` when it has none."""
        ...

    def publish_proposed(
        self,
        *,
        piece_cid: str,
        provider: str,
        client: str,
        deal_id: int,
    ) -> bool:
        """Move the first matching ``proposed`` record to ``published``.

        Returns whether a record matched. Never creates records.
        """
        ...

    def published_for_client(self, client: str) -> Sequence[DealState]: ...

    def update_chain_state(
        self,
        record_id: UUID,
        *,
        state: DealStatus,
        piece_cid: str,
        expiration: int,
    ) -> bool: ...

    def mark_slashed(self, record_id: UUID) -> bool: ...


@runtime_checkable
class WatchListRepository(Repository[TrackedAccount], Protocol):
    """Persistence contract for tracked accounts."""

    def tracked_clients(self) -> list[str]: ...

    def track(self, address: str) -> bool: ...

    def untrack(self, address: str) -> bool: ...
