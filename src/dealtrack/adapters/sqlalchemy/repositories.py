"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from dealtrack.adapters.sqlalchemy.mappings import deal_state_table, deal_tracking_state_table
from dealtrack.domain.model import (
    UNASSIGNED_DEAL_ID,
    DealState,
    DealStatus,
    StateType,
    TrackedAccount,
    TrackingValue,
)

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.orm import Session


class SqlAlchemyDealStateRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: DealState) -> None:
        self.session.add(entity)

    def get(self, record_id: uuid.UUID) -> DealState | None:
        return self.session.get(DealState, record_id)

    def latest_deal_id(self, client: str) -> int:
        stmt = (
            select(deal_state_table.c.deal_id)
            .where(deal_state_table.c.client == client)
            .order_by(deal_state_table.c.deal_id.desc())
            .limit(1)
        )
        deal_id = self.session.execute(stmt).scalar_one_or_none()
        return int(deal_id) if deal_id is not None else UNASSIGNED_DEAL_ID

    def publish_proposed(
        self,
        *,
        piece_cid: str,
        provider: str,
        client: str,
        deal_id: int,
    ) -> bool:
        stmt = (
            select(DealState)
            .where(deal_state_table.c.piece_cid == piece_cid)
            .where(deal_state_table.c.provider == provider)
            .where(deal_state_table.c.client == client)
            .where(deal_state_table.c.state == DealStatus.PROPOSED)
            .limit(1)
        )
        record = self.session.execute(stmt).scalars().first()
        if record is None:
            return False
        record.deal_id = deal_id
        record.state = DealStatus.PUBLISHED
        self.session.flush()
        return True

    def published_for_client(self, client: str) -> list[DealState]:
        stmt = (
            select(DealState)
            .where(deal_state_table.c.client == client)
            .where(deal_state_table.c.state == DealStatus.PUBLISHED)
            .order_by(deal_state_table.c.deal_id, deal_state_table.c.id)
        )
        return list(self.session.execute(stmt).scalars())

    def update_chain_state(
        self,
        record_id: uuid.UUID,
        *,
        state: DealStatus,
        piece_cid: str,
        expiration: int,
    ) -> bool:
        record = self.get(record_id)
        if record is None:
            return False
        record.piece_cid = piece_cid
        record.expiration = expiration
        record.state = state
        self.session.flush()
        return True

    def mark_slashed(self, record_id: uuid.UUID) -> bool:
        record = self.get(record_id)
        if record is None:
            return False
        record.state = DealStatus.SLASHED
        self.session.flush()
        return True


class SqlAlchemyWatchListRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: TrackedAccount) -> None:
        self.session.add(entity)

    def tracked_clients(self) -> list[str]:
        stmt = (
            select(deal_tracking_state_table.c.state_key)
            .where(deal_tracking_state_table.c.state_type == StateType.CLIENT)
            .where(deal_tracking_state_table.c.state_value == TrackingValue.TRACK)
            .order_by(deal_tracking_state_table.c.state_key)
        )
        return list(self.session.execute(stmt).scalars())

    def track(self, address: str) -> bool:
        """Flag an account for tracking; returns ``False`` when it already was."""

        if self._find(address) is not None:
            return False
        self.add(TrackedAccount(state_key=address))
        self.session.flush()
        return True

    def untrack(self, address: str) -> bool:
        entry = self._find(address)
        if entry is None:
            return False
        self.session.delete(entry)
        self.session.flush()
        return True

    def _find(self, address: str) -> TrackedAccount | None:
        stmt = (
            select(TrackedAccount)
            .where(deal_tracking_state_table.c.state_type == StateType.CLIENT)
            .where(deal_tracking_state_table.c.state_key == address)
            .limit(1)
        )
        return self.session.execute(stmt).scalars().first()
