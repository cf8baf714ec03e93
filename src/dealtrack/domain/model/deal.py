"""Deal records and the watch list of tracked accounts."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from dealtrack.domain.model.enums import DealStatus, StateType, TrackingValue

UNASSIGNED_DEAL_ID = 0


@dataclass(eq=False, kw_only=True)
class DealState:
    """One deal sent out by this system.

    ``deal_id`` is ``0`` until the chain publishes the deal. Once set it only grows
    and is the cursor for incremental index sync. ``price`` is denominated in FIL.
    """

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    client: str
    provider: str
    deal_cid: str = ""
    data_cid: str = ""
    piece_cid: str
    expiration: int = 0
    duration: int = 0
    price: Decimal = Decimal(0)
    verified: bool = False
    state: DealStatus = DealStatus.PROPOSED
    replication_request_id: str = ""
    dataset_id: str = ""
    deal_id: int = UNASSIGNED_DEAL_ID
    error_message: str | None = None

    @property
    def has_deal_id(self) -> bool:
        return self.deal_id != UNASSIGNED_DEAL_ID


@dataclass(eq=False, kw_only=True)
class TrackedAccount:
    """Watch-list entry; maintained by operators, read-only to reconciliation."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    state_key: str
    state_type: StateType = StateType.CLIENT
    state_value: TrackingValue = TrackingValue.TRACK
