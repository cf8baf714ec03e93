"""Domain model for deal tracking."""

from __future__ import annotations

from .deal import UNASSIGNED_DEAL_ID, DealState, TrackedAccount
from .enums import DealStatus, NotFoundPolicy, StateType, TrackingValue

__all__ = [
    "UNASSIGNED_DEAL_ID",
    "DealState",
    "DealStatus",
    "NotFoundPolicy",
    "StateType",
    "TrackedAccount",
    "TrackingValue",
]
