"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class DealStatus(StrEnum):
    """Lifecycle of a deal sent out by this system."""

    RESERVED = "reserved"
    PROPOSED = "proposed"
    PUBLISHED = "published"
    ACTIVE = "active"
    SLASHED = "slashed"
    ERROR = "error"


class StateType(StrEnum):
    CLIENT = "client"


class TrackingValue(StrEnum):
    TRACK = "track"


class NotFoundPolicy(StrEnum):
    """What a chain-state pass does after the chain reports an unknown deal id."""

    ABORT_ACCOUNT = "abort-account"
    SKIP_RECORD = "skip-record"
