"""SQLAlchemy mapping metadata for the deal-tracking domain model."""

from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from dealtrack.domain.model import (
    DealState,
    DealStatus,
    StateType,
    TrackedAccount,
    TrackingValue,
)

if TYPE_CHECKING:
    from enum import StrEnum

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class DecimalString(TypeDecorator[Decimal]):
    """Store decimals as text so FIL amounts keep their full precision on SQLite."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        return Decimal(value)


def _enum_values(enum_cls: type[StrEnum]) -> list[str]:
    return [member.value for member in enum_cls]


def _str_enum(enum_cls: type[StrEnum]) -> Enum:
    return Enum(enum_cls, native_enum=False, values_callable=_enum_values, length=32)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

deal_state_table = Table(
    "deal_state",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("client", String, nullable=False),
    Column("provider", String, nullable=False),
    Column("deal_cid", String, nullable=False, default=""),
    Column("data_cid", String, nullable=False, default=""),
    Column("piece_cid", String, nullable=False),
    Column("expiration", Integer, nullable=False, default=0),
    Column("duration", Integer, nullable=False, default=0),
    Column("price", DecimalString, nullable=False, default=Decimal(0)),
    Column("verified", Boolean, nullable=False, default=False),
    Column("state", _str_enum(DealStatus), nullable=False),
    Column("replication_request_id", String, nullable=False, default=""),
    Column("dataset_id", String, nullable=False, default=""),
    Column("deal_id", Integer, nullable=False, default=0),
    Column("error_message", String, nullable=True),
    Index("ix_deal_state_client_deal_id", "client", "deal_id"),
    Index("ix_deal_state_match_key", "piece_cid", "provider", "client", "state"),
)

deal_tracking_state_table = Table(
    "deal_tracking_state",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("state_type", _str_enum(StateType), nullable=False),
    Column("state_key", String, nullable=False),
    Column("state_value", _str_enum(TrackingValue), nullable=False),
    UniqueConstraint("state_type", "state_key"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(DealState, deal_state_table)
    mapper_registry.map_imperatively(TrackedAccount, deal_tracking_state_table)

    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
