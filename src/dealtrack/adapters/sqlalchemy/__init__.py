"""SQLAlchemy adapter package for dealtrack."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    deal_state_table,
    deal_tracking_state_table,
    mapper_registry,
    start_mappers,
)
from .repositories import SqlAlchemyDealStateRepository, SqlAlchemyWatchListRepository
from .unit_of_work import (
    SqlAlchemyDealTrackingUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyDealStateRepository",
    "SqlAlchemyDealTrackingUnitOfWork",
    "SqlAlchemyWatchListRepository",
    "StartupError",
    "create_all_tables",
    "deal_state_table",
    "deal_tracking_state_table",
    "is_started",
    "mapper_registry",
    "shutdown",
    "startup",
]
