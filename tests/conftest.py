from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from dealtrack.adapters.sqlalchemy import create_all_tables, start_mappers
from dealtrack.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyDealTrackingUnitOfWork,
    shutdown,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine

    from dealtrack.domain.model import DealState


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyDealTrackingUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyDealTrackingUnitOfWork
    finally:
        shutdown()


@pytest.fixture
def seed_deals(
    sqlite_unit_of_work: Callable[[], SqlAlchemyDealTrackingUnitOfWork],
) -> Callable[..., list[DealState]]:
    def seed(*deals: DealState) -> list[DealState]:
        with sqlite_unit_of_work() as uow:
            for deal in deals:
                uow.repositories.deals.add(deal)
            uow.commit()
        return list(deals)

    return seed


@pytest.fixture
def track_clients(
    sqlite_unit_of_work: Callable[[], SqlAlchemyDealTrackingUnitOfWork],
) -> Callable[..., None]:
    def track(*addresses: str) -> None:
        with sqlite_unit_of_work() as uow:
            for address in addresses:
                uow.repositories.watch_list.track(address)
            uow.commit()

    return track


@pytest.fixture
def load_deal(
    sqlite_unit_of_work: Callable[[], SqlAlchemyDealTrackingUnitOfWork],
) -> Callable[[DealState], DealState]:
    def load(deal: DealState) -> DealState:
        with sqlite_unit_of_work() as uow:
            stored = uow.repositories.deals.get(deal.id)
        assert stored is not None
        return stored

    return load
