from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import pytest

from dealtrack import app as app_module
from dealtrack.config import DealTrackingConfig, FilscanConfig
from dealtrack.domain.model import DealStatus, NotFoundPolicy
from tests.support.deals import (
    CLIENT,
    FakeChainState,
    FakeDealIndex,
    chain_state,
    index_page,
    make_deal,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from dealtrack.adapters.sqlalchemy import SqlAlchemyDealTrackingUnitOfWork
    from dealtrack.domain.model import DealState

    UowFactory = Callable[[], SqlAlchemyDealTrackingUnitOfWork]


def test_track_deals_once_uses_given_sources(
    sqlite_unit_of_work: UowFactory,
    seed_deals: Callable[..., list[DealState]],
    track_clients: Callable[..., None],
    load_deal: Callable[[DealState], DealState],
) -> None:
    track_clients(CLIENT)
    missing, untouched = seed_deals(
        make_deal(deal_id=1, state=DealStatus.PUBLISHED),
        make_deal(deal_id=2, state=DealStatus.PUBLISHED),
    )
    chain = FakeChainState(states={1: None})

    report = asyncio.run(
        app_module.track_deals_once(
            index_source=FakeDealIndex(),
            chain_source=chain,
            unit_of_work_factory=sqlite_unit_of_work,
            tracking=DealTrackingConfig(not_found_policy=NotFoundPolicy.SKIP_RECORD),
        )
    )

    assert report.failed == []
    assert chain.queried == [1, 2]
    assert load_deal(missing).state is DealStatus.SLASHED
    assert load_deal(untouched).state is DealStatus.PUBLISHED


def test_run_deal_tracking_exits_when_disabled(caplog: pytest.LogCaptureFixture) -> None:
    index = FakeDealIndex()

    with caplog.at_level(logging.WARNING, logger="dealtrack.app"):
        scheduler = asyncio.run(
            app_module.run_deal_tracking(
                index_source=index,
                chain_source=FakeChainState(),
                tracking=DealTrackingConfig(enabled=False),
            )
        )

    assert scheduler is None
    assert index.requests == []
    assert "Deal tracking service is not enabled" in caplog.text


def test_run_deal_tracking_runs_bounded_cycles(
    sqlite_unit_of_work: UowFactory,
    seed_deals: Callable[..., list[DealState]],
    track_clients: Callable[..., None],
) -> None:
    track_clients(CLIENT)
    seed_deals(make_deal(piece_cid="baga-piece-40"))
    index = FakeDealIndex(pages={CLIENT: [index_page(*range(40, 15, -1))]})

    scheduler = asyncio.run(
        app_module.run_deal_tracking(
            index_source=index,
            chain_source=FakeChainState(states={40: chain_state(40)}),
            unit_of_work_factory=sqlite_unit_of_work,
            tracking=DealTrackingConfig(interval_seconds=0.0),
            max_cycles=2,
        )
    )

    assert scheduler is not None
    assert scheduler.cycles_completed == 2
    # The second cycle starts from the high-water mark the first one established.
    assert [page for _, page, _ in index.requests] == [0, 1, 0]


def test_track_and_untrack_account(sqlite_unit_of_work: UowFactory) -> None:
    assert app_module.track_account(CLIENT, unit_of_work_factory=sqlite_unit_of_work)
    assert not app_module.track_account(CLIENT, unit_of_work_factory=sqlite_unit_of_work)

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.watch_list.tracked_clients() == [CLIENT]

    assert app_module.untrack_account(CLIENT, unit_of_work_factory=sqlite_unit_of_work)
    assert not app_module.untrack_account(CLIENT, unit_of_work_factory=sqlite_unit_of_work)


def test_track_deals_once_pages_with_configured_page_size(
    sqlite_unit_of_work: UowFactory,
    seed_deals: Callable[..., list[DealState]],
    track_clients: Callable[..., None],
    load_deal: Callable[[DealState], DealState],
) -> None:
    track_clients(CLIENT)
    (deal,) = seed_deals(make_deal(piece_cid="baga-piece-6"))
    index = FakeDealIndex(pages={CLIENT: [index_page(8, 7, 6, 5)]})

    report = asyncio.run(
        app_module.track_deals_once(
            index_source=index,
            chain_source=FakeChainState(states={6: chain_state(6)}),
            unit_of_work_factory=sqlite_unit_of_work,
            tracking=DealTrackingConfig(),
            index_config=FilscanConfig(page_size=4),
        )
    )

    # Four entries fill a page of four, so they are applied and paging continues.
    assert report.failed == []
    assert index.requests == [(CLIENT, 0, 4), (CLIENT, 1, 4)]
    assert load_deal(deal).deal_id == 6
