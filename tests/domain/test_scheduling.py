from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import pytest

from dealtrack.domain.model import DealStatus
from dealtrack.domain.scheduling import (
    CycleReport,
    ReconciliationScheduler,
    SchedulerState,
    run_tracking_cycle,
)
from tests.support.deals import (
    CLIENT,
    OTHER_CLIENT,
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


def test_cycle_with_empty_watch_list_does_nothing(sqlite_unit_of_work: UowFactory) -> None:
    index = FakeDealIndex()
    chain = FakeChainState()

    report = asyncio.run(
        run_tracking_cycle(
            index_source=index, chain_source=chain, unit_of_work_factory=sqlite_unit_of_work
        )
    )

    assert report.accounts == []
    assert index.requests == []
    assert chain.queried == []


def test_cycle_publishes_then_activates_in_one_pass(
    sqlite_unit_of_work: UowFactory,
    seed_deals: Callable[..., list[DealState]],
    track_clients: Callable[..., None],
    load_deal: Callable[[DealState], DealState],
) -> None:
    track_clients(CLIENT)
    (deal,) = seed_deals(make_deal(piece_cid="baga-piece-40"))
    index = FakeDealIndex(pages={CLIENT: [index_page(*range(40, 15, -1))]})
    chain = FakeChainState(states={40: chain_state(40, end_epoch=900)})

    report = asyncio.run(
        run_tracking_cycle(
            index_source=index, chain_source=chain, unit_of_work_factory=sqlite_unit_of_work
        )
    )

    (outcome,) = report.accounts
    assert outcome.ok
    assert outcome.index is not None
    assert outcome.index.published == 1
    assert outcome.chain is not None
    assert outcome.chain.activated == 1
    stored = load_deal(deal)
    assert stored.state is DealStatus.ACTIVE
    assert stored.deal_id == 40
    assert stored.expiration == 900


def test_index_failure_does_not_block_chain_sync_or_other_accounts(
    sqlite_unit_of_work: UowFactory,
    seed_deals: Callable[..., list[DealState]],
    track_clients: Callable[..., None],
    load_deal: Callable[[DealState], DealState],
    caplog: pytest.LogCaptureFixture,
) -> None:
    track_clients(CLIENT, OTHER_CLIENT)
    mine, theirs = seed_deals(
        make_deal(deal_id=1, state=DealStatus.PUBLISHED),
        make_deal(client=OTHER_CLIENT, deal_id=2, state=DealStatus.PUBLISHED),
    )
    index = FakeDealIndex(failures={CLIENT: RuntimeError("index down")})
    chain = FakeChainState(
        states={1: chain_state(1, end_epoch=500), 2: chain_state(2, end_epoch=600)}
    )

    with caplog.at_level(logging.ERROR, logger="dealtrack.domain.scheduling"):
        report = asyncio.run(
            run_tracking_cycle(
                index_source=index, chain_source=chain, unit_of_work_factory=sqlite_unit_of_work
            )
        )

    failed, succeeded = report.accounts
    assert failed.client == CLIENT
    assert failed.index_error == "RuntimeError: index down"
    assert failed.chain_error is None
    assert succeeded.ok
    assert report.failed == [failed]
    assert load_deal(mine).state is DealStatus.ACTIVE
    assert load_deal(theirs).state is DealStatus.ACTIVE
    (error_record,) = [r for r in caplog.records if r.name == "dealtrack.domain.scheduling"]
    assert error_record.args == (CLIENT,)
    assert error_record.getMessage().endswith(f"from the index: {CLIENT}")


def test_chain_failure_is_isolated_per_account(
    sqlite_unit_of_work: UowFactory,
    seed_deals: Callable[..., list[DealState]],
    track_clients: Callable[..., None],
    load_deal: Callable[[DealState], DealState],
) -> None:
    track_clients(CLIENT, OTHER_CLIENT)
    _, theirs = seed_deals(
        make_deal(deal_id=1, state=DealStatus.PUBLISHED),
        make_deal(client=OTHER_CLIENT, deal_id=2, state=DealStatus.PUBLISHED),
    )
    chain = FakeChainState(
        states={2: chain_state(2, end_epoch=600)},
        failures={1: ConnectionError("node gone")},
    )

    report = asyncio.run(
        run_tracking_cycle(
            index_source=FakeDealIndex(),
            chain_source=chain,
            unit_of_work_factory=sqlite_unit_of_work,
        )
    )

    assert [outcome.client for outcome in report.failed] == [CLIENT]
    assert report.accounts[0].chain_error == "ConnectionError: node gone"
    assert chain.queried == [1, 2]
    assert load_deal(theirs).state is DealStatus.ACTIVE


def test_scheduler_sleeps_interval_between_cycles() -> None:
    cycles: list[int] = []
    waits: list[float] = []

    async def cycle() -> CycleReport:
        cycles.append(1)
        return CycleReport()

    async def sleep(seconds: float) -> None:
        waits.append(seconds)

    scheduler = ReconciliationScheduler(cycle=cycle, interval_seconds=600.0, sleep=sleep)

    asyncio.run(scheduler.run_forever(max_cycles=3))

    assert len(cycles) == 3
    assert waits == [600.0, 600.0]
    assert scheduler.cycles_completed == 3
    assert scheduler.state is SchedulerState.IDLE


def test_scheduler_rearms_after_failed_cycle(caplog: pytest.LogCaptureFixture) -> None:
    cycles: list[int] = []

    async def cycle() -> CycleReport:
        cycles.append(1)
        if len(cycles) == 1:
            raise RuntimeError("store unavailable")
        return CycleReport()

    async def sleep(_seconds: float) -> None:
        return None

    scheduler = ReconciliationScheduler(cycle=cycle, sleep=sleep)

    with caplog.at_level(logging.ERROR, logger="dealtrack.domain.scheduling"):
        asyncio.run(scheduler.run_forever(max_cycles=2))

    assert len(cycles) == 2
    assert "Deal tracking cycle failed" in caplog.text


def test_scheduler_reports_running_state_during_cycle() -> None:
    seen: list[SchedulerState] = []

    async def cycle() -> CycleReport:
        seen.append(scheduler.state)
        return CycleReport()

    scheduler = ReconciliationScheduler(cycle=cycle)

    report = asyncio.run(scheduler.run_once())

    assert seen == [SchedulerState.RUNNING_CYCLE]
    assert report == CycleReport()
    assert scheduler.state is SchedulerState.IDLE


def test_scheduler_cycles_never_overlap() -> None:
    active: list[int] = []
    overlaps: list[int] = []

    async def cycle() -> CycleReport:
        if active:
            overlaps.append(1)
        active.append(1)
        await asyncio.sleep(0)
        active.pop()
        return CycleReport()

    async def sleep(_seconds: float) -> None:
        await asyncio.sleep(0)

    scheduler = ReconciliationScheduler(cycle=cycle, sleep=sleep)

    asyncio.run(scheduler.run_forever(max_cycles=4))

    assert overlaps == []
