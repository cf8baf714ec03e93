"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AsyncExitStack
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from dealtrack.adapters.filscan import FilscanDealIndex
from dealtrack.adapters.lotus import LotusChainState
from dealtrack.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyDealTrackingUnitOfWork,
    is_started,
    startup,
)
from dealtrack.config import get_filscan_config, get_lotus_config, get_tracking_config
from dealtrack.domain.ports.unit_of_work import DealTrackingUnitOfWork
from dealtrack.domain.scheduling import ReconciliationScheduler, run_tracking_cycle

if TYPE_CHECKING:
    from dealtrack.config import DealTrackingConfig, FilscanConfig
    from dealtrack.domain.ports.fetching import ChainStateSource, DealIndexSource
    from dealtrack.domain.scheduling import CycleReport

UnitOfWorkFactory = Callable[[], DealTrackingUnitOfWork]


log = getLogger(__name__)


def _default_unit_of_work_factory() -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return SqlAlchemyDealTrackingUnitOfWork


async def _open_sources(
    stack: AsyncExitStack,
    index_config: FilscanConfig,
    tracking: DealTrackingConfig,
    index_source: DealIndexSource | None,
    chain_source: ChainStateSource | None,
) -> tuple[DealIndexSource, ChainStateSource]:
    if index_source is None:
        index_source = await stack.enter_async_context(FilscanDealIndex(config=index_config))
    if chain_source is None:
        chain_source = await stack.enter_async_context(
            LotusChainState(config=get_lotus_config(retry=tracking.retry))
        )
    return index_source, chain_source


async def track_deals_once(
    *,
    index_source: DealIndexSource | None = None,
    chain_source: ChainStateSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    tracking: DealTrackingConfig | None = None,
    index_config: FilscanConfig | None = None,
) -> CycleReport:
    """Run a single reconciliation cycle over every tracked account."""

    effective_tracking = tracking or get_tracking_config()
    effective_index_config = index_config or get_filscan_config(retry=effective_tracking.retry)
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    async with AsyncExitStack() as stack:
        index, chain = await _open_sources(
            stack, effective_index_config, effective_tracking, index_source, chain_source
        )
        return await run_tracking_cycle(
            index_source=index,
            chain_source=chain,
            unit_of_work_factory=effective_uow,
            not_found_policy=effective_tracking.not_found_policy,
            page_size=effective_index_config.page_size,
        )


async def run_deal_tracking(
    *,
    index_source: DealIndexSource | None = None,
    chain_source: ChainStateSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    tracking: DealTrackingConfig | None = None,
    index_config: FilscanConfig | None = None,
    max_cycles: int | None = None,
) -> ReconciliationScheduler | None:
    """Run the deal tracking service until cancelled (or ``max_cycles`` is reached)."""

    effective_tracking = tracking or get_tracking_config()
    if not effective_tracking.enabled:
        log.warning("Deal tracking service is not enabled. Exit now...")
        return None

    effective_index_config = index_config or get_filscan_config(retry=effective_tracking.retry)
    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    log.info(
        "Starting deal tracking: interval=%ss, retries=%s, not_found_policy=%s",
        effective_tracking.interval_seconds,
        effective_tracking.retry.retries,
        effective_tracking.not_found_policy,
    )
    async with AsyncExitStack() as stack:
        index, chain = await _open_sources(
            stack, effective_index_config, effective_tracking, index_source, chain_source
        )
        scheduler = ReconciliationScheduler(
            cycle=partial(
                run_tracking_cycle,
                index_source=index,
                chain_source=chain,
                unit_of_work_factory=effective_uow,
                not_found_policy=effective_tracking.not_found_policy,
                page_size=effective_index_config.page_size,
            ),
            interval_seconds=effective_tracking.interval_seconds,
        )
        await scheduler.run_forever(max_cycles=max_cycles)
    return scheduler


def track_account(address: str, *, unit_of_work_factory: UnitOfWorkFactory | None = None) -> bool:
    """Add ``address`` to the watch list; returns ``False`` if it was already tracked."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        added = uow.repositories.watch_list.track(address)
        uow.commit()
    return added


def untrack_account(
    address: str, *, unit_of_work_factory: UnitOfWorkFactory | None = None
) -> bool:
    """Remove ``address`` from the watch list; returns ``False`` if it was not tracked."""

    effective_uow = unit_of_work_factory or _default_unit_of_work_factory()
    with effective_uow() as uow:
        removed = uow.repositories.watch_list.untrack(address)
        uow.commit()
    return removed
