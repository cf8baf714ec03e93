"""Per-cycle reconciliation over the watch list, re-armed after a fixed delay."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from dealtrack.domain.deal_tracking import (
    DEFAULT_PAGE_SIZE,
    ChainSyncResult,
    IndexSyncResult,
    high_water_mark,
    sync_chain_states,
    sync_index_deals,
)
from dealtrack.domain.model import NotFoundPolicy

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from dealtrack.domain.deal_tracking import UnitOfWorkFactory
    from dealtrack.domain.ports.fetching import ChainStateSource, DealIndexSource

DEFAULT_INTERVAL_SECONDS = 600.0

log = getLogger(__name__)


@dataclass(slots=True)
class AccountOutcome:
    client: str
    index: IndexSyncResult | None = None
    chain: ChainSyncResult | None = None
    index_error: str | None = None
    chain_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.index_error is None and self.chain_error is None


@dataclass(slots=True)
class CycleReport:
    accounts: list[AccountOutcome] = field(default_factory=list[AccountOutcome])

    @property
    def failed(self) -> list[AccountOutcome]:
        return [outcome for outcome in self.accounts if not outcome.ok]


async def run_tracking_cycle(
    *,
    index_source: DealIndexSource,
    chain_source: ChainStateSource,
    unit_of_work_factory: UnitOfWorkFactory,
    not_found_policy: NotFoundPolicy = NotFoundPolicy.ABORT_ACCOUNT,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> CycleReport:
    """Reconcile every tracked account once, strictly one after another.

    Index sync and chain sync each run inside their own failure boundary, so a
    broken upstream for one account (or one half of the work) never stops the rest.
    """

    log.info("Start update deal tracking")
    with unit_of_work_factory() as uow:
        clients = uow.repositories.watch_list.tracked_clients()

    report = CycleReport()
    for client in clients:
        outcome = AccountOutcome(client=client)
        report.accounts.append(outcome)

        try:
            outcome.index = await sync_index_deals(
                client=client,
                last_known_deal_id=high_water_mark(client, unit_of_work_factory),
                source=index_source,
                unit_of_work_factory=unit_of_work_factory,
                page_size=page_size,
            )
        except Exception as exc:  # noqa: BLE001
            outcome.index_error = f"{type(exc).__name__}: {exc}"
            log.exception("Encountered an error when importing deals from the index: %s", client)

        try:
            outcome.chain = await sync_chain_states(
                client=client,
                source=chain_source,
                unit_of_work_factory=unit_of_work_factory,
                not_found_policy=not_found_policy,
            )
        except Exception as exc:  # noqa: BLE001
            outcome.chain_error = f"{type(exc).__name__}: {exc}"
            log.exception("Encountered an error when updating deals from the chain: %s", client)

        _log_outcome(outcome)

    log.info(
        "Finished update deal tracking: accounts=%s, failed=%s",
        len(report.accounts),
        len(report.failed),
    )
    return report


def _log_outcome(outcome: AccountOutcome) -> None:
    published = outcome.index.published if outcome.index else 0
    activated = outcome.chain.activated if outcome.chain else 0
    slashed = outcome.chain.slashed if outcome.chain else 0
    log.info(
        "Account %s: published=%s, activated=%s, slashed=%s, ok=%s",
        outcome.client,
        published,
        activated,
        slashed,
        outcome.ok,
    )


class SchedulerState(StrEnum):
    IDLE = "idle"
    RUNNING_CYCLE = "running-cycle"


@dataclass(slots=True)
class ReconciliationScheduler:
    """Runs ``cycle`` repeatedly, sleeping ``interval_seconds`` after each cycle ends.

    The delay is measured from the end of one cycle to the start of the next, so
    a slow cycle pushes the next one out and cycles never overlap.
    """

    cycle: Callable[[], Awaitable[CycleReport]]
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)
    state: SchedulerState = field(default=SchedulerState.IDLE, init=False)
    cycles_completed: int = field(default=0, init=False)

    async def run_once(self) -> CycleReport | None:
        self.state = SchedulerState.RUNNING_CYCLE
        try:
            return await self.cycle()
        except Exception:
            log.exception("Deal tracking cycle failed")
            return None
        finally:
            self.state = SchedulerState.IDLE
            self.cycles_completed += 1

    async def run_forever(self, *, max_cycles: int | None = None) -> None:
        """Loop until cancelled, or until ``max_cycles`` cycles have run."""

        while True:
            await self.run_once()
            if max_cycles is not None and self.cycles_completed >= max_cycles:
                return
            log.debug("Next deal tracking cycle in %s seconds", self.interval_seconds)
            await self.sleep(self.interval_seconds)
