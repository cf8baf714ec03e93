"""Reconcile local deal records against the deal index and chain state."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from dealtrack.domain.model import DealStatus, NotFoundPolicy

if TYPE_CHECKING:
    from collections.abc import Callable

    from dealtrack.domain.ports.fetching import (
        ChainDealState,
        ChainStateSource,
        DealIndexSource,
        IndexedDeal,
    )
    from dealtrack.domain.ports.unit_of_work import DealTrackingUnitOfWork

    UnitOfWorkFactory = Callable[[], DealTrackingUnitOfWork]

DEFAULT_PAGE_SIZE = 25

log = getLogger(__name__)


@dataclass(slots=True)
class IndexSyncResult:
    """Outcome of one incremental index pass for an account."""

    client: str
    last_known_deal_id: int
    pages: int = 0
    examined: int = 0
    published: int = 0
    reached_boundary: bool = False


@dataclass(slots=True)
class ChainSyncResult:
    """Outcome of one chain-state pass for an account."""

    client: str
    examined: int = 0
    activated: int = 0
    slashed: int = 0
    unchanged: int = 0
    aborted: bool = False


@dataclass(slots=True, frozen=True)
class Transition:
    state: DealStatus
    piece_cid: str
    expiration: int


def high_water_mark(client: str, unit_of_work_factory: UnitOfWorkFactory) -> int:
    """Largest deal id stored for ``client``; queried fresh on every call."""

    with unit_of_work_factory() as uow:
        return uow.repositories.deals.latest_deal_id(client)


async def sync_index_deals(
    *,
    client: str,
    last_known_deal_id: int,
    source: DealIndexSource,
    unit_of_work_factory: UnitOfWorkFactory,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> IndexSyncResult:
    """Publish ``proposed`` records for deals the index reports above the high-water mark.

    Pages arrive newest first. The first entry at or below ``last_known_deal_id``,
    or any page shorter than ``page_size``, ends the whole pass; the index offers
    no other "has more" signal. Records are only ever updated, never created.
    """

    log.debug(
        "Updating deals from index: client=%s, last_deal=%s", client, last_known_deal_id
    )
    result = IndexSyncResult(client=client, last_known_deal_id=last_known_deal_id)
    page = 0
    while True:
        index_page = await source.fetch_page(client, page, page_size)
        result.pages += 1
        if index_page.deals is None:
            log.debug("No index result for client=%s", client)
            break

        deals = index_page.deals
        if _publish_page(
            deals,
            last_known_deal_id=last_known_deal_id,
            page_size=page_size,
            unit_of_work_factory=unit_of_work_factory,
            result=result,
        ):
            result.reached_boundary = True
            break
        if not deals:
            break
        page += 1

    return result


def _publish_page(
    deals: list[IndexedDeal],
    *,
    last_known_deal_id: int,
    page_size: int,
    unit_of_work_factory: UnitOfWorkFactory,
    result: IndexSyncResult,
) -> bool:
    """Apply one page; returns whether the pagination boundary was hit."""

    short_page = len(deals) < page_size
    with unit_of_work_factory() as uow:
        repository = uow.repositories.deals
        for deal in deals:
            if deal.deal_id <= last_known_deal_id or short_page:
                return True
            result.examined += 1
            matched = repository.publish_proposed(
                piece_cid=deal.piece_cid,
                provider=deal.provider,
                client=deal.client,
                deal_id=deal.deal_id,
            )
            if matched:
                uow.commit()
                result.published += 1
                log.debug("Deal %s published: piece_cid=%s", deal.deal_id, deal.piece_cid)
    return False


def decide_transition(chain_state: ChainDealState) -> Transition | None:
    """Map authoritative chain state to the next local state, or ``None`` to wait."""

    if chain_state.slashed:
        return Transition(
            state=DealStatus.SLASHED,
            piece_cid=chain_state.piece_cid,
            expiration=chain_state.end_epoch,
        )
    if chain_state.end_epoch > 0:
        return Transition(
            state=DealStatus.ACTIVE,
            piece_cid=chain_state.piece_cid,
            expiration=chain_state.end_epoch,
        )
    return None


async def sync_chain_states(
    *,
    client: str,
    source: ChainStateSource,
    unit_of_work_factory: UnitOfWorkFactory,
    not_found_policy: NotFoundPolicy = NotFoundPolicy.ABORT_ACCOUNT,
) -> ChainSyncResult:
    """Advance every ``published`` record of ``client`` using chain state.

    A deal id unknown to the chain marks its record ``slashed``. Under
    ``NotFoundPolicy.ABORT_ACCOUNT`` the rest of the account's records wait for the
    next cycle. Any other failure propagates and ends the pass.
    """

    log.debug("Start update deal state from chain: client=%s", client)
    result = ChainSyncResult(client=client)
    with unit_of_work_factory() as uow:
        repository = uow.repositories.deals
        for record in repository.published_for_client(client):
            result.examined += 1
            chain_state = await source.get_deal(record.deal_id)

            if chain_state is None:
                repository.mark_slashed(record.id)
                uow.commit()
                result.slashed += 1
                log.info("Deal %s not found on chain; marked slashed", record.deal_id)
                if not_found_policy is NotFoundPolicy.ABORT_ACCOUNT:
                    result.aborted = True
                    break
                continue

            transition = decide_transition(chain_state)
            if transition is None:
                result.unchanged += 1
                continue

            repository.update_chain_state(
                record.id,
                state=transition.state,
                piece_cid=transition.piece_cid,
                expiration=transition.expiration,
            )
            uow.commit()
            if transition.state is DealStatus.ACTIVE:
                result.activated += 1
            else:
                result.slashed += 1
            log.debug(
                "Deal %s is now %s: expiration=%s",
                record.deal_id,
                transition.state,
                transition.expiration,
            )

    return result
