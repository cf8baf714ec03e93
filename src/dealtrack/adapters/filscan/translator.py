"""Translate Filscan payloads into domain fetch results."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from dealtrack.domain.ports.fetching import DealIndexPage, IndexedDeal

if TYPE_CHECKING:
    from .schema import GetMarketDealResponse, MarketDealPayload

log = getLogger(__name__)


def parse_indexed_deal(payload: MarketDealPayload) -> IndexedDeal:
    return IndexedDeal(
        deal_id=payload.deal_id,
        piece_cid=payload.piece_cid,
        provider=payload.provider,
        client=payload.client,
    )


def parse_index_page(response: GetMarketDealResponse) -> DealIndexPage:
    result = response.result
    if result is None or result.deals is None:
        return DealIndexPage(deals=None, total=result.total if result else None)

    log.debug("Received %s out of %s deal entries.", len(result.deals), result.total)
    return DealIndexPage(
        deals=[parse_indexed_deal(deal) for deal in result.deals],
        total=result.total,
    )
