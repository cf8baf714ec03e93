"""Public interface for the Filscan deal-index adapter."""

from __future__ import annotations

from .client import GET_MARKET_DEAL_METHOD, FilscanAPIError, FilscanDealIndex, select_index_endpoint
from .schema import GetMarketDealResponse, MarketDealPayload
from .translator import parse_index_page

__all__ = [
    "GET_MARKET_DEAL_METHOD",
    "FilscanAPIError",
    "FilscanDealIndex",
    "GetMarketDealResponse",
    "MarketDealPayload",
    "parse_index_page",
    "select_index_endpoint",
]
