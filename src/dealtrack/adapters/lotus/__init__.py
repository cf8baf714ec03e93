"""Public interface for the Lotus chain-state adapter."""

from __future__ import annotations

from .client import (
    DEAL_NOT_FOUND_CODE,
    STATE_MARKET_STORAGE_DEAL_METHOD,
    LotusAPIError,
    LotusChainState,
    parse_chain_deal_state,
)
from .schema import MarketDealPayload, StateMarketStorageDealResponse

__all__ = [
    "DEAL_NOT_FOUND_CODE",
    "STATE_MARKET_STORAGE_DEAL_METHOD",
    "LotusAPIError",
    "LotusChainState",
    "MarketDealPayload",
    "StateMarketStorageDealResponse",
    "parse_chain_deal_state",
]
