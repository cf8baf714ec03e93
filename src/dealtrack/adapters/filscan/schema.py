"""Pydantic models describing the Filscan ``GetMarketDeal`` payloads."""

from __future__ import annotations

from pydantic import Field, field_validator

from dealtrack.adapters.jsonrpc import RpcBaseModel, RpcErrorPayload


class MarketDealPayload(RpcBaseModel):
    deal_id: int = Field(alias="dealid")
    piece_cid: str
    provider: str
    client: str


class MarketDealResult(RpcBaseModel):
    deals: list[MarketDealPayload] | None = None
    total: int | None = None

    @field_validator("deals", mode="before")
    @classmethod
    def _non_list_as_missing(cls, value: object) -> object:
        # Filscan answers accounts without history with ``"deals": null``
        if isinstance(value, list):
            return value
        return None


class GetMarketDealResponse(RpcBaseModel):
    result: MarketDealResult | None = None
    error: RpcErrorPayload | None = None
