"""Pydantic models describing the Lotus ``StateMarketStorageDeal`` payloads."""

from __future__ import annotations

from pydantic import Field

from dealtrack.adapters.jsonrpc import RpcBaseModel, RpcErrorPayload


class CidLink(RpcBaseModel):
    cid: str = Field(alias="/")


class DealProposalPayload(RpcBaseModel):
    end_epoch: int = Field(alias="EndEpoch")
    piece_cid: CidLink = Field(alias="PieceCID")


class DealStatePayload(RpcBaseModel):
    # Lotus reports -1 for deals that were never slashed
    slash_epoch: int = Field(alias="SlashEpoch")


class MarketDealPayload(RpcBaseModel):
    proposal: DealProposalPayload = Field(alias="Proposal")
    state: DealStatePayload = Field(alias="State")


class StateMarketStorageDealResponse(RpcBaseModel):
    result: MarketDealPayload | None = None
    error: RpcErrorPayload | None = None
