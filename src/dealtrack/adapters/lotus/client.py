"""HTTP client for the Lotus chain-state JSON-RPC API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from dealtrack.adapters.http_resilience import (
    ResilienceConfig,
    ResilientClient,
    SleepFunc,
    default_client_factory,
    retry_call,
)
from dealtrack.adapters.jsonrpc import JSON_HEADERS, decode_json, rpc_request
from dealtrack.config.lotus import LotusConfig, get_lotus_config
from dealtrack.domain.ports.fetching import ChainDealState

from .schema import MarketDealPayload, StateMarketStorageDealResponse

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from dealtrack.domain.ports.fetching import ChainStateSource

log = getLogger(__name__)

STATE_MARKET_STORAGE_DEAL_METHOD = "Filecoin.StateMarketStorageDeal"
DEAL_NOT_FOUND_CODE = 1


class LotusAPIError(RuntimeError):
    """Raised when Lotus answers with an unexpected JSON-RPC error or payload."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code

    @property
    def not_found(self) -> bool:
        return self.code == DEAL_NOT_FOUND_CODE


def parse_chain_deal_state(deal_id: int, payload: MarketDealPayload) -> ChainDealState:
    return ChainDealState(
        deal_id=deal_id,
        piece_cid=payload.proposal.piece_cid.cid,
        end_epoch=payload.proposal.end_epoch,
        slash_epoch=payload.state.slash_epoch,
    )


@dataclass(slots=True)
class LotusChainState:
    """Chain-state source backed by a Lotus node; use as an async context manager."""

    config: LotusConfig = field(default_factory=get_lotus_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    sleep: SleepFunc = field(default=asyncio.sleep)
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> LotusChainState:
        self._client = self.client_factory(self.config.resilience)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_deal(self, deal_id: int) -> ChainDealState | None:
        if self._client is None:
            raise RuntimeError("LotusChainState must be entered before querying deals")
        http = self._client
        api_url = self.config.api_url
        payload = rpc_request(STATE_MARKET_STORAGE_DEAL_METHOD, [deal_id, None])
        headers = {**JSON_HEADERS, **self.config.auth_headers()}

        async def fetch() -> object:
            log.debug("Fetching from %s: deal_id=%s", api_url, deal_id)
            response = await http.post(api_url, json=payload, headers=headers)
            return decode_json(response)

        raw = await retry_call(
            fetch,
            policy=self.config.resilience.retry,
            name=f"Lotus state lookup for deal {deal_id}",
            sleep=self.sleep,
        )
        parsed = StateMarketStorageDealResponse.model_validate(raw)

        if parsed.error is not None:
            error = LotusAPIError(parsed.error.message, code=parsed.error.code)
            if error.not_found:
                log.debug("Deal %s is unknown to the chain: %s", deal_id, parsed.error.message)
                return None
            raise error
        if parsed.result is None:
            raise LotusAPIError(f"Lotus returned neither result nor error for deal {deal_id}")

        return parse_chain_deal_state(deal_id, parsed.result)


if TYPE_CHECKING:
    _source_check: ChainStateSource = LotusChainState()
