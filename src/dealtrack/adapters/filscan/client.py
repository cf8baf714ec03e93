"""HTTP client for the Filscan deal-index API."""

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
from dealtrack.config.filscan import FilscanConfig

from .schema import GetMarketDealResponse
from .translator import parse_index_page

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from dealtrack.domain.ports.fetching import DealIndexPage, DealIndexSource

log = getLogger(__name__)

GET_MARKET_DEAL_METHOD = "filscan.GetMarketDeal"


class FilscanAPIError(RuntimeError):
    """Raised when Filscan answers with a JSON-RPC error."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


def select_index_endpoint(address: str, endpoints: Mapping[str, str], default: str) -> str:
    """Pick the index host for an account address by its network prefix.

    The longest matching prefix wins; addresses without a match use ``default``.
    """

    for prefix in sorted(endpoints, key=len, reverse=True):
        if address.startswith(prefix):
            return endpoints[prefix]
    return default


@dataclass(slots=True)
class FilscanDealIndex:
    """Deal-index source backed by Filscan; use as an async context manager."""

    config: FilscanConfig = field(default_factory=FilscanConfig)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=default_client_factory
    )
    sleep: SleepFunc = field(default=asyncio.sleep)
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> FilscanDealIndex:
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

    def endpoint_for(self, address: str) -> str:
        return select_index_endpoint(address, self.config.endpoints, self.config.default_url)

    async def fetch_page(self, client: str, page: int, page_size: int) -> DealIndexPage:
        if self._client is None:
            raise RuntimeError("FilscanDealIndex must be entered before fetching pages")
        http = self._client
        url = self.endpoint_for(client)
        payload = rpc_request(GET_MARKET_DEAL_METHOD, [client, page, page_size])

        async def fetch() -> object:
            log.debug("Fetching from %s", url)
            response = await http.post(url, json=payload, headers=JSON_HEADERS)
            return decode_json(response)

        raw = await retry_call(
            fetch,
            policy=self.config.resilience.retry,
            name=f"Filscan page {page} for {client}",
            sleep=self.sleep,
        )
        parsed = GetMarketDealResponse.model_validate(raw)
        if parsed.error is not None:
            raise FilscanAPIError(parsed.error.message, code=parsed.error.code)
        return parse_index_page(parsed)


if TYPE_CHECKING:
    _source_check: DealIndexSource = FilscanDealIndex()
