from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, TypedDict, Unpack

import httpx
from aiolimiter import AsyncLimiter

from dealtrack.config.http_resilience import (
    RateLimit,
    ResilienceConfig,
    RetryablePayloadError,
    RetryPolicy,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from httpx._client import UseClientDefault
    from httpx._types import (
        HeaderTypes,
        QueryParamTypes,
        RequestContent,
        TimeoutTypes,
        URLTypes,
    )

    from tenacity import RetryCallState

type SleepFunc = Callable[[float], Awaitable[None]]

log = getLogger(__name__)

__all__ = [
    "RateLimit",
    "ResilienceConfig",
    "ResilientClient",
    "RetryPolicy",
    "RetryablePayloadError",
    "SleepFunc",
    "retry_call",
]


async def retry_call[T](
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    name: str = "upstream call",
    sleep: SleepFunc = asyncio.sleep,
) -> T:
    """Run ``operation`` under the ``tenacity`` controller built from ``policy``.

    Every failed attempt is logged as a warning. Exceptions the policy does not
    consider retryable propagate immediately; once ``policy.max_attempts`` is
    exhausted the last failure propagates.
    """

    def warn_failed_attempt(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome
        log.warning(
            "%s failed (attempt %s/%s): %s",
            name,
            retry_state.attempt_number,
            policy.max_attempts,
            outcome.exception() if outcome is not None else None,
        )

    retrying = policy.build(sleep=sleep, after=warn_failed_attempt)
    return await retrying(operation)


class RequestOptions(TypedDict, total=False):
    content: RequestContent | None
    json: object
    params: QueryParamTypes | None
    headers: HeaderTypes | None
    timeout: TimeoutTypes | UseClientDefault


class AsyncClientOptions(TypedDict, total=False):
    base_url: str
    timeout: TimeoutTypes
    headers: HeaderTypes
    transport: httpx.AsyncBaseTransport


class ResilientClient:
    """Rate-limited ``httpx.AsyncClient``; retries are applied per call via ``retry_call``."""

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )

        client_kwargs: AsyncClientOptions = {"timeout": config.timeout_seconds}
        if config.base_url is not None:
            client_kwargs["base_url"] = config.base_url
        if config.default_headers is not None:
            client_kwargs["headers"] = dict(config.default_headers)
        if transport is not None:
            client_kwargs["transport"] = transport

        self._client = httpx.AsyncClient(**client_kwargs)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        async def do_request() -> httpx.Response:
            return await self._client.request(method, url, **kwargs)

        return await self._send(do_request)

    async def post(
        self,
        url: URLTypes,
        **kwargs: Unpack[RequestOptions],
    ) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def _send(self, func: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        if self._limiter is None:
            return await func()
        async with self._limiter:
            return await func()


def default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)
