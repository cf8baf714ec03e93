"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
from tenacity import (
    AsyncRetrying,
    after_nothing,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from tenacity import RetryCallState

DEFAULT_RETRIES = 3
DEFAULT_MIN_WAIT_SECONDS = 60.0


class RetryablePayloadError(httpx.HTTPError):
    """Raised when a payload-level condition should trigger a retry."""

    def __init__(self, message: str, *, response: httpx.Response) -> None:
        super().__init__(message)
        self.response = response


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Exponential backoff applied to a single upstream call.

    ``retries`` counts additional attempts beyond the first one. The wait before
    retry ``n`` (1-based) is ``min_wait_seconds * factor ** (n - 1)``, capped at
    ``max_wait_seconds`` when given. ``build`` turns the policy into a
    ``tenacity.AsyncRetrying`` controller that re-raises the last failure.
    """

    retries: int = DEFAULT_RETRIES
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS
    factor: float = 2.0
    max_wait_seconds: float | None = None
    retry_on_exceptions: tuple[type[Exception], ...] = (
        httpx.TransportError,
        httpx.HTTPStatusError,
        RetryablePayloadError,
    )

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    def build(
        self,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        after: Callable[[RetryCallState], None] = after_nothing,
    ) -> AsyncRetrying:
        wait_options = {
            "multiplier": self.min_wait_seconds,
            "min": self.min_wait_seconds,
            "exp_base": self.factor,
        }
        if self.max_wait_seconds is not None:
            wait_options["max"] = self.max_wait_seconds
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(**wait_options),
            retry=retry_if_exception_type(self.retry_on_exceptions),
            after=after,
            sleep=sleep,
            reraise=True,
        )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
