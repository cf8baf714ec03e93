"""Lotus chain-state API configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .env import require_env_var
from .http_resilience import ResilienceConfig, RetryPolicy

LOTUS_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class LotusConfig:
    """Holds chain-state API configuration values."""

    api_url: str
    token: str = ""
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(name="lotus", timeout_seconds=LOTUS_TIMEOUT_SECONDS)
    )

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


def get_lotus_config(*, retry: RetryPolicy | None = None) -> LotusConfig:
    api_url = require_env_var("LOTUS_API")
    token = os.getenv("LOTUS_TOKEN", "").strip()
    resilience = ResilienceConfig(
        name="lotus",
        timeout_seconds=LOTUS_TIMEOUT_SECONDS,
        retry=retry or RetryPolicy(),
    )
    return LotusConfig(api_url=api_url, token=token, resilience=resilience)
