"""Filscan deal-index configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping

FILSCAN_MAINNET_URL = "https://api.filscan.io:8700/rpc/v1"
FILSCAN_CALIBRATION_URL = "https://calibration.filscan.io:8700/rpc/v1"
FILSCAN_TIMEOUT_SECONDS = 30.0
FILSCAN_PAGE_SIZE = 25

# Testnet addresses start with "t" (t0/t1/t3/tf...), mainnet with "f".
DEFAULT_FILSCAN_ENDPOINTS: Mapping[str, str] = MappingProxyType({"t": FILSCAN_CALIBRATION_URL})


@dataclass(frozen=True, slots=True)
class FilscanConfig:
    """Holds deal-index API configuration values."""

    default_url: str = FILSCAN_MAINNET_URL
    endpoints: Mapping[str, str] = field(default_factory=lambda: DEFAULT_FILSCAN_ENDPOINTS)
    page_size: int = FILSCAN_PAGE_SIZE
    resilience: ResilienceConfig = field(
        default_factory=lambda: ResilienceConfig(
            name="filscan",
            timeout_seconds=FILSCAN_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        )
    )


def get_filscan_config(*, retry: RetryPolicy | None = None) -> FilscanConfig:
    if retry is None:
        return FilscanConfig()
    return FilscanConfig(
        resilience=ResilienceConfig(
            name="filscan",
            timeout_seconds=FILSCAN_TIMEOUT_SECONDS,
            retry=retry,
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
        )
    )
