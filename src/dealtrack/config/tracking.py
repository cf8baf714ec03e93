"""Deal tracking service settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dealtrack.domain.model import NotFoundPolicy

from .env import env_bool, env_float, env_int
from .errors import ConfigurationError
from .http_resilience import DEFAULT_MIN_WAIT_SECONDS, DEFAULT_RETRIES, RetryPolicy

DEFAULT_INTERVAL_SECONDS = 600.0


@dataclass(frozen=True, slots=True)
class DealTrackingConfig:
    enabled: bool = True
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS
    not_found_policy: NotFoundPolicy = NotFoundPolicy.ABORT_ACCOUNT
    retry: RetryPolicy = field(default_factory=RetryPolicy)


def _parse_not_found_policy(raw: str | None) -> NotFoundPolicy:
    if raw is None or not raw.strip():
        return NotFoundPolicy.ABORT_ACCOUNT
    try:
        return NotFoundPolicy(raw.strip().lower())
    except ValueError as exc:
        choices = ", ".join(policy.value for policy in NotFoundPolicy)
        raise ConfigurationError(
            f"DEALTRACK_NOT_FOUND_POLICY must be one of: {choices}; got {raw!r}",
            variable="DEALTRACK_NOT_FOUND_POLICY",
        ) from exc


def get_tracking_config() -> DealTrackingConfig:
    return DealTrackingConfig(
        enabled=env_bool("DEALTRACK_ENABLED", default=True),
        interval_seconds=env_float("DEALTRACK_INTERVAL_SECONDS", DEFAULT_INTERVAL_SECONDS),
        not_found_policy=_parse_not_found_policy(os.getenv("DEALTRACK_NOT_FOUND_POLICY")),
        retry=RetryPolicy(
            retries=env_int("DEALTRACK_RETRIES", DEFAULT_RETRIES),
            min_wait_seconds=env_float(
                "DEALTRACK_RETRY_MIN_WAIT_SECONDS", DEFAULT_MIN_WAIT_SECONDS
            ),
        ),
    )
