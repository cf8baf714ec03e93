from __future__ import annotations

import logging

import pytest

from dealtrack.config import ConfigurationError, DealTrackingConfig
from dealtrack.domain.scheduling import AccountOutcome, CycleReport
from dealtrack.ui import cli as cli_module


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DEALTRACK_INTERVAL_SECONDS", "DEALTRACK_NOT_FOUND_POLICY", "DEALTRACK_ENABLED"):
        monkeypatch.delenv(name, raising=False)


def test_run_command_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    async def fake_run(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli_module, "run_deal_tracking", fake_run)

    cli_module.main(["run"])

    tracking = captured["tracking"]
    assert isinstance(tracking, DealTrackingConfig)
    assert tracking.interval_seconds == 600.0
    assert captured["max_cycles"] is None


def test_run_command_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    async def fake_run(**kwargs: object) -> None:
        captured.update(kwargs)

    monkeypatch.setattr(cli_module, "run_deal_tracking", fake_run)

    cli_module.main(["-v", "run", "--interval", "5", "--max-cycles", "2"])

    tracking = captured["tracking"]
    assert isinstance(tracking, DealTrackingConfig)
    assert tracking.interval_seconds == 5.0
    assert captured["max_cycles"] == 2


@pytest.mark.parametrize("args", [["run", "--interval", "-1"], ["run", "--max-cycles", "0"]])
def test_run_command_rejects_invalid_values(
    monkeypatch: pytest.MonkeyPatch, args: list[str]
) -> None:
    async def fake_run(**_: object) -> None:
        return None

    monkeypatch.setattr(cli_module, "run_deal_tracking", fake_run)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(args)

    assert excinfo.value.code == 2


def test_invalid_environment_exits_with_usage_code(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEALTRACK_NOT_FOUND_POLICY", "whatever")

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["once"])

    assert excinfo.value.code == 2


def test_once_command_logs_failed_accounts(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    async def fake_once(**_: object) -> CycleReport:
        return CycleReport(
            accounts=[
                AccountOutcome(client="f1good"),
                AccountOutcome(client="f1bad", index_error="RuntimeError: down"),
            ]
        )

    monkeypatch.setattr(cli_module, "track_deals_once", fake_once)

    with caplog.at_level(logging.INFO):
        cli_module.main(["once"])

    assert "Account f1bad failed" in caplog.text
    assert "accounts=2, failed=1" in caplog.text


def test_track_and_untrack_commands(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, str]] = []

    def fake_track(address: str) -> bool:
        calls.append(("track", address))
        return True

    def fake_untrack(address: str) -> bool:
        calls.append(("untrack", address))
        return False

    monkeypatch.setattr(cli_module, "track_account", fake_track)
    monkeypatch.setattr(cli_module, "untrack_account", fake_untrack)

    cli_module.main(["track", "f1abc"])
    cli_module.main(["untrack", "f1abc"])

    assert calls == [("track", "f1abc"), ("untrack", "f1abc")]


def test_missing_configuration_during_command_exits_with_usage_code(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def fake_once(**_: object) -> CycleReport:
        raise ConfigurationError("Missing configuration for: LOTUS_API")

    monkeypatch.setattr(cli_module, "track_deals_once", fake_once)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["once"])

    assert excinfo.value.code == 2


def test_unexpected_failure_exits_with_error_code(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_track(_address: str) -> bool:
        raise RuntimeError("database locked")

    monkeypatch.setattr(cli_module, "track_account", fake_track)

    with pytest.raises(SystemExit) as excinfo:
        cli_module.main(["track", "f1abc"])

    assert excinfo.value.code == 1
