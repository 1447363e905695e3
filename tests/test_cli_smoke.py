import json
import logging
from collections.abc import Iterator

import pytest
import structlog
from click.testing import CliRunner

from candle_sim.config import Settings
from candle_sim.main import cli


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    # CliRunner closes its streams; drop handlers still pointing at them.
    yield
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


def _settings() -> Settings:
    return Settings(
        random_seed=7,
        warmup_candles=5,
        max_candles=10,
        candle_interval_ms=10,
        log_level="WARNING",
    )


def _info_settings() -> Settings:
    return Settings(random_seed=7, warmup_candles=5, max_candles=10)


def test_cli_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "candle-sim version" in result.output


def test_cli_once_json_stdout_is_pure_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("candle_sim.main.get_settings", _info_settings)
    result = CliRunner().invoke(cli, ["once", "--ticks", "3", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert len(payload["candles"]) == 8
    assert payload["cash_balance"] == 10_000.0
    assert "session_warmed_up" in result.stderr


def test_cli_loop_stops_after_max_ticks(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("candle_sim.main.get_settings", _settings)
    monkeypatch.setattr("candle_sim.main.time.sleep", lambda _: None)
    result = CliRunner().invoke(cli, ["loop", "--max-ticks", "3"])
    assert result.exit_code == 0


def test_cli_trade_buy_round_trip(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("candle_sim.main.get_settings", _settings)
    result = CliRunner().invoke(cli, ["trade", "buy", "--amount", "1000", "--ticks", "2"])
    assert result.exit_code == 0
    assert "Position exited." in result.output


def test_cli_trade_rejects_invalid_amount(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("candle_sim.main.get_settings", _settings)
    result = CliRunner().invoke(cli, ["trade", "short", "--amount", "abc"])
    assert result.exit_code == 2
