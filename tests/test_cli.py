from datetime import datetime, timezone
from decimal import Decimal

import pytest
from click.testing import CliRunner

from spot_price_exporter.cli import main as cli_main
from spot_price_exporter.core.checkpoint import FileCheckpointStore
from spot_price_exporter.core.config import settings
from spot_price_exporter.core.database import SqliteSpotPriceSink
from spot_price_exporter.core.errors import FetchFailed
from spot_price_exporter.core.models import (
    DayAheadPeriod,
    DayAheadPoint,
    DayAheadPrices,
    DayAheadTimeSeries,
)


def _document() -> DayAheadPrices:
    return DayAheadPrices(
        time_series=[
            DayAheadTimeSeries(
                period=DayAheadPeriod(
                    start=datetime(2024, 1, 1, tzinfo=timezone.utc),
                    resolution="PT60M",
                    points=[DayAheadPoint(price_amount=Decimal("50000"))] * 24,
                )
            )
        ]
    )


class FakeEntsoeClient:
    response: object = None
    calls: list = []

    @classmethod
    def from_settings(cls, config):
        if not config.entsoe_api_token:
            raise ValueError("ENTSOE_API_TOKEN が設定されていません")
        return cls()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    def get_day_ahead_prices(self, period_start, period_end):
        FakeEntsoeClient.calls.append((period_start, period_end))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


@pytest.fixture
def configured(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "database_url", f"sqlite:///{tmp_path / 'spot.db'}")
    monkeypatch.setattr(settings, "checkpoint_path", tmp_path / "state.json")
    monkeypatch.setattr(settings, "entsoe_api_token", "token")
    monkeypatch.setattr(cli_main, "EntsoeClient", FakeEntsoeClient)
    FakeEntsoeClient.response = _document()
    FakeEntsoeClient.calls = []
    return tmp_path


def test_run_exports_day_and_stores_checkpoint(configured):
    result = CliRunner().invoke(cli_main.cli, ["run", "--date", "2024-01-01"])

    assert result.exit_code == 0, result.output
    assert "エクスポート結果" in result.output
    assert FakeEntsoeClient.calls == [
        (datetime(2024, 1, 1, tzinfo=timezone.utc), datetime(2024, 1, 2, tzinfo=timezone.utc))
    ]
    assert SqliteSpotPriceSink(settings.database_url).count_rows() == 24
    checkpoint = FileCheckpointStore(configured / "state.json").read()
    assert checkpoint.last_from == datetime(2024, 1, 1, 23, tzinfo=timezone.utc)


def test_run_dry_run_writes_nothing(configured):
    result = CliRunner().invoke(cli_main.cli, ["run", "--date", "2024-01-01", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "ドライラン" in result.output
    assert not (configured / "state.json").exists()
    assert not (configured / "spot.db").exists()


def test_run_without_token_exits_non_zero(configured, monkeypatch):
    monkeypatch.setattr(settings, "entsoe_api_token", None)

    result = CliRunner().invoke(cli_main.cli, ["run", "--date", "2024-01-01"])

    assert result.exit_code == 1
    assert "ENTSOE_API_TOKEN" in result.output


def test_run_fetch_failure_exits_non_zero_without_checkpoint(configured):
    FakeEntsoeClient.response = FetchFailed("Status code 500 indicates failure", status_code=500)

    result = CliRunner().invoke(cli_main.cli, ["run", "--date", "2024-01-01"])

    assert result.exit_code == 1
    assert "Status code 500" in result.output
    assert len(FakeEntsoeClient.calls) == 3
    assert not (configured / "state.json").exists()


def test_db_init_and_stats(configured):
    runner = CliRunner()

    init_result = runner.invoke(cli_main.cli, ["db", "init"])
    stats_result = runner.invoke(cli_main.cli, ["db", "stats"])

    assert init_result.exit_code == 0, init_result.output
    assert stats_result.exit_code == 0, stats_result.output
    assert "spot_prices" in stats_result.output


def test_checkpoint_show_without_checkpoint(configured):
    result = CliRunner().invoke(cli_main.cli, ["checkpoint", "show"])

    assert result.exit_code == 0
    assert "チェックポイントはまだありません" in result.output


def test_checkpoint_show_after_run(configured):
    runner = CliRunner()
    runner.invoke(cli_main.cli, ["run", "--date", "2024-01-01"])

    result = runner.invoke(cli_main.cli, ["checkpoint", "show"])

    assert result.exit_code == 0, result.output
    assert "2024-01-01T23:00:00+00:00" in result.output
