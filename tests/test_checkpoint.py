import json
from datetime import datetime, timedelta, timezone

import pytest

from spot_price_exporter.core.checkpoint import (
    FileCheckpointStore,
    InMemoryCheckpointStore,
    dump_checkpoint,
    load_checkpoint,
)
from spot_price_exporter.core.errors import CheckpointIOFailed, ParseFailed
from spot_price_exporter.core.models import Checkpoint, PricedInterval

START = datetime(2024, 1, 1, 22, tzinfo=timezone.utc)


def _checkpoint(last_from: datetime = START) -> Checkpoint:
    return Checkpoint(
        future_spot_prices=[
            PricedInterval(
                id="abc",
                source="entso-e",
                from_=START,
                till=START + timedelta(hours=1),
                market_price=0.1,
                market_price_tax=0.021,
                sourcing_markup_price=0.0182,
                energy_tax_price=0.1316,
            )
        ],
        last_from=last_from,
    )


def test_missing_checkpoint_reads_as_none(tmp_path):
    assert FileCheckpointStore(tmp_path / "state.json").read() is None


def test_write_then_read_round_trip(tmp_path):
    store = FileCheckpointStore(tmp_path / "nested" / "state.json")

    store.write(_checkpoint())

    assert store.read() == _checkpoint()


def test_serialized_blob_uses_camel_case_names():
    data = json.loads(dump_checkpoint(_checkpoint()))

    assert set(data) == {"futureSpotPrices", "lastFrom"}
    assert data["lastFrom"] == "2024-01-01T22:00:00Z"
    assert set(data["futureSpotPrices"][0]) == {
        "id",
        "source",
        "from",
        "till",
        "marketPrice",
        "marketPriceTax",
        "sourcingMarkupPrice",
        "energyTaxPrice",
    }


def test_write_replaces_previous_checkpoint_wholesale(tmp_path):
    path = tmp_path / "state.json"
    store = FileCheckpointStore(path)
    store.write(_checkpoint())

    replacement = Checkpoint(last_from=START + timedelta(hours=1))
    store.write(replacement)

    assert store.read() == replacement
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_load_checkpoint_accepts_camel_case_blob():
    checkpoint = load_checkpoint('{"futureSpotPrices": [], "lastFrom": "2024-01-01T22:00:00Z"}')

    assert checkpoint.last_from == START
    assert checkpoint.future_spot_prices == []


@pytest.mark.parametrize("content", ["not json", '{"futureSpotPrices": []}', "[]"])
def test_invalid_checkpoint_content_fails_to_parse(tmp_path, content):
    path = tmp_path / "state.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ParseFailed):
        FileCheckpointStore(path).read()


def test_unreadable_checkpoint_raises_io_failure(tmp_path):
    directory = tmp_path / "state.json"
    directory.mkdir()

    with pytest.raises(CheckpointIOFailed) as exc_info:
        FileCheckpointStore(directory).read()

    assert exc_info.value.retryable is True


def test_in_memory_store_counts_writes():
    store = InMemoryCheckpointStore()

    assert store.read() is None
    store.write(_checkpoint())

    assert store.read() == _checkpoint()
    assert store.writes == 1


def test_checkpoint_that_is_not_utf8_fails_to_parse(tmp_path):
    path = tmp_path / "state.json"
    path.write_bytes(b"\xff\xfe{")

    with pytest.raises(ParseFailed) as exc_info:
        FileCheckpointStore(path).read()

    assert exc_info.value.retryable is False


@pytest.mark.parametrize(
    "content",
    [
        '{"futureSpotPrices": [], "lastFrom": "2024-01-01T05:00:00"}',
        '{"futureSpotPrices": [{"from": "2024-01-01T05:00:00", "till": "2024-01-01T06:00:00Z",'
        ' "marketPrice": 0.1, "marketPriceTax": 0.021, "sourcingMarkupPrice": 0.0182,'
        ' "energyTaxPrice": 0.1316}], "lastFrom": "2024-01-01T05:00:00Z"}',
    ],
)
def test_timestamps_without_offset_fail_to_parse(content):
    with pytest.raises(ParseFailed):
        load_checkpoint(content)
