"""
コアモジュール

設定、エラー、モデル、分析ストア、チェックポイントを提供する。
"""

from spot_price_exporter.core.checkpoint import FileCheckpointStore, InMemoryCheckpointStore
from spot_price_exporter.core.config import Settings, settings
from spot_price_exporter.core.database import SqliteSpotPriceSink
from spot_price_exporter.core.errors import (
    CheckpointIOFailed,
    ErrorKind,
    ExportError,
    FetchFailed,
    ParseFailed,
    SinkWriteFailed,
    UnknownResolution,
)
from spot_price_exporter.core.models import (
    Checkpoint,
    DayAheadPeriod,
    DayAheadPoint,
    DayAheadPrices,
    DayAheadTimeSeries,
    PricedInterval,
)

__all__ = [
    "settings",
    "Settings",
    "SqliteSpotPriceSink",
    "FileCheckpointStore",
    "InMemoryCheckpointStore",
    "ErrorKind",
    "ExportError",
    "FetchFailed",
    "UnknownResolution",
    "ParseFailed",
    "SinkWriteFailed",
    "CheckpointIOFailed",
    "PricedInterval",
    "Checkpoint",
    "DayAheadPrices",
    "DayAheadTimeSeries",
    "DayAheadPeriod",
    "DayAheadPoint",
]
