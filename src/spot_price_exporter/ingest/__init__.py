"""
収集（Ingest）モジュール

ENTSO-Eから前日市場価格を取得し、正規化して分析ストアに保存する。
"""

from spot_price_exporter.ingest.entsoe_client import EntsoeClient, parse_day_ahead_xml
from spot_price_exporter.ingest.exporter import (
    ExportResult,
    SpotPriceExporter,
    day_window,
    is_new_interval,
)
from spot_price_exporter.ingest.normalizer import PriceNormalizer, normalize_day_ahead_prices
from spot_price_exporter.ingest.resolution import SUPPORTED_RESOLUTIONS, add_months, resolve_end
from spot_price_exporter.ingest.retry import RetryPolicy, is_retryable

__all__ = [
    "EntsoeClient",
    "parse_day_ahead_xml",
    "PriceNormalizer",
    "normalize_day_ahead_prices",
    "resolve_end",
    "add_months",
    "SUPPORTED_RESOLUTIONS",
    "RetryPolicy",
    "is_retryable",
    "SpotPriceExporter",
    "ExportResult",
    "day_window",
    "is_new_interval",
]
