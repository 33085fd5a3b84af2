"""
正規化モジュール

ENTSO-Eの前日市場価格ドキュメントを価格区間（PricedInterval）の列に変換する。
"""

import logging
from collections.abc import Callable
from uuid import uuid4

from spot_price_exporter.core.config import settings
from spot_price_exporter.core.models import DayAheadPrices, DayAheadTimeSeries, PricedInterval
from spot_price_exporter.ingest.resolution import resolve_end

logger = logging.getLogger(__name__)


def generate_interval_id() -> str:
    """区間IDを生成"""
    return str(uuid4())


class PriceNormalizer:
    """価格区間への正規化クラス"""

    def __init__(
        self,
        source: str = settings.source_label,
        vat_rate: float = settings.vat_rate,
        sourcing_markup_price: float = settings.sourcing_markup_price,
        energy_tax_price: float = settings.energy_tax_price,
        id_generator: Callable[[], str] = generate_interval_id,
    ):
        self.source = source
        self.vat_rate = vat_rate
        self.sourcing_markup_price = sourcing_markup_price
        self.energy_tax_price = energy_tax_price
        self.id_generator = id_generator

    def normalize(self, document: DayAheadPrices) -> list[PricedInterval]:
        """
        ドキュメントを価格区間の列に変換

        TimeSeries・Pointはドキュメント順に処理し、並べ替えは行わない。
        1件でも未対応の解像度があれば全体を失敗とする（部分結果は返さない）。

        Raises:
            UnknownResolution: 未対応の解像度コードの場合
        """
        intervals: list[PricedInterval] = []
        for series in document.time_series:
            intervals.extend(self._normalize_series(series))

        logger.debug(f"正規化完了: {len(document.time_series)}系列, {len(intervals)}区間")
        return intervals

    def _normalize_series(self, series: DayAheadTimeSeries) -> list[PricedInterval]:
        period = series.period
        start = period.start
        intervals = []

        for point in period.points:
            end = resolve_end(start, period.resolution)

            # MWhあたり → kWhあたり
            market_price = float(point.price_amount) / 1000

            intervals.append(PricedInterval(
                id=self.id_generator(),
                source=self.source,
                from_=start,
                till=end,
                market_price=market_price,
                market_price_tax=market_price * self.vat_rate,
                sourcing_markup_price=self.sourcing_markup_price,
                energy_tax_price=self.energy_tax_price,
            ))

            start = end

        return intervals


def normalize_day_ahead_prices(document: DayAheadPrices) -> list[PricedInterval]:
    """デフォルト設定でドキュメントを正規化"""
    return PriceNormalizer().normalize(document)
