"""
エクスポートパイプライン

前回のチェックポイントを読み込み、ENTSO-Eから1日分の前日市場価格を取得・正規化し、
未書き込みの区間だけを分析ストアに保存してチェックポイントを更新する。
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

from spot_price_exporter.core.models import Checkpoint, DayAheadPrices, PricedInterval
from spot_price_exporter.ingest.normalizer import PriceNormalizer
from spot_price_exporter.ingest.retry import RetryPolicy

logger = logging.getLogger(__name__)


class MarketDataSource(Protocol):
    def get_day_ahead_prices(
        self, period_start: datetime, period_end: datetime
    ) -> DayAheadPrices: ...


class AnalyticalSink(Protocol):
    def init_table(self) -> None: ...

    def insert_spot_price(self, interval: PricedInterval) -> bool: ...


class CheckpointStore(Protocol):
    def read(self) -> Checkpoint | None: ...

    def write(self, checkpoint: Checkpoint) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def day_window(start_date: datetime) -> tuple[datetime, datetime]:
    """基準時刻を含むUTCの暦日 [開始, 終了) を返す"""
    if start_date.tzinfo is None:
        start_date = start_date.replace(tzinfo=timezone.utc)
    period_start = start_date.astimezone(timezone.utc).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return period_start, period_start + timedelta(days=1)


def is_new_interval(interval: PricedInterval, checkpoint: Checkpoint | None) -> bool:
    """前回書き込んだ区間より後の区間かどうか"""
    if checkpoint is None:
        return True
    return interval.from_ > checkpoint.last_from


class ExportResult:
    """エクスポート結果"""

    def __init__(self, period_start: datetime, period_end: datetime, dry_run: bool = False):
        self.period_start = period_start
        self.period_end = period_end
        self.dry_run = dry_run
        self.fetched: int = 0
        self.written: int = 0
        self.skipped: int = 0
        self.duplicates: int = 0
        self.future: int = 0
        self.last_from: datetime | None = None
        self.checkpoint_written: bool = False

    def summary(self) -> str:
        return (
            f"期間: {self.period_start.isoformat()}〜{self.period_end.isoformat()}, "
            f"取得: {self.fetched}件, "
            f"書き込み: {self.written}件, "
            f"スキップ: {self.skipped}件, "
            f"既存: {self.duplicates}件, "
            f"未経過: {self.future}件"
        )


class SpotPriceExporter:
    """スポット価格エクスポータ"""

    def __init__(
        self,
        market_data: MarketDataSource,
        sink: AnalyticalSink,
        checkpoint_store: CheckpointStore,
        normalizer: PriceNormalizer | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.market_data = market_data
        self.sink = sink
        self.checkpoint_store = checkpoint_store
        self.normalizer = normalizer or PriceNormalizer()
        self.retry_policy = retry_policy or RetryPolicy()
        self.clock = clock

    def run(
        self,
        start_date: datetime,
        now: datetime | None = None,
        dry_run: bool = False,
    ) -> ExportResult:
        """
        1日分のエクスポートを実行

        Args:
            start_date: 取得対象日を含む基準時刻
            now: 未経過判定に使う現在時刻（省略時は clock）
            dry_run: Trueの場合、テーブル初期化・書き込み・チェックポイント保存をスキップ

        Returns:
            ExportResult: エクスポート結果

        Raises:
            ExportError: リトライ上限に達した、またはパース等の致命的エラーの場合
        """
        now = now or self.clock()
        period_start, period_end = day_window(start_date)
        result = ExportResult(period_start, period_end, dry_run=dry_run)

        if not dry_run:
            logger.info("テーブルを初期化中...")
            self.retry_policy.call(self.sink.init_table)

        logger.info("前回の状態を読み込み中...")
        checkpoint = self.retry_policy.call(self.checkpoint_store.read)
        if checkpoint is not None:
            logger.info(f"前回の最終書き込み区間: {checkpoint.last_from.isoformat()}")

        logger.info(f"前日市場価格を取得中: {period_start.isoformat()}〜{period_end.isoformat()}")
        document = self.retry_policy.call(
            self.market_data.get_day_ahead_prices, period_start, period_end
        )

        intervals = self.normalizer.normalize(document)
        result.fetched = len(intervals)
        logger.info(f"前日市場価格を{len(intervals)}件取得しました")

        future_spot_prices: list[PricedInterval] = []
        last_from: datetime | None = None

        for interval in intervals:
            logger.debug(f"{interval!r}")
            if interval.till > now:
                future_spot_prices.append(interval)

            if not is_new_interval(interval, checkpoint):
                logger.debug(f"書き込み済みのためスキップ: from={interval.from_.isoformat()}")
                result.skipped += 1
                continue

            inserted = True
            if not dry_run:
                inserted = self.retry_policy.call(self.sink.insert_spot_price, interval)
            last_from = interval.from_
            if inserted:
                result.written += 1
            else:
                result.duplicates += 1

        result.future = len(future_spot_prices)
        result.last_from = last_from

        if last_from is not None and not dry_run:
            logger.info("新しい状態を書き込み中...")
            new_checkpoint = Checkpoint(
                future_spot_prices=future_spot_prices,
                last_from=last_from,
            )
            self.retry_policy.call(self.checkpoint_store.write, new_checkpoint)
            result.checkpoint_written = True

        logger.info(f"エクスポート完了: {result.summary()}")
        return result
