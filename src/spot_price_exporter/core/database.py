"""
データベース管理モジュール

分析ストア（SQLite）のテーブル初期化と価格区間の書き込みを提供する。
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator

from spot_price_exporter.core.config import settings
from spot_price_exporter.core.errors import SinkWriteFailed
from spot_price_exporter.core.models import PricedInterval

logger = logging.getLogger(__name__)


# =============================================================================
# DDL（テーブル定義）
# =============================================================================

DDL_STATEMENTS = """
-- spot_prices: 価格区間
CREATE TABLE IF NOT EXISTS spot_prices (
    "id" TEXT NOT NULL,
    "source" TEXT,
    "from" TEXT NOT NULL,
    "till" TEXT NOT NULL,
    "marketPrice" REAL NOT NULL,
    "marketPriceTax" REAL NOT NULL,
    "sourcingMarkupPrice" REAL NOT NULL,
    "energyTaxPrice" REAL NOT NULL
);

-- 再実行時の重複書き込みを吸収する自然キー
CREATE UNIQUE INDEX IF NOT EXISTS idx_spot_prices_source_from
    ON spot_prices("source", "from");
CREATE INDEX IF NOT EXISTS idx_spot_prices_till ON spot_prices("till");
"""

COLUMNS = (
    "id",
    "source",
    "from",
    "till",
    "marketPrice",
    "marketPriceTax",
    "sourcingMarkupPrice",
    "energyTaxPrice",
)


# =============================================================================
# データベース接続
# =============================================================================


def get_db_path(url: str) -> Path:
    """データベースファイルのパスを取得"""
    if url.startswith("sqlite:///"):
        return Path(url.replace("sqlite:///", ""))
    raise ValueError(f"Unsupported database URL: {url}")


class SqliteSpotPriceSink:
    """SQLiteの分析ストア"""

    def __init__(self, database_url: str = settings.database_url):
        self.db_path = get_db_path(database_url)

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """データベース接続を取得（コンテキストマネージャ）"""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def init_table(self) -> None:
        """テーブルを初期化（存在する場合は何もしない）"""
        try:
            with self.get_connection() as conn:
                conn.executescript(DDL_STATEMENTS)
                conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise SinkWriteFailed(f"テーブル初期化エラー: {e}", cause=e) from e

    def insert_spot_price(self, interval: PricedInterval) -> bool:
        """
        価格区間を1行書き込む

        (source, from) が既に存在する場合は書き込まない。

        Returns:
            新規に挿入した場合True
        """
        row = interval.to_row()
        column_list = ", ".join(f'"{c}"' for c in COLUMNS)
        placeholders = ", ".join("?" for _ in COLUMNS)
        try:
            with self.get_connection() as conn:
                cursor = conn.execute(
                    f"""
                    INSERT INTO spot_prices ({column_list})
                    VALUES ({placeholders})
                    ON CONFLICT("source", "from") DO NOTHING
                    """,  # noqa: S608
                    tuple(row[c] for c in COLUMNS),
                )
                conn.commit()
                inserted = cursor.rowcount > 0
        except (sqlite3.Error, OSError) as e:
            raise SinkWriteFailed(f"書き込みエラー: {e}", cause=e) from e

        if not inserted:
            logger.debug(f"既存行のため書き込みなし: source={row['source']}, from={row['from']}")
        return inserted

    def count_rows(self) -> int:
        """行数を取得"""
        with self.get_connection() as conn:
            cursor = conn.execute("SELECT COUNT(*) FROM spot_prices")
            return cursor.fetchone()[0]

    def latest_from(self) -> datetime | None:
        """最新の区間開始時刻を取得"""
        with self.get_connection() as conn:
            cursor = conn.execute('SELECT MAX("from") FROM spot_prices')
            value = cursor.fetchone()[0]
        if value is None:
            return None
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
