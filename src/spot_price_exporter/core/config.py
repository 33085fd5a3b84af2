"""
設定管理モジュール

環境変数と .env ファイルからの設定読み込みを管理する。
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ENTSO-E API設定
    entsoe_api_token: str | None = Field(
        default=None,
        description="ENTSO-E Transparency Platform のセキュリティトークン",
    )
    entsoe_api_url: str = Field(
        default="https://web-api.tp.entsoe.eu/api",
        description="ENTSO-E APIエンドポイント",
    )
    entsoe_document_type: str = Field(
        default="A44",
        description="ドキュメントタイプ（A44 = 前日市場価格）",
    )
    entsoe_area_code: str = Field(
        default="10YNL----------L",
        description="市場エリアのEICコード（in_Domain / out_Domain 共通）",
    )
    entsoe_request_timeout: float = Field(
        default=30.0,
        description="リクエストタイムアウト（秒）",
    )

    # 保存先
    database_url: str = Field(
        default="sqlite:///data/spot_prices.db",
        description="データベース接続URL",
    )
    checkpoint_path: Path = Field(
        default=Path("data/state.json"),
        description="チェックポイント（前回状態）ファイルのパス",
    )

    # ログ
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="ログレベル",
    )

    # リトライ設定
    retry_attempts: int = Field(default=3, ge=1, description="最大試行回数")
    retry_base_delay: float = Field(default=0.1, description="初回待機時間（秒）")
    retry_max_delay: float = Field(default=10.0, description="最大待機時間（秒）")
    retry_jitter: float = Field(default=0.1, description="待機時間に加えるジッタの上限（秒）")

    # 価格計算の定数
    source_label: str = Field(default="entso-e", description="データ提供元ラベル")
    vat_rate: float = Field(default=0.21, description="付加価値税率")
    sourcing_markup_price: float = Field(default=0.0182, description="調達マークアップ（/kWh）")
    energy_tax_price: float = Field(default=0.1316, description="エネルギー税（/kWh）")


# グローバル設定インスタンス
settings = Settings()
