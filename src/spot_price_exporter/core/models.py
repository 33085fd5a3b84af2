"""
データモデル定義

スポット価格の共通スキーマ、チェックポイント、ENTSO-Eレスポンスのモデルを定義する。
"""

from decimal import Decimal

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# スポット価格モデル
# =============================================================================


class PricedInterval(BaseModel):
    """正規化された価格区間モデル（分析ストアの1行）"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    source: str | None = None
    from_: AwareDatetime = Field(alias="from")
    till: AwareDatetime
    market_price: float
    market_price_tax: float
    sourcing_markup_price: float
    energy_tax_price: float

    def to_row(self) -> dict:
        """camelCaseのフィールド名で行データに変換"""
        return self.model_dump(by_alias=True, mode="json")


class Checkpoint(BaseModel):
    """前回実行の状態"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    future_spot_prices: list[PricedInterval] = Field(default_factory=list)
    last_from: AwareDatetime


# =============================================================================
# ENTSO-E レスポンスモデル
# =============================================================================


class DayAheadPoint(BaseModel):
    """Point要素（位置は並び順で決まる）"""

    price_amount: Decimal


class DayAheadPeriod(BaseModel):
    """Period要素"""

    start: AwareDatetime
    resolution: str
    points: list[DayAheadPoint] = Field(default_factory=list)


class DayAheadTimeSeries(BaseModel):
    """TimeSeries要素"""

    period: DayAheadPeriod


class DayAheadPrices(BaseModel):
    """前日市場価格ドキュメント"""

    time_series: list[DayAheadTimeSeries] = Field(default_factory=list)
