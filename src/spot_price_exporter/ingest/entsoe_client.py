"""
ENTSO-E APIクライアント

ENTSO-E Transparency Platform のAPIから前日市場価格を取得する。
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

import httpx
from pydantic import ValidationError

from spot_price_exporter.core.config import Settings, settings
from spot_price_exporter.core.errors import FetchFailed, ParseFailed
from spot_price_exporter.core.models import (
    DayAheadPeriod,
    DayAheadPoint,
    DayAheadPrices,
    DayAheadTimeSeries,
)

logger = logging.getLogger(__name__)

# timeInterval/start は秒を含まない（例: 2024-01-01T00:00Z）
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%MZ"
REQUEST_PERIOD_FORMAT = "%Y%m%d%H%M"


# =============================================================================
# XMLパース
# =============================================================================


def parse_timestamp(value: str | None) -> datetime:
    """秒なしのUTCタイムスタンプをパース"""
    if not value:
        raise ParseFailed("timeInterval/start がありません")
    try:
        return datetime.strptime(value.strip(), TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise ParseFailed(f"タイムスタンプのパースエラー: {value}", cause=e) from e


def parse_price_amount(value: str | None) -> Decimal:
    """price.amount をパース"""
    if value is None:
        raise ParseFailed("price.amount がありません")
    try:
        amount = Decimal(value.strip())
    except InvalidOperation as e:
        raise ParseFailed(f"価格のパースエラー: {value}", cause=e) from e
    if not amount.is_finite():
        raise ParseFailed(f"価格が有限値ではありません: {value}")
    return amount


def _parse_period(elem: ET.Element) -> DayAheadPeriod:
    """Period要素をパース"""
    start = parse_timestamp(elem.findtext("{*}timeInterval/{*}start"))

    resolution = elem.findtext("{*}resolution")
    if not resolution:
        raise ParseFailed("resolution がありません")

    points = [
        DayAheadPoint(price_amount=parse_price_amount(point.findtext("{*}price.amount")))
        for point in elem.findall("{*}Point")
    ]

    return DayAheadPeriod(start=start, resolution=resolution.strip(), points=points)


def parse_day_ahead_xml(xml_content: bytes) -> DayAheadPrices:
    """
    前日市場価格ドキュメント（XML）をパース

    要素は名前空間を問わずローカル名で照合する。
    TimeSeriesを含まないドキュメント（Acknowledgement等）は空として扱う。

    Raises:
        ParseFailed: XMLが想定の構造でない場合
    """
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        raise ParseFailed(f"XMLパースエラー: {e}", cause=e) from e

    time_series = []
    try:
        for ts in root.findall("{*}TimeSeries"):
            periods = ts.findall("{*}Period")
            if len(periods) != 1:
                raise ParseFailed(f"TimeSeries の Period は1つである必要があります: {len(periods)}個")
            time_series.append(DayAheadTimeSeries(period=_parse_period(periods[0])))
        return DayAheadPrices(time_series=time_series)
    except ValidationError as e:
        raise ParseFailed(f"ドキュメントの検証エラー: {e}", cause=e) from e


# =============================================================================
# APIクライアント
# =============================================================================


class EntsoeClient:
    """ENTSO-E APIクライアント"""

    def __init__(
        self,
        api_token: str,
        base_url: str = settings.entsoe_api_url,
        document_type: str = settings.entsoe_document_type,
        area_code: str = settings.entsoe_area_code,
        timeout: float = settings.entsoe_request_timeout,
        transport: httpx.BaseTransport | None = None,
    ):
        self.api_token = api_token
        self.base_url = base_url
        self.document_type = document_type
        self.area_code = area_code
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": "SpotPriceExporter/1.0"},
        )

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "EntsoeClient":
        """設定からクライアントを生成"""
        if not config.entsoe_api_token:
            raise ValueError("ENTSOE_API_TOKEN が設定されていません")
        return cls(
            api_token=config.entsoe_api_token,
            base_url=config.entsoe_api_url,
            document_type=config.entsoe_document_type,
            area_code=config.entsoe_area_code,
            timeout=config.entsoe_request_timeout,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self._client.close()

    def build_params(self, period_start: datetime, period_end: datetime) -> dict[str, str]:
        """APIパラメータを構築（トークンを除く）"""
        return {
            "documentType": self.document_type,
            "in_Domain": self.area_code,
            "out_Domain": self.area_code,
            "periodStart": period_start.astimezone(timezone.utc).strftime(REQUEST_PERIOD_FORMAT),
            "periodEnd": period_end.astimezone(timezone.utc).strftime(REQUEST_PERIOD_FORMAT),
        }

    def fetch_raw(self, period_start: datetime, period_end: datetime) -> bytes:
        """
        APIリクエストを実行

        Raises:
            FetchFailed: 通信エラーまたは2xx以外のステータスの場合
        """
        params = self.build_params(period_start, period_end)
        logger.info(f"前日市場価格を取得中: {self.base_url} {params}")

        try:
            response = self._client.get(
                self.base_url,
                params={**params, "securityToken": self.api_token},
            )
        except httpx.HTTPError as e:
            raise FetchFailed(f"リクエストエラー: {type(e).__name__}: {e}", cause=e) from e

        if not response.is_success:
            logger.warning(f"ステータスコード {response.status_code} は失敗を示します: {response.text}")
            raise FetchFailed(
                f"Status code {response.status_code} indicates failure",
                status_code=response.status_code,
                body=response.text,
            )

        return response.content

    def get_day_ahead_prices(self, period_start: datetime, period_end: datetime) -> DayAheadPrices:
        """前日市場価格を取得してパース"""
        return parse_day_ahead_xml(self.fetch_raw(period_start, period_end))
