"""
解像度モジュール

ENTSO-Eの解像度コードから区間の終了時刻を計算する。
"""

import calendar
from datetime import datetime, timedelta

from spot_price_exporter.core.errors import UnknownResolution

FIXED_DURATIONS: dict[str, timedelta] = {
    "PT1M": timedelta(minutes=1),
    "PT15M": timedelta(minutes=15),
    "PT60M": timedelta(minutes=60),
    "P1D": timedelta(days=1),
    "P7D": timedelta(days=7),
}

SUPPORTED_RESOLUTIONS = (*FIXED_DURATIONS, "P1M", "P1Y")


def add_months(value: datetime, months: int) -> datetime:
    """
    暦月を加算（負数で減算）

    日が移動先の月末を超える場合は月末に丸める（例: 1/31 + 1か月 = 2/29）
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def resolve_end(start: datetime, resolution: str) -> datetime:
    """
    区間の開始時刻と解像度コードから終了時刻を計算

    Raises:
        UnknownResolution: 未対応の解像度コードの場合
    """
    duration = FIXED_DURATIONS.get(resolution)
    if duration is not None:
        return start + duration

    if resolution == "P1M":
        return add_months(start, 1)
    if resolution == "P1Y":
        # 既存データとの互換のため12か月を減算する（加算ではない）
        return add_months(start, -12)

    raise UnknownResolution(resolution)
