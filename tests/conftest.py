from datetime import datetime
from decimal import Decimal

import pytest

from spot_price_exporter.core.models import (
    DayAheadPeriod,
    DayAheadPoint,
    DayAheadPrices,
    DayAheadTimeSeries,
)

ENTSOE_NS = "urn:iec62325.351:tc57wg16:451-3:publicationdocument:7:0"


@pytest.fixture
def make_document():
    def _make(*series: tuple[datetime, str, list[str]]) -> DayAheadPrices:
        return DayAheadPrices(
            time_series=[
                DayAheadTimeSeries(
                    period=DayAheadPeriod(
                        start=start,
                        resolution=resolution,
                        points=[DayAheadPoint(price_amount=Decimal(p)) for p in prices],
                    )
                )
                for start, resolution, prices in series
            ]
        )

    return _make


@pytest.fixture
def make_xml():
    def _make(*series: tuple[str, str, list[str]], namespace: str | None = ENTSOE_NS) -> bytes:
        xmlns = f' xmlns="{namespace}"' if namespace else ""
        parts = [f'<?xml version="1.0" encoding="UTF-8"?>\n<Publication_MarketDocument{xmlns}>']
        parts.append("<mRID>doc-1</mRID><type>A44</type>")
        for i, (start, resolution, prices) in enumerate(series, start=1):
            parts.append(f"<TimeSeries><mRID>{i}</mRID><Period>")
            parts.append(f"<timeInterval><start>{start}</start><end>ignored</end></timeInterval>")
            parts.append(f"<resolution>{resolution}</resolution>")
            for position, price in enumerate(prices, start=1):
                parts.append(
                    f"<Point><position>{position}</position>"
                    f"<price.amount>{price}</price.amount></Point>"
                )
            parts.append("</Period></TimeSeries>")
        parts.append("</Publication_MarketDocument>")
        return "".join(parts).encode("utf-8")

    return _make
