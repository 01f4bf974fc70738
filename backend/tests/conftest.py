from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from anomaly_board.errors import NetworkError
from anomaly_board.providers.base import MarketDataProvider


SAMPLE_ANOMALIES: dict[str, dict[str, list[list[Any]]]] = {
    "2024-01-02": {
        "Tech": [["A", 12.5, 1e8], ["B", 7.0, 2e8]],
        "Bank": [["C", 6.1, 5e8]],
    },
    "2024-01-03": {
        "Media": [["D", 10.0, 1e8]],
        "Auto": [["E", 9.0, 2e8], ["F", 8.0, 2e8], ["G", 6.5, 1e8]],
    },
}

SAMPLE_INDEX_POINTS: list[dict[str, Any]] = [
    {"tradeDate": "20240102", "close": 4500.0, "amount": 8.1e11, "pctChange": -0.52},
    {"tradeDate": "20240103", "close": 4530.0, "amount": 9.2e11, "pctChange": 0.67},
]

SAMPLE_CROWDING: dict[str, dict[str, float]] = {
    "2024-01-03": {"Auto": 3e10, "total_money": 9e11},
    "2024-01-02": {"Auto": 1e10, "Media": 2e10, "total_money": 8e11},
}


class FakeProvider(MarketDataProvider):
    """In-memory provider; sections listed in ``fail`` raise NetworkError."""

    def __init__(
        self,
        *,
        industries: list[str] | None = None,
        index_points: list[dict[str, Any]] | None = None,
        anomalies: dict[str, Any] | None = None,
        crowding: dict[str, Any] | None = None,
        fail: set[str] | None = None,
    ) -> None:
        self.industries = industries if industries is not None else ["Tech", "Bank", "Media", "Auto"]
        self.index_points = index_points if index_points is not None else SAMPLE_INDEX_POINTS
        self.anomalies = anomalies if anomalies is not None else SAMPLE_ANOMALIES
        self.crowding = crowding if crowding is not None else SAMPLE_CROWDING
        self.fail = fail or set()
        self.rise_calls: list[int] = []
        self.crowding_calls: list[tuple[list[str], str]] = []

    def _check(self, section: str) -> None:
        if section in self.fail:
            raise NetworkError(f"{section} unavailable")

    async def get_industry_list(self) -> list[str]:
        self._check("industries")
        return list(self.industries)

    async def get_index_points(self) -> list[dict[str, Any]]:
        self._check("index")
        return list(self.index_points)

    async def get_big_rise_volume(self, rise: int) -> dict[str, Any]:
        self.rise_calls.append(rise)
        self._check("anomalies")
        return self.anomalies

    async def get_trading_crowding(self, industries: list[str], latest_trade_date: str) -> dict[str, Any]:
        self.crowding_calls.append((list(industries), latest_trade_date))
        self._check("crowding")
        return self.crowding


class GatedProvider(FakeProvider):
    """Crowding calls block until the test resolves their future."""

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.pending: list[asyncio.Future] = []

    async def get_trading_crowding(self, industries: list[str], latest_trade_date: str) -> dict[str, Any]:
        self.crowding_calls.append((list(industries), latest_trade_date))
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()
