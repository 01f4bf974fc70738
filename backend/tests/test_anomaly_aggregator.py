from __future__ import annotations

import math
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from anomaly_board.core.anomaly_aggregator import AnomalyAggregator, chunk_rows
from anomaly_board.errors import PayloadError
from anomaly_board.models import StockAnomaly


def _stocks(prefix: str, count: int, pct: float = 8.0, amount: float = 1e8) -> list[list[object]]:
    return [[f"{prefix}{idx}", pct, amount] for idx in range(count)]


def test_aggregate_ranks_and_summarizes_example_day() -> None:
    raw = {
        "2024-01-02": {
            "Tech": [["A", 12.5, 1e8], ["B", 7.0, 2e8]],
            "Bank": [["C", 6.1, 5e8]],
        }
    }
    result = AnomalyAggregator().aggregate(raw)

    assert len(result) == 1
    day = result[0]
    assert day.date == "2024-01-02"
    assert [item.industry for item in day.top_industries] == ["Tech", "Bank"]

    tech, bank = day.top_industries
    assert tech.count == 2
    assert tech.avg_change_pct == 9.75
    assert tech.total_amount_hundred_million == 3.00
    assert bank.count == 1
    assert bank.avg_change_pct == 6.10
    assert bank.total_amount_hundred_million == 5.00
    assert tech.summary_label == "Tech 2，9.75%，3.00亿元"
    assert tech.stocks[0].label == "A（12.50%，1.00亿元）"


def test_aggregate_keeps_top_five_with_stable_ties() -> None:
    raw = {
        "2024-03-01": {
            "I1": _stocks("a", 2),
            "I2": _stocks("b", 4),
            "I3": _stocks("c", 2),
            "I4": _stocks("d", 3),
            "I5": _stocks("e", 2),
            "I6": _stocks("f", 1),
            "I7": _stocks("g", 2),
        }
    }
    day = AnomalyAggregator().aggregate(raw)[0]

    assert len(day.top_industries) == 5
    assert [item.industry for item in day.top_industries] == ["I2", "I4", "I1", "I3", "I5"]
    counts = [item.count for item in day.top_industries]
    assert counts == sorted(counts, reverse=True)


def test_aggregate_never_truncates_stock_list_within_industry() -> None:
    raw = {"2024-03-01": {"Big": _stocks("s", 12)}}
    big = AnomalyAggregator().aggregate(raw)[0].top_industries[0]

    assert big.count == 12
    assert len(big.stocks) == 12
    assert len(big.rows) == math.ceil(12 / 5)
    assert [len(row) for row in big.rows] == [5, 5, 2]
    assert [s for row in big.rows for s in row] == big.stocks


def test_aggregate_sorts_by_parsed_date_descending() -> None:
    raw = {
        "2023-12-29": {"A": _stocks("a", 1)},
        "20240103": {"B": _stocks("b", 1)},
        "2024-01-02": {"C": _stocks("c", 1)},
    }
    dates = [item.date for item in AnomalyAggregator().aggregate(raw)]

    assert dates == ["2024-01-03", "2024-01-02", "2023-12-29"]


def test_aggregate_empty_payload_yields_empty_list() -> None:
    assert AnomalyAggregator().aggregate({}) == []


def test_aggregate_keeps_duplicate_stock_names() -> None:
    raw = {"2024-01-02": {"Tech": [["A", 10.0, 1e8], ["A", 8.0, 1e8]]}}
    tech = AnomalyAggregator().aggregate(raw)[0].top_industries[0]

    assert tech.count == 2
    assert tech.avg_change_pct == 9.0


def test_aggregate_rejects_malformed_stock_rows() -> None:
    with pytest.raises(PayloadError):
        AnomalyAggregator().aggregate({"2024-01-02": {"Tech": [["A", 10.0]]}})

    with pytest.raises(PayloadError):
        AnomalyAggregator().aggregate({"2024-01-02": {"Tech": [["A", "n/a", 1e8]]}})


def test_chunk_rows_partitions_in_order() -> None:
    stocks = [StockAnomaly(name=str(i), pct_change=7.0, amount=1.0) for i in range(7)]
    rows = chunk_rows(stocks)

    assert [[s.name for s in row] for row in rows] == [["0", "1", "2", "3", "4"], ["5", "6"]]
    assert chunk_rows([]) == []


def test_aggregate_rounds_exact_ties_away_from_zero() -> None:
    raw = {
        "2024-01-02": {
            "Up": [["A", 6.125, 1.25e6]],
            "Split": [["B", 6.0, 1e8], ["C", 6.25, 1e8]],
        }
    }
    day = AnomalyAggregator().aggregate(raw)[0]
    by_name = {item.industry: item for item in day.top_industries}

    assert by_name["Up"].avg_change_pct == 6.13
    assert by_name["Up"].total_amount_hundred_million == 0.01
    assert by_name["Split"].avg_change_pct == 6.13


@pytest.mark.parametrize(
    "raw",
    [
        {"2024-01-02": ["not", "a", "mapping"]},
        {"2024-01-02": {"Tech": 42}},
        {"2024-01-02": {"Tech": "A,9.1,1e8"}},
        [["2024-01-02", {}]],
    ],
)
def test_aggregate_rejects_malformed_payload_shapes(raw: object) -> None:
    with pytest.raises(PayloadError):
        AnomalyAggregator().aggregate(raw)  # type: ignore[arg-type]
