"""
Stock anomaly aggregation.

Groups per-date anomaly records by industry, keeps the five industries with
the most anomalous stocks, and summarizes each one:
1. Rank industries by stock count (stable, upstream order breaks ties)
2. Keep the top five industries, each with its full stock list
3. Compute count, mean change and total amount
4. Partition stocks into display rows
"""

import logging
from typing import Any, Mapping, Sequence

from ..errors import PayloadError
from ..models import DailySnapshot, IndustryAggregate, RankedDaily, StockAnomaly
from ..utils.date_utils import normalize_date, parse_date
from ..utils.number_utils import round_half_up

logger = logging.getLogger(__name__)

TOP_INDUSTRY_COUNT = 5
ROW_SIZE = 5


def chunk_rows(stocks: Sequence[StockAnomaly], size: int = ROW_SIZE) -> list[list[StockAnomaly]]:
    return [list(stocks[i:i + size]) for i in range(0, len(stocks), size)]


def _parse_stock(row: Sequence[Any], date_key: str, industry: str) -> StockAnomaly:
    if not isinstance(row, (list, tuple)) or len(row) < 3:
        raise PayloadError(f"big-rise-volume: malformed stock row under {date_key}/{industry}: {row!r}")
    name, pct_change, amount = row[0], row[1], row[2]
    try:
        return StockAnomaly(name=str(name), pct_change=float(pct_change), amount=float(amount))
    except (TypeError, ValueError) as e:
        raise PayloadError(f"big-rise-volume: non-numeric stock row under {date_key}/{industry}: {row!r}") from e


class AnomalyAggregator:
    """
    Builds ranked daily industry views from raw anomaly payloads.
    """

    def __init__(self, top_n: int = TOP_INDUSTRY_COUNT, row_size: int = ROW_SIZE):
        self.top_n = top_n
        self.row_size = row_size

    def parse_snapshots(
        self,
        raw_data: Mapping[str, Mapping[str, Sequence[Sequence[Any]]]],
    ) -> list[DailySnapshot]:
        """
        Convert the raw payload into typed snapshots.

        Industry order inside each snapshot is the upstream order.
        """
        if not isinstance(raw_data, Mapping):
            raise PayloadError("big-rise-volume: payload is not a mapping of dates")

        snapshots: list[DailySnapshot] = []
        for date_key, industries in raw_data.items():
            try:
                normalized = normalize_date(date_key)
            except ValueError as e:
                raise PayloadError(f"big-rise-volume: bad date key {date_key!r}") from e
            if not isinstance(industries, Mapping):
                raise PayloadError(f"big-rise-volume: industries under {date_key} are not a mapping")

            parsed: dict[str, list[StockAnomaly]] = {}
            for industry, rows in industries.items():
                if not isinstance(rows, (list, tuple)):
                    raise PayloadError(f"big-rise-volume: stocks under {date_key}/{industry} are not a list")
                parsed[industry] = [_parse_stock(row, date_key, industry) for row in rows]
            snapshots.append(DailySnapshot(date=normalized, industries=parsed))
        return snapshots

    def summarize_industry(self, industry: str, stocks: list[StockAnomaly]) -> IndustryAggregate:
        count = len(stocks)
        avg_change = sum(s.pct_change for s in stocks) / count if count else 0.0
        total_amount = sum(s.amount for s in stocks)
        return IndustryAggregate(
            industry=industry,
            stocks=stocks,
            rows=chunk_rows(stocks, self.row_size),
            count=count,
            avg_change_pct=round_half_up(avg_change),
            total_amount_hundred_million=round_half_up(total_amount / 1e8),
        )

    def rank_snapshot(self, snapshot: DailySnapshot) -> RankedDaily:
        # sorted() is stable, so equal counts keep upstream order
        ranked = sorted(snapshot.industries.items(), key=lambda item: len(item[1]), reverse=True)
        top = ranked[: self.top_n]
        return RankedDaily(
            date=snapshot.date,
            top_industries=[self.summarize_industry(industry, stocks) for industry, stocks in top],
        )

    def aggregate(
        self,
        raw_data: Mapping[str, Mapping[str, Sequence[Sequence[Any]]]],
    ) -> list[RankedDaily]:
        """
        Rank and summarize every date in the payload.

        Args:
            raw_data: Mapping of date string to industry to
                [name, pct_change, amount] rows

        Returns:
            One RankedDaily per date, most recent first
        """
        ranked = [self.rank_snapshot(snapshot) for snapshot in self.parse_snapshots(raw_data)]
        ranked.sort(key=lambda item: parse_date(item.date), reverse=True)
        logger.debug(f"Aggregated {len(ranked)} anomaly snapshots")
        return ranked
