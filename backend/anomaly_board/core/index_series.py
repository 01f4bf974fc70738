"""
Index chart series.

Turns the raw index point sequence into aligned price-line and volume-bar
series. The input is trusted to be ascending by trade date.
"""

from typing import Any, Iterable

import numpy as np

from ..models import IndexPoint, IndexSeries, LatestIndexSummary
from ..utils.date_utils import normalize_date
from ..utils.number_utils import round_half_up

# A-share convention: red for up days, green for down days
POSITIVE_COLOR = "rgba(255, 0, 0, 0.7)"
NEGATIVE_COLOR = "rgba(0, 128, 0, 0.7)"


def parse_index_points(raw_points: Iterable[dict[str, Any]]) -> list[IndexPoint]:
    return [IndexPoint.model_validate(item) for item in raw_points]


def summarize_latest(point: IndexPoint) -> LatestIndexSummary:
    return LatestIndexSummary(
        trade_date=normalize_date(point.trade_date),
        pct_change=round_half_up(point.pct_change),
        amount_hundred_million=round_half_up(point.amount / 1e8),
    )


def build_index_series(points: list[IndexPoint]) -> IndexSeries:
    """
    Build chart-ready series from index points.

    Args:
        points: Index points in ascending trade-date order

    Returns:
        IndexSeries with dates, close and amount series, per-bar colors and
        the latest point (None when the input is empty)
    """
    if not points:
        return IndexSeries(dates=[], close_series=[], amount_series=[], bar_colors=[])

    pct = np.array([p.pct_change for p in points], dtype=float)
    colors = np.where(pct > 0, POSITIVE_COLOR, NEGATIVE_COLOR)
    latest = points[-1].model_copy(update={"trade_date": normalize_date(points[-1].trade_date)})

    return IndexSeries(
        dates=[normalize_date(p.trade_date) for p in points],
        close_series=[p.close for p in points],
        amount_series=[p.amount for p in points],
        bar_colors=colors.tolist(),
        latest=latest,
        latest_summary=summarize_latest(latest),
    )
