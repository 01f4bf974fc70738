"""
Trading crowding computation.

Crowding ratio = industry traded amount / total market traded amount for
the same day. Computations are triggered per date and cached in a
CrowdingStateStore under that date.
"""

import asyncio
import logging
from typing import Any, Mapping, Sequence

import pandas as pd

from ..errors import NetworkError, PayloadError, ValidationError
from ..models import CrowdingRequestState, CrowdingSeries
from ..providers.base import MarketDataProvider
from ..state_manager import CrowdingStateStore
from ..utils.date_utils import normalize_date, parse_date

logger = logging.getLogger(__name__)

TOTAL_MONEY_KEY = "total_money"

PALETTE = (
    "rgba(255, 99, 132, 1)",
    "rgba(54, 162, 235, 1)",
    "rgba(255, 206, 86, 1)",
    "rgba(75, 192, 192, 1)",
    "rgba(153, 102, 255, 1)",
    "rgba(255, 159, 64, 1)",
)


def assign_colors(industries: Sequence[str]) -> dict[str, str]:
    return {industry: PALETTE[idx % len(PALETTE)] for idx, industry in enumerate(industries)}


def build_crowding_series(
    response: Mapping[str, Mapping[str, Any]],
    industries: Sequence[str],
) -> CrowdingSeries:
    """
    Build per-industry crowding ratio series from a crowding response.

    Args:
        response: Mapping of date string to industry amounts plus ``total_money``
        industries: Requested industries, in caller order

    Returns:
        CrowdingSeries with ascending dates; an industry missing on a day
        contributes a ratio of 0

    Raises:
        PayloadError: If a date key is unparseable or a day lacks ``total_money``
    """
    try:
        ordered_keys = sorted(response.keys(), key=parse_date)
    except ValueError as e:
        raise PayloadError(f"trading-crowding: bad date key ({e})") from e

    colors = assign_colors(industries)
    if not ordered_keys:
        return CrowdingSeries(dates=[], series={name: [] for name in industries}, colors=colors)

    frame = pd.DataFrame.from_dict({key: dict(response[key]) for key in ordered_keys}, orient="index")
    frame = frame.apply(pd.to_numeric, errors="coerce")
    if TOTAL_MONEY_KEY not in frame.columns or frame[TOTAL_MONEY_KEY].isna().any():
        raise PayloadError("trading-crowding: every day must carry total_money")

    amounts = frame.reindex(index=ordered_keys, columns=list(dict.fromkeys(industries))).fillna(0.0)
    total = frame.loc[ordered_keys, TOTAL_MONEY_KEY]
    ratios = amounts.div(total, axis=0).where(amounts != 0, 0.0)

    return CrowdingSeries(
        dates=[normalize_date(key) for key in ordered_keys],
        series={name: [float(v) for v in ratios[name].tolist()] for name in industries},
        colors=colors,
    )


class CrowdingComputer:
    """
    Triggers per-date crowding requests and records their state.

    With ``discard_stale`` a settled response is stored only when it belongs
    to the latest trigger for its date; otherwise whichever response settles
    last wins the slot.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        store: CrowdingStateStore,
        discard_stale: bool = True,
    ):
        self._provider = provider
        self.store = store
        self.discard_stale = discard_stale
        self._inflight: set[asyncio.Task] = set()

    def trigger(self, date: str, industries: Sequence[str]) -> "asyncio.Task[CrowdingRequestState]":
        """
        Start a crowding computation for ``date``.

        The slot for ``date`` is set to ``loading`` before the request is
        dispatched. Must be called from a running event loop.

        Args:
            date: Trigger date
            industries: Industries to compute, in display order

        Returns:
            Task resolving to the state this request produced

        Raises:
            ValidationError: If no industry is selected or the date is invalid
        """
        if not industries:
            raise ValidationError("select at least one industry")
        try:
            key = normalize_date(date)
        except ValueError as e:
            raise ValidationError(f"invalid trade date: {date!r}") from e

        loop = asyncio.get_running_loop()
        requested = list(industries)
        generation = self.store.next_generation(key)
        self.store.set(
            key,
            CrowdingRequestState(status="loading", industries=requested, generation=generation),
        )
        task = loop.create_task(self._run(key, requested, generation))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    async def compute(self, date: str, industries: Sequence[str]) -> CrowdingRequestState:
        return await self.trigger(date, industries)

    async def _run(self, key: str, industries: list[str], generation: int) -> CrowdingRequestState:
        try:
            response = await self._provider.get_trading_crowding(industries, key)
            state = CrowdingRequestState(
                status="success",
                data=build_crowding_series(response, industries),
                industries=industries,
                generation=generation,
            )
        except NetworkError as e:
            logger.error(f"Crowding request for {key} failed: {e.message}")
            state = CrowdingRequestState(
                status="error", error=e.message, industries=industries, generation=generation
            )
        except Exception as e:
            logger.exception(f"Unexpected error computing crowding for {key}")
            state = CrowdingRequestState(
                status="error", error=str(e), industries=industries, generation=generation
            )

        if self.discard_stale and not self.store.is_latest(key, generation):
            logger.info(f"Discarding stale crowding response for {key} (generation {generation})")
            return state

        self.store.set(key, state)
        return state
