"""
Dashboard orchestration.

Composes the catalog, index series, anomaly aggregation and crowding
computation into one view model. Each section keeps its own status so a
failure in one leaves the others usable.
"""

import asyncio
import logging
from typing import Sequence

from .config import RISE_MAX, RISE_MIN
from .core.anomaly_aggregator import AnomalyAggregator
from .core.crowding import CrowdingComputer
from .core.index_series import build_index_series, parse_index_points
from .core.industry_catalog import IndustryCatalog
from .errors import NetworkError, ValidationError
from .models import (
    AnomalySection,
    AppConfig,
    CrowdingRequestState,
    DashboardView,
    IndexSection,
    RankedDaily,
)
from .providers.base import MarketDataProvider
from .providers.http_provider import create_http_provider
from .state_manager import CrowdingStateStore
from .utils.date_utils import normalize_date

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Holds the dashboard state for one process.

    The anomaly snapshot set is rebuilt wholesale on every rise change and
    reseeds the industry selection; crowding states are keyed by trigger date
    and survive rise changes.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        *,
        default_rise: int = 8,
        discard_stale: bool = True,
    ):
        self.provider = provider
        self.catalog = IndustryCatalog(provider)
        self.aggregator = AnomalyAggregator()
        self.crowding_store = CrowdingStateStore()
        self.crowding = CrowdingComputer(provider, self.crowding_store, discard_stale=discard_stale)

        self.index_section = IndexSection()
        self.anomaly_section = AnomalySection(rise=default_rise)
        self.selected_industries: list[str] = []

    @classmethod
    def from_config(cls, config: AppConfig, provider: MarketDataProvider | None = None) -> "DashboardService":
        return cls(
            provider or create_http_provider(config),
            default_rise=config.default_rise,
            discard_stale=config.crowding_discard_stale,
        )

    @property
    def rise(self) -> int:
        return self.anomaly_section.rise

    async def load_industry_catalog(self) -> list[str]:
        return await self.catalog.load()

    async def load_index(self) -> IndexSection:
        self.index_section = IndexSection(status="loading")
        try:
            points = parse_index_points(await self.provider.get_index_points())
            self.index_section = IndexSection(status="success", data=build_index_series(points))
        except NetworkError as e:
            self.index_section = IndexSection(status="error", error=e.message)
        except ValueError as e:
            # pydantic.ValidationError is a ValueError
            logger.error(f"Malformed index points: {e}")
            self.index_section = IndexSection(status="error", error="malformed index data")
        return self.index_section

    async def set_rise(self, rise: int) -> AnomalySection:
        """
        Change the rise threshold and rebuild the anomaly snapshots.

        Args:
            rise: Rise threshold in percent (6-15)

        Raises:
            ValidationError: If rise is out of range
        """
        if not RISE_MIN <= rise <= RISE_MAX:
            raise ValidationError(f"rise must be between {RISE_MIN} and {RISE_MAX}")

        self.anomaly_section = AnomalySection(status="loading", rise=rise)
        try:
            raw = await self.provider.get_big_rise_volume(rise)
            ranked = self.aggregator.aggregate(raw)
        except NetworkError as e:
            self.anomaly_section = AnomalySection(status="error", error=e.message, rise=rise)
            return self.anomaly_section

        self.anomaly_section = AnomalySection(status="success", rise=rise, data=ranked)
        self.selected_industries = self._default_selection(ranked)
        logger.info(f"Loaded {len(ranked)} anomaly days for rise>{rise}%")
        return self.anomaly_section

    async def load_anomalies(self) -> AnomalySection:
        return await self.set_rise(self.rise)

    async def refresh(self) -> DashboardView:
        await asyncio.gather(
            self.load_industry_catalog(),
            self.load_index(),
            self.load_anomalies(),
        )
        return self.view()

    def select_industries(self, industries: Sequence[str]) -> list[str]:
        self.selected_industries = list(dict.fromkeys(industries))
        return list(self.selected_industries)

    def trigger_crowding(
        self,
        date: str,
        industries: Sequence[str] | None = None,
    ) -> "asyncio.Task[CrowdingRequestState]":
        chosen = self.selected_industries if industries is None else list(industries)
        return self.crowding.trigger(date, chosen)

    def crowding_state(self, date: str) -> CrowdingRequestState:
        try:
            key = normalize_date(date)
        except ValueError as e:
            raise ValidationError(f"invalid trade date: {date!r}") from e
        return self.crowding_store.get(key)

    def view(self) -> DashboardView:
        return DashboardView(
            index=self.index_section,
            anomalies=self.anomaly_section,
            industry_options=self.catalog.labels,
            selected_industries=list(self.selected_industries),
            crowding=dict(self.crowding_store.snapshot()),
        )

    @staticmethod
    def _default_selection(ranked: list[RankedDaily]) -> list[str]:
        if not ranked:
            return []
        return [item.industry for item in ranked[0].top_industries]
