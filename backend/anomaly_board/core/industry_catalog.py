"""
Industry catalog used to populate the industry selector.
"""

import logging

from ..errors import NetworkError
from ..providers.base import MarketDataProvider

logger = logging.getLogger(__name__)


class IndustryCatalog:
    """
    Selectable industry labels.

    A failed fetch is logged and degrades to an empty catalog; it is never
    surfaced as a section error.
    """

    def __init__(self, provider: MarketDataProvider):
        self._provider = provider
        self._labels: list[str] = []

    @property
    def labels(self) -> list[str]:
        return list(self._labels)

    async def load(self) -> list[str]:
        try:
            labels = await self._provider.get_industry_list()
        except NetworkError as e:
            logger.warning(f"Failed to load industry list: {e.message}")
            labels = []
        self._labels = labels
        return self.labels
