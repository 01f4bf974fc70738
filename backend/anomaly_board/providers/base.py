"""
Base interfaces for upstream market data providers.
"""

from abc import ABC, abstractmethod
from typing import Any


class MarketDataProvider(ABC):
    """
    Abstract base class for the dashboard's upstream data source.

    Every method is a coroutine; each await is a network boundary. Payloads
    returned here are already unwrapped from the transport envelope but not
    yet transformed.
    """

    @abstractmethod
    async def get_industry_list(self) -> list[str]:
        """
        Get the selectable industry labels.

        Returns:
            Industry labels in upstream order
        """

    @abstractmethod
    async def get_index_points(self) -> list[dict[str, Any]]:
        """
        Get the raw index point sequence, ascending by trade date.

        Returns:
            Raw point dicts with tradeDate, close, amount and pctChange
        """

    @abstractmethod
    async def get_big_rise_volume(self, rise: int) -> dict[str, dict[str, list[list[Any]]]]:
        """
        Get per-date anomaly records for stocks that rose above ``rise`` percent.

        Args:
            rise: Rise threshold in percent

        Returns:
            Mapping of date string to industry to [name, pct_change, amount] rows
        """

    @abstractmethod
    async def get_trading_crowding(
        self,
        industries: list[str],
        latest_trade_date: str,
    ) -> dict[str, dict[str, float]]:
        """
        Get per-date traded amounts for the given industries plus the market total.

        Args:
            industries: Industry labels to request
            latest_trade_date: Trigger date in YYYY-MM-DD format

        Returns:
            Mapping of date string to industry amounts and ``total_money``
        """
