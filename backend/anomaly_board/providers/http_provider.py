"""
HTTP provider for the stock dashboard API.
"""

import logging
from typing import Any

import httpx

from .base import MarketDataProvider
from ..errors import NetworkError, PayloadError
from ..models import AppConfig

logger = logging.getLogger(__name__)


def unwrap_data(body: Any, endpoint: str) -> Any:
    """
    Return the ``data`` member of a response envelope.

    Args:
        body: Decoded JSON body
        endpoint: Endpoint name used in error messages

    Raises:
        PayloadError: If the body has no ``data`` member
    """
    if not isinstance(body, dict) or "data" not in body:
        raise PayloadError(f"{endpoint}: response has no 'data' member")
    return body["data"]


def normalize_wind_payload(body: Any) -> list[dict[str, Any]]:
    """
    Normalize the wind-info response into its point list.

    The endpoint answers either ``{"data": {"Result": [...]}}`` or a bare
    ``{"Result": [...]}``; both collapse into the same list here so nothing
    downstream has to care.
    """
    if isinstance(body, dict) and isinstance(body.get("data"), dict):
        body = body["data"]
    if not isinstance(body, dict) or not isinstance(body.get("Result"), list):
        raise PayloadError("wind-info: response has no 'Result' list")
    return body["Result"]


class HttpMarketDataProvider(MarketDataProvider):
    """
    Fetches dashboard data from the upstream stock API.

    A fresh ``httpx.AsyncClient`` is opened per request so the provider holds
    no connection state between calls.
    """

    def __init__(self, config: AppConfig, transport: httpx.AsyncBaseTransport | None = None):
        """
        Initialize HTTP provider.

        Args:
            config: Application config carrying base URL and path templates
            transport: Optional httpx transport (used to stub the network)
        """
        self.config = config
        self._transport = transport

    def _url(self, path: str) -> str:
        return f"{self.config.api_base_url.rstrip('/')}{path}"

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self._url(path)
        try:
            timeout = httpx.Timeout(self.config.request_timeout_sec, connect=5.0)
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"{method} {url} returned {e.response.status_code}")
            raise NetworkError(f"Request failed with status code {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise NetworkError(str(e) or e.__class__.__name__) from e
        except ValueError as e:
            logger.error(f"{method} {url} returned invalid JSON: {e}")
            raise PayloadError(f"invalid JSON from {path}") from e

    async def get_industry_list(self) -> list[str]:
        body = await self._request("GET", self.config.industry_list_path)
        data = unwrap_data(body, "industry-list")
        if not isinstance(data, list):
            raise PayloadError("industry-list: 'data' is not a list")
        return [str(item) for item in data]

    async def get_index_points(self) -> list[dict[str, Any]]:
        body = await self._request("GET", self.config.wind_info_path)
        return normalize_wind_payload(body)

    async def get_big_rise_volume(self, rise: int) -> dict[str, dict[str, list[list[Any]]]]:
        body = await self._request("GET", self.config.big_rise_volume_path, params={"rise": rise})
        data = unwrap_data(body, "big-rise-volume")
        if not isinstance(data, dict):
            raise PayloadError("big-rise-volume: 'data' is not a mapping")
        return data

    async def get_trading_crowding(
        self,
        industries: list[str],
        latest_trade_date: str,
    ) -> dict[str, dict[str, float]]:
        payload = {
            "industry_list": list(industries),
            "latest_trade_date": latest_trade_date,
        }
        body = await self._request("POST", self.config.trading_crowding_path, json=payload)
        data = unwrap_data(body, "trading-crowding")
        if not isinstance(data, dict):
            raise PayloadError("trading-crowding: 'data' is not a mapping")
        return data


def create_http_provider(
    config: AppConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HttpMarketDataProvider:
    """Factory function to create the HTTP provider."""
    return HttpMarketDataProvider(config, transport=transport)
