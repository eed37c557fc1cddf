from __future__ import annotations

"""exchangeratesapi.io provider and factory.

Both endpoints answer with a JSON envelope:

    {"success": true, "base": "EUR", "date": "2024-05-01", "rates": {"USD": 1.07, ...}}
    {"success": false, "error": {"code": 101, "info": "You have not supplied an API Access Key."}}
"""
from datetime import date
import logging
from typing import Any, Dict, Iterable, Optional

import httpx

from fxdash.core.config import Settings
from fxdash.core.errors import ConfigurationError, UpstreamError
from fxdash.services.http_client import HttpError, get_json
from .base import RateProvider

logger = logging.getLogger("fxdash.rates.provider")

MISSING_KEY_MESSAGE = "EXCHANGE_RATES_API_KEY is not configured"


class ExchangeRatesApiProvider(RateProvider):
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "http://api.exchangeratesapi.io/v1",
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._api_key = api_key or None
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._api_key is not None

    def _require_key(self) -> str:
        if self._api_key is None:
            raise ConfigurationError(MISSING_KEY_MESSAGE)
        return self._api_key

    async def _fetch(self, path: str, params: Dict[str, Any]) -> Dict[str, float]:
        params = {"access_key": self._require_key(), **params}
        url = f"{self._base_url}/{path}"
        try:
            data = await get_json(self._client, url, params=params, timeout=self._timeout)
        except HttpError as e:
            raise UpstreamError(
                f"Failed to fetch exchange rates: {e}", upstream_status=e.status_code
            ) from e
        if not isinstance(data, dict) or not data.get("success"):
            error = data.get("error") if isinstance(data, dict) else None
            info = error.get("info") if isinstance(error, dict) else None
            raise UpstreamError(f"API Error: {info or 'Unknown error'}")
        rates = data.get("rates") or {}
        if not isinstance(rates, dict):
            raise UpstreamError("API Error: malformed rates payload")
        try:
            return {str(k).upper(): float(v) for k, v in rates.items() if v is not None}
        except (TypeError, ValueError) as e:
            raise UpstreamError(f"API Error: non-numeric rate in payload ({e})") from e

    async def latest(self, base_currency: str) -> Dict[str, float]:
        logger.info("fetching latest rates base=%s", base_currency)
        return await self._fetch("latest", {"base": base_currency})

    async def historical(
        self, day: date, base_currency: str, symbols: Iterable[str]
    ) -> Dict[str, float]:
        logger.debug("fetching historical rates day=%s base=%s", day, base_currency)
        return await self._fetch(
            day.isoformat(),
            {"base": base_currency, "symbols": ",".join(symbols)},
        )


def make_rate_provider(
    settings: Settings, client: Optional[httpx.AsyncClient] = None
) -> RateProvider:
    return ExchangeRatesApiProvider(
        settings.exchange_rates_api_key,
        settings.exchange_rates_api_url,
        timeout=settings.http_timeout_seconds,
        client=client,
    )
