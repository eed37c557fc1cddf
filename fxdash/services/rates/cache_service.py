from __future__ import annotations

"""Client-side rate cache in front of the /exchange-rates endpoint.

Purpose:
    Avoid a network round trip per rate lookup by keeping, per base currency,
    the full row set returned by the server together with the time it was
    fetched. Entries older than the TTL (24h by default) are re-fetched.

Design:
    - Constructed explicitly with its fetcher, TTL and clock; there is no
      module-level instance, so tests control time and never share state.
    - No eviction beyond overwrite-on-refresh. The key space is currency codes.
    - Not safe for concurrent refreshes: two callers missing the same base at
      once both call the fetcher and the later result overwrites the earlier.

Cached rows are advisory. Exchanges and transfers must not rely on them; the
ledger re-derives rates at transaction time.
"""
from datetime import timedelta
import logging
from typing import Awaitable, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError as ModelValidationError

from fxdash.core.errors import UpstreamError
from fxdash.models.constants import normalize_currency
from fxdash.models.rates import ExchangeRate, RateSnapshot
from fxdash.services.http_client import HttpError, get_json
from .freshness import DEFAULT_MAX_AGE, Clock, utc_now

RatesFetcher = Callable[[str], Awaitable[List[ExchangeRate]]]

logger = logging.getLogger("fxdash.rates.cache")


class ClientRateCache:
    def __init__(
        self,
        fetcher: RatesFetcher,
        *,
        ttl: timedelta = DEFAULT_MAX_AGE,
        clock: Clock = utc_now,
    ):
        self._fetcher = fetcher
        self._ttl = ttl
        self._clock = clock
        self._entries: Dict[str, RateSnapshot] = {}

    def snapshot(self, base_currency: str) -> Optional[RateSnapshot]:
        return self._entries.get(normalize_currency(base_currency))

    def is_valid(self, base_currency: str) -> bool:
        entry = self.snapshot(base_currency)
        if entry is None:
            return False
        return self._clock() - entry.fetched_at < self._ttl

    async def get(self, base_currency: str) -> List[ExchangeRate]:
        base = normalize_currency(base_currency)
        if self.is_valid(base):
            return self._entries[base].rates
        logger.debug("cache miss for %s", base)
        rates = await self._fetcher(base)
        self._entries[base] = RateSnapshot(
            base_currency=base, rates=rates, fetched_at=self._clock()
        )
        return rates


class HttpRatesFetcher:
    """Fetch rows from the dashboard API: GET {api_url}/exchange-rates?base=CODE."""

    def __init__(
        self,
        api_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._url = f"{api_url.rstrip('/')}/exchange-rates"
        self._timeout = timeout
        self._client = client

    async def __call__(self, base_currency: str) -> List[ExchangeRate]:
        try:
            data = await get_json(
                self._client,
                self._url,
                params={"base": base_currency},
                timeout=self._timeout,
            )
        except HttpError as e:
            message = e.payload.get("error") if isinstance(e.payload, dict) else None
            raise UpstreamError(
                message or f"Failed to fetch exchange rates: {e}",
                upstream_status=e.status_code,
            ) from e
        if not isinstance(data, list):
            raise UpstreamError("Failed to fetch exchange rates: expected a list of rows")
        try:
            return [ExchangeRate.model_validate(row) for row in data]
        except ModelValidationError as e:
            raise UpstreamError(f"Failed to parse exchange rates: {e}") from e
