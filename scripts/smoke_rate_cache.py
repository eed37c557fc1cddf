"""Smoke script for the client-side rate cache.

Demonstrates against a running API (DASHBOARD_API_URL, default http://localhost:8000):
 1. First access triggers an HTTP fetch.
 2. Subsequent access within the TTL is served from the cache (same fetched_at).
 3. Advancing the injected clock past the TTL forces a refetch.

NOTE: This is a lightweight diagnostic and not a formal test.
"""

import asyncio
from datetime import timedelta
from pprint import pprint

from fxdash.core.config import get_settings
from fxdash.services.rates.cache_service import ClientRateCache, HttpRatesFetcher
from fxdash.services.rates.freshness import utc_now


async def run(base: str = "EUR"):
    settings = get_settings()
    offset = timedelta(0)

    def clock():
        return utc_now() + offset

    cache = ClientRateCache(
        HttpRatesFetcher(settings.dashboard_api_url, timeout=settings.http_timeout_seconds),
        ttl=timedelta(seconds=settings.client_cache_ttl_seconds),
        clock=clock,
    )
    out = {}

    rows = await cache.get(base)
    out["initial"] = {"rows": len(rows), "fetched_at": cache.snapshot(base).fetched_at.isoformat()}

    rows = await cache.get(base)
    out["second"] = {"rows": len(rows), "fetched_at": cache.snapshot(base).fetched_at.isoformat()}

    offset = timedelta(seconds=settings.client_cache_ttl_seconds + 5)
    rows = await cache.get(base)
    out["after_ttl"] = {"rows": len(rows), "fetched_at": cache.snapshot(base).fetched_at.isoformat()}

    pprint(out)


if __name__ == "__main__":
    asyncio.run(run())
