from __future__ import annotations

"""Exchange rate synchronization.

Flow for one base currency:
    read rows from the store -> freshness check on the first row ->
    (stale or empty) fetch latest rates -> upsert the batch -> re-read.

There is no locking: two overlapping refreshes for the same base both hit the
provider and the last upsert wins. Upserts are idempotent per pair, so the
stored rows converge. No step is retried.
"""
import asyncio
from datetime import date, timedelta
import logging
from typing import Dict, List, Optional

from fxdash.core.errors import ConfigurationError, ValidationError
from fxdash.core.logging import log_context
from fxdash.models.constants import (
    EXCHANGE_RATES_TABLE,
    is_currency_code,
    normalize_currency,
)
from fxdash.models.rates import ExchangeRate, HistoryPoint
from fxdash.services.realtime import ChangeFeed
from .base import RateProvider
from .freshness import DEFAULT_MAX_AGE, Clock, needs_refresh, utc_now
from .providers import MISSING_KEY_MESSAGE
from .store import RateStore

logger = logging.getLogger("fxdash.rates.sync")


def validate_currency(value: Optional[str], label: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{label} is required")
    code = normalize_currency(value)
    if not is_currency_code(code):
        raise ValidationError(f"{label} must be a 3 letter currency code, got {value!r}")
    return code


class RateSyncService:
    def __init__(
        self,
        store: RateStore,
        provider: RateProvider,
        *,
        max_age: timedelta = DEFAULT_MAX_AGE,
        history_days: int = 7,
        history_base: str = "EUR",
        clock: Clock = utc_now,
        change_feed: Optional[ChangeFeed] = None,
    ):
        self._store = store
        self._provider = provider
        self._max_age = max_age
        self._history_days = history_days
        self._history_base = history_base
        self._clock = clock
        self._change_feed = change_feed

    # Internal --------------------------------------------------
    def _require_provider(self) -> None:
        if not self._provider.is_configured:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

    def _build_rows(self, base: str, rates: Dict[str, float]) -> List[ExchangeRate]:
        now = self._clock()
        rows: List[ExchangeRate] = []
        for target, rate in rates.items():
            if rate <= 0 or not is_currency_code(target):
                logger.warning("skipping invalid rate %s/%s=%r", base, target, rate)
                continue
            rows.append(
                ExchangeRate(
                    base_currency=base,
                    target_currency=target,
                    rate=rate,
                    last_updated=now,
                )
            )
        return rows

    async def _refresh(self, base: str) -> List[ExchangeRate]:
        rates = await self._provider.latest(base)
        rows = self._build_rows(base, rates)
        await self._store.upsert(rows)
        logger.info("stored %d rates for base=%s", len(rows), base)
        if self._change_feed is not None:
            self._change_feed.publish(
                EXCHANGE_RATES_TABLE, {"base_currency": base, "count": len(rows)}
            )
        return await self._store.select_by_base(base)

    # Public API -----------------------------------------------
    async def get_rates(self, base_currency: Optional[str]) -> List[ExchangeRate]:
        """Return stored rows for the base, refreshing them first when stale."""
        self._require_provider()
        base = validate_currency(base_currency, "Base currency")
        with log_context(base_currency=base):
            try:
                current = await self._store.select_by_base(base)
                if current and not needs_refresh(
                    current[0].last_updated, self._clock(), self._max_age
                ):
                    return current
                logger.info("fetching new rates for %s", base)
                return await self._refresh(base)
            except Exception:
                logger.exception("error handling exchange rates for %s", base)
                raise

    async def force_refresh(self, base_currency: Optional[str]) -> List[ExchangeRate]:
        """Fetch and store rates for the base regardless of their age."""
        self._require_provider()
        base = validate_currency(base_currency, "Base currency")
        with log_context(base_currency=base, forced=True):
            logger.info("force updating rates for %s", base)
            try:
                return await self._refresh(base)
            except Exception:
                logger.exception("error updating exchange rates for %s", base)
                raise

    async def get_history(
        self, currency: Optional[str], days: Optional[int] = None
    ) -> List[HistoryPoint]:
        """Rates of `currency` against the history base for the trailing days, oldest first.

        One provider request per day, issued concurrently; a single failed day
        fails the whole call.
        """
        self._require_provider()
        code = validate_currency(currency, "Currency")
        days = self._history_days if days is None else days
        if days < 1:
            raise ValidationError("days must be at least 1")
        today = self._clock().date()
        dates = [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]

        async def _one(day: date) -> HistoryPoint:
            rates = await self._provider.historical(day, self._history_base, [code])
            return HistoryPoint(date=day, rate=rates.get(code))

        with log_context(currency=code, base_currency=self._history_base, days=days):
            tasks = [asyncio.ensure_future(_one(d)) for d in dates]
            try:
                return list(await asyncio.gather(*tasks))
            except Exception:
                logger.exception("error fetching historical rates for %s", code)
                for task in tasks:
                    task.cancel()
                # wait for the cancelled days so none outlives the call
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
