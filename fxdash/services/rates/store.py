from __future__ import annotations

"""Rate Store contract and its sqlite-backed implementation.

The sync service is the only writer of exchange rate rows. Store
implementations must apply an upsert batch atomically and raise StoreError on
any failure; the service does not look at store-specific error types.
"""
from typing import Any, Dict, List, Protocol, Sequence

from pydantic import ValidationError as ModelValidationError
from starlette.concurrency import run_in_threadpool

from fxdash.core.errors import StoreError
from fxdash.db.dal import Database
from fxdash.models.rates import ExchangeRate


class RateStore(Protocol):
    async def select_by_base(self, base_currency: str) -> List[ExchangeRate]: ...

    async def upsert(self, rows: Sequence[ExchangeRate]) -> None: ...


def _to_row(rate: ExchangeRate) -> Dict[str, Any]:
    return {
        "base_currency": rate.base_currency,
        "target_currency": rate.target_currency,
        "rate": rate.rate,
        "last_updated": rate.last_updated.isoformat(),
    }


class SqliteRateStore:
    """Async facade over the synchronous DAL; calls run in the threadpool."""

    def __init__(self, db: Database):
        self._db = db

    async def select_by_base(self, base_currency: str) -> List[ExchangeRate]:
        rows = await run_in_threadpool(self._db.select_rates_by_base, base_currency)
        try:
            return [ExchangeRate.model_validate(r) for r in rows]
        except ModelValidationError as e:
            raise StoreError(f"Corrupt exchange rate row for {base_currency}: {e}") from e

    async def upsert(self, rows: Sequence[ExchangeRate]) -> None:
        await run_in_threadpool(self._db.upsert_rates, [_to_row(r) for r in rows])
