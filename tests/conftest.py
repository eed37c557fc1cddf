import asyncio
import inspect
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

from fxdash.core.config import Settings
from fxdash.core.errors import UpstreamError
from fxdash.db.dal import Database
from fxdash.db.migrate import apply_migrations
from fxdash.services.rates.base import RateProvider
from fxdash.services.rates.store import SqliteRateStore

T0 = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        funcargs = {
            name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
        }
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(test_function(**funcargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


class FakeClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeProvider(RateProvider):
    """Deterministic provider recording every call."""

    def __init__(
        self,
        rates: Optional[Dict[str, float]] = None,
        *,
        configured: bool = True,
        fail_with: Optional[Exception] = None,
        failing_days: Iterable[date] = (),
    ):
        self.rates = rates if rates is not None else {"USD": 1.08, "GBP": 0.86, "JPY": 168.2}
        self.configured = configured
        self.fail_with = fail_with
        self.failing_days = set(failing_days)
        self.latest_calls: List[str] = []
        self.historical_calls: List[Tuple[date, str, Tuple[str, ...]]] = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def latest(self, base_currency: str) -> Dict[str, float]:
        self.latest_calls.append(base_currency)
        if self.fail_with is not None:
            raise self.fail_with
        return dict(self.rates)

    async def historical(
        self, day: date, base_currency: str, symbols: Iterable[str]
    ) -> Dict[str, float]:
        symbols = tuple(symbols)
        self.historical_calls.append((day, base_currency, symbols))
        if day in self.failing_days:
            raise UpstreamError(f"Failed to fetch data for {day.isoformat()}")
        # one distinct rate per day: 1 + day-of-month / 100
        return {s: round(1 + day.day / 100, 4) for s in symbols}


@pytest.fixture()
def db(tmp_path: Path) -> Database:
    path = tmp_path / "rates.sqlite3"
    apply_migrations(path)
    return Database(path)


@pytest.fixture()
def store(db: Database) -> SqliteRateStore:
    return SqliteRateStore(db)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path,
        db_path=tmp_path / "app.sqlite3",
        exchange_rates_api_key="test-key",
        ledger_rpc_url="https://ledger.test/rest/v1",
        ledger_api_key="anon-key",
        debug=False,
    )
