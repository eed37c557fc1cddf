from __future__ import annotations

from datetime import timedelta

from fastapi import Depends, Request

from fxdash.core.config import Settings
from fxdash.db.dal import Database
from fxdash.services.ledger import LedgerClient, make_ledger_client
from fxdash.services.rates.providers import make_rate_provider
from fxdash.services.rates.store import SqliteRateStore
from fxdash.services.rates.sync_service import RateSyncService
from fxdash.services.realtime import ChangeFeed

"""Request-scoped dependencies shared by routers.

Settings and the change feed live on app.state (set by create_app) so an
app built with settings_override never falls back to environment settings.
"""


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_change_feed(request: Request) -> ChangeFeed:
    return request.app.state.change_feed


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)  # type: ignore[arg-type]


def get_sync_service(
    settings: Settings = Depends(get_app_settings),
    db: Database = Depends(get_db),
    change_feed: ChangeFeed = Depends(get_change_feed),
) -> RateSyncService:
    return RateSyncService(
        SqliteRateStore(db),
        make_rate_provider(settings),
        max_age=timedelta(seconds=settings.rates_max_age_seconds),
        history_days=settings.history_days,
        history_base=settings.history_base_currency,
        change_feed=change_feed,
    )


def get_ledger_client(settings: Settings = Depends(get_app_settings)) -> LedgerClient:
    return make_ledger_client(settings)
