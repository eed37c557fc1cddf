from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from fxdash.core.config import Settings
from fxdash.models.rates import (
    ConversionResult,
    ExchangeRate,
    HistoryPoint,
    RefreshRequest,
)
from fxdash.services.rates.conversion import compute_conversion
from fxdash.services.rates.sync_service import RateSyncService, validate_currency
from .deps import get_app_settings, get_sync_service

"""Exchange rates router.

Endpoints:
    - GET  /exchange-rates?base=CODE              -> current rows, refreshed when older than 24h
    - POST /exchange-rates {baseCurrency}         -> forced refresh
    - GET  /exchange-rates/history?currency=CODE  -> trailing daily rates vs EUR
    - GET  /exchange-rates/quote?from=..&to=..&amount=..  -> conversion quote

Domain errors map to {"error": message} via the handlers in fxdash.core.errors.
"""

router = APIRouter(prefix="/exchange-rates", tags=["exchange-rates"])


@router.get("", response_model=List[ExchangeRate], summary="Get rates for a base currency")
async def get_rates(
    base: Optional[str] = Query(None, description="Base currency (defaults to EUR)"),
    settings: Settings = Depends(get_app_settings),
    svc: RateSyncService = Depends(get_sync_service),
):
    return await svc.get_rates(base or settings.default_base_currency)


@router.post("", response_model=List[ExchangeRate], summary="Force a rate refresh")
async def refresh_rates(
    payload: Optional[RefreshRequest] = Body(None),
    svc: RateSyncService = Depends(get_sync_service),
):
    return await svc.force_refresh(payload.baseCurrency if payload else None)


@router.get("/history", response_model=List[HistoryPoint], summary="Trailing daily rates")
async def get_history(
    currency: Optional[str] = Query(None, description="Currency to chart"),
    svc: RateSyncService = Depends(get_sync_service),
):
    return await svc.get_history(currency)


@router.get("/quote", response_model=ConversionResult, summary="Quote a conversion")
async def quote(
    from_currency: Optional[str] = Query(None, alias="from"),
    to_currency: Optional[str] = Query(None, alias="to"),
    amount: Optional[str] = Query(None),
    svc: RateSyncService = Depends(get_sync_service),
):
    source = validate_currency(from_currency, "from")
    target = validate_currency(to_currency, "to")
    rows = await svc.get_rates(source)
    return compute_conversion(amount if amount is not None else "", source, target, rows)
