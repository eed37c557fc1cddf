from __future__ import annotations
from datetime import date as date_cls, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import is_currency_code, normalize_currency


class ExchangeRate(BaseModel):
    """Last known rate between an ordered currency pair (target per 1 base)."""

    model_config = ConfigDict(from_attributes=True)

    base_currency: str
    target_currency: str
    rate: float = Field(..., gt=0)
    last_updated: datetime

    @field_validator("base_currency", "target_currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        v = normalize_currency(v)
        if not is_currency_code(v):
            raise ValueError("currency must be a 3 letter code")
        return v


class HistoryPoint(BaseModel):
    date: date_cls
    rate: Optional[float] = None


class RateSnapshot(BaseModel):
    """Process-local cache entry: every row fetched for one base currency."""

    base_currency: str
    rates: List[ExchangeRate]
    fetched_at: datetime


class RefreshRequest(BaseModel):
    # Optional so a missing value reaches the service and gets its "is required" message
    baseCurrency: Optional[str] = None


class ConversionResult(BaseModel):
    from_currency: str
    to_currency: str
    amount: Decimal
    rate: float
    converted_amount: Decimal
