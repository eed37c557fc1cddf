"""Pydantic domain models for the FX dashboard backend."""

from .constants import (
    CURRENCY_CODE_RE,
    EXCHANGE_RATES_TABLE,
    is_currency_code,
    normalize_currency,
)  # re-export
from .rates import (
    ConversionResult,
    ExchangeRate,
    HistoryPoint,
    RateSnapshot,
    RefreshRequest,
)
from .ledger import ExchangeIn, LedgerResult, TransferIn

__all__ = [
    "CURRENCY_CODE_RE",
    "EXCHANGE_RATES_TABLE",
    "is_currency_code",
    "normalize_currency",
    "ConversionResult",
    "ExchangeRate",
    "HistoryPoint",
    "RateSnapshot",
    "RefreshRequest",
    "ExchangeIn",
    "LedgerResult",
    "TransferIn",
]
