"""Domain constants for validation."""

import re
from typing import Pattern

CURRENCY_CODE_RE: Pattern[str] = re.compile(r"^[A-Z]{3}$")
EXCHANGE_RATES_TABLE = "exchange_rates"

# Remote procedures provided by the external ledger
EXCHANGE_CURRENCY_RPC = "exchange_currency"
TRANSFER_MONEY_RPC = "transfer_money"


def normalize_currency(value: str) -> str:
    return value.strip().upper()


def is_currency_code(value: str) -> bool:
    return bool(CURRENCY_CODE_RE.match(value))
