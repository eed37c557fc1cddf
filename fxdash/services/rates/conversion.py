from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional, Union

from fxdash.core.errors import ValidationError
from fxdash.models.rates import ConversionResult, ExchangeRate
from fxdash.services.money import multiply_rate, round2, to_decimal

"""Currency conversion quotes.

Given the row set for a base currency, look up the (from, to) rate and compute
the converted amount with Decimal arithmetic, rounding to cents once.
A quote is informational: the ledger applies its own rate when the exchange
actually happens.
"""


def find_rate(
    rows: Iterable[ExchangeRate], base_currency: str, target_currency: str
) -> Optional[float]:
    for row in rows:
        if row.base_currency == base_currency and row.target_currency == target_currency:
            return row.rate
    return None


def compute_conversion(
    amount: Union[str, int, float, Decimal],
    from_currency: str,
    to_currency: str,
    rows: Iterable[ExchangeRate],
) -> ConversionResult:
    try:
        value = to_decimal(amount)
    except ValueError as e:
        raise ValidationError("Please enter a valid amount") from e
    if not value.is_finite() or value <= 0:
        raise ValidationError("Please enter a valid amount")
    if round2(value) == 0:
        raise ValidationError("Amount must be at least 0.01")
    from_currency = from_currency.upper()
    to_currency = to_currency.upper()
    if from_currency == to_currency:
        return ConversionResult(
            from_currency=from_currency,
            to_currency=to_currency,
            amount=round2(value),
            rate=1.0,
            converted_amount=round2(value),
        )
    rate = find_rate(rows, from_currency, to_currency)
    if rate is None:
        raise ValidationError("Exchange rate not found")
    return ConversionResult(
        from_currency=from_currency,
        to_currency=to_currency,
        amount=round2(value),
        rate=rate,
        converted_amount=multiply_rate(value, rate),
    )
