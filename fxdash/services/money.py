"""Money / rounding helpers.

Centralized so conversion quotes and ledger calls use identical rounding
semantics. Amounts are Decimal; rates stay float as delivered by the provider.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

CENT = Decimal("0.01")


def to_decimal(value: Union[str, int, float, Decimal]) -> Decimal:
    """Convert via str() so floats keep their printed value, not binary noise."""
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"not a number: {value!r}") from e


def round2(value: Union[str, int, float, Decimal]) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def multiply_rate(amount: Union[str, int, float, Decimal], rate: float) -> Decimal:
    return round2(to_decimal(amount) * to_decimal(rate))
