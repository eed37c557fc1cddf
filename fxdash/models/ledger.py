from __future__ import annotations
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field


class ExchangeIn(BaseModel):
    user_id: str = Field(..., min_length=1)
    from_currency: str
    to_currency: str
    amount: Decimal = Field(..., description="Amount in from_currency")


class TransferIn(BaseModel):
    from_wallet_id: str = Field(..., min_length=1)
    to_wallet_id: str = Field(..., min_length=1)
    currency: str
    amount: Decimal


class LedgerResult(BaseModel):
    procedure: str
    result: Optional[Any] = None

    @classmethod
    def from_rpc(cls, procedure: str, payload: Any) -> "LedgerResult":
        return cls(procedure=procedure, result=payload)


def rpc_amount(amount: Decimal) -> float:
    """Ledger procedures take JSON numbers; send the decimal as a float."""
    return float(amount)
