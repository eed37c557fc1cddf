"""Client for the external ledger's remote procedures.

`exchange_currency` and `transfer_money` implement the actual balance moves
inside the hosted database. Their atomicity, overdraft checks and the rate an
exchange settles at belong to the ledger; this client only validates obvious
input mistakes, forwards the caller's credentials and surfaces failures.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from fxdash.core.config import Settings
from fxdash.core.errors import ConfigurationError, UpstreamError, ValidationError
from fxdash.models.constants import (
    EXCHANGE_CURRENCY_RPC,
    TRANSFER_MONEY_RPC,
    is_currency_code,
    normalize_currency,
)
from fxdash.models.ledger import rpc_amount
from fxdash.services.http_client import HttpError, post_json
from fxdash.services.money import round2

logger = logging.getLogger("fxdash.ledger")


def _currency(value: str, label: str) -> str:
    code = normalize_currency(value or "")
    if not is_currency_code(code):
        raise ValidationError(f"{label} must be a 3 letter currency code")
    return code


def _positive(amount: Decimal) -> Decimal:
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Please enter a valid amount")
    cents = round2(amount)
    if cents == 0:
        raise ValidationError("Amount must be at least 0.01")
    return cents


class LedgerClient:
    def __init__(
        self,
        rpc_url: Optional[str],
        api_key: Optional[str],
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._rpc_url = rpc_url.rstrip("/") if rpc_url else None
        self._api_key = api_key or None
        self._timeout = timeout
        self._client = client

    async def call(
        self,
        procedure: str,
        params: Dict[str, Any],
        authorization: Optional[str] = None,
    ) -> Any:
        if self._rpc_url is None or self._api_key is None:
            raise ConfigurationError("Ledger RPC is not configured")
        headers = {"apikey": self._api_key}
        if authorization:
            headers["Authorization"] = authorization
        logger.info("calling ledger procedure %s", procedure)
        try:
            return await post_json(
                self._client,
                f"{self._rpc_url}/rpc/{procedure}",
                body=params,
                headers=headers,
                timeout=self._timeout,
            )
        except HttpError as e:
            message = e.payload.get("message") if isinstance(e.payload, dict) else None
            logger.warning("ledger procedure %s failed: %s", procedure, message or e)
            raise UpstreamError(
                f"{procedure} failed: {message or e}", upstream_status=e.status_code
            ) from e

    async def exchange_currency(
        self,
        user_id: str,
        from_currency: str,
        to_currency: str,
        amount: Decimal,
        authorization: Optional[str] = None,
    ) -> Any:
        source = _currency(from_currency, "from_currency")
        target = _currency(to_currency, "to_currency")
        if source == target:
            raise ValidationError("Cannot exchange a currency into itself")
        params = {
            "user_id": user_id,
            "from_currency": source,
            "to_currency": target,
            "amount": rpc_amount(_positive(amount)),
        }
        return await self.call(EXCHANGE_CURRENCY_RPC, params, authorization)

    async def transfer_money(
        self,
        from_wallet_id: str,
        to_wallet_id: str,
        currency: str,
        amount: Decimal,
        authorization: Optional[str] = None,
    ) -> Any:
        if from_wallet_id == to_wallet_id:
            raise ValidationError("Cannot transfer money to the same wallet")
        params = {
            "p_from_wallet_id": from_wallet_id,
            "p_to_wallet_id": to_wallet_id,
            "p_currency": _currency(currency, "currency"),
            "p_amount": rpc_amount(_positive(amount)),
        }
        return await self.call(TRANSFER_MONEY_RPC, params, authorization)


def make_ledger_client(
    settings: Settings, client: Optional[httpx.AsyncClient] = None
) -> LedgerClient:
    return LedgerClient(
        settings.ledger_rpc_url,
        settings.ledger_api_key,
        timeout=settings.http_timeout_seconds,
        client=client,
    )
