from typing import Optional

from fastapi import APIRouter, Depends, Header

from fxdash.models.constants import EXCHANGE_CURRENCY_RPC, TRANSFER_MONEY_RPC
from fxdash.models.ledger import ExchangeIn, LedgerResult, TransferIn
from fxdash.services.ledger import LedgerClient
from .deps import get_ledger_client

router = APIRouter(prefix="/ledger", tags=["ledger"])


@router.post("/exchange", response_model=LedgerResult, summary="Exchange between wallet currencies")
async def exchange(
    payload: ExchangeIn,
    authorization: Optional[str] = Header(None),
    ledger: LedgerClient = Depends(get_ledger_client),
):
    result = await ledger.exchange_currency(
        payload.user_id,
        payload.from_currency,
        payload.to_currency,
        payload.amount,
        authorization,
    )
    return LedgerResult.from_rpc(EXCHANGE_CURRENCY_RPC, result)


@router.post("/transfer", response_model=LedgerResult, summary="Send money to another wallet")
async def transfer(
    payload: TransferIn,
    authorization: Optional[str] = Header(None),
    ledger: LedgerClient = Depends(get_ledger_client),
):
    result = await ledger.transfer_money(
        payload.from_wallet_id,
        payload.to_wallet_id,
        payload.currency,
        payload.amount,
        authorization,
    )
    return LedgerResult.from_rpc(TRANSFER_MONEY_RPC, result)
