"""
Transactions router — read an account's transaction history.

    GET /accounts/{account_id}/transactions?page=&size= — List transactions

Transactions are only ever created by transfers (see transfers.py).
"""

from fastapi import APIRouter, Depends, Query

from app.config import settings
from app.dependencies import get_ledger_service
from app.schemas.page import MAX_PAGE_INDEX, PageResponse
from app.schemas.transaction import TransactionResponse
from app.services.ledger_service import LedgerService

router = APIRouter()


@router.get(
    "/{account_id}/transactions",
    response_model=PageResponse[TransactionResponse],
    summary="List transactions for an account",
)
async def list_transactions(
    account_id: int,
    page: int = Query(0, ge=0, le=MAX_PAGE_INDEX, description="Zero-based page index"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: LedgerService = Depends(get_ledger_service),
):
    """
    List transactions for a specific account, oldest first.

    Debits carry a negative amount, credits a positive one. Returns 404 if
    the account doesn't exist.
    """
    result = await service.get_account_transactions(account_id, page, size)
    return PageResponse[TransactionResponse].model_validate(result)
