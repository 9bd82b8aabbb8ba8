"""
Accounts router — bank account management endpoints.

    POST   /accounts                      — Create a new account
    GET    /accounts?page=&size=          — List accounts, one page at a time
    GET    /accounts/{account_id}         — Get account details
    GET    /accounts/{account_id}/balance — Get account balance
    DELETE /accounts/{account_id}         — Delete an account and its history

Unknown account ids return 404 (see app/exceptions.py).
"""

from fastapi import APIRouter, Depends, Query, status

from app.config import settings
from app.dependencies import get_ledger_service
from app.models.account import Account
from app.schemas.account import AccountCreateRequest, AccountResponse, BalanceResponse
from app.schemas.page import MAX_PAGE_INDEX, PageResponse
from app.services.ledger_service import LedgerService

router = APIRouter()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new bank account",
)
async def create_account(
    request: AccountCreateRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Create a checking or savings account.

    The opening balance defaults to zero. The id is assigned by the server.
    """
    return await service.create_account(Account(**request.model_dump()))


@router.get(
    "",
    response_model=PageResponse[AccountResponse],
    summary="List accounts",
)
async def list_accounts(
    page: int = Query(0, ge=0, le=MAX_PAGE_INDEX, description="Zero-based page index"),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: LedgerService = Depends(get_ledger_service),
):
    """List accounts in creation order."""
    result = await service.list_accounts(page, size)
    return PageResponse[AccountResponse].model_validate(result)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Get account details",
)
async def get_account(
    account_id: int,
    service: LedgerService = Depends(get_ledger_service),
):
    return await service.get_account(account_id)


@router.get(
    "/{account_id}/balance",
    response_model=BalanceResponse,
    summary="Check account balance",
)
async def get_balance(
    account_id: int,
    service: LedgerService = Depends(get_ledger_service),
):
    balance = await service.get_account_balance(account_id)
    return BalanceResponse(account_id=account_id, balance=balance)


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an account",
)
async def delete_account(
    account_id: int,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Delete an account. Its transactions are deleted with it.

    Deleting an id that doesn't exist returns 404, including a second
    delete of the same account.
    """
    await service.delete_account(account_id)
