"""
Transfers router — money transfers between accounts.

    POST /accounts/{account_id}/transfer — Transfer from {account_id}

A transfer is an atomic operation that writes two balance updates and two
linked transactions:
  1. A DEBIT (negative amount) on the source account
  2. A CREDIT (positive amount) on the destination account

Unlike the other endpoints, every domain error here is a 400 with the
error message as `detail`: an unknown account is a bad transfer request,
not a missing resource at this URL.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.dependencies import get_ledger_service
from app.exceptions import BankAPIError, error_response
from app.schemas.transaction import TransactionResponse, TransferRequest, TransferResponse
from app.services.ledger_service import LedgerService

router = APIRouter()


@router.post(
    "/{account_id}/transfer",
    response_model=TransferResponse,
    summary="Transfer money to another account",
    responses={status.HTTP_400_BAD_REQUEST: {"description": "Unknown account, insufficient funds, or invalid transfer"}},
)
async def create_transfer(
    account_id: int,
    request: TransferRequest,
    service: LedgerService = Depends(get_ledger_service),
):
    """
    Transfer money from the account in the path to `to_account_id`.

    Either both balances change and both transactions are recorded, or
    nothing changes.

    - **to_account_id**: Destination account
    - **amount**: Positive decimal (e.g. "30.00")
    - Cannot transfer to the same account
    """
    try:
        result = await service.transfer(account_id, request.to_account_id, request.amount)
    except BankAPIError as exc:
        return error_response(exc, status.HTTP_400_BAD_REQUEST)

    return TransferResponse(
        from_account_id=account_id,
        to_account_id=request.to_account_id,
        amount=request.amount,
        debit_transaction=TransactionResponse.model_validate(result.debit),
        credit_transaction=TransactionResponse.model_validate(result.credit),
    )
