"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like InsufficientFundsError)
without importing HTTP concepts. The handler layer translates them into
HTTP responses with a consistent body: {"detail": ..., "error_type": ...}.

Exception hierarchy:
    BankAPIError (base)
    ├── AccountNotFoundError     — a referenced account id does not resolve
    ├── InsufficientFundsError   — transfer source balance below the amount
    └── InvalidTransferError     — non-positive amount or self-transfer

Anything else (including database errors) propagates untranslated and
surfaces as a 500.
"""

from decimal import Decimal

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankAPIError(Exception):
    """Base exception for all Ledger API domain errors."""

    error_type = "bank_api_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class AccountNotFoundError(BankAPIError):
    """Raised when a requested account does not exist."""

    error_type = "account_not_found"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Account not found with id: {account_id}")


class InsufficientFundsError(BankAPIError):
    """
    Raised when a transfer would take more than the source balance.

    Attributes:
        account_id: The account that lacks sufficient funds.
        requested: The amount the caller tried to move.
        available: The balance of the account at the time of the check.
    """

    error_type = "insufficient_funds"

    def __init__(self, account_id: int, requested: Decimal, available: Decimal):
        self.account_id = account_id
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient funds in account with id: {account_id}")


class InvalidTransferError(BankAPIError):
    """Raised when a transfer request is rejected before any account is read."""

    error_type = "invalid_transfer"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def error_response(exc: BankAPIError, status_code: int) -> JSONResponse:
    """Build the standard JSON error body for a domain exception."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.detail, "error_type": exc.error_type},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    These are the defaults for every route. The transfer endpoint overrides
    them and reports every domain error as 400 (see routers/accounts.py).

    This is called once during app startup in main.py.
    """

    @app.exception_handler(AccountNotFoundError)
    async def account_not_found_handler(
        request: Request, exc: AccountNotFoundError
    ) -> JSONResponse:
        return error_response(exc, status.HTTP_404_NOT_FOUND)

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        return error_response(exc, status.HTTP_400_BAD_REQUEST)

    @app.exception_handler(InvalidTransferError)
    async def invalid_transfer_handler(
        request: Request, exc: InvalidTransferError
    ) -> JSONResponse:
        return error_response(exc, status.HTTP_400_BAD_REQUEST)
