"""
Pydantic schemas for Transaction and Transfer endpoints.

Transaction amounts are signed: negative for the debit leg of a transfer,
positive for the credit leg.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models.types import MONEY_SCALE


class TransactionResponse(BaseModel):
    """Public representation of a transaction."""
    id: int
    account_id: int
    amount: Decimal
    transfer_id: uuid.UUID | None
    transaction_date: datetime

    model_config = {"from_attributes": True}


class TransferRequest(BaseModel):
    """Request body for POST /accounts/{id}/transfer. The path id is the source."""
    to_account_id: int
    amount: Decimal = Field(
        gt=0,
        decimal_places=MONEY_SCALE,
        description="Amount to move (must be positive)",
    )


class TransferResponse(BaseModel):
    """Response body for a successful transfer."""
    message: str = "Transfer successful"
    from_account_id: int
    to_account_id: int
    amount: Decimal
    debit_transaction: TransactionResponse
    credit_transaction: TransactionResponse
