"""
Pydantic schemas for Account endpoints.

Monetary amounts are decimal.Decimal and serialize to JSON strings
(e.g. "100.00"), so no client ever sees a float-rounded balance.
Input amounts may carry at most MONEY_SCALE fractional digits, the scale
of the database column.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from app.models.types import MONEY_SCALE


class AccountCreateRequest(BaseModel):
    """Request body for POST /accounts."""
    account_holder_name: str = Field(min_length=1, max_length=100)
    email: EmailStr | None = None
    account_type: Literal["checking", "savings"] = Field(
        default="checking",
        description="Type of bank account to create",
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        decimal_places=MONEY_SCALE,
        description="Opening balance (not checked for sign)",
    )


class AccountResponse(BaseModel):
    """Public representation of a bank account."""
    id: int
    account_holder_name: str
    email: str | None
    account_type: str
    balance: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BalanceResponse(BaseModel):
    """Response body for GET /accounts/{id}/balance."""
    account_id: int
    balance: Decimal
