"""
Transaction model — one signed ledger entry on one account.

A transfer creates TWO transactions:
  - a debit on the source account with a negative amount
  - a credit on the destination account with a positive amount
Both legs share a `transfer_id` so they can be reconciled later. The two
amounts are always additive inverses.

Transactions are append-only: nothing in the application updates them.
They are removed only when their owning account is deleted.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import Money


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Negative = debit, positive = credit
    amount: Mapped[Decimal] = mapped_column(
        Money,
        nullable=False,
    )

    # Links the two legs of a transfer
    transfer_id: Mapped[uuid.UUID | None] = mapped_column(
        nullable=True,
        index=True,
    )

    # Stamped when the row is created, server clock
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
