"""
Account model — a named balance holder.

Each account has:
  - A server-assigned integer id (never reused, even after deletion)
  - Caller-supplied profile fields: holder name, optional email, account type
  - A balance stored as an exact decimal (see app/models/types.py)
  - A version counter for optimistic concurrency control

Balance management:
  The balance is only changed by transfers, which update it in the same
  database transaction as the matching Transaction rows. There is no
  database constraint pinning the balance at or above zero: an account may
  be created with a negative opening balance. The only floor is the funds
  check inside a transfer.

Optimistic versioning:
  `version` is registered as SQLAlchemy's version_id_col. Every UPDATE is
  issued as "... WHERE id = :id AND version = :expected", so two sessions
  that read the same balance cannot both write it back; the loser gets a
  StaleDataError and its transaction rolls back.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.models.types import Money


class Account(Base):
    __tablename__ = "accounts"

    # AUTOINCREMENT keeps SQLite from reusing the ids of deleted accounts
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    account_holder_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # "checking" or "savings"
    account_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="checking",
    )

    balance: Mapped[Decimal] = mapped_column(
        Money,
        nullable=False,
        default=Decimal("0"),
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version}
