"""
FastAPI dependencies.

Dependencies are reusable functions that FastAPI injects into route handlers:

  get_db (request -> AsyncSession)
      └── get_ledger_service (AsyncSession -> LedgerService)

Every repository built here shares the request's session, so all writes of
one request land in the same database transaction.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.repositories import (
    SqlAlchemyAccountRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyUnitOfWork,
)
from app.services.ledger_service import LedgerService


async def get_ledger_service(db: AsyncSession = Depends(get_db)) -> LedgerService:
    """Build a LedgerService over SQLAlchemy repositories for this request."""
    return LedgerService(
        accounts=SqlAlchemyAccountRepository(db),
        transactions=SqlAlchemyTransactionRepository(db),
        unit_of_work=SqlAlchemyUnitOfWork(db),
    )
