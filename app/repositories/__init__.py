"""
Persistence layer for accounts and transactions.

The Ledger Service depends only on the protocols in base.py. Two storage
engines satisfy them:
  - sql.py: async SQLAlchemy over the request's AsyncSession
  - memory.py: plain dicts, used by service-level tests and scripts
"""

from app.repositories.base import AccountRepository, Page, TransactionRepository, UnitOfWork  # noqa: F401
from app.repositories.memory import InMemoryLedgerStore  # noqa: F401
from app.repositories.sql import (  # noqa: F401
    SqlAlchemyAccountRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyUnitOfWork,
)
