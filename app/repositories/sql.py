"""
SQLAlchemy implementations of the ledger repositories.

All three classes wrap the same AsyncSession (one per request, see
app/database.get_db), so writes made through either repository are part of
the same database transaction and are visible to each other immediately.

Row locking:
  find_by_id(for_update=True) issues SELECT ... FOR UPDATE. On PostgreSQL
  this holds the row lock until the enclosing transaction ends. SQLite
  ignores FOR UPDATE; its single-writer locking serialises concurrent
  transfers instead.
"""

from contextlib import asynccontextmanager

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.account import Account
from app.models.transaction import Transaction
from app.repositories.base import Page


class SqlAlchemyAccountRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, account: Account) -> Account:
        self._session.add(account)
        await self._session.flush()
        return account

    async def find_by_id(self, account_id: int, for_update: bool = False) -> Account | None:
        query = select(Account).where(Account.id == account_id)
        if for_update:
            # Refresh from the locked row instead of trusting the identity map
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self._session.execute(query)
        return result.scalar_one_or_none()

    async def exists_by_id(self, account_id: int) -> bool:
        result = await self._session.execute(
            select(func.count()).select_from(Account).where(Account.id == account_id)
        )
        return result.scalar_one() > 0

    async def delete_by_id(self, account_id: int) -> None:
        # Transactions first: their foreign key points at the account
        await self._session.execute(
            delete(Transaction).where(Transaction.account_id == account_id)
        )
        account = await self._session.get(Account, account_id)
        if account is not None:
            await self._session.delete(account)
            await self._session.flush()

    async def find_all(self, page: int, size: int) -> Page[Account]:
        total = await self._session.scalar(select(func.count()).select_from(Account))
        result = await self._session.execute(
            select(Account)
            .order_by(Account.id)
            .offset(page * size)
            .limit(size)
        )
        return Page(items=list(result.scalars().all()), total=total or 0, page=page, size=size)


class SqlAlchemyTransactionRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, transaction: Transaction) -> Transaction:
        self._session.add(transaction)
        await self._session.flush()
        return transaction

    async def find_by_account_id(self, account_id: int, page: int, size: int) -> Page[Transaction]:
        total = await self._session.scalar(
            select(func.count())
            .select_from(Transaction)
            .where(Transaction.account_id == account_id)
        )
        result = await self._session.execute(
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.id)
            .offset(page * size)
            .limit(size)
        )
        return Page(items=list(result.scalars().all()), total=total or 0, page=page, size=size)


class SqlAlchemyUnitOfWork:
    """
    Transactional boundary over the request session.

    If the session already has a transaction open (anything was read or
    written earlier in the request), the block runs in a SAVEPOINT so a
    failure undoes only the block's own writes. Otherwise the block gets
    its own transaction, committed on exit.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    @asynccontextmanager
    async def atomic(self):
        if self._session.in_transaction():
            async with self._session.begin_nested():
                yield
        else:
            async with self._session.begin():
                yield
