"""
Tests for the SQLAlchemy repositories and unit of work.

These run the LedgerService against a real (in-memory SQLite) database
through one shared session, the same way a request does:
  - Ids are assigned on save and never reused after a delete
  - Pages come back in storage order with correct totals
  - Deleting an account deletes its transactions
  - A transfer that fails halfway leaves no trace (SAVEPOINT rollback)
  - Decimal amounts survive the round trip exactly
  - Concurrent transfers against a file database queue up instead of failing
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import Base, enable_sqlite_savepoints
from app.exceptions import InsufficientFundsError
from app.models.account import Account
from app.models.transaction import Transaction
from app.repositories import (
    AccountRepository,
    SqlAlchemyAccountRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyUnitOfWork,
    TransactionRepository,
    UnitOfWork,
)
from app.services.ledger_service import LedgerService


async def open_account(service, name: str, balance: str) -> int:
    account = await service.create_account(
        Account(account_holder_name=name, balance=Decimal(balance))
    )
    return account.id


async def test_sqlalchemy_classes_satisfy_repository_protocols(sql_service):
    assert isinstance(sql_service.accounts, AccountRepository)
    assert isinstance(sql_service.transactions, TransactionRepository)
    assert isinstance(sql_service.unit_of_work, UnitOfWork)


class TestAccountRepository:

    async def test_save_assigns_id_and_version(self, sql_service):
        account = await sql_service.create_account(Account(account_holder_name="Alice"))
        assert account.id is not None
        assert account.version == 1
        assert account.balance == Decimal("0")
        assert account.account_type == "checking"

    async def test_exists_by_id(self, sql_service):
        account_id = await open_account(sql_service, "Alice", "0")
        assert await sql_service.accounts.exists_by_id(account_id) is True
        assert await sql_service.accounts.exists_by_id(account_id + 100) is False

    async def test_find_all_in_id_order(self, sql_service):
        ids = [await open_account(sql_service, f"Holder {i}", "0") for i in range(5)]

        page = await sql_service.accounts.find_all(page=1, size=2)

        assert page.total == 5
        assert page.total_pages == 3
        assert [a.id for a in page.items] == ids[2:4]

    async def test_ids_are_not_reused_after_delete(self, sql_service):
        first = await open_account(sql_service, "Alice", "0")
        await sql_service.delete_account(first)
        second = await open_account(sql_service, "Bob", "0")
        assert second > first

    async def test_delete_cascades_to_transactions(self, sql_service, db_session):
        a = await open_account(sql_service, "Alice", "100")
        b = await open_account(sql_service, "Bob", "0")
        await sql_service.transfer(a, b, Decimal("25"))

        await sql_service.delete_account(a)

        remaining = await db_session.scalar(
            select(func.count()).select_from(Transaction).where(Transaction.account_id == a)
        )
        assert remaining == 0
        assert (await sql_service.get_account_transactions(b, 0, 10)).total == 1


class TestTransferPersistence:

    async def test_transfer_writes_balances_and_entries(self, sql_service):
        x = await open_account(sql_service, "X", "100.00")
        y = await open_account(sql_service, "Y", "50.00")

        result = await sql_service.transfer(x, y, Decimal("30.00"))

        assert await sql_service.get_account_balance(x) == Decimal("70.00")
        assert await sql_service.get_account_balance(y) == Decimal("80.00")
        assert result.debit.id < result.credit.id
        history = await sql_service.get_account_transactions(x, 0, 10)
        assert [t.amount for t in history.items] == [Decimal("-30.00")]
        assert history.items[0].transfer_id == result.credit.transfer_id

    async def test_transfer_bumps_versions(self, sql_service):
        x = await open_account(sql_service, "X", "10")
        y = await open_account(sql_service, "Y", "0")
        await sql_service.transfer(x, y, Decimal("1"))
        assert (await sql_service.get_account(x)).version == 2
        assert (await sql_service.get_account(y)).version == 2

    async def test_insufficient_funds_leaves_database_untouched(self, sql_service, db_session):
        x = await open_account(sql_service, "X", "70.00")
        y = await open_account(sql_service, "Y", "80.00")

        with pytest.raises(InsufficientFundsError):
            await sql_service.transfer(x, y, Decimal("1000.00"))

        assert await sql_service.get_account_balance(x) == Decimal("70.00")
        assert await sql_service.get_account_balance(y) == Decimal("80.00")
        assert await db_session.scalar(select(func.count()).select_from(Transaction)) == 0

    async def test_failure_mid_transfer_rolls_back_to_savepoint(self, sql_service, db_session):
        """Balances were already flushed when the credit entry fails; all of it is undone."""
        x = await open_account(sql_service, "X", "100")
        y = await open_account(sql_service, "Y", "0")

        real_save = sql_service.transactions.save
        calls = []

        async def fail_on_credit(txn):
            calls.append(txn)
            if len(calls) == 2:
                raise RuntimeError("connection lost")
            return await real_save(txn)

        with patch.object(sql_service.transactions, "save", new=AsyncMock(side_effect=fail_on_credit)):
            with pytest.raises(RuntimeError):
                await sql_service.transfer(x, y, Decimal("40"))

        assert await sql_service.get_account_balance(x) == Decimal("100")
        assert await sql_service.get_account_balance(y) == Decimal("0")
        assert await db_session.scalar(select(func.count()).select_from(Transaction)) == 0
        # The accounts created before the transfer are still there
        assert (await sql_service.list_accounts(0, 10)).total == 2

    async def test_decimal_precision_round_trip(self, sql_service, db_session):
        """Values a float can't hold exactly come back unchanged."""
        x = await open_account(sql_service, "X", "0.3")
        y = await open_account(sql_service, "Y", "1234567890.123456789")

        await sql_service.transfer(x, y, Decimal("0.1"))
        await sql_service.transfer(x, y, Decimal("0.2"))

        db_session.expire_all()
        assert await sql_service.get_account_balance(x) == Decimal("0.0")
        assert await sql_service.get_account_balance(y) == Decimal("1234567890.423456789")


@pytest_asyncio.fixture
async def file_sessions(tmp_path):
    """Session factory on a SQLite file, so each session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


def service_for(session) -> LedgerService:
    return LedgerService(
        accounts=SqlAlchemyAccountRepository(session),
        transactions=SqlAlchemyTransactionRepository(session),
        unit_of_work=SqlAlchemyUnitOfWork(session),
    )


class TestConcurrentTransfers:

    async def test_concurrent_transfers_are_serialised(self, file_sessions):
        """Six racing transfers of 30 out of 100: three go through, three are refused."""
        async with file_sessions() as session:
            x = await open_account(service_for(session), "X", "100")
            y = await open_account(service_for(session), "Y", "0")
            await session.commit()

        async def transfer_30():
            async with file_sessions() as session:
                try:
                    await service_for(session).transfer(x, y, Decimal("30"))
                except InsufficientFundsError:
                    return "refused"
                return "ok"

        outcomes = await asyncio.gather(*(transfer_30() for _ in range(6)))

        assert sorted(outcomes) == ["ok"] * 3 + ["refused"] * 3
        async with file_sessions() as session:
            service = service_for(session)
            assert await service.get_account_balance(x) == Decimal("10")
            assert await service.get_account_balance(y) == Decimal("90")
            assert (await service.get_account_transactions(x, 0, 10)).total == 3
            assert (await service.get_account_transactions(y, 0, 10)).total == 3
            assert (await service.get_account(x)).version == 4
