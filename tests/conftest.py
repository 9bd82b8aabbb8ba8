"""
Test fixtures for the Ledger API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client wired to the test database
  - memory_store / memory_service: LedgerService over the in-memory store
  - sql_service: LedgerService over SQLAlchemy repositories on db_session
  - create_account: helper that creates an account through the API

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database, no state leaks between tests.
  - We override FastAPI's get_db dependency to inject our test session,
    so the application code works exactly as it does in production.
  - The test engine gets the same SAVEPOINT support as the real one, since
    transfers run inside a nested transaction.
"""

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from app import models  # noqa: F401
from app.database import Base, enable_sqlite_savepoints, get_db
from app.main import app
from app.repositories import (
    InMemoryLedgerStore,
    SqlAlchemyAccountRepository,
    SqlAlchemyTransactionRepository,
    SqlAlchemyUnitOfWork,
)
from app.services.ledger_service import LedgerService


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def create_account(client):
    """
    Factory fixture: create an account through the API and return its JSON.

    Usage:
        account = await create_account("Alice", balance="100.00")
    """
    async def _create(name: str = "Test Holder", balance: str = "0", **fields) -> dict:
        response = await client.post(
            "/accounts",
            json={"account_holder_name": name, "balance": balance, **fields},
        )
        assert response.status_code == 201, f"Account creation failed: {response.text}"
        return response.json()

    return _create


@pytest_asyncio.fixture
async def memory_store():
    return InMemoryLedgerStore()


@pytest_asyncio.fixture
async def memory_service(memory_store):
    """LedgerService backed by plain dicts, no database involved."""
    return LedgerService(memory_store.accounts, memory_store.transactions, memory_store)


@pytest_asyncio.fixture
async def sql_service(db_session):
    """LedgerService backed by SQLAlchemy repositories sharing db_session."""
    return LedgerService(
        accounts=SqlAlchemyAccountRepository(db_session),
        transactions=SqlAlchemyTransactionRepository(db_session),
        unit_of_work=SqlAlchemyUnitOfWork(db_session),
    )

