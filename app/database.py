"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - engine: The async database engine (connection pool for production DBs)
  - AsyncSessionLocal: Factory for creating async database sessions
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request
  - enable_sqlite_savepoints(): makes SAVEPOINT work on the SQLite driver

Session lifecycle:
  Each API request gets its own session via get_db(). The session commits
  on success and rolls back on any exception, so a failed request never
  leaves partial writes behind.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    Take over transaction control from the SQLite driver.

    The sqlite3/aiosqlite drivers emit their own BEGIN lazily and do not
    cooperate with SAVEPOINT. Transfers run inside a nested transaction
    (see SqlAlchemyUnitOfWork.atomic), so SQLAlchemy must emit BEGIN itself.

    The BEGIN is IMMEDIATE: the write lock is taken when the transaction
    starts, and a second writer waits for it (up to the driver's busy
    timeout) instead of failing with "database is locked" when it tries to
    upgrade a read lock halfway through a transfer. No-op for other backends.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# echo=True in debug mode logs all SQL statements
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
)
enable_sqlite_savepoints(engine)

# expire_on_commit=False prevents lazy-load errors after commit:
# accessing attributes on a committed object would otherwise trigger
# a synchronous DB call, which fails in async context.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...

    The session is committed on success and rolled back on any exception,
    then closed when the request completes.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
