"""
Repository interfaces for the ledger.

These are structural (typing.Protocol) interfaces: any storage engine that
provides the methods satisfies them, no inheritance required. All methods
are coroutines so that async database drivers fit without adapters.

Storage contract:
  - save() must make the write visible to every later read in the same
    unit of work (strong read-after-write).
  - find_all() / find_by_account_id() return items in storage (id) order.
  - Pages are zero-based: page 0 holds items [0, size).
"""

from dataclasses import dataclass
from typing import AsyncContextManager, Generic, Protocol, TypeVar, runtime_checkable

from app.models.account import Account
from app.models.transaction import Transaction

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    """A bounded slice of an ordered collection."""

    items: list[T]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return (self.total + self.size - 1) // self.size


@runtime_checkable
class AccountRepository(Protocol):
    """Storage for Account records."""

    async def save(self, account: Account) -> Account:
        """Insert or update an account, assigning its id on first save."""
        ...

    async def find_by_id(self, account_id: int, for_update: bool = False) -> Account | None:
        """
        Load an account by id.

        Args:
            account_id: The account to load.
            for_update: Lock the row until the enclosing unit of work ends.
        """
        ...

    async def exists_by_id(self, account_id: int) -> bool:
        ...

    async def delete_by_id(self, account_id: int) -> None:
        """Remove an account and every transaction recorded against it."""
        ...

    async def find_all(self, page: int, size: int) -> Page[Account]:
        ...


@runtime_checkable
class TransactionRepository(Protocol):
    """Append-only storage for Transaction records."""

    async def save(self, transaction: Transaction) -> Transaction:
        """Insert a transaction, assigning its id and timestamp."""
        ...

    async def find_by_account_id(self, account_id: int, page: int, size: int) -> Page[Transaction]:
        ...


@runtime_checkable
class UnitOfWork(Protocol):
    """Transactional boundary shared by the repositories of one request."""

    def atomic(self) -> AsyncContextManager[None]:
        """
        Run a block as one all-or-nothing unit.

        Every write made inside the block is committed together when the
        block exits normally, and discarded when it raises.
        """
        ...
