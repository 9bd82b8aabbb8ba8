"""
In-memory implementation of the ledger repositories.

Useful anywhere a database is unnecessary: service-level tests, scripts,
local experiments. It keeps the same observable contract as the SQLAlchemy
implementation (id assignment, storage order, zero-based pages, cascade on
delete, all-or-nothing atomic blocks).

Usage:
    store = InMemoryLedgerStore()
    service = LedgerService(store.accounts, store.transactions, store)
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal

from app.models.account import Account
from app.models.transaction import Transaction
from app.repositories.base import Page


def _slice(items: list, page: int, size: int) -> Page:
    start = page * size
    return Page(items=items[start:start + size], total=len(items), page=page, size=size)


class InMemoryAccountRepository:
    def __init__(self, store: "InMemoryLedgerStore"):
        self._store = store

    async def save(self, account: Account) -> Account:
        now = datetime.now(timezone.utc)
        if account.id is None:
            account.id = self._store.next_account_id()
            account.created_at = now
            account.version = 0
            if account.balance is None:
                account.balance = Decimal("0")
            if account.account_type is None:
                account.account_type = "checking"
        account.version += 1
        account.updated_at = now
        self._store.account_rows[account.id] = account
        return account

    async def find_by_id(self, account_id: int, for_update: bool = False) -> Account | None:
        return self._store.account_rows.get(account_id)

    async def exists_by_id(self, account_id: int) -> bool:
        return account_id in self._store.account_rows

    async def delete_by_id(self, account_id: int) -> None:
        self._store.account_rows.pop(account_id, None)
        self._store.transaction_rows = [
            txn for txn in self._store.transaction_rows if txn.account_id != account_id
        ]

    async def find_all(self, page: int, size: int) -> Page[Account]:
        rows = sorted(self._store.account_rows.values(), key=lambda account: account.id)
        return _slice(rows, page, size)


class InMemoryTransactionRepository:
    def __init__(self, store: "InMemoryLedgerStore"):
        self._store = store

    async def save(self, transaction: Transaction) -> Transaction:
        transaction.id = self._store.next_transaction_id()
        transaction.transaction_date = datetime.now(timezone.utc)
        self._store.transaction_rows.append(transaction)
        return transaction

    async def find_by_account_id(self, account_id: int, page: int, size: int) -> Page[Transaction]:
        rows = [txn for txn in self._store.transaction_rows if txn.account_id == account_id]
        return _slice(rows, page, size)


class InMemoryLedgerStore:
    """
    Holds all rows and hands out the repositories that share them.

    Also acts as the unit of work: atomic() snapshots every row on entry
    and restores the snapshot if the block raises.
    """

    def __init__(self):
        self.account_rows: dict[int, Account] = {}
        self.transaction_rows: list[Transaction] = []
        self._account_seq = 0
        self._transaction_seq = 0
        self.accounts = InMemoryAccountRepository(self)
        self.transactions = InMemoryTransactionRepository(self)

    def next_account_id(self) -> int:
        self._account_seq += 1
        return self._account_seq

    def next_transaction_id(self) -> int:
        self._transaction_seq += 1
        return self._transaction_seq

    @asynccontextmanager
    async def atomic(self):
        # Account objects are mutated in place, so remember their mutable fields
        saved_accounts = {
            account_id: (account, account.balance, account.version, account.updated_at)
            for account_id, account in self.account_rows.items()
        }
        saved_transactions = list(self.transaction_rows)
        try:
            yield
        except BaseException:
            self.account_rows = {}
            for account_id, (account, balance, version, updated_at) in saved_accounts.items():
                account.balance = balance
                account.version = version
                account.updated_at = updated_at
                self.account_rows[account_id] = account
            self.transaction_rows = saved_transactions
            raise
