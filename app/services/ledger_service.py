"""
Ledger service — the account and transfer business logic.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. It handles:
  - Account lifecycle (create, read, list, delete)
  - Balance and transaction-history queries
  - Transfers between accounts, with their two ledger entries

The service never talks to a database directly. It is handed an
AccountRepository, a TransactionRepository and a UnitOfWork (see
app/repositories/base.py), so the same rules run against SQLAlchemy in
production and against the in-memory store in tests.

Atomicity:
  A transfer performs four writes: two balance updates and two transaction
  records. All four happen inside one unit-of-work block. If any of them
  fails, none of them is kept.

Deadlock prevention:
  Both accounts are locked (SELECT ... FOR UPDATE) in ascending id order,
  whatever the direction of the transfer. Two concurrent transfers A->B and
  B->A therefore always try to lock the same row first.

Validation order:
  Every check (amount, self-transfer, source exists, destination exists,
  sufficient funds) runs before the first write, so a rejected transfer
  never leaves anything behind.
"""

import logging
import uuid
from decimal import Decimal
from typing import NamedTuple

from app.exceptions import AccountNotFoundError, InsufficientFundsError, InvalidTransferError
from app.models.account import Account
from app.models.transaction import Transaction
from app.models.types import MONEY_SCALE
from app.repositories.base import AccountRepository, Page, TransactionRepository, UnitOfWork

logger = logging.getLogger(__name__)


class TransferResult(NamedTuple):
    """The two ledger entries written by a successful transfer."""
    debit: Transaction
    credit: Transaction


class LedgerService:
    def __init__(
        self,
        accounts: AccountRepository,
        transactions: TransactionRepository,
        unit_of_work: UnitOfWork,
    ):
        self.accounts = accounts
        self.transactions = transactions
        self.unit_of_work = unit_of_work

    # -----------------------------------------------------------------------
    # Accounts
    # -----------------------------------------------------------------------

    async def create_account(self, account: Account) -> Account:
        """
        Store a new account and return it with its assigned id.

        The opening balance is taken as given. It is not checked for sign.
        """
        account = await self.accounts.save(account)
        logger.info(
            "Created account %s for %s with opening balance %s",
            account.id, account.account_holder_name, account.balance,
        )
        return account

    async def get_account(self, account_id: int) -> Account:
        """
        Raises:
            AccountNotFoundError: If the account doesn't exist.
        """
        account = await self.accounts.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def list_accounts(self, page: int, size: int) -> Page[Account]:
        return await self.accounts.find_all(page, size)

    async def delete_account(self, account_id: int) -> None:
        """
        Delete an account together with its transaction history.

        Raises:
            AccountNotFoundError: If the account doesn't exist. Deleting an
                unknown id is always an error, never a silent success.
        """
        if not await self.accounts.exists_by_id(account_id):
            raise AccountNotFoundError(account_id)
        await self.accounts.delete_by_id(account_id)
        logger.info("Deleted account %s", account_id)

    async def get_account_balance(self, account_id: int) -> Decimal:
        account = await self.get_account(account_id)
        return account.balance

    async def get_account_transactions(
        self,
        account_id: int,
        page: int,
        size: int,
    ) -> Page[Transaction]:
        """
        List an account's transactions in the order they were recorded.

        Raises:
            AccountNotFoundError: If the account doesn't exist.
        """
        await self.get_account(account_id)
        return await self.transactions.find_by_account_id(account_id, page, size)

    # -----------------------------------------------------------------------
    # Transfers
    # -----------------------------------------------------------------------

    async def transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
    ) -> TransferResult:
        """
        Move `amount` from one account to another.

        Writes, in order: the source balance, the destination balance, a
        debit entry (-amount) on the source, a credit entry (+amount) on the
        destination. The two entries share a transfer_id.

        Args:
            from_account_id: Account to debit.
            to_account_id: Account to credit.
            amount: Positive exact decimal.

        Returns:
            TransferResult(debit, credit).

        Raises:
            InvalidTransferError: If amount <= 0, has more than MONEY_SCALE
                decimal places, or both ids are the same.
            AccountNotFoundError: If either account doesn't exist. The source
                is checked first.
            InsufficientFundsError: If the source balance is below amount.
        """
        if amount <= 0:
            logger.warning(
                "Rejected transfer %s -> %s: non-positive amount %s",
                from_account_id, to_account_id, amount,
            )
            raise InvalidTransferError(f"Transfer amount must be positive, got {amount}")
        if amount.normalize().as_tuple().exponent < -MONEY_SCALE:
            logger.warning(
                "Rejected transfer %s -> %s: amount %s has more than %d decimal places",
                from_account_id, to_account_id, amount, MONEY_SCALE,
            )
            raise InvalidTransferError(
                f"Transfer amount may have at most {MONEY_SCALE} decimal places, got {amount}"
            )
        if from_account_id == to_account_id:
            logger.warning("Rejected transfer %s -> %s: same account", from_account_id, to_account_id)
            raise InvalidTransferError("Cannot transfer to the same account")

        async with self.unit_of_work.atomic():
            source, dest = await self._lock_pair(from_account_id, to_account_id)

            if source.balance < amount:
                logger.warning(
                    "Rejected transfer %s -> %s of %s: balance is %s",
                    from_account_id, to_account_id, amount, source.balance,
                )
                raise InsufficientFundsError(
                    account_id=from_account_id,
                    requested=amount,
                    available=source.balance,
                )

            source.balance = source.balance - amount
            dest.balance = dest.balance + amount
            await self.accounts.save(source)
            await self.accounts.save(dest)

            transfer_id = uuid.uuid4()
            debit = await self.transactions.save(
                Transaction(account_id=source.id, amount=-amount, transfer_id=transfer_id)
            )
            credit = await self.transactions.save(
                Transaction(account_id=dest.id, amount=amount, transfer_id=transfer_id)
            )

        logger.info(
            "Transferred %s from account %s to account %s (transfer %s)",
            amount, from_account_id, to_account_id, transfer_id,
        )
        return TransferResult(debit=debit, credit=credit)

    async def _lock_pair(self, from_account_id: int, to_account_id: int) -> tuple[Account, Account]:
        """Lock both accounts in ascending id order and return (source, dest)."""
        locked: dict[int, Account | None] = {}
        for account_id in sorted([from_account_id, to_account_id]):
            locked[account_id] = await self.accounts.find_by_id(account_id, for_update=True)

        # Report the source before the destination, regardless of lock order
        source = locked[from_account_id]
        if source is None:
            raise AccountNotFoundError(from_account_id)
        dest = locked[to_account_id]
        if dest is None:
            raise AccountNotFoundError(to_account_id)
        return source, dest
