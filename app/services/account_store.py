from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from decimal import Decimal
from typing import Dict, Iterable, Optional

from app.models import Account
from app.services.errors import AccountNotFoundError, InsufficientBalanceError
from app.utils.emails import normalize_email


class AccountStore:
    """Account Store - balance reads and atomic balance changes

    Works inside the caller's session; nothing here commits. The caller
    (the transfer engine) owns the database transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, account_id: int) -> Optional[Account]:
        return await self.db.get(Account, account_id)

    async def get_balance(self, account_id: int) -> Decimal:
        """Read the stored balance straight from the row, bypassing the identity map"""
        stmt = select(Account.balance).where(Account.id == account_id)
        result = await self.db.execute(stmt)
        balance = result.scalar_one_or_none()

        if balance is None:
            raise AccountNotFoundError(f"Account {account_id} not found")

        return Decimal(balance)

    async def find_by_email(self, email: str) -> Optional[Account]:
        stmt = select(Account).where(Account.email == normalize_email(email))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_accounts(self, account_ids: Iterable[int]) -> Dict[int, Account]:
        """
        Lock account rows for the rest of the transaction.

        DEADLOCK AVOIDANCE: rows are always locked in ascending id order, so a
        transfer A->B and a concurrent B->A queue behind each other instead of
        each holding one lock.
        """
        ids = sorted(set(account_ids))

        stmt = (
            select(Account)
            .where(Account.id.in_(ids))
            .order_by(Account.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return {a.id: a for a in result.scalars().all()}

    async def apply_delta(self, account_id: int, delta: Decimal) -> Decimal:
        """
        Add delta to the balance in one conditional UPDATE and return the new balance.

        The WHERE clause refuses any change that would leave the balance
        negative, so the check and the write cannot be split by another writer.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id, Account.balance + delta >= 0)
            .values(balance=Account.balance + delta)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)

        if result.rowcount == 0:
            available = await self.get_balance(account_id)
            raise InsufficientBalanceError(
                f"Insufficient balance. Available: {available}, Required: {-delta}"
            )

        return await self.get_balance(account_id)

    async def create_account(self, email: str, name: str, balance: Decimal = Decimal("0.00")) -> Account:
        """Provision a new account (seed script and tests; sign-up is handled elsewhere)"""
        account = Account(
            email=normalize_email(email),
            name=name.strip(),
            balance=balance,
        )
        self.db.add(account)
        await self.db.flush()
        return account
