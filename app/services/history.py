from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.config import settings
from app.models import LedgerEntry
from app.services.account_store import AccountStore
from app.services.ledger import TransactionLedger
from app.services.errors import UnauthenticatedError


class HistoryService:
    """History View - read-only projection of the ledger for one account

    The caller only sees the entries written for their own view (their send,
    their receive, their charge), filtered to those where their email is a
    party, newest first. Never flushes or commits.
    """

    def __init__(self, db: AsyncSession):
        self.accounts = AccountStore(db)
        self.ledger = TransactionLedger(db)

    async def get_history(
        self,
        account_id: int,
        limit: Optional[int] = 50,
        offset: int = 0
    ) -> List[LedgerEntry]:
        account = await self.accounts.get(account_id)
        if not account:
            raise UnauthenticatedError("User not found")

        if limit is not None:
            limit = max(1, min(limit, settings.HISTORY_MAX_LIMIT))

        return await self.ledger.query_by_participant(
            account.email,
            owner_id=account.id,
            limit=limit,
            offset=max(offset, 0),
        )
