from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
import uuid
from typing import List, Optional, Tuple

from app.models import LedgerEntry, EntryType
from app.utils.emails import normalize_email


class TransactionLedger:
    """Transaction Ledger - append-only log of transfer records

    Only adds rows. There is no update or delete path; a status change would
    be recorded as a new entry.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, entry: LedgerEntry) -> str:
        """Add a single entry to the current transaction and return its public id"""
        if not entry.entry_id:
            entry.entry_id = str(uuid.uuid4())

        self.db.add(entry)
        await self.db.flush()

        return entry.entry_id

    async def append_pair(self, entry_a: LedgerEntry, entry_b: LedgerEntry) -> Tuple[str, str]:
        """
        Add the sender's and the recipient's view of one transfer together.

        Both rows go out in the same flush of the caller's transaction, so
        they commit or roll back as one.
        """
        self._check_pair(entry_a, entry_b)

        for entry in (entry_a, entry_b):
            if not entry.entry_id:
                entry.entry_id = str(uuid.uuid4())

        self.db.add_all([entry_a, entry_b])
        await self.db.flush()

        return entry_a.entry_id, entry_b.entry_id

    @staticmethod
    def _check_pair(entry_a: LedgerEntry, entry_b: LedgerEntry) -> None:
        if {entry_a.entry_type, entry_b.entry_type} != {EntryType.SEND, EntryType.RECEIVE}:
            raise ValueError("A ledger pair must be one send and one receive entry")

        shared = ("transfer_id", "amount", "sender_email", "recipient_email", "description", "created_at")
        mismatched = [f for f in shared if getattr(entry_a, f) != getattr(entry_b, f)]
        if mismatched:
            raise ValueError(f"Ledger pair entries disagree on: {', '.join(mismatched)}")

    async def query_by_participant(
        self,
        email: str,
        owner_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[LedgerEntry]:
        """
        Entries where email is the sender or the recipient, newest first.

        owner_id restricts the result to the entries written for that
        account's view. Entries created together (a send/receive pair) share
        created_at, so insertion order breaks the tie.
        """
        email = normalize_email(email)

        stmt = select(LedgerEntry).where(
            or_(
                LedgerEntry.sender_email == email,
                LedgerEntry.recipient_email == email,
            )
        )

        if owner_id is not None:
            stmt = stmt.where(LedgerEntry.account_id == owner_id)

        stmt = stmt.order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc()).offset(offset)

        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
