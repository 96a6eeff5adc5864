"""Database Models"""
from app.models.account import Account
from app.models.ledger_entry import LedgerEntry, EntryType, EntryStatus
from app.models.idempotency_log import IdempotencyLog

__all__ = [
    "Account",
    "LedgerEntry",
    "EntryType",
    "EntryStatus",
    "IdempotencyLog",
]
