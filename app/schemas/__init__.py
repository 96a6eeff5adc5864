"""Pydantic Schemas for Request/Response Validation"""
from app.schemas.transfer import (
    SendRequest,
    ChargeRequest,
    TransferRequest,
    TransferResponse,
    LedgerEntryResponse,
    TransactionHistoryResponse,
)
from app.schemas.account import (
    AccountResponse,
    ProfileResponse,
    BalanceResponse,
    RecipientSearchResponse,
)

__all__ = [
    "SendRequest",
    "ChargeRequest",
    "TransferRequest",
    "TransferResponse",
    "LedgerEntryResponse",
    "TransactionHistoryResponse",
    "AccountResponse",
    "ProfileResponse",
    "BalanceResponse",
    "RecipientSearchResponse",
]
