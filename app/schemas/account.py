"""Account Schemas - Response Models"""
from datetime import datetime

from app.schemas.transfer import CamelModel, Money


class AccountResponse(CamelModel):
    """The caller's own account"""
    id: int
    email: str
    name: str
    balance: Money
    created_at: datetime
    updated_at: datetime


class ProfileResponse(CamelModel):
    success: bool = True
    data: AccountResponse


class BalanceData(CamelModel):
    balance: Money


class BalanceResponse(CamelModel):
    success: bool = True
    data: BalanceData


class RecipientResponse(CamelModel):
    """Public view of another user; never carries a balance"""
    id: int
    email: str
    name: str


class RecipientSearchResponse(CamelModel):
    success: bool = True
    data: RecipientResponse
