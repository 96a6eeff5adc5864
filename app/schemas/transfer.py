"""Transfer Schemas - Request/Response Models"""
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, RootModel, field_validator
from pydantic.alias_generators import to_camel
from decimal import Decimal
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from app.utils.emails import normalize_email


# Amounts are exact Decimals internally and plain JSON numbers on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Wire models use camelCase field names; Python code uses snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SendRequest(CamelModel):
    """Send funds to another user by email"""
    type: Literal["send"] = "send"
    amount: Decimal = Field(..., description="Amount to send; checked against the ceiling by the transfer engine")
    recipient_email: str = Field(..., max_length=255)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("recipient_email")
    @classmethod
    def validate_recipient_email(cls, v: str) -> str:
        v = normalize_email(v)
        if not v:
            raise ValueError("Recipient email required")
        return v


class ChargeRequest(CamelModel):
    """Top up the caller's own balance from a (simulated) card payment"""
    type: Literal["charge"] = "charge"
    amount: Decimal = Field(..., description="Amount to add; checked against the ceiling by the transfer engine")
    description: Optional[str] = Field(None, max_length=500)


class TransferRequest(RootModel[Annotated[Union[SendRequest, ChargeRequest], Field(discriminator="type")]]):
    """Body of POST /transactions, tagged by its `type` field"""


class TransferResponse(CamelModel):
    """Response schema for a completed transfer"""
    success: bool = True
    message: str
    transfer_id: str
    balance: Money


class LedgerEntryResponse(CamelModel):
    """One history row, as seen by the account that owns it"""
    id: str
    type: str
    amount: Money
    sender_email: Optional[str] = None
    recipient_email: Optional[str] = None
    description: Optional[str] = None
    status: str
    timestamp: datetime

    @classmethod
    def from_entry(cls, entry) -> "LedgerEntryResponse":
        return cls(
            id=entry.entry_id,
            type=entry.entry_type.value,
            amount=entry.amount,
            sender_email=entry.sender_email,
            recipient_email=entry.recipient_email,
            description=entry.description,
            status=entry.status.value,
            timestamp=entry.created_at,
        )


class TransactionHistoryResponse(CamelModel):
    """Response schema for transaction history"""
    success: bool = True
    data: List[LedgerEntryResponse]
