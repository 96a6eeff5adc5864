from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from app.database import get_db
from app.schemas.transfer import (
    TransferRequest,
    TransferResponse,
    LedgerEntryResponse,
    TransactionHistoryResponse,
)
from app.services.identity import get_current_account_id
from app.services.transfer_service import TransferService
from app.services.history import HistoryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("", response_model=TransferResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    request: TransferRequest,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    account_id: int = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Send funds to another user, or charge (top up) your own balance

    **Send an Idempotency-Key header to make retries safe**; a repeated key
    returns the original result instead of moving money again.

    Example:
    ```
    POST /api/v1/transactions
    Headers: {"Authorization": "Bearer <token>", "Idempotency-Key": "send_7f3c2a"}
    Body: {
        "type": "send",
        "amount": 15.50,
        "recipientEmail": "mike@university.edu",
        "description": "Coffee money"
    }
    ```
    """
    service = TransferService(db)

    result = await service.execute_transfer(
        actor_id=account_id,
        request=request.root,
        idempotency_key=idempotency_key
    )

    return TransferResponse(
        message="Transaction already processed" if result.replayed else "Transaction completed successfully",
        transfer_id=result.transfer_id,
        balance=result.balance
    )


@router.get("/history", response_model=TransactionHistoryResponse)
async def get_transaction_history(
    limit: int = 50,
    offset: int = 0,
    account_id: int = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Transaction history for the caller, newest first

    Example:
    ```
    GET /api/v1/transactions/history?limit=20
    ```
    """
    service = HistoryService(db)

    entries = await service.get_history(account_id, limit=limit, offset=offset)

    return TransactionHistoryResponse(
        data=[LedgerEntryResponse.from_entry(e) for e in entries]
    )
