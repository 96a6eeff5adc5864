from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.account import (
    AccountResponse,
    ProfileResponse,
    BalanceResponse,
    RecipientResponse,
    RecipientSearchResponse,
)
from app.services.account_store import AccountStore
from app.services.identity import get_current_account_id
from app.services.errors import AccountNotFoundError, UnauthenticatedError
from app.utils.emails import normalize_email

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    account_id: int = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db)
):
    """The caller's account, including the current balance"""
    account = await AccountStore(db).get(account_id)
    if not account:
        raise UnauthenticatedError("User not found")

    return ProfileResponse(data=AccountResponse.model_validate(account))


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    account_id: int = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Current stored balance; clients re-fetch this after a transfer

    Example:
    ```
    GET /api/v1/users/balance
    ```
    """
    try:
        balance = await AccountStore(db).get_balance(account_id)
    except AccountNotFoundError:
        raise UnauthenticatedError("User not found")

    return BalanceResponse(data={"balance": balance})


@router.get("/search", response_model=RecipientSearchResponse)
async def search_user(
    email: str = Query(..., min_length=1, description="Exact email of the recipient"),
    account_id: int = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Look up a recipient by email before sending

    Example:
    ```
    GET /api/v1/users/search?email=jane@college.edu
    ```
    """
    account = await AccountStore(db).find_by_email(email)
    if not account:
        raise AccountNotFoundError(f"No user with email {normalize_email(email)}")

    return RecipientSearchResponse(data=RecipientResponse.model_validate(account))
