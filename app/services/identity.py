"""Identity Resolver - turns a bearer credential into an account id

Tokens are HS256 JWTs whose `sub` claim is the account id. Issuing them
belongs to the sign-in service; create_access_token exists for the seed
script and tests.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header
from jose import JWTError, jwt

from app.config import settings
from app.services.errors import UnauthenticatedError


def create_access_token(account_id: int, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode({"sub": str(account_id), "exp": exp}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def resolve_token(token: str) -> int:
    """Verify signature and expiry and return the account id in `sub`"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        return int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        raise UnauthenticatedError("Invalid token")


async def get_current_account_id(
    authorization: Optional[str] = Header(default=None, alias="Authorization")
) -> int:
    """FastAPI dependency: `Authorization: Bearer <token>` -> account id"""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise UnauthenticatedError("Unauthorized")

    return resolve_token(authorization.split(" ", 1)[1].strip())
