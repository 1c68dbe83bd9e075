"""
Auth Session Provider

Verifies Supabase-issued bearer tokens and resolves the acting user.
The resulting Principal doubles as the session provider for mirror
calls: the user's own token is forwarded to the secondary service.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .mirror.client import NoActiveSessionError
from .models.profile import Profile

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    """The authenticated user behind a request."""
    user_id: str
    access_token: str = ""
    email: str = ""
    name: str = ""
    is_admin: bool = False

    async def get_access_token(self) -> str:
        if not self.access_token:
            raise NoActiveSessionError("No active session")
        return self.access_token


def decode_token(token: str) -> dict:
    """Verify a Supabase JWT and return its claims."""
    return jwt.decode(
        token,
        settings.supabase_jwt_secret,
        algorithms=["HS256"],
        audience=settings.supabase_jwt_audience,
    )


def _display_name(claims: dict) -> str:
    metadata = claims.get("user_metadata") or {}
    if metadata.get("name"):
        return metadata["name"]
    email = claims.get("email") or ""
    if email:
        return email.split("@")[0]
    return "User"


async def ensure_profile(db: AsyncSession, user_id: str, email: str, name: str) -> Profile:
    """Fetch the user's profile, creating it on first sight."""
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    profile = result.scalar_one_or_none()
    if profile:
        return profile

    profile = Profile(id=user_id, name=name, email=email or "", is_admin=False)
    db.add(profile)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        # A concurrent first request may have created it already
        await db.rollback()
        result = await db.execute(select(Profile).where(Profile.id == user_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            logger.error(f"Error creating profile for {user_id}: {e}")
            raise
    else:
        logger.info(f"Created profile for user {user_id}")
    return profile


async def get_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Dependency resolving the bearer token to a Principal."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = decode_token(credentials.credentials)
    except JWTError as e:
        logger.info(f"Rejected token: {e}")
        raise unauthorized

    user_id = claims.get("sub")
    if not user_id:
        raise unauthorized

    email = claims.get("email") or ""
    name = _display_name(claims)
    profile = await ensure_profile(db, user_id, email, name)

    return Principal(
        user_id=user_id,
        access_token=credentials.credentials,
        email=email,
        name=profile.name,
        is_admin=profile.is_admin,
    )
