"""
FastAPI dependencies resolving the calling user.

These are the only places that read identity from the request; everything below
the routes receives the resolved `User` (or None) as an explicit argument.
"""
from typing import Annotated, Optional
from datetime import datetime, timezone
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.users.models import User
from app.features.users.auth import verify_jwt_token, get_session_account


security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


async def _resolve_user(token: str, db: AsyncSession) -> User:
    """
    Map a bearer token onto a local profile, provisioning it on first sight.

    Every request is confirmed with Appwrite; the local profile is only looked
    up once Appwrite has vouched for the `userId` claim.
    """
    payload = verify_jwt_token(token)
    appwrite_user_id = payload.get("userId")

    if not appwrite_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    account = await get_session_account(token, appwrite_user_id)

    result = await db.execute(
        select(User).where(User.appwrite_id == appwrite_user_id)
    )
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            appwrite_id=appwrite_user_id,
            email=account.get("email", ""),
            full_name=account.get("name"),
        )
        db.add(user)

    user.last_seen_at = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    """
    Get the current authenticated user from the bearer token (401 if absent).

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    return await _resolve_user(credentials.credentials, db)


async def get_optional_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(optional_security)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Optional[User]:
    """
    Like get_current_user, but returns None when no credentials were sent.

    Admin routes use this so an anonymous caller reaches the super admin gate
    and gets diverted, instead of failing earlier with a 401.
    """
    if credentials is None:
        return None
    return await _resolve_user(credentials.credentials, db)


def get_client_ip(request: Request) -> Optional[str]:
    """Client address recorded on audit entries."""
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    return request.headers.get("user-agent")


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"
