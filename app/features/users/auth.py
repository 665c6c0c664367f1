"""
Authentication utilities for Appwrite JWT verification.
"""
import jwt
from fastapi import HTTPException, status
from appwrite.client import Client
from appwrite.services.account import Account
from appwrite.exception import AppwriteException

from app.core import config
from app.utils import get_logger


log = get_logger(__name__)


class AppwriteClient:
    """Appwrite clients acting on behalf of a user session."""

    @staticmethod
    def for_session(token: str) -> Client:
        """Client authenticated with the caller's session JWT, not a server key."""
        client = Client()
        client.set_endpoint(config.APPWRITE_ENDPOINT)
        client.set_project(config.APPWRITE_PROJECT_ID)
        client.set_jwt(token)
        return client


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_jwt_token(token: str) -> dict:
    """
    Decode an Appwrite session JWT and return its payload.

    Only the structure and expiry are checked here. The payload is not trusted
    until get_session_account has confirmed the token with Appwrite.

    Raises:
        HTTPException: 401 if the token is expired or malformed
    """
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": True}
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        log.info("Rejected bearer token: %s", e)
        raise _unauthorized(f"Invalid token: {str(e)}")


async def get_session_account(token: str, user_id: str) -> dict:
    """
    Ask Appwrite who the session JWT belongs to.

    Args:
        token: The bearer token as sent by the client
        user_id: The `userId` claim read from the token

    Returns:
        The Appwrite account (`$id`, `email`, `name`, ...)

    Raises:
        HTTPException: 401 if Appwrite rejects the token or the account it
            belongs to is not `user_id`
    """
    try:
        account = Account(AppwriteClient.for_session(token)).get()
    except AppwriteException as e:
        log.warning("Appwrite rejected session for %s: %s", user_id, e)
        raise _unauthorized("Failed to verify session")

    if account.get("$id") != user_id:
        log.warning("Session token claims %s but belongs to %s", user_id, account.get("$id"))
        raise _unauthorized("Invalid token payload")

    return account
