"""Bearer-token identity resolution.

Tokens are issued by the account service; this module only verifies them and
loads the caller's user record.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from opentelemetry import trace

from . import config
from .database import Transaction, get_transaction

# Initialize logger
logger = structlog.get_logger(__name__)

security = HTTPBearer()


def create_access_token(user_id: str, email: str) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: The user's ID
        email: The user's email

    Returns:
        Encoded JWT token
    """
    expire = datetime.now(UTC) + timedelta(days=config.JWT_EXPIRATION_DAYS)
    to_encode = {"sub": user_id, "email": email, "exp": expire}
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT token. Returns None if invalid."""
    try:
        return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning("jwt_token_decode_failed", error=str(e), error_type=type(e).__name__)
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    tx: Transaction = Depends(get_transaction),
) -> dict:
    """
    Dependency to get the current authenticated user.

    Validates the JWT and loads the user inside the request's transaction.
    Raises 401 if the token is invalid or the user does not exist.
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("get_current_user") as span:
        payload = decode_access_token(credentials.credentials)
        if payload is None:
            logger.warning("auth_failed_invalid_token")
            raise _unauthorized("Invalid authentication credentials")

        user_id = payload.get("sub")
        if user_id is None:
            logger.warning("auth_failed_missing_user_id")
            raise _unauthorized("Invalid authentication credentials")

        span.set_attribute("user.id", user_id)

        try:
            user_oid = ObjectId(user_id)
        except (InvalidId, TypeError):
            logger.warning("auth_failed_invalid_user_id", user_id=user_id)
            raise _unauthorized("Invalid user ID")

        user = await tx.users.find_one({"_id": user_oid}, session=tx.session)
        if user is None:
            logger.warning("auth_failed_user_not_found", user_id=user_id)
            raise _unauthorized("User not found")

        logger.debug("auth_user_authenticated", user_id=user_id)
        return user
