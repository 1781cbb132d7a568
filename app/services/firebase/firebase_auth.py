"""Firebase authentication dependencies.

The dependencies here only establish who is calling. They hand the resolved
``User`` to routers, which pass it explicitly into the service layer.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from firebase_admin import auth
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.models.user import User
from app.services.firebase.firebase_config import get_firebase_app
from app.utils.sentry_utils import set_user_context

logger = logging.getLogger(__name__)


@dataclass
class TokenData:
    """Decoded Firebase token data"""

    uid: str
    email: Optional[str] = None
    name: Optional[str] = None
    email_verified: bool = False


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_token_async(id_token: str) -> TokenData:
    """
    Verify a Firebase ID token without blocking the event loop.

    Raises:
        HTTPException: 401 if verification fails for any reason
    """
    try:
        get_firebase_app()
        decoded_token = await asyncio.to_thread(auth.verify_id_token, id_token)
    except auth.ExpiredIdTokenError:
        raise _unauthorized("Token has expired")
    except auth.RevokedIdTokenError:
        raise _unauthorized("Token has been revoked")
    except auth.InvalidIdTokenError:
        raise _unauthorized("Invalid token")
    except Exception as e:
        logger.error(f"Token verification failed: {e}")
        raise _unauthorized("Authentication failed")

    return TokenData(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
        email_verified=decoded_token.get("email_verified", False),
    )


def get_token_from_header(request: Request) -> str:
    """Extract the Bearer token from the Authorization header."""
    auth_header = request.headers.get("Authorization")

    if not auth_header:
        raise _unauthorized("Authorization header missing")

    if not auth_header.startswith("Bearer ") or not auth_header[len("Bearer "):].strip():
        raise _unauthorized("Invalid authorization header format. Expected 'Bearer <token>'")

    return auth_header[len("Bearer "):].strip()


async def _find_user(token_data: TokenData, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.firebase_uid == token_data.uid))
    user = result.scalar_one_or_none()
    if user or not token_data.email:
        return user

    # Account may predate a change of Firebase uid
    result = await db.execute(select(User).where(User.email == token_data.email))
    user = result.scalar_one_or_none()
    if user:
        user.firebase_uid = token_data.uid
        await db.commit()
    return user


async def get_current_user(
    request: Request, db: AsyncSession = Depends(get_db)
) -> User:
    """
    FastAPI dependency resolving the authenticated user.

    Raises:
        HTTPException: 401 if the token is missing or invalid, or if no account
        exists for it yet (accounts are created by /auth/login)
    """
    token = get_token_from_header(request)
    token_data = await verify_token_async(token)

    user = await _find_user(token_data, db)
    if not user:
        raise _unauthorized("Account not found. Please log in first.")

    set_user_context(user.id)
    return user


async def get_current_user_or_create(
    request: Request, db: AsyncSession = Depends(get_db)
) -> User:
    """
    Like get_current_user, but creates the account on first login.
    """
    token = get_token_from_header(request)
    token_data = await verify_token_async(token)

    if not token_data.email:
        raise _unauthorized("Email not found in token")

    user = await _find_user(token_data, db)
    if user:
        return user

    user = User(
        firebase_uid=token_data.uid,
        email=token_data.email,
        name=token_data.name,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"Created user {user.id} for firebase uid {token_data.uid}")
    return user
