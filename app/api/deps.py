import logging
import uuid
from typing import Annotated, Optional
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import StorageUnavailableException, UnauthorizedException
from app.core.security import AuthenticatedIdentity, decode_access_token
from app.db.session import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_db)]
BearerDep = Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)]


async def get_optional_identity(
    session: SessionDep,
    credentials: BearerDep,
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> Optional[AuthenticatedIdentity]:
    """
    Resolves a bearer token or an X-User-Id header to a stored, active user.

    Returns None when the request carries neither. Credentials that are
    present but do not resolve are rejected with 401.
    """
    if credentials is None and x_user_id is None:
        return None

    if credentials is not None:
        try:
            subject = decode_access_token(credentials.credentials).sub
        except (JWTError, ValidationError):
            raise UnauthorizedException(detail="Invalid or expired token")
    else:
        subject = x_user_id

    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        raise UnauthorizedException(detail="Invalid user identifier")

    try:
        user = await session.get(User, user_id)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"User lookup failed: {e}")
        raise StorageUnavailableException()

    if user is None:
        raise UnauthorizedException(detail="User not found")
    if not user.is_active:
        raise UnauthorizedException(detail="Inactive user")

    return AuthenticatedIdentity(user_id=user.id, username=user.user_name, email=user.email)


OptionalIdentity = Annotated[Optional[AuthenticatedIdentity], Depends(get_optional_identity)]
