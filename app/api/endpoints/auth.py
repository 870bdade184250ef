import logging
from typing import Any
from fastapi import APIRouter, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from app.core import security
from app.api.deps import SessionDep
from app.models.user import User
from app.schemas.token import AuthResponse
from app.schemas.user import User as UserSchema, UserLogin, UserRegister
from app.core.errors import BadRequestException, ForbiddenException, NotFoundException, StorageUnavailableException

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        access_token=security.create_access_token(user.id),
        token_type="bearer",
        user=UserSchema.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    *,
    session: SessionDep,
    user_in: UserRegister,
) -> Any:
    try:
        stmt = select(User).where(
            or_(User.email == user_in.email, User.firebase_uid == user_in.firebase_uid)
        )
        result = await session.execute(stmt)
        if result.scalars().first():
            raise BadRequestException(detail="User already exists")

        user = User(
            email=user_in.email,
            user_name=user_in.user_name,
            firebase_uid=user_in.firebase_uid,
            firebase_sign_in_provider=user_in.firebase_sign_in_provider,
            is_active=True,
            has_completed_onboarding=False,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        logger.info(f"New user registered: {user.id}")

        return _auth_response(user)
    except HTTPException as http_exc:
        raise http_exc
    except IntegrityError as e:
        logger.warning(f"Duplicate registration for {user_in.email}: {e}")
        await session.rollback()
        raise BadRequestException(detail="User already exists")
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Registration failed: {e}", exc_info=True)
        await session.rollback()
        raise StorageUnavailableException(detail="Registration failed")


@router.post("/login", response_model=AuthResponse, status_code=status.HTTP_200_OK)
async def login_access_token(
    session: SessionDep, login_data: UserLogin
) -> Any:
    try:
        stmt = select(User).where(User.firebase_uid == login_data.firebase_uid)
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            raise NotFoundException(detail="User not found")
        elif not user.is_active:
            raise ForbiddenException(detail="Inactive user")

        return _auth_response(user)
    except HTTPException as http_exc:
        raise http_exc
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Login failed: {e}", exc_info=True)
        raise StorageUnavailableException(detail="Login failed")
