"""Authentication API endpoints."""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autobiography.database import get_db
from autobiography.models.profile import Profile
from autobiography.models.user import User
from autobiography.schemas.user import (
    MagicLinkExchange,
    PasswordResetConfirm,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)
from autobiography.utils.security import (
    MAGIC_LINK,
    RECOVERY,
    CurrentUser,
    create_access_token,
    hash_password,
    is_disabled,
    load_user,
    user_id_from_token,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def user_to_response(user: User) -> UserResponse:
    """Convert a User model to UserResponse schema."""
    return UserResponse(
        id=user.id,
        email=user.email,
        is_admin=user.is_admin,
        created_at=user.created_at,
    )


def issue_token(user: User) -> Token:
    """Reject disabled accounts, otherwise return a fresh access token."""
    if is_disabled(user):
        raise HTTPException(status_code=403, detail="Account disabled")
    access_token = create_access_token(data={"sub": str(user.id)})
    return Token(access_token=access_token, token_type="bearer")


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Register a new user.

    Creates the account and its profile. The start date is left unset until
    an administrator schedules the writer, so the writer starts on week 1.

    Raises:
        HTTPException 409: If the email already exists
    """
    email_query = select(User).where(User.email == user_data.email)
    email_result = await db.execute(email_query)
    if email_result.scalar_one_or_none():
        raise HTTPException(
            status_code=409,
            detail="Email already registered",
        )

    now = datetime.now(UTC)
    new_user = User(
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        is_admin=False,
        created_at=now,
    )
    new_user.profile = Profile(
        email=user_data.email,
        preferred_name=(user_data.preferred_name or "").strip() or None,
        created_at=now,
    )
    db.add(new_user)
    await db.flush()
    await db.refresh(new_user)

    logger.info("Registered user %s", new_user.id)
    return user_to_response(new_user)


@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Authenticate user and return JWT token.

    Raises:
        HTTPException 401: If credentials are invalid
        HTTPException 403: If the account is disabled
    """
    query = (
        select(User)
        .where(User.email == credentials.email.lower())
        .options(selectinload(User.profile))
    )
    result = await db.execute(query)
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password",
        )

    return issue_token(user)


@router.post("/link", response_model=Token)
async def exchange_magic_link(
    payload: MagicLinkExchange,
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Exchange the token of an emailed sign-in link for an access token.

    Raises:
        HTTPException 401: If the link is invalid or expired
        HTTPException 403: If the account is disabled
    """
    user_id = user_id_from_token(payload.token, purpose=MAGIC_LINK)
    user = await load_user(db, user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(status_code=401, detail="Sign-in link is invalid or expired")

    return issue_token(user)


@router.post("/reset-password", response_model=Token)
async def reset_password(
    payload: PasswordResetConfirm,
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Set a new password using the token of an emailed reset link.

    Raises:
        HTTPException 401: If the link is invalid or expired
        HTTPException 403: If the account is disabled
    """
    user_id = user_id_from_token(payload.token, purpose=RECOVERY)
    user = await load_user(db, user_id) if user_id is not None else None
    if user is None:
        raise HTTPException(status_code=401, detail="Reset link is invalid or expired")
    if is_disabled(user):
        raise HTTPException(status_code=403, detail="Account disabled")

    user.hashed_password = hash_password(payload.new_password)
    await db.flush()

    logger.info("Password reset for user %s", user.id)
    return issue_token(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: CurrentUser) -> UserResponse:
    """Get the current authenticated user's information."""
    return user_to_response(current_user)
