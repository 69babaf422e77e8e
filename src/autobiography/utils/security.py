"""Security utilities for password hashing, JWT handling and access guards."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Annotated

import bcrypt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autobiography.config import get_settings
from autobiography.database import get_db

if TYPE_CHECKING:
    from autobiography.models.user import User

# OAuth2 scheme for Bearer token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

# Admin and cron endpoints answer with {"ok": false, ...} instead of FastAPI's default 401
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

ACCESS = "access"
MAGIC_LINK = "magiclink"
RECOVERY = "recovery"


class AccessDeniedError(Exception):
    """Rejected admin or scheduled-job request, rendered as {"ok": false, "error": ...}."""

    def __init__(self, message: str, status_code: int = 401) -> None:
        super().__init__(message)
        self.status_code = status_code


def hash_password(password: str) -> str:
    """Hash a plain text password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a hashed password."""
    password_bytes = plain_password.encode("utf-8")
    hashed_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(password_bytes, hashed_bytes)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token.

    Args:
        data: Payload data to encode in the token. The "sub" (subject) claim
              must be a string (e.g., {"sub": str(user_id)}).
        expires_delta: Optional custom expiration time. Defaults to settings value.

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()
    to_encode = data.copy()
    to_encode.setdefault("purpose", ACCESS)

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def create_auth_link_token(user_id: int, purpose: str) -> str:
    """Create the token embedded in an emailed sign-in or password-reset link."""
    settings = get_settings()
    return create_access_token(
        {"sub": str(user_id), "purpose": purpose},
        expires_delta=timedelta(minutes=settings.auth_link_expire_minutes),
    )


def decode_access_token(token: str, purpose: str = ACCESS) -> dict | None:
    """Decode and validate a JWT token.

    Args:
        token: The JWT token string to decode
        purpose: The purpose claim the token must carry

    Returns:
        Decoded token payload if valid, None if invalid, expired or issued
        for another purpose
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None

    if payload.get("purpose", ACCESS) != purpose:
        return None
    return payload


def user_id_from_token(token: str, purpose: str = ACCESS) -> int | None:
    """Return the subject user ID of a valid token, or None."""
    payload = decode_access_token(token, purpose=purpose)
    if payload is None:
        return None

    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        return None

    try:
        return int(user_id_str)
    except ValueError:
        return None


async def load_user(db: AsyncSession, user_id: int) -> "User | None":
    """Fetch a user together with its profile."""
    # Import here to avoid circular import
    from autobiography.models.user import User

    result = await db.execute(
        select(User).where(User.id == user_id).options(selectinload(User.profile))
    )
    return result.scalar_one_or_none()


def is_disabled(user: "User") -> bool:
    return bool(user.profile is not None and user.profile.disabled)


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: AsyncSession = Depends(get_db),
):
    """Get the current authenticated user from JWT token.

    Raises:
        HTTPException 401: If token is invalid, expired, or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = user_id_from_token(token)
    if user_id is None:
        raise credentials_exception

    user = await load_user(db, user_id)
    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(
    current_user: Annotated["User", Depends(get_current_user)],
):
    """Get the current user, rejecting accounts an administrator disabled.

    Raises:
        HTTPException 403: If the account is disabled
    """
    if is_disabled(current_user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account disabled",
        )
    return current_user


async def require_admin(
    token: Annotated[str | None, Depends(optional_oauth2_scheme)],
    db: AsyncSession = Depends(get_db),
):
    """Get the current user and require the administrator role.

    Raises:
        AccessDeniedError 401: Missing or invalid token
        AccessDeniedError 403: Caller is not an administrator, or is disabled
    """
    if not token:
        raise AccessDeniedError("Missing bearer token", status_code=401)

    user_id = user_id_from_token(token)
    if user_id is None:
        raise AccessDeniedError("Invalid session", status_code=401)

    user = await load_user(db, user_id)
    if user is None:
        raise AccessDeniedError("Invalid session", status_code=401)

    if not user.is_admin:
        raise AccessDeniedError("Not authorized", status_code=403)

    if is_disabled(user):
        raise AccessDeniedError("Account disabled", status_code=403)

    return user


def verify_cron_secret(authorization: Annotated[str | None, Header()] = None) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>`` on scheduled-job calls.

    Raises:
        AccessDeniedError 401: Secret missing, unset or wrong
    """
    cron_secret = get_settings().cron_secret
    expected = f"Bearer {cron_secret}".encode()
    provided = (authorization or "").encode()
    if not cron_secret or not secrets.compare_digest(provided, expected):
        raise AccessDeniedError("Unauthorized", status_code=401)


# Type aliases for use in route dependencies
CurrentUser = Annotated["User", Depends(get_current_active_user)]
CurrentAdmin = Annotated["User", Depends(require_admin)]
