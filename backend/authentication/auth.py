from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import bcrypt
from fastapi import Depends
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBearer,
    OAuth2PasswordBearer,
)
import jwt
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import (
    AuthenticationException,
    InsufficientPermissionsException,
    UnverifiedUserException,
    UserBlockedException,
)
from repositories.database import get_db
from repositories.user_repository import UserRepository

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")
optional_oauth2_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def authenticate_user(db: Session, email: str, password: str) -> db_models.User | None:
    user = UserRepository(db).get_by_email(email)
    if not user:
        return None
    if not verify_password(password, str(user.hashed_password)):
        return None
    return user


def _decode_subject(token: str) -> str:
    """Return the email in the token's `sub` claim or raise."""
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except jwt.exceptions.InvalidTokenError:
        raise AuthenticationException("Could not validate credentials")
    subject = payload.get("sub")
    if subject is None:
        raise AuthenticationException("Could not validate credentials")
    return schemas.TokenData(email=str(subject)).email or ""


async def get_current_user(
    token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)
) -> db_models.User:
    """
    Get the user behind the bearer token.

    Raises:
        AuthenticationException: If the token is invalid or the user is gone.
    """
    user = UserRepository(db).get_by_email(_decode_subject(token))
    if user is None:
        raise AuthenticationException("Could not validate credentials")
    return user


async def get_current_active_user(
    current_user: db_models.User = Depends(get_current_user),
) -> db_models.User:
    """
    Get the current user and refuse blocked accounts.

    Raises:
        UserBlockedException: If an admin has blocked the account.
    """
    if bool(current_user.blocked):
        raise UserBlockedException()
    return current_user


async def get_verified_user(
    current_user: db_models.User = Depends(get_current_active_user),
) -> db_models.User:
    """
    Require a verified account. Creating content needs this.

    Raises:
        UnverifiedUserException: If the account has not been verified yet.
    """
    if not bool(current_user.verified):
        raise UnverifiedUserException()
    return current_user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        optional_oauth2_scheme
    ),
    db: Session = Depends(get_db),
) -> Optional[db_models.User]:
    """
    Get the current user if a valid token was sent, otherwise None.

    An expired token still raises so the client knows to log in again.
    """
    if credentials is None:
        return None
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except jwt.exceptions.ExpiredSignatureError:
        raise AuthenticationException("Session expired. Please log in again.")
    except jwt.exceptions.InvalidTokenError:
        return None
    subject = payload.get("sub")
    if subject is None:
        return None
    return UserRepository(db).get_by_email(str(subject))


def require_role(*roles: db_models.UserRole) -> Callable:
    """
    Build a dependency that admits only the given roles.

    Usage:
        @router.post("/badges")
        def create_badge(user = Depends(require_role(UserRole.TEACHER, UserRole.ADMIN))):

    Raises:
        InsufficientPermissionsException: From the built dependency when the
            caller's role is not listed.
    """
    allowed = frozenset(roles)

    async def role_checker(
        current_user: db_models.User = Depends(get_current_active_user),
    ) -> db_models.User:
        if current_user.role not in allowed:
            raise InsufficientPermissionsException()
        return current_user

    return role_checker


get_admin_user = require_role(db_models.UserRole.ADMIN)
get_moderator_user = require_role(db_models.UserRole.TEACHER, db_models.UserRole.ADMIN)
