"""
Authentication service: registration and password login.
"""

import hmac

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from authentication.auth import (
    authenticate_user,
    create_access_token,
    get_password_hash,
)
from models.config import settings
from models.exceptions import (
    InvalidCredentialsException,
    InvalidTeacherCodeException,
    UserAlreadyExistsException,
)
from repositories.user_repository import UserRepository
from services.admin_alert_service import AdminAlertService


class AuthService:
    """Service for registration and login."""

    @staticmethod
    def _token_for(user: db_models.User) -> str:
        return create_access_token(data={"sub": user.email})

    @staticmethod
    def register(db: Session, data: schemas.UserRegister) -> schemas.AuthResponse:
        """
        Create an account and log it in.

        Teachers must present settings.TEACHER_REGISTRATION_CODE. New
        accounts are verified straight away unless AUTO_VERIFY_USERS is off,
        in which case admins are alerted.

        Args:
            db: Database session
            data: Registration form

        Returns:
            Bearer token and the new user

        Raises:
            InvalidTeacherCodeException: Teacher role with a wrong code
            UserAlreadyExistsException: Email already registered
        """
        if data.role == db_models.UserRole.TEACHER and not hmac.compare_digest(
            (data.teacher_code or "").encode(),
            settings.TEACHER_REGISTRATION_CODE.encode(),
        ):
            raise InvalidTeacherCodeException()

        user_repo = UserRepository(db)
        if user_repo.email_exists(data.email):
            raise UserAlreadyExistsException()

        user = db_models.User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            role=data.role,
            grade=data.grade,
            interests=[],
            verified=settings.AUTO_VERIFY_USERS,
            blocked=False,
        )
        try:
            user = user_repo.create(user)
        except IntegrityError:
            user_repo.rollback()
            raise UserAlreadyExistsException()

        logger.info(f"User {user.id} registered as {user.role.value}")
        if not user.verified:
            AdminAlertService.notify_user_pending(
                user.id, f"{user.first_name} {user.last_name}", user.role.value
            )

        return schemas.AuthResponse(
            access_token=AuthService._token_for(user),
            token_type="bearer",
            user=schemas.User.model_validate(user),
        )

    @staticmethod
    def login(db: Session, email: str, password: str) -> schemas.Token:
        """
        Exchange email and password for a bearer token.

        Blocked users can still obtain a token; every protected route
        rejects them through get_current_active_user.

        Raises:
            InvalidCredentialsException: Unknown email or wrong password
        """
        user = authenticate_user(db, email, password)
        if user is None:
            logger.info("Failed login attempt")
            raise InvalidCredentialsException()
        return schemas.Token(access_token=AuthService._token_for(user), token_type="bearer")
