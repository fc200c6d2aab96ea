import logging

from sqlalchemy.orm import Session

from expense_tracker.core.config import settings
from expense_tracker.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from expense_tracker.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from expense_tracker.db import tables
from expense_tracker.models.user import LoginResponse, OperationResult, UserCreate, UserLogin, UserPublic
from expense_tracker.services._helpers import write_transaction
from expense_tracker.services.users import get_user_by_email

logger = logging.getLogger(__name__)

VERIFY_EMAIL_PURPOSE = "verify_email"
RESET_PASSWORD_PURPOSE = "reset_password"


def register_user(db: Session, user: UserCreate) -> UserPublic:
    email = user.email.lower()
    if get_user_by_email(db, email) is not None:
        raise ConflictError("User already exists")

    row = tables.User(
        email=email,
        password_hash=get_password_hash(user.password),
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )
    with write_transaction(db, "User registration"):
        db.add(row)
    logger.info(f"Registered user {row.id} ({email})")
    return UserPublic.model_validate(row)


def login_user(db: Session, login_data: UserLogin) -> LoginResponse:
    logger.info(f"Login attempt for email: {login_data.email}")
    user = get_user_by_email(db, login_data.email)

    if user is None:
        logger.warning(f"User not found: {login_data.email}")
        raise AuthenticationError("Invalid credentials")
    if not verify_password(login_data.password, user.password_hash):
        logger.warning(f"Invalid password for user: {login_data.email}")
        raise AuthenticationError("Invalid credentials")
    if not user.is_active:
        logger.warning(f"Login refused for deactivated user: {login_data.email}")
        raise AuthenticationError("Account is deactivated")

    access_token = create_access_token(data={"sub": user.id})
    return LoginResponse(user=UserPublic.model_validate(user), access_token=access_token)


def create_email_verification_token(user_id: int) -> str:
    return create_access_token(
        data={"sub": user_id, "purpose": VERIFY_EMAIL_PURPOSE},
        expires_minutes=settings.EMAIL_VERIFICATION_EXPIRE_MINUTES,
    )


def verify_email(db: Session, token: str) -> OperationResult:
    payload = decode_access_token(token)
    if payload.get("purpose") != VERIFY_EMAIL_PURPOSE:
        raise AuthenticationError("Token is not an email verification token")

    user = db.get(tables.User, int(payload["sub"]))
    if user is None:
        raise NotFoundError(f"User with id {payload['sub']} not found")

    with write_transaction(db, "Email verification"):
        user.is_email_verified = True
    return OperationResult(success=True)


def reset_password(db: Session, email: str) -> OperationResult:
    """
    Start a password reset. The answer is the same whether or not the
    address is registered so callers cannot probe for accounts.
    """
    user = get_user_by_email(db, email)
    if user is not None and user.is_active:
        token = create_access_token(
            data={"sub": user.id, "purpose": RESET_PASSWORD_PURPOSE},
            expires_minutes=settings.EMAIL_VERIFICATION_EXPIRE_MINUTES,
        )
        logger.info(f"Password reset requested for user {user.id}; token issued ({len(token)} chars)")
    else:
        logger.info(f"Password reset requested for unknown or inactive email: {email}")
    return OperationResult(success=True)
