import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from expense_tracker.core.exceptions import ConflictError
from expense_tracker.db import tables
from expense_tracker.models.user import OperationResult, UserPublic, UserUpdate
from expense_tracker.services._helpers import require, write_transaction

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[tables.User]:
    return db.scalars(select(tables.User).where(tables.User.email == email.lower())).first()


def get_users(db: Session) -> List[UserPublic]:
    rows = db.scalars(select(tables.User).order_by(tables.User.id)).all()
    return [UserPublic.model_validate(row) for row in rows]


def get_user_by_id(db: Session, user_id: int) -> Optional[UserPublic]:
    row = db.get(tables.User, user_id)
    return UserPublic.model_validate(row) if row else None


def get_user_profile(db: Session, user_id: int) -> Optional[UserPublic]:
    """Profile of an active account; deactivated users have no profile."""
    row = db.get(tables.User, user_id)
    if row is None or not row.is_active:
        return None
    return UserPublic.model_validate(row)


def update_user(db: Session, user_id: int, update: UserUpdate) -> UserPublic:
    user = require(db, tables.User, user_id, "User")
    changes = update.model_dump(exclude_unset=True)

    if "email" in changes and changes["email"] is not None:
        changes["email"] = changes["email"].lower()
        existing = get_user_by_email(db, changes["email"])
        if existing is not None and existing.id != user_id:
            raise ConflictError(f"Email {changes['email']} is already registered")

    with write_transaction(db, "User update"):
        for field, value in changes.items():
            setattr(user, field, value)
    return UserPublic.model_validate(user)


def delete_user(db: Session, user_id: int) -> OperationResult:
    """Soft delete: the account is deactivated and its history is kept."""
    user = require(db, tables.User, user_id, "User")
    with write_transaction(db, "User deactivation"):
        user.is_active = False
    logger.info(f"Deactivated user {user_id}")
    return OperationResult(success=True)
