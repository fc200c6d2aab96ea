import logging
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from expense_tracker.db import tables
from expense_tracker.models.enums import NotificationType
from expense_tracker.models.notification import Notification, NotificationCreate, UnreadCount
from expense_tracker.models.user import OperationResult
from expense_tracker.services._helpers import require, write_transaction

logger = logging.getLogger(__name__)

EXPENSE_REMINDER_MESSAGE = "Don't forget to submit your recent expenses to keep your records up to date."


def format_amount(value: float) -> str:
    """Render 80.0 as '80' and 80.5 as '80.5'."""
    value = float(value)
    return str(int(value)) if value.is_integer() else str(value)


def _insert(
    db: Session,
    user_id: int,
    notification_type: NotificationType,
    title: str,
    message: str,
    related_expense_id: Optional[int] = None,
    related_budget_id: Optional[int] = None,
) -> tables.Notification:
    row = tables.Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        related_expense_id=related_expense_id,
        related_budget_id=related_budget_id,
    )
    with write_transaction(db, f"{notification_type.value} notification"):
        db.add(row)
    return row


def create_notification(db: Session, notification: NotificationCreate) -> Notification:
    require(db, tables.User, notification.user_id, "User")
    if notification.related_expense_id:
        require(db, tables.Expense, notification.related_expense_id, "Expense")

    row = _insert(
        db,
        notification.user_id,
        notification.type,
        notification.title,
        notification.message,
        notification.related_expense_id or None,
    )
    return Notification.model_validate(row)


def get_notifications(db: Session, user_id: int) -> List[Notification]:
    require(db, tables.User, user_id, "User")
    rows = db.scalars(
        select(tables.Notification)
        .where(tables.Notification.user_id == user_id)
        .order_by(tables.Notification.created_at, tables.Notification.id)
    ).all()
    return [Notification.model_validate(row) for row in rows]


def mark_notification_as_read(db: Session, notification_id: int) -> OperationResult:
    row = require(db, tables.Notification, notification_id, "Notification")
    with write_transaction(db, "Mark notification as read"):
        row.is_read = True
    return OperationResult(success=True)


def mark_all_notifications_as_read(db: Session, user_id: int) -> OperationResult:
    require(db, tables.User, user_id, "User")
    with write_transaction(db, "Mark all notifications as read"):
        db.execute(
            update(tables.Notification)
            .where(tables.Notification.user_id == user_id, tables.Notification.is_read.is_(False))
            .values(is_read=True)
        )
    return OperationResult(success=True)


def delete_notification(db: Session, notification_id: int) -> OperationResult:
    row = require(db, tables.Notification, notification_id, "Notification")
    with write_transaction(db, "Delete notification"):
        db.delete(row)
    return OperationResult(success=True)


def get_unread_notification_count(db: Session, user_id: int) -> UnreadCount:
    require(db, tables.User, user_id, "User")
    count = db.scalar(
        select(func.count())
        .select_from(tables.Notification)
        .where(tables.Notification.user_id == user_id, tables.Notification.is_read.is_(False))
    )
    return UnreadCount(count=count or 0)


def budget_alert_message(percentage: float, budget_amount: float) -> str:
    return (
        f"You have used {format_amount(percentage)}% of your budget ({format_amount(budget_amount)}). "
        "Consider reviewing your spending."
    )


def has_unread(
    db: Session,
    user_id: int,
    notification_type: NotificationType,
    message: str,
    related_budget_id: Optional[int] = None,
) -> bool:
    query = select(tables.Notification.id).where(
        tables.Notification.user_id == user_id,
        tables.Notification.type == notification_type,
        tables.Notification.message == message,
        tables.Notification.is_read.is_(False),
    )
    if related_budget_id is not None:
        query = query.where(tables.Notification.related_budget_id == related_budget_id)
    existing = db.scalars(query).first()
    return existing is not None


def send_budget_alert(db: Session, user_id: int, budget_id: int, percentage: float) -> None:
    require(db, tables.User, user_id, "User")
    budget = require(db, tables.Budget, budget_id, "Budget")
    _insert(
        db,
        user_id,
        NotificationType.BUDGET_ALERT,
        "Budget Alert",
        budget_alert_message(percentage, float(budget.amount)),
        related_budget_id=budget_id,
    )


def send_expense_approval_notification(db: Session, expense_id: int, manager_id: int) -> None:
    require(db, tables.User, manager_id, "Manager")
    expense = require(db, tables.Expense, expense_id, "Expense")
    _insert(
        db,
        manager_id,
        NotificationType.EXPENSE_APPROVAL,
        "Expense Approval Required",
        f'An expense "{expense.title}" of ${format_amount(float(expense.amount))} requires your approval.',
        related_expense_id=expense_id,
    )


def send_expense_reminder_notification(db: Session, user_id: int) -> None:
    require(db, tables.User, user_id, "User")
    _insert(db, user_id, NotificationType.EXPENSE_REMINDER, "Expense Reminder", EXPENSE_REMINDER_MESSAGE)
