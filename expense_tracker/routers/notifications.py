"""
Notifications Router
Stored notifications: budget alerts, approval requests and reminders
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.notification import Notification, NotificationCreate, UnreadCount
from expense_tracker.models.user import OperationResult
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import notifications as notification_service

router = APIRouter()


@router.get("/", response_model=List[Notification])
def list_notifications(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """All notifications of the current user, oldest first."""
    return notification_service.get_notifications(db, user_id)


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return notification_service.get_unread_notification_count(db, user_id)


@router.post("/", response_model=Notification, status_code=status.HTTP_201_CREATED)
def create_notification(
    notification: NotificationCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return notification_service.create_notification(db, notification)


@router.post("/read-all", response_model=OperationResult)
def mark_all_read(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return notification_service.mark_all_notifications_as_read(db, user_id)


@router.post("/reminder", response_model=OperationResult)
def send_reminder(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    notification_service.send_expense_reminder_notification(db, user_id)
    return OperationResult(success=True)


@router.post("/{notification_id}/read", response_model=OperationResult)
def mark_read(notification_id: int, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return notification_service.mark_notification_as_read(db, notification_id)


@router.delete("/{notification_id}", response_model=OperationResult)
def delete_notification(
    notification_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return notification_service.delete_notification(db, notification_id)
