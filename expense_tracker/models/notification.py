from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from expense_tracker.models.enums import NotificationType


class NotificationCreate(BaseModel):
    user_id: int
    type: NotificationType
    title: str
    message: str
    related_expense_id: Optional[int] = None


class Notification(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    is_read: bool
    related_expense_id: Optional[int] = None
    related_budget_id: Optional[int] = None
    created_at: datetime


class UnreadCount(BaseModel):
    count: int
