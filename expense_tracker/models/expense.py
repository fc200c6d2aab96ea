from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from expense_tracker.models.enums import ExpenseStatus, RecurringFrequency


class ExpenseCreate(BaseModel):
    user_id: int
    team_id: Optional[int] = None
    category_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    amount: float = Field(gt=0)
    receipt_url: Optional[str] = None
    tags: List[str] = []
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None
    recurring_end_date: Optional[date] = None
    expense_date: date


class ExpenseUpdate(BaseModel):
    category_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[float] = Field(default=None, gt=0)
    receipt_url: Optional[str] = None
    tags: Optional[List[str]] = None
    expense_date: Optional[date] = None


class ExpenseApproval(BaseModel):
    expense_id: int
    status: ExpenseStatus
    approved_by: int

    @field_validator("status")
    @classmethod
    def check_decision(cls, value: ExpenseStatus) -> ExpenseStatus:
        if value == ExpenseStatus.PENDING:
            raise ValueError("status must be APPROVED or REJECTED")
        return value


class ExpenseFilter(BaseModel):
    user_id: Optional[int] = None
    team_id: Optional[int] = None
    category_id: Optional[int] = None
    status: Optional[ExpenseStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    tags: Optional[List[str]] = None
    search: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)


class Expense(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    team_id: Optional[int] = None
    category_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    amount: float
    receipt_url: Optional[str] = None
    tags: List[str] = []
    status: ExpenseStatus
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequency] = None
    recurring_end_date: Optional[date] = None
    expense_date: date
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ExpenseListResponse(BaseModel):
    expenses: List[Expense]
    total_count: int
    page: int
    limit: int
    total_pages: int


class RecurringRunResult(BaseModel):
    created: int
