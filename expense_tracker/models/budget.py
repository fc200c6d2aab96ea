from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from expense_tracker.models.enums import BudgetPeriod


class BudgetCreate(BaseModel):
    user_id: int
    category_id: Optional[int] = None  # None means an overall budget
    amount: float = Field(gt=0)
    period: BudgetPeriod
    start_date: date
    end_date: date
    alert_threshold: Optional[float] = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class BudgetUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, gt=0)
    alert_threshold: Optional[float] = Field(default=None, ge=0, le=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class Budget(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    category_id: Optional[int] = None
    amount: float
    period: BudgetPeriod
    start_date: date
    end_date: date
    alert_threshold: float
    created_at: datetime
    updated_at: datetime


class BudgetOverview(BaseModel):
    budgets: List[Budget] = []
    total_budget: float = 0.0
    total_spent: float = 0.0
    remaining: float = 0.0
    percentage_used: float = 0.0


class BudgetAnalyticsRequest(BaseModel):
    user_id: int
    period: BudgetPeriod
    start_date: date
    end_date: date


class CategorySpend(BaseModel):
    category_id: Optional[int] = None
    amount_spent: float
    percentage: float


class SpendingTrendPoint(BaseModel):
    period: str  # YYYY-MM
    amount: float


class BudgetAnalytics(BaseModel):
    budget_utilization: float
    category_breakdown: List[CategorySpend]
    spending_trend: List[SpendingTrendPoint]
    recommendations: List[str]


class BudgetAlert(BaseModel):
    budget_id: int
    category_id: Optional[int] = None
    budget_amount: float
    amount_spent: float
    usage_percentage: float
    alert_threshold: float
    period: BudgetPeriod
    start_date: date
    end_date: date
