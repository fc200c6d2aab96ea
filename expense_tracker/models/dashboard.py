from typing import List, Optional

from pydantic import BaseModel

from expense_tracker.models.expense import Expense


class CategoryBreakdownItem(BaseModel):
    category_name: str
    amount_spent: float
    percentage: float


class MonthlyTrendPoint(BaseModel):
    month: str  # YYYY-MM
    amount: float


class DashboardStats(BaseModel):
    total_expenses: int
    total_amount_spent: float
    budget_usage_percentage: float
    category_breakdown: List[CategoryBreakdownItem]
    monthly_trend: List[MonthlyTrendPoint]
    recent_expenses: List[Expense]


class SpendingTrends(BaseModel):
    trends: List[MonthlyTrendPoint]
    average_monthly: float
    month_over_month_change: Optional[float] = None  # percent, None when previous month is zero


class CategoryAnalyticsItem(BaseModel):
    category_id: Optional[int] = None
    category_name: str
    amount_spent: float
    expense_count: int
    average_amount: float
    percentage: float


class CategoryAnalytics(BaseModel):
    categories: List[CategoryAnalyticsItem]
    top_categories: List[CategoryAnalyticsItem]


class MemberBreakdownItem(BaseModel):
    user_id: int
    expense_count: int
    amount_spent: float


class TeamDashboardStats(BaseModel):
    team_id: int
    team_expenses: int
    total_amount: float
    pending_approvals: int
    member_breakdown: List[MemberBreakdownItem]
