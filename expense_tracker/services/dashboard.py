import logging
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from expense_tracker.core.exceptions import InvalidRequestError
from expense_tracker.db import tables
from expense_tracker.models.dashboard import (
    CategoryAnalytics,
    DashboardStats,
    MemberBreakdownItem,
    SpendingTrends,
    TeamDashboardStats,
)
from expense_tracker.models.enums import ExpenseStatus
from expense_tracker.models.expense import Expense
from expense_tracker.services._helpers import budget_analyzer, require
from expense_tracker.services.budgets import get_budgets
from expense_tracker.services.categories import category_names
from expense_tracker.utils.analyzer import sum_amounts

logger = logging.getLogger(__name__)


def user_expenses(db: Session, user_id: int) -> List[Expense]:
    rows = db.scalars(
        select(tables.Expense).where(tables.Expense.user_id == user_id).order_by(tables.Expense.id)
    ).all()
    return [Expense.model_validate(row) for row in rows]


def get_dashboard_stats(db: Session, user_id: int) -> DashboardStats:
    """Dashboard figures over all of a user's expenses, any status."""
    expenses = user_expenses(db, user_id)
    budgets = get_budgets(db, user_id)
    names = category_names(db, (exp.category_id for exp in expenses))
    return budget_analyzer.dashboard(expenses, budgets, names)


def get_spending_trends(db: Session, user_id: int, months: int = 12, today: Optional[date] = None) -> SpendingTrends:
    if months < 1:
        raise InvalidRequestError("months must be at least 1")
    return budget_analyzer.spending_trends(user_expenses(db, user_id), months, today or date.today())


def get_category_analytics(db: Session, user_id: int) -> CategoryAnalytics:
    expenses = user_expenses(db, user_id)
    names = category_names(db, (exp.category_id for exp in expenses))
    return budget_analyzer.category_analytics(expenses, names)


def get_team_dashboard_stats(db: Session, team_id: int) -> TeamDashboardStats:
    require(db, tables.Team, team_id, "Team")
    rows = db.scalars(
        select(tables.Expense).where(tables.Expense.team_id == team_id).order_by(tables.Expense.id)
    ).all()
    expenses = [Expense.model_validate(row) for row in rows]

    per_member: Dict[int, List[float]] = defaultdict(list)
    for exp in expenses:
        per_member[exp.user_id].append(exp.amount)

    return TeamDashboardStats(
        team_id=team_id,
        team_expenses=len(expenses),
        total_amount=sum_amounts(exp.amount for exp in expenses),
        pending_approvals=sum(1 for exp in expenses if exp.status == ExpenseStatus.PENDING),
        member_breakdown=[
            MemberBreakdownItem(user_id=member, expense_count=len(amounts), amount_spent=sum_amounts(amounts))
            for member, amounts in sorted(per_member.items())
        ],
    )
