"""
Budget CRUD plus the budget aggregations: overview, analytics for a
date window, and threshold alerts. Rows are read through SQLAlchemy and the
arithmetic is delegated to BudgetAnalyzer.
"""
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from expense_tracker.core.config import settings
from expense_tracker.core.exceptions import InvalidRequestError
from expense_tracker.db import tables
from expense_tracker.models.budget import (
    Budget,
    BudgetAlert,
    BudgetAnalytics,
    BudgetAnalyticsRequest,
    BudgetCreate,
    BudgetOverview,
    BudgetUpdate,
)
from expense_tracker.models.enums import ExpenseStatus
from expense_tracker.models.expense import Expense
from expense_tracker.models.user import OperationResult
from expense_tracker.services._helpers import budget_analyzer, require, write_transaction

logger = logging.getLogger(__name__)


def approved_expenses(
    db: Session,
    user_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Expense]:
    query = select(tables.Expense).where(
        tables.Expense.user_id == user_id,
        tables.Expense.status == ExpenseStatus.APPROVED,
    )
    if start_date is not None:
        query = query.where(tables.Expense.expense_date >= start_date)
    if end_date is not None:
        query = query.where(tables.Expense.expense_date <= end_date)
    rows = db.scalars(query.order_by(tables.Expense.id)).all()
    return [Expense.model_validate(row) for row in rows]


def create_budget(db: Session, budget: BudgetCreate) -> Budget:
    require(db, tables.User, budget.user_id, "User")
    if budget.category_id is not None:
        require(db, tables.Category, budget.category_id, "Category")

    threshold = budget.alert_threshold
    if threshold is None:
        threshold = settings.DEFAULT_ALERT_THRESHOLD

    row = tables.Budget(
        user_id=budget.user_id,
        category_id=budget.category_id,
        amount=budget.amount,
        period=budget.period,
        start_date=budget.start_date,
        end_date=budget.end_date,
        alert_threshold=threshold,
    )
    with write_transaction(db, "Budget creation"):
        db.add(row)
    db.refresh(row)
    return Budget.model_validate(row)


def get_budgets(db: Session, user_id: int) -> List[Budget]:
    rows = db.scalars(select(tables.Budget).where(tables.Budget.user_id == user_id).order_by(tables.Budget.id)).all()
    return [Budget.model_validate(row) for row in rows]


def get_budget_by_id(db: Session, budget_id: int) -> Optional[Budget]:
    row = db.get(tables.Budget, budget_id)
    return Budget.model_validate(row) if row else None


def update_budget(db: Session, budget_id: int, budget_update: BudgetUpdate) -> Budget:
    row = require(db, tables.Budget, budget_id, "Budget")
    changes = {field: value for field, value in budget_update.model_dump(exclude_unset=True).items() if value is not None}

    start_date = changes.get("start_date", row.start_date)
    end_date = changes.get("end_date", row.end_date)
    if start_date > end_date:
        raise InvalidRequestError("start_date must not be after end_date")

    with write_transaction(db, "Budget update"):
        for field, value in changes.items():
            setattr(row, field, value)
    db.refresh(row)
    return Budget.model_validate(row)


def delete_budget(db: Session, budget_id: int) -> OperationResult:
    row = require(db, tables.Budget, budget_id, "Budget")
    with write_transaction(db, "Budget deletion"):
        db.execute(
            update(tables.Notification)
            .where(tables.Notification.related_budget_id == budget_id)
            .values(related_budget_id=None)
        )
        db.delete(row)
    return OperationResult(success=True)


def get_budget_overview(db: Session, user_id: int) -> BudgetOverview:
    """Totals for a user. An unknown user yields a zeroed overview."""
    budgets = get_budgets(db, user_id)
    expenses = approved_expenses(db, user_id)
    return budget_analyzer.overview(budgets, expenses)


def get_budget_analytics(db: Session, request: BudgetAnalyticsRequest) -> BudgetAnalytics:
    if request.start_date > request.end_date:
        raise InvalidRequestError("start_date must not be after end_date")
    rows = db.scalars(
        select(tables.Budget)
        .where(
            tables.Budget.user_id == request.user_id,
            tables.Budget.period == request.period,
            tables.Budget.end_date >= request.start_date,
            tables.Budget.start_date <= request.end_date,
        )
        .order_by(tables.Budget.id)
    ).all()
    budgets = [Budget.model_validate(row) for row in rows]
    expenses = approved_expenses(db, request.user_id, request.start_date, request.end_date)
    return budget_analyzer.analytics(request, budgets, expenses)


def check_budget_alerts(db: Session, user_id: int) -> List[BudgetAlert]:
    """Alerts for every budget whose approved spend reached its threshold, in budget id order."""
    budgets = get_budgets(db, user_id)
    if not budgets:
        return []
    expenses = approved_expenses(
        db,
        user_id,
        min(budget.start_date for budget in budgets),
        max(budget.end_date for budget in budgets),
    )
    alerts = budget_analyzer.budget_alerts(budgets, expenses)
    if alerts:
        logger.info(f"User {user_id} has {len(alerts)} budget alert(s)")
    return alerts
