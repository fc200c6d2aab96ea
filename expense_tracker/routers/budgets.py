from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.budget import (
    Budget,
    BudgetAlert,
    BudgetAnalytics,
    BudgetAnalyticsRequest,
    BudgetCreate,
    BudgetOverview,
    BudgetUpdate,
)
from expense_tracker.models.enums import BudgetPeriod
from expense_tracker.models.user import OperationResult
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import budgets as budget_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.post("/", response_model=Budget, status_code=status.HTTP_201_CREATED)
def create_budget(budget: BudgetCreate, db: Session = Depends(get_db)):
    return budget_service.create_budget(db, budget)


@router.get("/", response_model=List[Budget])
def list_budgets(user_id: int, db: Session = Depends(get_db)):
    return budget_service.get_budgets(db, user_id)


@router.get("/overview/{user_id}", response_model=BudgetOverview)
def budget_overview(user_id: int, db: Session = Depends(get_db)):
    """
    Totals across all of a user's budgets. Only APPROVED expenses count as spent.
    """
    return budget_service.get_budget_overview(db, user_id)


@router.get("/analytics", response_model=BudgetAnalytics)
def budget_analytics(
    user_id: int,
    period: BudgetPeriod,
    start_date: date,
    end_date: date,
    db: Session = Depends(get_db),
):
    """
    Utilization, category breakdown, trend and recommendations for the
    budgets of one period overlapping [start_date, end_date].
    """
    request = BudgetAnalyticsRequest(user_id=user_id, period=period, start_date=start_date, end_date=end_date)
    return budget_service.get_budget_analytics(db, request)


@router.get("/alerts/{user_id}", response_model=List[BudgetAlert])
def budget_alerts(user_id: int, db: Session = Depends(get_db)):
    return budget_service.check_budget_alerts(db, user_id)


@router.get("/{budget_id}", response_model=Budget)
def get_budget(budget_id: int, db: Session = Depends(get_db)):
    budget = budget_service.get_budget_by_id(db, budget_id)
    if not budget:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found")
    return budget


@router.put("/{budget_id}", response_model=Budget)
def update_budget(budget_id: int, budget_update: BudgetUpdate, db: Session = Depends(get_db)):
    return budget_service.update_budget(db, budget_id, budget_update)


@router.delete("/{budget_id}", response_model=OperationResult)
def delete_budget(budget_id: int, db: Session = Depends(get_db)):
    return budget_service.delete_budget(db, budget_id)
