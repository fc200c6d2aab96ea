from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.enums import ExpenseStatus
from expense_tracker.models.expense import (
    Expense,
    ExpenseApproval,
    ExpenseCreate,
    ExpenseFilter,
    ExpenseListResponse,
    ExpenseUpdate,
    RecurringRunResult,
)
from expense_tracker.models.user import OperationResult
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import expenses as expense_service

router = APIRouter()


class ExpenseDecision(BaseModel):
    status: ExpenseStatus


def expense_filter_params(
    user_id: Optional[int] = None,
    team_id: Optional[int] = None,
    category_id: Optional[int] = None,
    status: Optional[ExpenseStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    tags: Optional[List[str]] = Query(None),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> ExpenseFilter:
    return ExpenseFilter(
        user_id=user_id,
        team_id=team_id,
        category_id=category_id,
        status=status,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        tags=tags,
        search=search,
        page=page,
        limit=limit,
    )


@router.post("/", response_model=Expense, status_code=status.HTTP_201_CREATED)
def create_expense(
    expense: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return expense_service.create_expense(db, expense)


@router.get("/", response_model=ExpenseListResponse)
def list_expenses(
    expense_filter: ExpenseFilter = Depends(expense_filter_params),
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return expense_service.get_expenses(db, expense_filter)


@router.post("/filter", response_model=ExpenseListResponse)
def filter_expenses(
    expense_filter: ExpenseFilter,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return expense_service.get_expenses(db, expense_filter)


@router.get("/search", response_model=List[Expense])
def search_expenses(
    q: str = Query(..., min_length=1),
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Case-insensitive match on title or description; defaults to the caller's expenses."""
    return expense_service.search_expenses(db, q, user_id if user_id is not None else current_user_id)


@router.get("/recurring", response_model=List[Expense])
def list_recurring_expenses(
    user_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return expense_service.get_recurring_expenses(db, user_id if user_id is not None else current_user_id)


@router.post("/process-recurring", response_model=RecurringRunResult)
def process_recurring(db: Session = Depends(get_db), current_user_id: int = Depends(get_current_user_id)):
    return expense_service.process_recurring_expenses(db)


@router.get("/{expense_id}", response_model=Expense)
def get_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    expense = expense_service.get_expense_by_id(db, expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return expense


@router.put("/{expense_id}", response_model=Expense)
def update_expense(
    expense_id: int,
    expense_update: ExpenseUpdate,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    if not expense_update.model_dump(exclude_unset=True):
        raise HTTPException(status_code=400, detail="No fields to update")
    return expense_service.update_expense(db, expense_id, expense_update)


@router.delete("/{expense_id}", response_model=OperationResult)
def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    return expense_service.delete_expense(db, expense_id)


@router.post("/{expense_id}/approve", response_model=Expense)
def decide_expense(
    expense_id: int,
    decision: ExpenseDecision,
    db: Session = Depends(get_db),
    current_user_id: int = Depends(get_current_user_id),
):
    """Approve or reject a pending expense as the authenticated manager."""
    if decision.status == ExpenseStatus.PENDING:
        raise HTTPException(status_code=400, detail="status must be APPROVED or REJECTED")
    approval = ExpenseApproval(expense_id=expense_id, status=decision.status, approved_by=current_user_id)
    return expense_service.approve_expense(db, approval)
