import logging
import math
from datetime import date
from typing import List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from expense_tracker.core.exceptions import ConflictError, PermissionDeniedError
from expense_tracker.db import tables
from expense_tracker.models.enums import ExpenseStatus, UserRole
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
from expense_tracker.services._helpers import require, write_transaction
from expense_tracker.services.notifications import send_expense_approval_notification
from expense_tracker.utils.recurrence import due_occurrences

logger = logging.getLogger(__name__)

APPROVER_ROLES = {UserRole.ADMIN, UserRole.MANAGER}
# Fields that cannot be cleared once set
REQUIRED_FIELDS = {"title", "amount", "expense_date", "tags"}


def _newest_first():
    return (tables.Expense.expense_date.desc(), tables.Expense.id.desc())


def _text_match(text: str):
    pattern = f"%{text}%"
    return or_(tables.Expense.title.ilike(pattern), tables.Expense.description.ilike(pattern))


def create_expense(db: Session, expense: ExpenseCreate) -> Expense:
    require(db, tables.User, expense.user_id, "User")
    if expense.category_id is not None:
        require(db, tables.Category, expense.category_id, "Category")
    team = None
    if expense.team_id is not None:
        team = require(db, tables.Team, expense.team_id, "Team")

    row = tables.Expense(**expense.model_dump(), status=ExpenseStatus.PENDING)
    with write_transaction(db, "Expense creation"):
        db.add(row)
    db.refresh(row)

    if team is not None and team.manager_id != expense.user_id:
        send_expense_approval_notification(db, row.id, team.manager_id)
    return Expense.model_validate(row)


def get_expenses(db: Session, expense_filter: ExpenseFilter) -> ExpenseListResponse:
    conditions = []
    if expense_filter.user_id is not None:
        conditions.append(tables.Expense.user_id == expense_filter.user_id)
    if expense_filter.team_id is not None:
        conditions.append(tables.Expense.team_id == expense_filter.team_id)
    if expense_filter.category_id is not None:
        conditions.append(tables.Expense.category_id == expense_filter.category_id)
    if expense_filter.status is not None:
        conditions.append(tables.Expense.status == expense_filter.status)
    if expense_filter.start_date is not None:
        conditions.append(tables.Expense.expense_date >= expense_filter.start_date)
    if expense_filter.end_date is not None:
        conditions.append(tables.Expense.expense_date <= expense_filter.end_date)
    if expense_filter.min_amount is not None:
        conditions.append(tables.Expense.amount >= expense_filter.min_amount)
    if expense_filter.max_amount is not None:
        conditions.append(tables.Expense.amount <= expense_filter.max_amount)
    if expense_filter.search:
        conditions.append(_text_match(expense_filter.search))

    page, limit = expense_filter.page, expense_filter.limit
    offset = (page - 1) * limit
    query = select(tables.Expense).where(*conditions).order_by(*_newest_first())

    if expense_filter.tags:
        # JSON containment is not portable across backends, so tags are matched in Python
        wanted = set(expense_filter.tags)
        rows = [row for row in db.scalars(query).all() if wanted.issubset(row.tags or [])]
        total_count = len(rows)
        rows = rows[offset : offset + limit]
    else:
        total_count = db.scalar(select(func.count()).select_from(tables.Expense).where(*conditions)) or 0
        rows = db.scalars(query.offset(offset).limit(limit)).all()

    return ExpenseListResponse(
        expenses=[Expense.model_validate(row) for row in rows],
        total_count=total_count,
        page=page,
        limit=limit,
        total_pages=math.ceil(total_count / limit),
    )


def get_expense_by_id(db: Session, expense_id: int) -> Optional[Expense]:
    row = db.get(tables.Expense, expense_id)
    return Expense.model_validate(row) if row else None


def update_expense(db: Session, expense_id: int, expense_update: ExpenseUpdate) -> Expense:
    row = require(db, tables.Expense, expense_id, "Expense")
    changes = expense_update.model_dump(exclude_unset=True)
    if changes.get("category_id") is not None:
        require(db, tables.Category, changes["category_id"], "Category")

    with write_transaction(db, "Expense update"):
        for field, value in changes.items():
            if field in REQUIRED_FIELDS and value is None:
                continue
            setattr(row, field, value)
    db.refresh(row)
    return Expense.model_validate(row)


def delete_expense(db: Session, expense_id: int) -> OperationResult:
    row = require(db, tables.Expense, expense_id, "Expense")
    with write_transaction(db, "Expense deletion"):
        db.execute(
            update(tables.Notification)
            .where(tables.Notification.related_expense_id == expense_id)
            .values(related_expense_id=None)
        )
        db.delete(row)
    return OperationResult(success=True)


def approve_expense(db: Session, approval: ExpenseApproval) -> Expense:
    """Record a manager's decision on a pending expense."""
    row = require(db, tables.Expense, approval.expense_id, "Expense")
    approver = require(db, tables.User, approval.approved_by, "Approver")
    if approver.role not in APPROVER_ROLES:
        raise PermissionDeniedError("Only managers and admins can approve expenses")
    if row.status != ExpenseStatus.PENDING:
        raise ConflictError(f"Expense {row.id} has already been {row.status.value.lower()}")

    with write_transaction(db, "Expense approval"):
        row.status = approval.status
        row.approved_by = approver.id
        row.approved_at = tables.utcnow()
    logger.info(f"Expense {row.id} {approval.status.value.lower()} by user {approver.id}")
    db.refresh(row)
    return Expense.model_validate(row)


def search_expenses(db: Session, query: str, user_id: int) -> List[Expense]:
    rows = db.scalars(
        select(tables.Expense)
        .where(tables.Expense.user_id == user_id, _text_match(query))
        .order_by(*_newest_first())
    ).all()
    return [Expense.model_validate(row) for row in rows]


def get_recurring_expenses(db: Session, user_id: int) -> List[Expense]:
    rows = db.scalars(
        select(tables.Expense)
        .where(tables.Expense.user_id == user_id, tables.Expense.is_recurring.is_(True))
        .order_by(tables.Expense.expense_date, tables.Expense.id)
    ).all()
    return [Expense.model_validate(row) for row in rows]


def _occurrence_exists(db: Session, template: tables.Expense, expense_date: date) -> bool:
    category_match = (
        tables.Expense.category_id.is_(None)
        if template.category_id is None
        else tables.Expense.category_id == template.category_id
    )
    found = db.scalars(
        select(tables.Expense.id).where(
            tables.Expense.user_id == template.user_id,
            tables.Expense.title == template.title,
            category_match,
            tables.Expense.expense_date == expense_date,
            tables.Expense.is_recurring.is_(False),
        )
    ).first()
    return found is not None


def process_recurring_expenses(db: Session, today: Optional[date] = None) -> RecurringRunResult:
    """
    Materialise every due occurrence of each recurring expense as a
    pending, non-recurring copy. Occurrences created earlier are skipped,
    so the job can run any number of times a day.
    """
    today = today or date.today()
    templates = db.scalars(
        select(tables.Expense)
        .where(tables.Expense.is_recurring.is_(True), tables.Expense.recurring_frequency.is_not(None))
        .order_by(tables.Expense.id)
    ).all()

    created = 0
    with write_transaction(db, "Recurring expense processing"):
        for template in templates:
            for due in due_occurrences(
                template.expense_date, template.recurring_frequency, today, template.recurring_end_date
            ):
                if _occurrence_exists(db, template, due):
                    continue
                db.add(
                    tables.Expense(
                        user_id=template.user_id,
                        team_id=template.team_id,
                        category_id=template.category_id,
                        title=template.title,
                        description=template.description,
                        amount=template.amount,
                        tags=list(template.tags or []),
                        status=ExpenseStatus.PENDING,
                        is_recurring=False,
                        expense_date=due,
                    )
                )
                db.flush()
                created += 1
    logger.info(f"Recurring expense processing created {created} expense(s)")
    return RecurringRunResult(created=created)
