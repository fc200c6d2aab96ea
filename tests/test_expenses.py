from datetime import date

import pytest

from expense_tracker.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from expense_tracker.db import tables
from expense_tracker.models.enums import ExpenseStatus, NotificationType, RecurringFrequency, UserRole
from expense_tracker.models.expense import ExpenseApproval, ExpenseCreate, ExpenseFilter, ExpenseUpdate
from expense_tracker.services import expenses as expense_service
from expense_tracker.services.notifications import get_notifications


def test_create_expense_starts_pending(db, make_user, make_category):
    user = make_user()
    food = make_category("Food")
    expense = expense_service.create_expense(
        db,
        ExpenseCreate(
            user_id=user.id,
            category_id=food.id,
            title="Lunch",
            amount=12.5,
            tags=["client"],
            expense_date=date(2024, 3, 1),
        ),
    )
    assert expense.status == ExpenseStatus.PENDING
    assert expense.amount == 12.5
    assert expense.tags == ["client"]


def test_create_team_expense_notifies_manager(db, make_user):
    manager = make_user(role=UserRole.MANAGER)
    member = make_user()
    team = tables.Team(name="Sales", manager_id=manager.id)
    db.add(team)
    db.commit()

    expense = expense_service.create_expense(
        db,
        ExpenseCreate(user_id=member.id, team_id=team.id, title="Taxi", amount=30, expense_date=date(2024, 3, 2)),
    )
    notifications = get_notifications(db, manager.id)
    assert len(notifications) == 1
    assert notifications[0].type == NotificationType.EXPENSE_APPROVAL
    assert notifications[0].related_expense_id == expense.id
    assert notifications[0].message == 'An expense "Taxi" of $30 requires your approval.'


def test_create_expense_unknown_category(db, make_user):
    user = make_user()
    with pytest.raises(NotFoundError, match="Category with id 77 not found"):
        expense_service.create_expense(
            db,
            ExpenseCreate(user_id=user.id, category_id=77, title="x", amount=1, expense_date=date(2024, 1, 1)),
        )


def test_filter_and_paginate(db, make_user, make_expense):
    user = make_user()
    other = make_user()
    for day in range(1, 6):
        make_expense(user.id, day * 10, expense_date=date(2024, 1, day), title=f"Coffee {day}")
    make_expense(other.id, 100)

    page = expense_service.get_expenses(db, ExpenseFilter(user_id=user.id, page=2, limit=2))
    assert page.total_count == 5
    assert page.total_pages == 3
    assert [exp.expense_date.day for exp in page.expenses] == [3, 2]

    ranged = expense_service.get_expenses(db, ExpenseFilter(user_id=user.id, min_amount=20, max_amount=40))
    assert sorted(exp.amount for exp in ranged.expenses) == [20, 30, 40]


def test_filter_by_tags_and_text(db, make_user, make_expense):
    user = make_user()
    make_expense(user.id, 10, tags=["travel", "client"], title="Train ticket")
    make_expense(user.id, 20, tags=["travel"], title="Hotel", description="Client visit")
    make_expense(user.id, 30, title="Books")

    tagged = expense_service.get_expenses(db, ExpenseFilter(user_id=user.id, tags=["travel", "client"]))
    assert [exp.title for exp in tagged.expenses] == ["Train ticket"]
    assert tagged.total_count == 1

    found = expense_service.search_expenses(db, "client", user.id)
    assert [exp.title for exp in found] == ["Hotel"]


def test_empty_filter_has_zero_pages(db):
    result = expense_service.get_expenses(db, ExpenseFilter(user_id=1))
    assert result.total_count == 0
    assert result.total_pages == 0
    assert result.expenses == []


def test_update_expense_keeps_required_fields(db, make_user, make_expense):
    user = make_user()
    row = make_expense(user.id, 10, title="Old")

    updated = expense_service.update_expense(db, row.id, ExpenseUpdate(title=None, amount=15, description="New"))
    assert updated.title == "Old"
    assert updated.amount == 15
    assert updated.description == "New"


def test_approve_expense(db, make_user, make_expense):
    user = make_user()
    manager = make_user(role=UserRole.MANAGER)
    row = make_expense(user.id, 10, status=ExpenseStatus.PENDING)

    approved = expense_service.approve_expense(
        db, ExpenseApproval(expense_id=row.id, status=ExpenseStatus.APPROVED, approved_by=manager.id)
    )
    assert approved.status == ExpenseStatus.APPROVED
    assert approved.approved_by == manager.id
    assert approved.approved_at is not None

    with pytest.raises(ConflictError, match="already been approved"):
        expense_service.approve_expense(
            db, ExpenseApproval(expense_id=row.id, status=ExpenseStatus.REJECTED, approved_by=manager.id)
        )


def test_regular_user_cannot_approve(db, make_user, make_expense):
    user = make_user()
    row = make_expense(user.id, 10, status=ExpenseStatus.PENDING)
    with pytest.raises(PermissionDeniedError):
        expense_service.approve_expense(
            db, ExpenseApproval(expense_id=row.id, status=ExpenseStatus.APPROVED, approved_by=user.id)
        )


def test_approval_cannot_set_pending():
    with pytest.raises(ValueError):
        ExpenseApproval(expense_id=1, status=ExpenseStatus.PENDING, approved_by=1)


def test_delete_expense_detaches_notifications(db, make_user, make_expense):
    user = make_user()
    row = make_expense(user.id, 10)
    note = tables.Notification(
        user_id=user.id,
        type=NotificationType.EXPENSE_APPROVAL,
        title="t",
        message="m",
        related_expense_id=row.id,
    )
    db.add(note)
    db.commit()

    assert expense_service.delete_expense(db, row.id).success is True
    assert expense_service.get_expense_by_id(db, row.id) is None
    db.refresh(note)
    assert note.related_expense_id is None


def test_process_recurring_expenses_is_idempotent(db, make_user, make_expense):
    user = make_user()
    template = make_expense(user.id, 50, title="Gym", expense_date=date(2024, 1, 31))
    template.is_recurring = True
    template.recurring_frequency = RecurringFrequency.MONTHLY
    db.commit()

    result = expense_service.process_recurring_expenses(db, today=date(2024, 4, 30))
    assert result.created == 3
    created = db.query(tables.Expense).filter(tables.Expense.is_recurring.is_(False)).order_by(tables.Expense.expense_date)
    assert [row.expense_date for row in created] == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]
    assert all(row.status == ExpenseStatus.PENDING for row in created)

    again = expense_service.process_recurring_expenses(db, today=date(2024, 4, 30))
    assert again.created == 0


def test_recurring_expenses_listed(db, make_user, make_expense):
    user = make_user()
    template = make_expense(user.id, 50, title="Rent")
    template.is_recurring = True
    template.recurring_frequency = RecurringFrequency.MONTHLY
    db.commit()
    make_expense(user.id, 5, title="Snack")

    assert [exp.title for exp in expense_service.get_recurring_expenses(db, user.id)] == ["Rent"]
