from datetime import date

import pytest

from expense_tracker.core.exceptions import InvalidRequestError, NotFoundError
from expense_tracker.models.budget import BudgetAnalyticsRequest, BudgetCreate, BudgetUpdate
from expense_tracker.models.enums import BudgetPeriod, ExpenseStatus
from expense_tracker.services import budgets as budget_service
from expense_tracker.services import notifications as notification_service


def test_overview_totals(db, make_user, make_category, make_budget, make_expense):
    user = make_user()
    food = make_category("Food")
    make_budget(user.id, 1000, category_id=food.id)
    make_budget(user.id, 500)
    make_expense(user.id, 300, category_id=food.id)

    overview = budget_service.get_budget_overview(db, user.id)
    assert len(overview.budgets) == 2
    assert overview.total_budget == 1500
    assert overview.total_spent == 300
    assert overview.remaining == 1200
    assert overview.percentage_used == pytest.approx(20)


def test_overview_ignores_pending_and_rejected(db, make_user, make_budget, make_expense):
    user = make_user()
    make_budget(user.id, 1000)
    make_expense(user.id, 200, status=ExpenseStatus.PENDING)
    make_expense(user.id, 300, status=ExpenseStatus.REJECTED)

    overview = budget_service.get_budget_overview(db, user.id)
    assert overview.total_spent == 0
    assert overview.percentage_used == 0


def test_overview_for_unknown_user_is_zeroed(db):
    overview = budget_service.get_budget_overview(db, 999)
    assert overview.budgets == []
    assert overview.total_budget == 0
    assert overview.total_spent == 0
    assert overview.remaining == 0
    assert overview.percentage_used == 0


def test_category_alert_over_threshold(db, make_user, make_category, make_budget, make_expense):
    user = make_user()
    food = make_category("Food")
    budget = make_budget(user.id, 1000, category_id=food.id, alert_threshold=80)
    make_expense(user.id, 850, category_id=food.id)

    alerts = budget_service.check_budget_alerts(db, user.id)
    assert len(alerts) == 1
    assert alerts[0].budget_id == budget.id
    assert alerts[0].category_id == food.id
    assert alerts[0].amount_spent == 850
    assert alerts[0].usage_percentage == pytest.approx(85)


def test_no_alert_under_threshold(db, make_user, make_category, make_budget, make_expense):
    user = make_user()
    food = make_category("Food")
    make_budget(user.id, 1000, category_id=food.id, alert_threshold=80)
    make_expense(user.id, 500, category_id=food.id)

    assert budget_service.check_budget_alerts(db, user.id) == []


def test_pending_and_rejected_expenses_raise_no_alert(db, make_user, make_category, make_budget, make_expense):
    user = make_user()
    food = make_category("Food")
    make_budget(user.id, 1000, category_id=food.id, alert_threshold=80)
    make_expense(user.id, 850, category_id=food.id, status=ExpenseStatus.PENDING)
    make_expense(user.id, 850, category_id=food.id, status=ExpenseStatus.REJECTED)

    assert budget_service.check_budget_alerts(db, user.id) == []


def test_overall_budget_alert_counts_any_category(db, make_user, make_category, make_budget, make_expense):
    user = make_user()
    rent = make_category("Rent")
    make_budget(user.id, 1000, alert_threshold=75)
    make_expense(user.id, 800, category_id=rent.id)

    alerts = budget_service.check_budget_alerts(db, user.id)
    assert len(alerts) == 1
    assert alerts[0].category_id is None
    assert alerts[0].usage_percentage == pytest.approx(80)


def test_alert_at_exact_threshold(db, make_user, make_budget, make_expense):
    user = make_user()
    make_budget(user.id, 1000, alert_threshold=50)
    make_expense(user.id, 500)

    alerts = budget_service.check_budget_alerts(db, user.id)
    assert [alert.usage_percentage for alert in alerts] == [50.0]


def test_alerts_skip_expenses_outside_budget_window(db, make_user, make_budget, make_expense):
    user = make_user()
    make_budget(user.id, 100)
    make_expense(user.id, 500, expense_date=date(2024, 2, 1))

    assert budget_service.check_budget_alerts(db, user.id) == []


def test_alerts_are_in_budget_order_and_repeatable(db, make_user, make_budget, make_expense):
    user = make_user()
    first = make_budget(user.id, 100)
    second = make_budget(user.id, 200, start_date=date(2024, 1, 10), end_date=date(2024, 1, 20))
    make_expense(user.id, 180, expense_date=date(2024, 1, 15))

    alerts = budget_service.check_budget_alerts(db, user.id)
    assert [alert.budget_id for alert in alerts] == [first.id, second.id]
    assert budget_service.check_budget_alerts(db, user.id) == alerts


def test_analytics_filters_period_and_window(db, make_user, make_category, make_budget, make_expense):
    user = make_user()
    food = make_category("Food")
    make_budget(user.id, 1000, category_id=food.id)
    make_budget(user.id, 12000, period=BudgetPeriod.YEARLY, start_date=date(2024, 1, 1), end_date=date(2024, 12, 31))
    make_budget(user.id, 700, start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))
    make_expense(user.id, 200, category_id=food.id)
    make_expense(user.id, 300, expense_date=date(2024, 1, 20))
    make_expense(user.id, 900, expense_date=date(2024, 3, 2))

    analytics = budget_service.get_budget_analytics(
        db,
        BudgetAnalyticsRequest(
            user_id=user.id, period=BudgetPeriod.MONTHLY, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        ),
    )
    assert analytics.budget_utilization == pytest.approx(50)
    assert [(item.category_id, item.amount_spent) for item in analytics.category_breakdown] == [
        (food.id, 200),
        (None, 300),
    ]
    assert analytics.category_breakdown[0].percentage == pytest.approx(40)
    assert [(point.period, point.amount) for point in analytics.spending_trend] == [("2024-01", 500)]
    assert analytics.recommendations == []


def test_analytics_rejects_inverted_window(db, make_user):
    user = make_user()
    request = BudgetAnalyticsRequest(
        user_id=user.id, period=BudgetPeriod.MONTHLY, start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)
    )
    with pytest.raises(InvalidRequestError, match="start_date must not be after end_date"):
        budget_service.get_budget_analytics(db, request)


def test_create_budget_uses_default_threshold(db, make_user):
    user = make_user()
    budget = budget_service.create_budget(
        db,
        BudgetCreate(
            user_id=user.id,
            amount=250,
            period=BudgetPeriod.MONTHLY,
            start_date=date(2024, 5, 1),
            end_date=date(2024, 5, 31),
        ),
    )
    assert budget.alert_threshold == 80
    assert budget.amount == 250


def test_create_budget_for_unknown_user(db):
    with pytest.raises(NotFoundError, match="User with id 42 not found"):
        budget_service.create_budget(
            db,
            BudgetCreate(
                user_id=42,
                amount=10,
                period=BudgetPeriod.MONTHLY,
                start_date=date(2024, 5, 1),
                end_date=date(2024, 5, 31),
            ),
        )


def test_budget_create_rejects_inverted_dates():
    with pytest.raises(ValueError):
        BudgetCreate(
            user_id=1,
            amount=10,
            period=BudgetPeriod.MONTHLY,
            start_date=date(2024, 5, 31),
            end_date=date(2024, 5, 1),
        )


def test_update_budget_checks_merged_dates(db, make_user, make_budget):
    user = make_user()
    budget = make_budget(user.id, 100)

    updated = budget_service.update_budget(db, budget.id, BudgetUpdate(amount=150, alert_threshold=90))
    assert updated.amount == 150
    assert updated.alert_threshold == 90

    with pytest.raises(InvalidRequestError):
        budget_service.update_budget(db, budget.id, BudgetUpdate(start_date=date(2024, 2, 1)))


def test_delete_budget(db, make_user, make_budget):
    user = make_user()
    budget = make_budget(user.id, 100)

    assert budget_service.delete_budget(db, budget.id).success is True
    assert budget_service.get_budget_by_id(db, budget.id) is None
    with pytest.raises(NotFoundError):
        budget_service.delete_budget(db, budget.id)


def test_delete_budget_keeps_its_alerts(db, make_user, make_budget):
    user = make_user()
    budget = make_budget(user.id, 100)
    notification_service.send_budget_alert(db, user.id, budget.id, 90)

    budget_service.delete_budget(db, budget.id)
    notes = notification_service.get_notifications(db, user.id)
    assert len(notes) == 1
    assert notes[0].related_budget_id is None
