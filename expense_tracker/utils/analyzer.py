from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from dateutil.relativedelta import relativedelta

from expense_tracker.models.budget import (
    Budget,
    BudgetAlert,
    BudgetAnalytics,
    BudgetAnalyticsRequest,
    BudgetOverview,
    CategorySpend,
    SpendingTrendPoint,
)
from expense_tracker.models.dashboard import (
    CategoryAnalytics,
    CategoryAnalyticsItem,
    CategoryBreakdownItem,
    DashboardStats,
    MonthlyTrendPoint,
    SpendingTrends,
)
from expense_tracker.models.enums import ExpenseStatus
from expense_tracker.models.expense import Expense

REDUCE_SPENDING_ADVICE = "Consider reducing spending or increasing budget allocation"
ROOM_TO_SPEND_ADVICE = "You have room to increase spending within your budget"
UNCATEGORIZED = "Uncategorized"


def sum_amounts(amounts: Iterable[float]) -> float:
    """Add money amounts without accumulating binary floating point error."""
    return float(sum((Decimal(str(amount)) for amount in amounts), Decimal("0")))


def percentage(part: float, whole: float) -> float:
    if whole == 0:
        return 0.0
    return (part / whole) * 100


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def _category_sort_key(category_id: Optional[int]):
    return (category_id is None, category_id or 0)


class BudgetAnalyzer:
    """
    Budget and dashboard arithmetic over rows already fetched from the store.

    Every method is a pure function of its arguments, so the API services and
    the scheduled alert job derive identical numbers from identical rows.
    """

    def __init__(
        self,
        high_utilization: float = 90.0,
        low_utilization: float = 50.0,
        recent_limit: int = 5,
    ) -> None:
        self._high_utilization = high_utilization
        self._low_utilization = low_utilization
        self._recent_limit = recent_limit

    @staticmethod
    def approved(expenses: Iterable[Expense]) -> List[Expense]:
        return [exp for exp in expenses if exp.status == ExpenseStatus.APPROVED]

    @staticmethod
    def in_window(expenses: Iterable[Expense], start: date, end: date) -> List[Expense]:
        return [exp for exp in expenses if start <= exp.expense_date <= end]

    # Budget overview

    def overview(self, budgets: Sequence[Budget], expenses: Iterable[Expense]) -> BudgetOverview:
        """
        Totals across every budget and every approved expense of one user.
        Spend is all-time and is not matched against individual budget periods.
        """
        total_budget = sum_amounts(budget.amount for budget in budgets)
        total_spent = sum_amounts(exp.amount for exp in self.approved(expenses))
        return BudgetOverview(
            budgets=list(budgets),
            total_budget=total_budget,
            total_spent=total_spent,
            remaining=total_budget - total_spent,
            percentage_used=percentage(total_spent, total_budget),
        )

    # Alerts

    def spent_for_budget(self, budget: Budget, expenses: Iterable[Expense]) -> float:
        matched = self.in_window(self.approved(expenses), budget.start_date, budget.end_date)
        if budget.category_id is not None:
            matched = [exp for exp in matched if exp.category_id == budget.category_id]
        return sum_amounts(exp.amount for exp in matched)

    def budget_alerts(self, budgets: Sequence[Budget], expenses: Sequence[Expense]) -> List[BudgetAlert]:
        alerts: List[BudgetAlert] = []
        for budget in budgets:
            amount_spent = self.spent_for_budget(budget, expenses)
            usage = percentage(amount_spent, budget.amount)
            if usage >= budget.alert_threshold:
                alerts.append(
                    BudgetAlert(
                        budget_id=budget.id,
                        category_id=budget.category_id,
                        budget_amount=budget.amount,
                        amount_spent=amount_spent,
                        usage_percentage=usage,
                        alert_threshold=budget.alert_threshold,
                        period=budget.period,
                        start_date=budget.start_date,
                        end_date=budget.end_date,
                    )
                )
        return alerts

    # Analytics for a date window

    def recommendations(self, utilization: float) -> List[str]:
        advice: List[str] = []
        if utilization > self._high_utilization:
            advice.append(REDUCE_SPENDING_ADVICE)
        if utilization < self._low_utilization:
            advice.append(ROOM_TO_SPEND_ADVICE)
        return advice

    def analytics(
        self,
        request: BudgetAnalyticsRequest,
        budgets: Iterable[Budget],
        expenses: Iterable[Expense],
    ) -> BudgetAnalytics:
        matched_budgets = [
            budget
            for budget in budgets
            if budget.user_id == request.user_id
            and budget.period == request.period
            and budget.end_date >= request.start_date
            and budget.start_date <= request.end_date
        ]
        window = self.in_window(self.approved(expenses), request.start_date, request.end_date)

        by_category: Dict[Optional[int], List[float]] = defaultdict(list)
        for exp in window:
            by_category[exp.category_id].append(exp.amount)
        category_totals = {cat: sum_amounts(amounts) for cat, amounts in by_category.items()}

        total_budgeted = sum_amounts(budget.amount for budget in matched_budgets)
        total_spent = sum_amounts(category_totals.values())
        utilization = percentage(total_spent, total_budgeted)

        breakdown = [
            CategorySpend(
                category_id=category_id,
                amount_spent=category_totals[category_id],
                percentage=percentage(category_totals[category_id], total_spent),
            )
            for category_id in sorted(category_totals, key=_category_sort_key)
        ]

        # Single bucket keyed by the month the window starts in
        trend = [SpendingTrendPoint(period=month_key(request.start_date), amount=total_spent)]

        return BudgetAnalytics(
            budget_utilization=utilization,
            category_breakdown=breakdown,
            spending_trend=trend,
            recommendations=self.recommendations(utilization),
        )

    # Dashboard

    @staticmethod
    def monthly_totals(expenses: Iterable[Expense]) -> Dict[str, float]:
        buckets: Dict[str, List[float]] = defaultdict(list)
        for exp in expenses:
            buckets[month_key(exp.expense_date)].append(exp.amount)
        return {month: sum_amounts(amounts) for month, amounts in buckets.items()}

    def recent(self, expenses: Iterable[Expense]) -> List[Expense]:
        ordered = sorted(expenses, key=lambda exp: (exp.created_at, exp.id), reverse=True)
        return ordered[: self._recent_limit]

    def dashboard(
        self,
        expenses: Sequence[Expense],
        budgets: Sequence[Budget],
        category_names: Mapping[int, str],
    ) -> DashboardStats:
        """
        Dashboard figures over every expense of the user, whatever its status.
        This intentionally differs from overview(), which only counts approved spend.
        """
        total_amount = sum_amounts(exp.amount for exp in expenses)
        total_budget = sum_amounts(budget.amount for budget in budgets)

        per_category: Dict[int, List[float]] = defaultdict(list)
        for exp in expenses:
            if exp.category_id is not None and exp.category_id in category_names:
                per_category[exp.category_id].append(exp.amount)

        breakdown = []
        for category_id in sorted(per_category):
            spent = sum_amounts(per_category[category_id])
            if spent <= 0:
                continue
            breakdown.append(
                CategoryBreakdownItem(
                    category_name=category_names[category_id],
                    amount_spent=spent,
                    percentage=percentage(spent, total_amount),
                )
            )

        monthly = self.monthly_totals(expenses)
        trend = [MonthlyTrendPoint(month=month, amount=monthly[month]) for month in sorted(monthly)]

        return DashboardStats(
            total_expenses=len(expenses),
            total_amount_spent=total_amount,
            budget_usage_percentage=round(percentage(total_amount, total_budget), 2),
            category_breakdown=breakdown,
            monthly_trend=trend,
            recent_expenses=self.recent(expenses),
        )

    def spending_trends(self, expenses: Iterable[Expense], months: int, today: date) -> SpendingTrends:
        """Approved spend for each of the last `months` calendar months, oldest first, zero-filled."""
        monthly = self.monthly_totals(self.approved(expenses))
        first_of_month = today.replace(day=1)
        keys = [month_key(first_of_month - relativedelta(months=offset)) for offset in range(months - 1, -1, -1)]
        trends = [MonthlyTrendPoint(month=key, amount=monthly.get(key, 0.0)) for key in keys]

        average = sum_amounts(point.amount for point in trends) / months if months else 0.0
        change = None
        if len(trends) >= 2 and trends[-2].amount > 0:
            change = percentage(trends[-1].amount - trends[-2].amount, trends[-2].amount)
        return SpendingTrends(trends=trends, average_monthly=average, month_over_month_change=change)

    def category_analytics(
        self,
        expenses: Iterable[Expense],
        category_names: Mapping[int, str],
        top_n: int = 3,
    ) -> CategoryAnalytics:
        grouped: Dict[Optional[int], List[float]] = defaultdict(list)
        for exp in self.approved(expenses):
            grouped[exp.category_id].append(exp.amount)

        total = sum_amounts(amount for amounts in grouped.values() for amount in amounts)
        items = []
        for category_id, amounts in grouped.items():
            spent = sum_amounts(amounts)
            items.append(
                CategoryAnalyticsItem(
                    category_id=category_id,
                    category_name=category_names.get(category_id, UNCATEGORIZED)
                    if category_id is not None
                    else UNCATEGORIZED,
                    amount_spent=spent,
                    expense_count=len(amounts),
                    average_amount=spent / len(amounts),
                    percentage=percentage(spent, total),
                )
            )
        items.sort(key=lambda item: (-item.amount_spent, _category_sort_key(item.category_id)))
        return CategoryAnalytics(categories=items, top_categories=items[:top_n])
