from datetime import date

from expense_tracker.models.enums import RecurringFrequency
from expense_tracker.utils.recurrence import due_occurrences, occurrence


def test_monthly_steps_clamp_to_month_end():
    assert occurrence(date(2024, 1, 31), RecurringFrequency.MONTHLY, 1) == date(2024, 2, 29)
    assert occurrence(date(2023, 1, 31), RecurringFrequency.MONTHLY, 1) == date(2023, 2, 28)
    assert occurrence(date(2024, 11, 15), RecurringFrequency.QUARTERLY, 1) == date(2025, 2, 15)
    assert occurrence(date(2024, 2, 29), RecurringFrequency.YEARLY, 1) == date(2025, 2, 28)


def test_occurrences_do_not_drift():
    anchor = date(2024, 1, 31)
    assert occurrence(anchor, RecurringFrequency.MONTHLY, 2) == date(2024, 3, 31)
    assert occurrence(anchor, RecurringFrequency.QUARTERLY, 1) == date(2024, 4, 30)
    assert occurrence(anchor, RecurringFrequency.YEARLY, 1) == date(2025, 1, 31)
    assert occurrence(anchor, RecurringFrequency.WEEKLY, 1) == date(2024, 2, 7)
    assert occurrence(anchor, RecurringFrequency.DAILY, 1) == date(2024, 2, 1)


def test_due_occurrences_respect_today_and_end_date():
    anchor = date(2024, 1, 1)
    assert list(due_occurrences(anchor, RecurringFrequency.WEEKLY, date(2024, 1, 22))) == [
        date(2024, 1, 8),
        date(2024, 1, 15),
        date(2024, 1, 22),
    ]
    assert list(
        due_occurrences(anchor, RecurringFrequency.DAILY, date(2024, 12, 31), end_date=date(2024, 1, 3))
    ) == [date(2024, 1, 2), date(2024, 1, 3)]
    assert list(due_occurrences(anchor, RecurringFrequency.MONTHLY, date(2024, 1, 31))) == []
