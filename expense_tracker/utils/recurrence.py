from datetime import date
from typing import Iterator, Optional

from dateutil.relativedelta import relativedelta

from expense_tracker.models.enums import RecurringFrequency

STEPS = {
    RecurringFrequency.DAILY: relativedelta(days=1),
    RecurringFrequency.WEEKLY: relativedelta(weeks=1),
    RecurringFrequency.MONTHLY: relativedelta(months=1),
    RecurringFrequency.QUARTERLY: relativedelta(months=3),
    RecurringFrequency.YEARLY: relativedelta(years=1),
}


def occurrence(anchor: date, frequency: RecurringFrequency, n: int) -> date:
    """The n-th repetition after anchor, always computed from the anchor to avoid drift."""
    # relativedelta clamps to the last day of a shorter month
    return anchor + STEPS[frequency] * n


def due_occurrences(
    anchor: date,
    frequency: RecurringFrequency,
    today: date,
    end_date: Optional[date] = None,
) -> Iterator[date]:
    limit = today if end_date is None else min(today, end_date)
    n = 1
    current = occurrence(anchor, frequency, n)
    while current <= limit:
        yield current
        n += 1
        current = occurrence(anchor, frequency, n)
