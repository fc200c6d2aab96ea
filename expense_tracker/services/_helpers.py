"""Shared lookups used by the service modules."""

import logging
from contextlib import contextmanager
from typing import Iterator, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from expense_tracker.core.config import settings
from expense_tracker.core.exceptions import NotFoundError
from expense_tracker.db.tables import Base
from expense_tracker.utils.analyzer import BudgetAnalyzer

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)

budget_analyzer = BudgetAnalyzer(
    high_utilization=settings.HIGH_UTILIZATION_PERCENT,
    low_utilization=settings.LOW_UTILIZATION_PERCENT,
    recent_limit=settings.RECENT_EXPENSES_LIMIT,
)


def require(db: Session, table: Type[T], row_id: int, label: str) -> T:
    """Fetch a row by primary key or raise NotFoundError naming the entity."""
    row = db.get(table, row_id)
    if row is None:
        raise NotFoundError(f"{label} with id {row_id} not found")
    return row


@contextmanager
def write_transaction(db: Session, operation: str) -> Iterator[Session]:
    """Commit on success; on a storage error roll back, log and re-raise unchanged."""
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{operation} failed: {e}")
        raise
    except Exception:
        db.rollback()
        raise
