import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from expense_tracker.core.exceptions import ConflictError
from expense_tracker.db import tables
from expense_tracker.models.category import Category, CategoryCreate, CategoryUpdate
from expense_tracker.models.user import OperationResult
from expense_tracker.services._helpers import require, write_transaction

logger = logging.getLogger(__name__)


def _newest_first():
    return (tables.Category.created_at.desc(), tables.Category.id.desc())


def create_category(db: Session, category: CategoryCreate) -> Category:
    if category.user_id is not None:
        require(db, tables.User, category.user_id, "User")

    row = tables.Category(
        name=category.name,
        description=category.description,
        color=category.color,
        icon=category.icon,
        user_id=category.user_id,
    )
    with write_transaction(db, "Category creation"):
        db.add(row)
    return Category.model_validate(row)


def get_categories(db: Session, user_id: Optional[int] = None) -> List[Category]:
    """Global categories, plus the user's own ones when a user is given."""
    query = select(tables.Category)
    if user_id is not None:
        query = query.where(or_(tables.Category.user_id.is_(None), tables.Category.user_id == user_id))
    else:
        query = query.where(tables.Category.user_id.is_(None))
    rows = db.scalars(query.order_by(*_newest_first())).all()
    return [Category.model_validate(row) for row in rows]


def get_global_categories(db: Session) -> List[Category]:
    return get_categories(db)


def get_category_by_id(db: Session, category_id: int) -> Optional[Category]:
    row = db.get(tables.Category, category_id)
    return Category.model_validate(row) if row else None


def category_names(db: Session, category_ids: Iterable[int]) -> Dict[int, str]:
    ids = {cid for cid in category_ids if cid is not None}
    if not ids:
        return {}
    rows = db.execute(select(tables.Category.id, tables.Category.name).where(tables.Category.id.in_(ids))).all()
    return {row.id: row.name for row in rows}


def update_category(db: Session, category_id: int, category_update: CategoryUpdate) -> Category:
    row = require(db, tables.Category, category_id, "Category")
    with write_transaction(db, "Category update"):
        for field, value in category_update.model_dump(exclude_unset=True).items():
            if field in ("name", "color") and value is None:
                continue
            setattr(row, field, value)
    return Category.model_validate(row)


def delete_category(db: Session, category_id: int) -> OperationResult:
    in_use = db.scalars(
        select(tables.Expense.id).where(tables.Expense.category_id == category_id).limit(1)
    ).first()
    if in_use is not None:
        raise ConflictError("Cannot delete category with existing expenses")

    budgeted = db.scalars(select(tables.Budget.id).where(tables.Budget.category_id == category_id).limit(1)).first()
    if budgeted is not None:
        raise ConflictError("Cannot delete category with existing budgets")

    with write_transaction(db, "Category deletion"):
        result = db.execute(delete(tables.Category).where(tables.Category.id == category_id))
    return OperationResult(success=result.rowcount > 0)
