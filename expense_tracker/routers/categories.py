from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.category import Category, CategoryCreate, CategoryUpdate
from expense_tracker.models.user import OperationResult
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import categories as category_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.post("/", response_model=Category, status_code=status.HTTP_201_CREATED)
def create_category(category: CategoryCreate, db: Session = Depends(get_db)):
    return category_service.create_category(db, category)


@router.get("/", response_model=List[Category])
def list_categories(user_id: Optional[int] = None, db: Session = Depends(get_db)):
    """Global categories, plus the user's own when user_id is given."""
    return category_service.get_categories(db, user_id)


@router.get("/global", response_model=List[Category])
def list_global_categories(db: Session = Depends(get_db)):
    return category_service.get_global_categories(db)


@router.get("/{category_id}", response_model=Category)
def get_category(category_id: int, db: Session = Depends(get_db)):
    category = category_service.get_category_by_id(db, category_id)
    if not category:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return category


@router.put("/{category_id}", response_model=Category)
def update_category(category_id: int, category_update: CategoryUpdate, db: Session = Depends(get_db)):
    return category_service.update_category(db, category_id, category_update)


@router.delete("/{category_id}", response_model=OperationResult)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    return category_service.delete_category(db, category_id)
