from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.user import OperationResult, UserPublic, UserUpdate
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import users as user_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.get("/", response_model=List[UserPublic])
def list_users(db: Session = Depends(get_db)):
    return user_service.get_users(db)


@router.get("/{user_id}", response_model=UserPublic)
def get_user(user_id: int, db: Session = Depends(get_db)):
    user = user_service.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/{user_id}/profile", response_model=UserPublic)
def get_profile(user_id: int, db: Session = Depends(get_db)):
    user = user_service.get_user_profile(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.put("/{user_id}", response_model=UserPublic)
def update_user(user_id: int, update: UserUpdate, db: Session = Depends(get_db)):
    return user_service.update_user(db, user_id, update)


@router.delete("/{user_id}", response_model=OperationResult)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    return user_service.delete_user(db, user_id)
