from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.user import LoginResponse, OperationResult, UserCreate, UserLogin, UserPublic
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import auth as auth_service
from expense_tracker.services.users import get_user_profile

router = APIRouter()


class EmailVerification(BaseModel):
    token: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, db: Session = Depends(get_db)):
    return auth_service.register_user(db, user)


@router.post("/login", response_model=LoginResponse)
def login(login_data: UserLogin, db: Session = Depends(get_db)):
    return auth_service.login_user(db, login_data)


@router.post("/verify-email", response_model=OperationResult)
def verify_email(body: EmailVerification, db: Session = Depends(get_db)):
    return auth_service.verify_email(db, body.token)


@router.post("/reset-password", response_model=OperationResult)
def reset_password(body: PasswordResetRequest, db: Session = Depends(get_db)):
    return auth_service.reset_password(db, body.email)


@router.get("/me", response_model=UserPublic)
def get_current_user(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Get current user profile"""
    user = get_user_profile(db, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user
