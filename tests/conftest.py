import io
from datetime import date
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from expense_tracker.core.security import create_access_token, get_password_hash
from expense_tracker.db import tables
from expense_tracker.db.session import get_db
from expense_tracker.main import app
from expense_tracker.models.enums import BudgetPeriod, ExpenseStatus, UserRole
from expense_tracker.utils import pdf_report


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    tables.Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class FakeS3:
    """Stands in for the boto3 S3 client; keeps uploaded objects in memory."""

    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}

    def upload_fileobj(self, fileobj: io.BytesIO, bucket: str, key: str, ExtraArgs: Optional[dict] = None):
        self.objects[key] = fileobj.read()
        self.content_types[key] = (ExtraArgs or {}).get("ContentType", "")

    def head_bucket(self, Bucket: str):
        return {}


@pytest.fixture
def fake_s3(monkeypatch):
    fake = FakeS3()
    monkeypatch.setattr(pdf_report, "s3", fake)
    return fake


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.USER, email: Optional[str] = None, password: str = "password123"):
        counter["n"] += 1
        user = tables.User(
            email=email or f"user{counter['n']}@example.com",
            password_hash=get_password_hash(password),
            first_name="Test",
            last_name=f"User{counter['n']}",
            role=role,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_category(db):
    def _make(name: str, user_id: Optional[int] = None, color: str = "#336699"):
        category = tables.Category(name=name, color=color, user_id=user_id)
        db.add(category)
        db.commit()
        return category

    return _make


@pytest.fixture
def make_budget(db):
    def _make(
        user_id: int,
        amount: float,
        category_id: Optional[int] = None,
        period: BudgetPeriod = BudgetPeriod.MONTHLY,
        start_date: date = date(2024, 1, 1),
        end_date: date = date(2024, 1, 31),
        alert_threshold: float = 80.0,
    ):
        budget = tables.Budget(
            user_id=user_id,
            category_id=category_id,
            amount=amount,
            period=period,
            start_date=start_date,
            end_date=end_date,
            alert_threshold=alert_threshold,
        )
        db.add(budget)
        db.commit()
        return budget

    return _make


@pytest.fixture
def make_expense(db):
    def _make(
        user_id: int,
        amount: float,
        category_id: Optional[int] = None,
        expense_date: date = date(2024, 1, 15),
        status: ExpenseStatus = ExpenseStatus.APPROVED,
        title: str = "Expense",
        team_id: Optional[int] = None,
        tags: Optional[List[str]] = None,
        description: Optional[str] = None,
    ):
        expense = tables.Expense(
            user_id=user_id,
            team_id=team_id,
            category_id=category_id,
            title=title,
            description=description,
            amount=amount,
            tags=tags or [],
            status=status,
            expense_date=expense_date,
        )
        db.add(expense)
        db.commit()
        return expense

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user_id: int) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}

    return _headers
