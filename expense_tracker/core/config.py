from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App settings
    PROJECT_NAME: str = "ExpenseTracker"
    API_PREFIX: str = "/api"
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: str = Field(default="INFO")

    # Allowed browser origins (JSON list in the environment)
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://localhost:8000"])

    # Relational store (any SQLAlchemy URL, e.g. postgresql+psycopg://...)
    DATABASE_URL: str = Field(default="sqlite:///./expense_tracker.db")
    SQL_ECHO: bool = Field(default=False)

    # AWS S3 (generated reports and exports)
    S3_BUCKET_NAME: str = Field(default="expense-tracker-reports")
    S3_REGION: str = Field(default="eu-west-1")

    # JWT Authentication
    JWT_SECRET_KEY: str = Field(default="change-me-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    EMAIL_VERIFICATION_EXPIRE_MINUTES: int = 60 * 24

    # Budget analytics
    DEFAULT_ALERT_THRESHOLD: float = 80.0
    HIGH_UTILIZATION_PERCENT: float = 90.0
    LOW_UTILIZATION_PERCENT: float = 50.0
    RECENT_EXPENSES_LIMIT: int = 5

    # Background jobs
    SCHEDULER_ENABLED: bool = Field(default=False)
    BUDGET_ALERT_HOUR: int = 6
    BUDGET_ALERT_MINUTE: int = 0
    RECURRING_EXPENSES_HOUR: int = 0
    RECURRING_EXPENSES_MINUTE: int = 30


settings = Settings()
