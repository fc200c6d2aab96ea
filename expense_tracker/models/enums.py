from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class ExpenseStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class NotificationType(str, Enum):
    BUDGET_ALERT = "BUDGET_ALERT"
    EXPENSE_APPROVAL = "EXPENSE_APPROVAL"
    EXPENSE_REMINDER = "EXPENSE_REMINDER"
    SYSTEM_UPDATE = "SYSTEM_UPDATE"


class BudgetPeriod(str, Enum):
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class RecurringFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class ReportFormat(str, Enum):
    PDF = "PDF"
    EXCEL = "EXCEL"
    CSV = "CSV"


class ExportFormat(str, Enum):
    CSV = "CSV"
    JSON = "JSON"
