"""
Report generation: renders PDF/CSV/JSON files from stored expenses and
budgets, uploads them to S3 and returns the download link.
"""
import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from expense_tracker.core.exceptions import InvalidRequestError, ReportGenerationError
from expense_tracker.db import tables
from expense_tracker.models.budget import Budget
from expense_tracker.models.enums import ExportFormat, ReportFormat
from expense_tracker.models.expense import Expense
from expense_tracker.models.report import ExportResponse, ReportRequest, ReportResponse
from expense_tracker.services._helpers import budget_analyzer, require
from expense_tracker.services.budgets import approved_expenses
from expense_tracker.services.categories import category_names
from expense_tracker.services.dashboard import user_expenses
from expense_tracker.utils import pdf_report
from expense_tracker.utils.analyzer import percentage, sum_amounts

logger = logging.getLogger(__name__)


def _report_id(owner: str, start_date: date, end_date: date) -> str:
    return f"{owner}_{start_date.isoformat()}_{end_date.isoformat()}_{uuid.uuid4().hex[:6]}"


def _window_expenses(
    db: Session,
    start_date: date,
    end_date: date,
    user_id: Optional[int] = None,
    team_id: Optional[int] = None,
) -> List[Expense]:
    query = select(tables.Expense).where(
        tables.Expense.expense_date >= start_date,
        tables.Expense.expense_date <= end_date,
    )
    if user_id is not None:
        query = query.where(tables.Expense.user_id == user_id)
    if team_id is not None:
        query = query.where(tables.Expense.team_id == team_id)
    rows = db.scalars(query.order_by(tables.Expense.expense_date, tables.Expense.id)).all()
    return [Expense.model_validate(row) for row in rows]


def _upload(owner_id: int, report_id: str, extension: str, data: bytes, content_type: str) -> str:
    url = pdf_report.upload_report(owner_id, report_id, extension, data, content_type)
    if url is None:
        raise ReportGenerationError(f"Failed to upload {extension.upper()} report {report_id}")
    logger.info(f"Report uploaded: {url}")
    return url


def generate_expense_report(db: Session, request: ReportRequest) -> ReportResponse:
    require(db, tables.User, request.user_id, "User")
    if request.team_id is not None:
        require(db, tables.Team, request.team_id, "Team")
    if request.format == ReportFormat.EXCEL:
        raise InvalidRequestError("EXCEL reports are not supported; use PDF or CSV")

    expenses = _window_expenses(db, request.start_date, request.end_date, request.user_id, request.team_id)
    names = category_names(db, (exp.category_id for exp in expenses))
    report_id = _report_id(str(request.user_id), request.start_date, request.end_date)
    logger.info(f"Generating {request.format.value} expense report {report_id} with {len(expenses)} expenses")

    if request.format == ReportFormat.CSV:
        url = _upload(request.user_id, report_id, "csv", pdf_report.expenses_csv(expenses, names), "text/csv")
        return ReportResponse(report_url=url)

    summary = [
        f"User ID: {request.user_id}",
        f"Period: {request.start_date.isoformat()} to {request.end_date.isoformat()}",
        f"Expenses: {len(expenses)}",
        f"Total: ${sum_amounts(exp.amount for exp in expenses):.2f}",
    ]
    if request.team_id is not None:
        summary.insert(1, f"Team ID: {request.team_id}")
    data = pdf_report.expense_pdf("Expense Report", summary, expenses, names, request.include_receipts)
    return ReportResponse(report_url=_upload(request.user_id, report_id, "pdf", data, "application/pdf"))


def generate_budget_report(db: Session, user_id: int, start_date: date, end_date: date) -> ReportResponse:
    require(db, tables.User, user_id, "User")
    if start_date > end_date:
        raise InvalidRequestError("start_date must not be after end_date")

    rows = db.scalars(
        select(tables.Budget)
        .where(
            tables.Budget.user_id == user_id,
            tables.Budget.end_date >= start_date,
            tables.Budget.start_date <= end_date,
        )
        .order_by(tables.Budget.id)
    ).all()
    budgets = [Budget.model_validate(row) for row in rows]
    names = category_names(db, (budget.category_id for budget in budgets))

    lines = []
    expenses = []
    if budgets:
        expenses = approved_expenses(
            db, user_id, min(b.start_date for b in budgets), max(b.end_date for b in budgets)
        )
    for budget in budgets:
        spent = budget_analyzer.spent_for_budget(budget, expenses)
        scope = names.get(budget.category_id, "Overall") if budget.category_id is not None else "Overall"
        lines.append(
            f"{scope} ({budget.period.value}, {budget.start_date.isoformat()} to {budget.end_date.isoformat()}): "
            f"${spent:.2f} of ${budget.amount:.2f} ({percentage(spent, budget.amount):.1f}%)"
        )

    summary = [
        f"User ID: {user_id}",
        f"Period: {start_date.isoformat()} to {end_date.isoformat()}",
        f"Total budgeted: ${sum_amounts(b.amount for b in budgets):.2f}",
    ]
    report_id = _report_id(f"budget_{user_id}", start_date, end_date)
    data = pdf_report.budget_pdf("Budget Report", summary, lines)
    return ReportResponse(report_url=_upload(user_id, report_id, "pdf", data, "application/pdf"))


def generate_team_report(db: Session, team_id: int, start_date: date, end_date: date) -> ReportResponse:
    team = require(db, tables.Team, team_id, "Team")
    if start_date > end_date:
        raise InvalidRequestError("start_date must not be after end_date")

    expenses = _window_expenses(db, start_date, end_date, team_id=team_id)
    names = category_names(db, (exp.category_id for exp in expenses))
    summary = [
        f"Team: {team.name} (ID {team_id})",
        f"Period: {start_date.isoformat()} to {end_date.isoformat()}",
        f"Expenses: {len(expenses)}",
        f"Total: ${sum_amounts(exp.amount for exp in expenses):.2f}",
    ]
    report_id = _report_id(f"team_{team_id}", start_date, end_date)
    data = pdf_report.expense_pdf("Team Expense Report", summary, expenses, names)
    return ReportResponse(report_url=_upload(team.manager_id, report_id, "pdf", data, "application/pdf"))


def export_expense_data(db: Session, user_id: int, export_format: ExportFormat) -> ExportResponse:
    require(db, tables.User, user_id, "User")
    expenses = user_expenses(db, user_id)
    report_id = f"export_{user_id}_{uuid.uuid4().hex[:6]}"

    if export_format == ExportFormat.JSON:
        url = _upload(user_id, report_id, "json", pdf_report.expenses_json(expenses), "application/json")
    else:
        names = category_names(db, (exp.category_id for exp in expenses))
        url = _upload(user_id, report_id, "csv", pdf_report.expenses_csv(expenses, names), "text/csv")
    return ExportResponse(download_url=url)
