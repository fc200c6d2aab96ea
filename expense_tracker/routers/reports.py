import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.enums import ExportFormat
from expense_tracker.models.report import ExportResponse, ReportRequest, ReportResponse
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import reports as report_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])
logger = logging.getLogger(__name__)


def _check_window(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")


@router.post("/expenses", response_model=ReportResponse)
def expense_report(request: ReportRequest, db: Session = Depends(get_db)):
    """
    Render the user's expenses in the window as PDF or CSV, upload it to S3
    and return the download link.
    """
    logger.info(f"Generating expense report for user_id: {request.user_id}, format: {request.format.value}")
    return report_service.generate_expense_report(db, request)


@router.get("/budgets/{user_id}", response_model=ReportResponse)
def budget_report(user_id: int, start_date: date, end_date: date, db: Session = Depends(get_db)):
    _check_window(start_date, end_date)
    return report_service.generate_budget_report(db, user_id, start_date, end_date)


@router.get("/teams/{team_id}", response_model=ReportResponse)
def team_report(team_id: int, start_date: date, end_date: date, db: Session = Depends(get_db)):
    _check_window(start_date, end_date)
    return report_service.generate_team_report(db, team_id, start_date, end_date)


@router.get("/export/{user_id}", response_model=ExportResponse)
def export_expenses(user_id: int, format: ExportFormat = ExportFormat.CSV, db: Session = Depends(get_db)):
    return report_service.export_expense_data(db, user_id, format)
