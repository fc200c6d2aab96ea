from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from expense_tracker.db.session import get_db
from expense_tracker.models.dashboard import CategoryAnalytics, DashboardStats, SpendingTrends, TeamDashboardStats
from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.services import dashboard as dashboard_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.get("/stats/{user_id}", response_model=DashboardStats)
def dashboard_stats(user_id: int, db: Session = Depends(get_db)):
    """
    Headline numbers for the dashboard. Counts expenses of every status,
    unlike the budget endpoints which only count APPROVED spend.
    """
    return dashboard_service.get_dashboard_stats(db, user_id)


@router.get("/trends/{user_id}", response_model=SpendingTrends)
def spending_trends(user_id: int, months: int = Query(12, ge=1, le=120), db: Session = Depends(get_db)):
    return dashboard_service.get_spending_trends(db, user_id, months)


@router.get("/categories/{user_id}", response_model=CategoryAnalytics)
def category_analytics(user_id: int, db: Session = Depends(get_db)):
    return dashboard_service.get_category_analytics(db, user_id)


@router.get("/team/{team_id}", response_model=TeamDashboardStats)
def team_stats(team_id: int, db: Session = Depends(get_db)):
    return dashboard_service.get_team_dashboard_stats(db, team_id)
