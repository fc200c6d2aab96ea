"""
Settings Router
Provides endpoints to control the background scheduler
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends

from expense_tracker.routers.deps import get_current_user_id
from expense_tracker.utils import scheduler as scheduler_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])
logger = logging.getLogger(__name__)


@router.get("/scheduler")
def get_scheduler_settings() -> Dict:
    """Scheduler status plus the configured daily run times."""
    return scheduler_service.get_scheduler_status()


@router.post("/scheduler/start")
def start_scheduler_endpoint() -> Dict:
    scheduler_service.start_scheduler()
    return {
        "success": True,
        "message": "Scheduler running. Budget alerts and recurring expenses will be processed daily.",
        "status": scheduler_service.get_scheduler_status(),
    }


@router.post("/scheduler/stop")
def stop_scheduler_endpoint() -> Dict:
    scheduler_service.stop_scheduler()
    return {
        "success": True,
        "message": "Scheduler stopped.",
        "status": scheduler_service.get_scheduler_status(),
    }


@router.post("/scheduler/run/budget-alerts")
def run_budget_alerts() -> Dict:
    """Run the budget alert scan now instead of waiting for its cron slot."""
    logger.info("Budget alert scan triggered manually")
    return scheduler_service.budget_alerts_job()


@router.post("/scheduler/run/recurring-expenses")
def run_recurring_expenses() -> Dict:
    logger.info("Recurring expense processing triggered manually")
    return scheduler_service.recurring_expenses_job()
