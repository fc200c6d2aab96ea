"""
Scheduler Service
Runs the daily budget alert scan and recurring expense processing with APScheduler
"""
import logging
from datetime import date
from typing import Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from expense_tracker.core.config import settings
from expense_tracker.db import tables
from expense_tracker.db.session import SessionLocal
from expense_tracker.models.enums import NotificationType
from expense_tracker.services.budgets import check_budget_alerts
from expense_tracker.services.expenses import process_recurring_expenses
from expense_tracker.services.notifications import budget_alert_message, has_unread, send_budget_alert

logger = logging.getLogger(__name__)

BUDGET_ALERTS_JOB_ID = "daily_budget_alerts"
RECURRING_EXPENSES_JOB_ID = "daily_recurring_expenses"

# Scheduler instance (exported for use in settings router)
scheduler: Optional[BackgroundScheduler] = None


def send_budget_alerts(db: Session) -> int:
    """Notify every active user about budgets over threshold, once per unread alert and budget."""
    user_ids = db.scalars(
        select(tables.User.id).where(tables.User.is_active.is_(True)).order_by(tables.User.id)
    ).all()

    sent = 0
    for user_id in user_ids:
        for alert in check_budget_alerts(db, user_id):
            usage = round(alert.usage_percentage, 2)
            message = budget_alert_message(usage, alert.budget_amount)
            if has_unread(db, user_id, NotificationType.BUDGET_ALERT, message, related_budget_id=alert.budget_id):
                continue
            send_budget_alert(db, user_id, alert.budget_id, usage)
            sent += 1
    return sent


def budget_alerts_job() -> Dict:
    """Job function for the daily budget alert scan"""
    logger.info("Executing budget alerts job...")
    db = SessionLocal()
    try:
        sent = send_budget_alerts(db)
        logger.info(f"Budget alerts job completed: {sent} notification(s) sent")
        return {"success": True, "sent": sent}
    except SQLAlchemyError as e:
        logger.error(f"Error in budget alerts job: {str(e)}")
        return {"success": False, "error": str(e)}
    finally:
        db.close()


def recurring_expenses_job(today: Optional[date] = None) -> Dict:
    """Job function materialising due recurring expenses"""
    logger.info("Executing recurring expenses job...")
    db = SessionLocal()
    try:
        result = process_recurring_expenses(db, today)
        return {"success": True, "created": result.created}
    except SQLAlchemyError as e:
        logger.error(f"Error in recurring expenses job: {str(e)}")
        return {"success": False, "error": str(e)}
    finally:
        db.close()


def start_scheduler():
    """Start the background scheduler with the daily jobs"""
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler is already running")
        return

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        budget_alerts_job,
        trigger=CronTrigger(hour=settings.BUDGET_ALERT_HOUR, minute=settings.BUDGET_ALERT_MINUTE),
        id=BUDGET_ALERTS_JOB_ID,
        name="Daily Budget Alerts",
        replace_existing=True,
    )
    scheduler.add_job(
        recurring_expenses_job,
        trigger=CronTrigger(hour=settings.RECURRING_EXPENSES_HOUR, minute=settings.RECURRING_EXPENSES_MINUTE),
        id=RECURRING_EXPENSES_JOB_ID,
        name="Daily Recurring Expenses",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started: budget alerts at {settings.BUDGET_ALERT_HOUR:02d}:{settings.BUDGET_ALERT_MINUTE:02d}, "
        f"recurring expenses at {settings.RECURRING_EXPENSES_HOUR:02d}:{settings.RECURRING_EXPENSES_MINUTE:02d} UTC"
    )


def stop_scheduler():
    """Stop the background scheduler"""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")


def get_scheduler_status() -> Dict:
    """Get current scheduler status"""
    if scheduler is None:
        return {"running": False, "jobs": []}

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": str(job.next_run_time) if job.next_run_time else None,
        })

    return {
        "running": scheduler.running,
        "jobs": jobs,
    }
