"""
Health Check Router
Liveness plus a status probe of the database and the reports bucket
"""
import logging
from datetime import datetime, timezone

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from expense_tracker.core.config import settings
from expense_tracker.db.session import ping
from expense_tracker.utils import pdf_report

router = APIRouter()
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health_check():
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": _now(),
    }


@router.get("/status")
def services_status():
    """
    Check connectivity of the backing services:
    - Database (SQLAlchemy engine)
    - S3 (Reports bucket)
    """
    status = {"timestamp": _now(), "services": {}}

    database_status = {"connected": False, "error": None}
    try:
        database_status["connected"] = ping()
    except SQLAlchemyError as e:
        database_status["error"] = str(e)
        logger.error(f"Database check failed: {str(e)}")
    status["services"]["database"] = database_status

    s3_status = {
        "connected": False,
        "bucket": settings.S3_BUCKET_NAME,
        "region": settings.S3_REGION,
        "error": None,
    }
    try:
        pdf_report.s3.head_bucket(Bucket=settings.S3_BUCKET_NAME)
        s3_status["connected"] = True
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        s3_status["error"] = f"{error_code}: {str(e)}"
        logger.error(f"S3 check failed: {str(e)}")
    except BotoCoreError as e:
        # Missing credentials or unreachable endpoint
        s3_status["error"] = str(e)
        logger.error(f"S3 check failed: {str(e)}")
    status["services"]["s3"] = s3_status

    all_connected = all(service["connected"] for service in status["services"].values())
    status["overall_status"] = "healthy" if all_connected else "degraded"
    return status
