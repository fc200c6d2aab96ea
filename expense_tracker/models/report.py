from datetime import date
from typing import Optional

from pydantic import BaseModel, model_validator

from expense_tracker.models.enums import ReportFormat


class ReportRequest(BaseModel):
    user_id: int
    team_id: Optional[int] = None
    start_date: date
    end_date: date
    format: ReportFormat
    include_receipts: bool = False

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class ReportResponse(BaseModel):
    report_url: str


class ExportResponse(BaseModel):
    download_url: str
