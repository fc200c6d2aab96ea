import csv
import io
import json
from datetime import date

import pytest
from botocore.exceptions import ClientError

from expense_tracker.core.exceptions import InvalidRequestError, NotFoundError, ReportGenerationError
from expense_tracker.db import tables
from expense_tracker.models.enums import ExportFormat, ReportFormat
from expense_tracker.models.report import ReportRequest
from expense_tracker.services import reports as report_service
from expense_tracker.utils import pdf_report

BUCKET_URL = "https://expense-tracker-reports.s3.eu-west-1.amazonaws.com/"


def request(user_id, report_format, team_id=None):
    return ReportRequest(
        user_id=user_id,
        team_id=team_id,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 31),
        format=report_format,
    )


def only_object(fake_s3):
    assert len(fake_s3.objects) == 1
    return next(iter(fake_s3.objects.items()))


def test_csv_expense_report(db, fake_s3, make_user, make_category, make_expense):
    user = make_user()
    food = make_category("Food")
    make_expense(user.id, 12.5, category_id=food.id, title="Lunch", tags=["team", "client"])
    make_expense(user.id, 99, title="Outside window", expense_date=date(2024, 2, 1))

    response = report_service.generate_expense_report(db, request(user.id, ReportFormat.CSV))
    key, data = only_object(fake_s3)
    assert response.report_url == BUCKET_URL + key
    assert key.startswith(f"reports/{user.id}/{user.id}_2024-01-01_2024-01-31_")
    assert fake_s3.content_types[key] == "text/csv"

    rows = list(csv.DictReader(io.StringIO(data.decode())))
    assert len(rows) == 1
    assert rows[0]["title"] == "Lunch"
    assert rows[0]["category"] == "Food"
    assert rows[0]["amount"] == "12.50"
    assert rows[0]["tags"] == "team;client"


def test_pdf_expense_report(db, fake_s3, make_user, make_expense):
    user = make_user()
    make_expense(user.id, 40)

    response = report_service.generate_expense_report(db, request(user.id, ReportFormat.PDF))
    key, data = only_object(fake_s3)
    assert response.report_url.endswith(".pdf")
    assert data.startswith(b"%PDF")


def test_excel_is_rejected(db, fake_s3, make_user):
    user = make_user()
    with pytest.raises(InvalidRequestError):
        report_service.generate_expense_report(db, request(user.id, ReportFormat.EXCEL))
    assert fake_s3.objects == {}


def test_report_for_unknown_team(db, fake_s3, make_user):
    user = make_user()
    with pytest.raises(NotFoundError, match="Team with id 8 not found"):
        report_service.generate_expense_report(db, request(user.id, ReportFormat.PDF, team_id=8))


def test_budget_and_team_reports(db, fake_s3, make_user, make_budget, make_expense):
    manager = make_user()
    make_budget(manager.id, 500)
    team = tables.Team(name="Design", manager_id=manager.id)
    db.add(team)
    db.commit()
    make_expense(manager.id, 120, team_id=team.id)

    budget_report = report_service.generate_budget_report(db, manager.id, date(2024, 1, 1), date(2024, 1, 31))
    team_report = report_service.generate_team_report(db, team.id, date(2024, 1, 1), date(2024, 1, 31))
    assert f"/budget_{manager.id}_" in budget_report.report_url
    assert f"/team_{team.id}_" in team_report.report_url
    assert all(data.startswith(b"%PDF") for data in fake_s3.objects.values())


def test_json_export(db, fake_s3, make_user, make_expense):
    user = make_user()
    make_expense(user.id, 10, title="Pens")

    response = report_service.export_expense_data(db, user.id, ExportFormat.JSON)
    key, data = only_object(fake_s3)
    assert response.download_url.endswith(".json")
    exported = json.loads(data)
    assert [row["title"] for row in exported] == ["Pens"]
    assert exported[0]["amount"] == 10.0


def test_failed_upload_raises(db, monkeypatch, make_user):
    class BrokenS3:
        def upload_fileobj(self, *args, **kwargs):
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")

    monkeypatch.setattr(pdf_report, "s3", BrokenS3())
    user = make_user()
    with pytest.raises(ReportGenerationError):
        report_service.export_expense_data(db, user.id, ExportFormat.CSV)
