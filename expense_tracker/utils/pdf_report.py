import csv
import io
import json
import logging
from typing import Iterable, List, Mapping, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from expense_tracker.core.config import settings
from expense_tracker.models.expense import Expense

logger = logging.getLogger(__name__)

# Initialize S3 client using default AWS credential chain
# (environment variables, AWS credentials file, or IAM role)
s3 = boto3.client("s3", region_name=settings.S3_REGION)

CSV_FIELDS = ["id", "expense_date", "title", "category", "amount", "status", "tags", "description"]


def _latin1(text: str) -> str:
    # Core PDF fonts only cover latin-1
    return str(text).encode("latin-1", "replace").decode("latin-1")


def _line(pdf: FPDF, text: str, style: str = "", size: int = 12) -> None:
    pdf.set_font("Helvetica", style, size)
    pdf.cell(0, 8, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _category(expense: Expense, category_names: Mapping[int, str]) -> str:
    if expense.category_id is None:
        return "Uncategorized"
    return category_names.get(expense.category_id, f"#{expense.category_id}")


def expense_pdf(
    title: str,
    summary: Sequence[str],
    expenses: Iterable[Expense],
    category_names: Mapping[int, str],
    include_receipts: bool = False,
) -> bytes:
    pdf = FPDF()
    pdf.add_page()
    _line(pdf, title, "B", 16)
    for text in summary:
        _line(pdf, text)
    pdf.ln(5)

    _line(pdf, "Expenses:", "B")
    rows = list(expenses)
    if not rows:
        _line(pdf, "None")
    for exp in rows:
        _line(
            pdf,
            f"- {exp.expense_date.isoformat()} {exp.title} [{_category(exp, category_names)}] "
            f"${exp.amount:.2f} ({exp.status.value})",
        )
        if include_receipts and exp.receipt_url:
            _line(pdf, f"    Receipt: {exp.receipt_url}", size=10)
    return bytes(pdf.output())


def budget_pdf(title: str, summary: Sequence[str], budget_lines: Sequence[str]) -> bytes:
    pdf = FPDF()
    pdf.add_page()
    _line(pdf, title, "B", 16)
    for text in summary:
        _line(pdf, text)
    pdf.ln(5)

    _line(pdf, "Budgets:", "B")
    if not budget_lines:
        _line(pdf, "None")
    for text in budget_lines:
        _line(pdf, f"- {text}")
    return bytes(pdf.output())


def expenses_csv(expenses: Iterable[Expense], category_names: Mapping[int, str]) -> bytes:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for exp in expenses:
        writer.writerow({
            "id": exp.id,
            "expense_date": exp.expense_date.isoformat(),
            "title": exp.title,
            "category": _category(exp, category_names),
            "amount": f"{exp.amount:.2f}",
            "status": exp.status.value,
            "tags": ";".join(exp.tags),
            "description": exp.description or "",
        })
    return output.getvalue().encode()


def expenses_json(expenses: Iterable[Expense]) -> bytes:
    rows: List[dict] = [exp.model_dump(mode="json") for exp in expenses]
    return json.dumps(rows, indent=2).encode()


def upload_report(user_id: int, report_id: str, extension: str, data: bytes, content_type: str) -> Optional[str]:
    """Upload a generated file and return its public URL, or None when S3 refuses it."""
    s3_key = f"reports/{user_id}/{report_id}.{extension}"
    try:
        s3.upload_fileobj(
            io.BytesIO(data), settings.S3_BUCKET_NAME, s3_key, ExtraArgs={"ContentType": content_type}
        )
        return f"https://{settings.S3_BUCKET_NAME}.s3.{settings.S3_REGION}.amazonaws.com/{s3_key}"
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to upload {s3_key}: {e}")
        return None
