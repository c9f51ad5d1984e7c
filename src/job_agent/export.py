"""
Job Export
==========

Writes job search results as a plain-text report and renders job lists
as CSV, Excel and PDF.

The text report is the on-disk history format: the server lists the
reports in the downloads directory and re-exports them on demand by
parsing them back with ``parse_jobs_from_text``.
"""

import csv
import io
import logging
import re
import textwrap
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOADS_DIR = Path("public") / "downloads"
BLOCK_SEPARATOR = "-" * 30

# (label, job field) in report order
TEXT_FIELDS = [
    ("🏢 Company:", "company"),
    ("💼 Position:", "jobTitle"),
    ("📍 Location:", "companyAddress"),
    ("🌐 Work Type:", "remoteOnsite"),
    ("💻 Technologies:", "languageRequirements"),
    ("📅 Posted:", "postedDate"),
    ("💰 Salary:", "salary"),
    ("📋 Requirements:", "requirements"),
    ("🎁 Benefits:", "benefits"),
    ("🔗 URL:", "url"),
]

# (column header, job field, Excel width)
TABLE_COLUMNS = [
    ("Company", "company", 20),
    ("Job Title", "jobTitle", 25),
    ("Location", "companyAddress", 20),
    ("Work Type", "remoteOnsite", 15),
    ("Technologies", "languageRequirements", 25),
    ("Posted Date", "postedDate", 15),
    ("Salary", "salary", 15),
    ("Requirements", "requirements", 30),
    ("Benefits", "benefits", 25),
    ("URL", "url", 40),
]

MEDIA_TYPES = {
    "csv": ("text/csv", ".csv"),
    "excel": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", ".xlsx"),
    "pdf": ("application/pdf", ".pdf"),
}


def _value(job: Dict[str, Any], key: str) -> str:
    value = job.get(key)
    if key == "companyAddress" and not value:
        value = job.get("location")
    return str(value) if value else "N/A"


def report_filename(jobs: List[Dict[str, Any]], today: Optional[date] = None) -> str:
    """``<clean job title>_<YYYY-MM-DD>.txt`` built from the first job."""
    title = (jobs[0].get("jobTitle") if jobs else None) or "Jobs"
    clean = re.sub(r"[^a-zA-Z0-9\s]", "", title.lower())
    clean = re.sub(r"_+", "_", re.sub(r"\s+", "_", clean)).strip("_")
    clean = clean[:25].rstrip("_") or "jobs"
    return f"{clean}_{(today or date.today()).isoformat()}.txt"


def format_text_report(jobs: List[Dict[str, Any]]) -> str:
    lines = [f"Job Search Results - {datetime.now().strftime('%m/%d/%Y')}", "=" * 50, ""]
    for index, job in enumerate(jobs, 1):
        lines.append(f"Job {index}:")
        for label, key in TEXT_FIELDS:
            if key == "url" and not job.get("url"):
                continue
            lines.append(f"{label} {_value(job, key)}")
        lines.extend(["", BLOCK_SEPARATOR, ""])
    return "\n".join(lines) + "\n"


def export_to_text(
    jobs: List[Dict[str, Any]],
    filename: Optional[str] = None,
    downloads_dir: Union[str, Path] = DEFAULT_DOWNLOADS_DIR,
) -> Path:
    """
    Write the text report into ``downloads_dir``.

    Args:
        jobs: Job records
        filename: Report name (derived from the first job title if None)
        downloads_dir: Directory for reports, created if missing

    Returns:
        Path of the written report
    """
    downloads_dir = Path(downloads_dir)
    downloads_dir.mkdir(parents=True, exist_ok=True)

    path = downloads_dir / (filename or report_filename(jobs))
    path.write_text(format_text_report(jobs), encoding="utf-8")
    logger.info(f"Text file saved: {path}")
    return path


def parse_jobs_from_text(content: str) -> List[Dict[str, str]]:
    """Recover job records from a text report."""
    jobs = []
    for block in re.split(r"-{30}", content):
        if not block.strip():
            continue
        job: Dict[str, str] = {}
        for line in block.splitlines():
            for label, key in TEXT_FIELDS:
                if label in line:
                    job[key] = line.split(label, 1)[1].strip() or "N/A"
                    break
        if job:
            if "companyAddress" in job:
                job["location"] = job["companyAddress"]
            jobs.append(job)
    return jobs


def jobs_to_frame(jobs: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per job with the export column headers."""
    rows = [{header: _value(job, key) for header, key, _ in TABLE_COLUMNS} for job in jobs]
    return pd.DataFrame(rows, columns=[header for header, _, _ in TABLE_COLUMNS])


def export_to_csv(jobs: List[Dict[str, Any]]) -> bytes:
    buffer = io.StringIO()
    jobs_to_frame(jobs).to_csv(buffer, index=False, quoting=csv.QUOTE_ALL)
    return buffer.getvalue().encode("utf-8")


def export_to_excel(jobs: List[Dict[str, Any]]) -> bytes:
    """Single "Job Search Results" sheet with a bold, grey header row."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        jobs_to_frame(jobs).to_excel(writer, sheet_name="Job Search Results", index=False)
        sheet = writer.sheets["Job Search Results"]
        header_fill = PatternFill(fill_type="solid", fgColor="FFE0E0E0")
        for cell in sheet[1]:
            cell.font = Font(bold=True)
            cell.fill = header_fill
        for i, (_, _, width) in enumerate(TABLE_COLUMNS, 1):
            sheet.column_dimensions[get_column_letter(i)].width = width
    return buffer.getvalue()


def _pdf_page() -> Figure:
    # US Letter, portrait
    return Figure(figsize=(8.5, 11))


def export_to_pdf(jobs: List[Dict[str, Any]], jobs_per_page: int = 3) -> bytes:
    """
    Render the jobs as a paginated PDF report.

    Each page carries up to ``jobs_per_page`` jobs; the first page also
    carries the report title and generation date.
    """
    buffer = io.BytesIO()
    pages = [jobs[i:i + jobs_per_page] for i in range(0, len(jobs), jobs_per_page)] or [[]]

    with PdfPages(buffer) as pdf:
        index = 0
        for page_number, page_jobs in enumerate(pages):
            fig = _pdf_page()
            y = 0.95
            if page_number == 0:
                fig.text(0.5, y, "Job Search Results", ha="center", va="top", fontsize=20)
                y -= 0.04
                fig.text(0.5, y, f"Generated on: {datetime.now().strftime('%m/%d/%Y')}",
                         ha="center", va="top", fontsize=11)
                y -= 0.06

            for job in page_jobs:
                index += 1
                fig.text(0.08, y, f"Job {index}: {_value(job, 'jobTitle')}",
                         va="top", fontsize=14, weight="bold")
                y -= 0.035
                for header, key, _ in TABLE_COLUMNS:
                    if key == "jobTitle":
                        continue
                    line = textwrap.shorten(f"{header}: {_value(job, key)}", width=95, placeholder="...")
                    fig.text(0.1, y, line, va="top", fontsize=9)
                    y -= 0.022
                y -= 0.02

            pdf.savefig(fig)

        info = pdf.infodict()
        info["Title"] = "Job Search Results"

    return buffer.getvalue()


EXPORTERS = {
    "csv": export_to_csv,
    "excel": export_to_excel,
    "pdf": export_to_pdf,
}


def export_jobs(jobs: List[Dict[str, Any]], fmt: str) -> bytes:
    """
    Render ``jobs`` in ``fmt`` ("csv", "excel" or "pdf").

    Raises:
        ValueError: For an unknown format
    """
    if fmt not in EXPORTERS:
        raise ValueError(f"Invalid format: {fmt}")
    return EXPORTERS[fmt](jobs)


__all__ = [
    "export_to_text",
    "parse_jobs_from_text",
    "export_to_csv",
    "export_to_excel",
    "export_to_pdf",
    "export_jobs",
    "report_filename",
    "MEDIA_TYPES",
]
