"""
Tests for job export: text reports, CSV, Excel and PDF.
"""

import csv
import io
from datetime import date

import pandas as pd
import pytest

from job_agent.export import (
    BLOCK_SEPARATOR,
    MEDIA_TYPES,
    export_jobs,
    export_to_csv,
    export_to_excel,
    export_to_pdf,
    export_to_text,
    format_text_report,
    parse_jobs_from_text,
    report_filename,
)

JOBS = [
    {
        "jobTitle": "Senior Python Developer",
        "company": "Acme Corp",
        "location": "Philadelphia, PA",
        "companyAddress": "Philadelphia, PA",
        "remoteOnsite": "Remote",
        "languageRequirements": "Python, AWS",
        "postedDate": "3 days ago",
        "salary": "$120,000 - $150,000 per year",
        "url": "https://example.com/careers/1",
    },
    {
        "jobTitle": "Data Engineer",
        "company": "Globex",
        "location": "Austin, TX",
        "remoteOnsite": "Hybrid",
    },
]


class TestTextReport:
    """Test the on-disk text report."""

    def test_report_filename(self):
        assert report_filename(JOBS, today=date(2024, 5, 1)) == "senior_python_developer_2024-05-01.txt"

    def test_report_filename_truncates(self):
        jobs = [{"jobTitle": "Principal Staff Machine Learning Infrastructure Engineer"}]
        name = report_filename(jobs, today=date(2024, 5, 1))
        assert name == "principal_staff_machine_l_2024-05-01.txt"

    def test_report_filename_without_jobs(self):
        assert report_filename([], today=date(2024, 5, 1)) == "jobs_2024-05-01.txt"

    def test_format(self):
        report = format_text_report(JOBS)
        assert report.startswith("Job Search Results - ")
        assert "Job 1:" in report
        assert "🏢 Company: Acme Corp" in report
        assert "📍 Location: Austin, TX" in report
        assert "🎁 Benefits: N/A" in report
        assert report.count(BLOCK_SEPARATOR) == 2
        # Jobs without a URL have no URL line
        assert report.count("🔗 URL:") == 1

    def test_round_trip(self, tmp_path):
        path = export_to_text(JOBS, filename="report.txt", downloads_dir=tmp_path / "downloads")
        assert path == tmp_path / "downloads" / "report.txt"

        jobs = parse_jobs_from_text(path.read_text(encoding="utf-8"))
        assert len(jobs) == 2
        assert jobs[0]["company"] == "Acme Corp"
        assert jobs[0]["salary"] == "$120,000 - $150,000 per year"
        assert jobs[0]["url"] == "https://example.com/careers/1"
        assert jobs[1]["location"] == "Austin, TX"
        assert jobs[1]["languageRequirements"] == "N/A"

    def test_parse_ignores_header(self):
        assert parse_jobs_from_text("Job Search Results - 01/01/2024\n" + "=" * 50 + "\n") == []


class TestBinaryExports:
    """Test CSV, Excel and PDF rendering."""

    def test_csv(self):
        rows = list(csv.reader(io.StringIO(export_to_csv(JOBS).decode("utf-8"))))
        assert rows[0][:3] == ["Company", "Job Title", "Location"]
        assert rows[1][:3] == ["Acme Corp", "Senior Python Developer", "Philadelphia, PA"]
        assert rows[2][0] == "Globex"
        assert rows[2][-1] == "N/A"

    def test_csv_quotes_everything(self):
        first_line = export_to_csv(JOBS).decode("utf-8").splitlines()[0]
        assert first_line.startswith('"Company","Job Title"')

    def test_excel(self):
        data = export_to_excel(JOBS)
        assert data[:2] == b"PK"
        frame = pd.read_excel(io.BytesIO(data), sheet_name="Job Search Results")
        assert list(frame["Company"]) == ["Acme Corp", "Globex"]
        assert frame.loc[1, "Location"] == "Austin, TX"

    def test_pdf(self):
        data = export_to_pdf(JOBS * 4)
        assert data.startswith(b"%PDF")

    def test_pdf_without_jobs(self):
        assert export_to_pdf([]).startswith(b"%PDF")

    def test_export_jobs(self):
        assert export_jobs(JOBS, "csv") == export_to_csv(JOBS)
        assert set(MEDIA_TYPES) == {"csv", "excel", "pdf"}

    def test_export_jobs_invalid_format(self):
        with pytest.raises(ValueError):
            export_jobs(JOBS, "docx")
