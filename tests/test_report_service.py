from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest
from loguru import logger

from integrations.risk_data_client import RiskDataClient
from reporting.pdf_report import PDFReportGenerator, format_euro
from services.report_service import ReportService

NOW = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)


@pytest.fixture()
def service() -> ReportService:
    return ReportService(client=RiskDataClient(mock=True), now=NOW)


def test_overview_on_sample_data(service) -> None:
    summary = service.overview()
    assert summary.total_risks == 7
    assert summary.critical_and_high_risks == 4
    assert summary.services_with_risks == 5
    # B2B, B2C and the unassigned bucket
    assert summary.divisions_with_risks == 3
    assert list(summary.level_distribution) == ["critical", "high", "low", "medium"]


def test_rows_resolve_dangling_service(service) -> None:
    rows = {row.assessment.id: row for row in service.rows()}
    assert rows["r-007"].service.name == "Unknown Service"
    assert rows["r-006"].service.division == "Unknown Division"
    assert rows["r-001"].service.team == "Zeus"


def test_rows_search_and_scope(service) -> None:
    assert {r.assessment.id for r in service.rows(search="ZEUS")} == {
        "r-001", "r-002", "r-003", "r-004"
    }
    assert {r.assessment.id for r in service.rows(search="unknown service")} == {"r-007"}
    assert {r.assessment.id for r in service.rows(division="B2C")} == {"r-005"}
    assert {r.assessment.id for r in service.rows(search="monitoring", division="B2B")} == set()


def test_service_detail(service) -> None:
    detail, assessments = service.service_detail("partner portal")
    assert detail.id == "s-002"
    assert detail.team == "Zeus"
    assert {a.id for a in assessments} == {"r-003", "r-004"}

    missing, none = service.service_detail("does not exist")
    assert missing is None
    assert none == []


def test_ciso_report_for_division_and_team(service) -> None:
    report = service.ciso_report(division="B2B", team="Zeus")
    m = report.metrics
    assert report.has_data
    assert m.number_of_products == 2
    assert m.global_revenue_risks == 1
    assert m.local_revenue_risks == 1
    assert m.custom_risks == 1
    assert m.days_since_last_assessment == 21
    assert m.risks_without_controls == 2
    assert m.median_recovery_time == 24
    assert m.pi_risk_score == 150
    assert m.weighted_risk_score == 81
    assert m.total_loss_event_costs == 700000
    assert len(report.critical_rows) == 2
    assert "Zeus team" in report.summary_text


def test_ciso_report_for_empty_scope(service) -> None:
    report = service.ciso_report(division="B2E", team="Apollo")
    assert not report.has_data
    assert report.rows == []
    assert report.metrics.days_since_last_assessment == 0
    assert report.metrics.weighted_risk_score == 0
    assert "No risk assessments" in report.summary_text


def test_refresh_rebuilds_resolver(service) -> None:
    first = service.resolver
    service.refresh()
    assert service.resolver is not first


def test_pdf_report_is_written(service, tmp_path: Path) -> None:
    report = service.ciso_report(division="B2B", team="Zeus")
    path = PDFReportGenerator(report, output_dir=tmp_path).generate()
    written = Path(path)
    assert written.parent == tmp_path
    assert written.read_bytes().startswith(b"%PDF")


def test_pdf_report_handles_empty_scope(service, tmp_path: Path) -> None:
    report = service.ciso_report(division="B2E", team="Apollo")
    path = PDFReportGenerator(report, output_dir=tmp_path).generate()
    assert Path(path).stat().st_size > 0


def test_format_euro() -> None:
    assert format_euro(700000) == "700.000 €"


def test_pdf_reports_in_the_same_second_do_not_collide(service, tmp_path: Path) -> None:
    report = service.ciso_report(division="B2B", team="Zeus")
    first = PDFReportGenerator(report, output_dir=tmp_path).generate()
    second = PDFReportGenerator(report, output_dir=tmp_path).generate()
    assert first != second
    assert len(list(tmp_path.glob("*.pdf"))) == 2


def test_refresh_logs_fetch_time(service) -> None:
    messages = []
    handler_id = logger.add(messages.append, level="INFO", format="{message}")
    try:
        dataset = service.refresh()
    finally:
        logger.remove(handler_id)
    loaded = [m for m in messages if "Dataset loaded" in m]
    assert len(loaded) == 1
    assert f"fetched {dataset.fetched_at:%Y-%m-%d %H:%M:%S} UTC" in loaded[0]
