from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from click.testing import CliRunner

from cli.commands import cli
from config.settings import settings
from integrations.risk_data_client import RiskDataClient


def _invoke(*args):
    result = CliRunner().invoke(cli, list(args))
    assert result.exit_code == 0, result.output
    return result.output


def _live_backend(monkeypatch, handler) -> None:
    def client() -> RiskDataClient:
        return RiskDataClient(base_url="https://db.example.test", api_key="anon-key",
                              mock=False, transport=httpx.MockTransport(handler))

    monkeypatch.setattr("services.report_service.RiskDataClient", client)


def test_overview_command() -> None:
    output = _invoke("overview")
    assert "Risk Overview" in output
    assert "Total Risks:" in output


def test_assessments_command_with_search() -> None:
    output = _invoke("assessments", "--search", "malicious")
    assert "Risk Assessments (1)" in output


def test_assessments_command_without_matches() -> None:
    output = _invoke("assessments", "--search", "no-such-risk")
    assert "No risk assessments match." in output


def test_service_command() -> None:
    assert "Checkout API" in _invoke("service", "checkout api")
    assert "not found" in _invoke("service", "Unknown Thing")


def test_ciso_report_command_without_pdf() -> None:
    output = _invoke("ciso-report", "--division", "B2B", "--team", "Zeus", "--no-pdf")
    assert "CISO Report: B2B Division - Zeus Team" in output
    assert "Generating PDF" not in output


def test_ciso_report_command_writes_pdf(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(settings, "REPORT_OUTPUT_DIR", tmp_path)
    output = _invoke("ciso-report", "--division", "B2B", "--team", "Zeus")
    assert "Report saved" in output
    assert "PDF generation failed" not in output
    assert len(list(tmp_path.glob("CISO_Report_B2B_Zeus_*.pdf"))) == 1


@pytest.mark.parametrize("command", [
    ["overview"],
    ["assessments"],
    ["service", "Checkout API"],
    ["ciso-report", "--no-pdf"],
])
def test_unreachable_backend_is_reported(monkeypatch, no_retry_wait, command) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _live_backend(monkeypatch, handler)
    output = _invoke(*command)
    assert "Connection failed" in output
    assert "Traceback" not in output


@pytest.mark.parametrize("command", [["overview"], ["service", "Checkout API"]])
def test_backend_error_status_is_reported(monkeypatch, command) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "boom"})

    _live_backend(monkeypatch, handler)
    output = _invoke(*command)
    assert "Backend error" in output
    assert "HTTP 500" in output


def test_standard_risks_command() -> None:
    output = _invoke("standard-risks", "--category", "malicious")
    assert "Malicious" in output
    assert "Failure" not in output


def test_status_and_connect_in_mock_mode() -> None:
    assert "MOCK" in _invoke("status")
    assert "MOCK MODE" in _invoke("connect")
