from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest


ROOT_DIR = Path(__file__).resolve().parents[1]

if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ["MOCK_MODE"] = "true"

from models.risk import Division, RiskAssessment, Service, Team  # noqa: E402


def make_assessment(**fields) -> RiskAssessment:
    values = {
        "id": "r-test",
        "service_id": "s-1",
        "risk_category": "Error",
        "risk_description": "Synthetic risk",
        "risk_level": "low",
        "data_classification": "Internal",
        "mitigation": "Peer review",
        "risk_owner": "Owner",
        "created_at": datetime(2026, 10, 1, tzinfo=timezone.utc),
    }
    values.update(fields)
    return RiskAssessment(**values)


@pytest.fixture()
def divisions() -> list[Division]:
    return [
        Division(id="d-1", name="B2B"),
        Division(id="d-2", name="B2C"),
    ]


@pytest.fixture()
def teams() -> list[Team]:
    return [
        Team(id="t-1", name="Zeus", division_id="d-1"),
        Team(id="t-2", name="Athena", division_id="d-2"),
    ]


@pytest.fixture()
def services() -> list[Service]:
    return [
        Service(id="s-1", name="Checkout API", description="Payments",
                division_id="d-1", team_id="t-1", created_by="u-1"),
        Service(id="s-2", name="Loyalty App", division_id="d-2", team_id="t-2"),
        Service(id="s-3", name="Legacy Billing"),
        Service(id="s-4", name="Data Lake", division_id="d-1", team_id="t-gone"),
    ]


@pytest.fixture()
def no_retry_wait(monkeypatch) -> None:
    from tenacity import wait_none

    from integrations.risk_data_client import RiskDataClient

    monkeypatch.setattr(RiskDataClient._fetch.retry, "wait", wait_none())
