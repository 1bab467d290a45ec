from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field
from models.risk import Division, RiskAssessment, Service, ServiceDetail, Team


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Dataset(BaseModel):
    """The four collections fetched from the backend, as one snapshot."""
    divisions: list[Division] = Field(default_factory=list)
    teams: list[Team] = Field(default_factory=list)
    services: list[Service] = Field(default_factory=list)
    assessments: list[RiskAssessment] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=_utcnow)


class AssessmentRow(BaseModel):
    assessment: RiskAssessment
    service: ServiceDetail


class OverviewSummary(BaseModel):
    total_risks: int = 0
    critical_and_high_risks: int = 0
    services_with_risks: int = 0
    divisions_with_risks: int = 0
    weighted_risk_score: int = 0
    level_distribution: dict[str, int] = Field(default_factory=dict)
    category_distribution: dict[str, int] = Field(default_factory=dict)
    classification_distribution: dict[str, int] = Field(default_factory=dict)


class CISOMetrics(BaseModel):
    number_of_products: int = 0
    global_revenue_risks: int = 0
    local_revenue_risks: int = 0
    custom_risks: int = 0
    days_since_last_assessment: int = 0
    risks_without_controls: int = 0
    median_recovery_time: float = 0.0
    pi_risk_score: int = 0
    weighted_risk_score: int = 0
    total_loss_event_costs: float = 0.0


class CISOReport(BaseModel):
    organization_name: str
    division: str
    team: str
    generated_at: datetime = Field(default_factory=_utcnow)
    metrics: CISOMetrics = Field(default_factory=CISOMetrics)
    level_distribution: dict[str, int] = Field(default_factory=dict)
    category_distribution: dict[str, int] = Field(default_factory=dict)
    classification_distribution: dict[str, int] = Field(default_factory=dict)
    rows: list[AssessmentRow] = Field(default_factory=list)
    has_data: bool = False
    summary_text: Optional[str] = None

    @property
    def critical_rows(self):
        return [r for r in self.rows if r.assessment.risk_level == "critical"]

    @property
    def high_rows(self):
        return [r for r in self.rows if r.assessment.risk_level == "high"]
