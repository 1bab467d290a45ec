from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RiskLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RevenueImpact(str, Enum):
    YES = "yes"
    NO = "no"
    UNCLEAR = "unclear"


class PIDataAtRisk(str, Enum):
    YES = "yes"
    NO = "no"


class PIDataAmount(str, Enum):
    LESS_THAN_1M = "less_than_1m"
    BETWEEN_1M_AND_99M = "between_1m_and_99m"
    MORE_THAN_99M = "more_than_99m"
    UNKNOWN = "unknown"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("created_at", mode="after", check_fields=False)
    @classmethod
    def _assume_utc(cls, value):
        # rows written without an offset are stored in UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Division(_Record):
    id: str
    name: str
    description: Optional[str] = None
    parent_division_id: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None


class Team(_Record):
    id: str
    name: str
    description: Optional[str] = None
    division_id: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None


class Service(_Record):
    id: str
    name: str
    description: Optional[str] = None
    division_id: Optional[str] = None
    team_id: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None


class RiskAssessment(_Record):
    """One risk recorded against a service.

    ``risk_level`` and the other enumerated columns are kept as plain strings
    so a corrupted row still loads; use the enums above for comparisons.
    """
    id: str
    service_id: Optional[str] = None
    division_id: Optional[str] = None
    risk_category: str = ""
    risk_description: str = ""
    risk_level: str = RiskLevel.LOW.value
    data_classification: str = ""
    data_interface: str = ""
    data_location: str = ""
    likelihood_per_year: float = 0.0
    mitigation: Optional[str] = None
    risk_owner: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    created_by: Optional[str] = None
    revenue_impact: str = RevenueImpact.NO.value
    has_global_revenue_impact: bool = False
    global_revenue_impact_hours: Optional[float] = None
    has_local_revenue_impact: bool = False
    local_revenue_impact_hours: Optional[float] = None
    pi_data_at_risk: str = PIDataAtRisk.NO.value
    pi_data_amount: Optional[str] = None
    hours_to_remediate: Optional[float] = None
    additional_loss_event_costs: Optional[float] = None
    mitigative_controls_implemented: Optional[str] = None
    post_mortem_hours: Optional[float] = None

    @field_validator("pi_data_at_risk", mode="before")
    @classmethod
    def _pi_default(cls, value):
        return value or PIDataAtRisk.NO.value

    @field_validator("has_global_revenue_impact", "has_local_revenue_impact", mode="before")
    @classmethod
    def _flag_default(cls, value):
        return False if value is None else value


class ServiceDetail(BaseModel):
    """Denormalized service row: names instead of foreign keys."""
    model_config = ConfigDict(frozen=True)

    name: str
    division: str
    team: str
    id: Optional[str] = None
    description: str = ""
    division_id: Optional[str] = None
    team_id: Optional[str] = None
    created_at: Optional[datetime] = None
    created_by: Optional[str] = None
