import math
from collections import Counter
from datetime import datetime, timezone
from typing import Iterable, Optional
from models.report import CISOMetrics, OverviewSummary
from models.risk import PIDataAmount, PIDataAtRisk, RiskAssessment, RiskLevel, Service

WEIGHTS = {
    RiskLevel.CRITICAL.value: 4,
    RiskLevel.HIGH.value: 3,
    RiskLevel.MEDIUM.value: 2,
    RiskLevel.LOW.value: 1,
}
MAX_WEIGHT = 4

PI_AMOUNT_POINTS = {
    PIDataAmount.MORE_THAN_99M.value: 100,
    PIDataAmount.BETWEEN_1M_AND_99M.value: 50,
    PIDataAmount.LESS_THAN_1M.value: 10,
}
PI_DEFAULT_POINTS = 5

SECONDS_PER_DAY = 86400


def distribution_by(records: Iterable[RiskAssessment], key: str) -> dict:
    """Count records per value of ``key``; keys come out in first-seen order."""
    return dict(Counter(getattr(r, key, None) for r in records))


def weighted_risk_score(records: list[RiskAssessment]) -> int:
    # severity index 0..100; unknown levels weigh 0
    if not records:
        return 0
    total = sum(WEIGHTS.get(r.risk_level, 0) for r in records)
    return math.floor(total / (len(records) * MAX_WEIGHT) * 100 + 0.5)


def median_remediation_hours(records: Iterable[RiskAssessment]) -> float:
    hours = sorted(r.hours_to_remediate for r in records if r.hours_to_remediate is not None)
    if not hours:
        return 0
    mid = len(hours) // 2
    if len(hours) % 2 == 0:
        return ((hours[mid - 1] or 0) + (hours[mid] or 0)) / 2
    return hours[mid] or 0


def pi_risk_score(records: Iterable[RiskAssessment]) -> int:
    score = 0
    for r in records:
        if r.pi_data_at_risk == PIDataAtRisk.YES.value:
            score += PI_AMOUNT_POINTS.get(r.pi_data_amount, PI_DEFAULT_POINTS)
    return score


def days_since_last_assessment(records: list[RiskAssessment],
                               now: Optional[datetime] = None) -> int:
    # an empty scope reads as "assessed now"
    if not records:
        return 0
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    latest = max(r.created_at for r in records)
    return math.floor((now - latest).total_seconds() / SECONDS_PER_DAY)


def count_missing_mitigation(records: Iterable[RiskAssessment]) -> int:
    return sum(1 for r in records if not r.mitigation or not r.mitigation.strip())


def count_global_revenue_risks(records: Iterable[RiskAssessment]) -> int:
    return sum(1 for r in records if r.has_global_revenue_impact)


def count_local_revenue_risks(records: Iterable[RiskAssessment]) -> int:
    return sum(1 for r in records if r.has_local_revenue_impact)


def count_custom_risks(records: Iterable[RiskAssessment], standard_categories) -> int:
    standard = set(standard_categories)
    return sum(1 for r in records if r.risk_category not in standard)


def count_by_level(records: Iterable[RiskAssessment], *levels) -> int:
    wanted = {getattr(level, "value", level) for level in levels}
    return sum(1 for r in records if r.risk_level in wanted)


def total_loss_event_costs(records: Iterable[RiskAssessment]) -> float:
    return sum(r.additional_loss_event_costs or 0 for r in records)


def overview_summary(records: list[RiskAssessment], services: list[Service]) -> OverviewSummary:
    service_ids = {r.service_id for r in records}
    # unassigned services collapse into a single None division
    divisions = {s.division_id for s in services if s.id in service_ids}
    return OverviewSummary(
        total_risks=len(records),
        critical_and_high_risks=count_by_level(records, RiskLevel.CRITICAL, RiskLevel.HIGH),
        services_with_risks=len(service_ids),
        divisions_with_risks=len(divisions),
        weighted_risk_score=weighted_risk_score(records),
        level_distribution=distribution_by(records, "risk_level"),
        category_distribution=distribution_by(records, "risk_category"),
        classification_distribution=distribution_by(records, "data_classification"),
    )


class MetricsEngine:
    """Bundles the dashboard metrics for one scope of assessments."""

    def __init__(self, records, now: Optional[datetime] = None, standard_categories=()):
        self.records = list(records)
        self.now = now
        self.standard_categories = standard_categories

    def ciso_metrics(self, product_count: int = 0) -> CISOMetrics:
        r = self.records
        return CISOMetrics(
            number_of_products=product_count,
            global_revenue_risks=count_global_revenue_risks(r),
            local_revenue_risks=count_local_revenue_risks(r),
            custom_risks=count_custom_risks(r, self.standard_categories),
            days_since_last_assessment=days_since_last_assessment(r, self.now),
            risks_without_controls=count_missing_mitigation(r),
            median_recovery_time=median_remediation_hours(r),
            pi_risk_score=pi_risk_score(r),
            weighted_risk_score=weighted_risk_score(r),
            total_loss_event_costs=total_loss_event_costs(r),
        )
