from datetime import datetime, timezone
from typing import Optional
from loguru import logger
from config.settings import settings
from core.metrics_engine import MetricsEngine, distribution_by, overview_summary
from core.resolver import EntityResolver, matches_search_term
from data.standard_risks import STANDARD_CATEGORIES
from integrations.risk_data_client import RiskDataClient
from models.report import AssessmentRow, CISOReport, Dataset, OverviewSummary


class ReportService:
    def __init__(self, client: Optional[RiskDataClient] = None, now: Optional[datetime] = None):
        self.client = client or RiskDataClient()
        self.now = now
        self._dataset = None
        self._resolver = None

    @property
    def dataset(self) -> Dataset:
        if self._dataset is None:
            self.refresh()
        return self._dataset

    @property
    def resolver(self) -> EntityResolver:
        if self._resolver is None:
            ds = self.dataset
            self._resolver = EntityResolver(ds.services, ds.divisions, ds.teams)
        return self._resolver

    def refresh(self) -> Dataset:
        """Re-fetch every collection; the resolver index is rebuilt lazily."""
        logger.info("Loading risk dataset...")
        self._dataset = self.client.get_dataset()
        self._resolver = None
        ds = self._dataset
        logger.info(
            f"Dataset loaded: {len(ds.divisions)} divisions, {len(ds.teams)} teams, "
            f"{len(ds.services)} services, {len(ds.assessments)} assessments "
            f"(fetched {ds.fetched_at:%Y-%m-%d %H:%M:%S} UTC)"
        )
        return ds

    def overview(self) -> OverviewSummary:
        return overview_summary(self.dataset.assessments, self.dataset.services)

    def rows(self, search: str = "", division: Optional[str] = None,
             team: Optional[str] = None) -> list[AssessmentRow]:
        records = self.dataset.assessments
        if division is not None or team is not None:
            records = self.resolver.filter_by_scope(records, division, team)
        result = []
        for r in records:
            details = self.resolver.resolve(r.service_id)
            if matches_search_term(r, search, details):
                result.append(AssessmentRow(assessment=r, service=details))
        logger.debug(f"{len(result)} of {len(records)} assessments match '{search}'")
        return result

    def service_detail(self, name: str):
        detail = self.resolver.find_by_name(name)
        if detail is None:
            return None, []
        assessments = [a for a in self.dataset.assessments if a.service_id == detail.id]
        return detail, assessments

    def ciso_report(self, division: Optional[str] = None,
                    team: Optional[str] = None) -> CISOReport:
        division = division or settings.REPORT_DIVISION
        team = team or settings.REPORT_TEAM
        logger.info(f"CISO report started for: {division} / {team}")

        products = self.resolver.services_in_scope(division, team)
        records = self.resolver.filter_by_scope(self.dataset.assessments, division, team)

        report = CISOReport(
            organization_name=settings.ORGANIZATION_NAME,
            division=division,
            team=team,
            generated_at=self.now or datetime.now(timezone.utc),
            has_data=bool(records),
        )
        if records:
            engine = MetricsEngine(records, now=self.now,
                                   standard_categories=STANDARD_CATEGORIES)
            report.metrics = engine.ciso_metrics(product_count=len(products))
            report.level_distribution = distribution_by(records, "risk_level")
            report.category_distribution = distribution_by(records, "risk_category")
            report.classification_distribution = distribution_by(records, "data_classification")
            report.rows = [AssessmentRow(assessment=r, service=self.resolver.resolve(r.service_id))
                           for r in records]
        else:
            logger.warning(f"No assessments in scope {division} / {team}.")
            report.metrics.number_of_products = len(products)

        report.summary_text = self._summary_text(report)
        logger.info("CISO report complete.")
        return report

    @staticmethod
    def _summary_text(report: CISOReport) -> str:
        m = report.metrics
        if not report.has_data:
            return (
                f"No risk assessments are recorded for the {report.division} division, "
                f"{report.team} team, as of {report.generated_at.strftime('%B %d, %Y')}. "
                f"{m.number_of_products} product(s) are in scope and should be assessed "
                f"against the standard risk catalogue."
            )
        return (
            f"The {report.division} division, {report.team} team, manages "
            f"{m.number_of_products} product(s) with {len(report.rows)} recorded risk(s), "
            f"{len(report.critical_rows)} of them critical. "
            f"The weighted risk score is {m.weighted_risk_score}/100 and the "
            f"last assessment was {m.days_since_last_assessment} day(s) ago.\n\n"
            f"{m.risks_without_controls} risk(s) have no compensating controls. "
            f"Median recovery time is {m.median_recovery_time:g} hours and the PI risk "
            f"score is {m.pi_risk_score}."
        )
