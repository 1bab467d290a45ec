import httpx
from loguru import logger
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential
from config.settings import settings
from models.report import Dataset
from models.risk import Division, RiskAssessment, Service, Team


class RiskDataClient:
    """Read-only client for the hosted backend's REST (PostgREST) interface."""

    def __init__(self, base_url=None, api_key=None, mock=None, transport=None):
        self.mock = settings.MOCK_MODE if mock is None else mock
        self.base_url = (base_url or settings.DATA_API_URL).rstrip("/")
        api_key = api_key if api_key is not None else settings.DATA_API_KEY
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        }
        self.timeout = settings.REQUEST_TIMEOUT
        self.transport = transport
        if self.mock:
            logger.warning("RiskDataClient: MOCK MODE active.")
        else:
            logger.info(f"RiskDataClient: using backend {self.base_url}")

    def _client(self) -> httpx.Client:
        return httpx.Client(headers=self.headers, timeout=self.timeout,
                            transport=self.transport)

    def verify_connection(self):
        if self.mock:
            return
        try:
            with self._client() as client:
                resp = client.get(f"{self.base_url}/rest/v1/")
        except httpx.HTTPError as e:
            logger.error(f"Cannot reach backend: {e}")
            raise ConnectionError(
                "Cannot connect to the backend. Check DATA_API_URL and network access."
            ) from e
        if resp.status_code in (401, 403):
            logger.error(f"Auth failed: HTTP {resp.status_code}")
            raise ConnectionError("Backend rejected the API key. Check DATA_API_KEY.")
        logger.info(f"Backend reachable: HTTP {resp.status_code}")

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------
    def get_divisions(self) -> list[Division]:
        rows = self._mock_divisions() if self.mock else self._get("divisions")
        return self._parse(Division, rows, "divisions")

    def get_teams(self) -> list[Team]:
        rows = self._mock_teams() if self.mock else self._get("teams")
        return self._parse(Team, rows, "teams")

    def get_services(self) -> list[Service]:
        rows = self._mock_services() if self.mock else self._get("services")
        return self._parse(Service, rows, "services")

    def get_risk_assessments(self) -> list[RiskAssessment]:
        if self.mock:
            rows = sorted(self._mock_risk_assessments(),
                          key=lambda r: r["created_at"], reverse=True)
        else:
            rows = self._get("risk_assessments", {"order": "created_at.desc"})
        return self._parse(RiskAssessment, rows, "risk_assessments")

    def get_service_risk_assessments(self, service_id: str) -> list[RiskAssessment]:
        if self.mock:
            rows = [r for r in self._mock_risk_assessments() if r["service_id"] == service_id]
        else:
            rows = self._get("risk_assessments", {"service_id": f"eq.{service_id}"})
        return self._parse(RiskAssessment, rows, "risk_assessments")

    def get_dataset(self) -> Dataset:
        return Dataset(
            divisions=self.get_divisions(),
            teams=self.get_teams(),
            services=self.get_services(),
            assessments=self.get_risk_assessments(),
        )

    @staticmethod
    def _parse(model, rows, table):
        records = []
        for row in rows:
            try:
                records.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning(f"Skipping invalid {table} row {row.get('id', '?')}: "
                               f"{e.error_count()} error(s)")
        return records

    # ------------------------------------------------------------------
    # Generic GET with retry
    # ------------------------------------------------------------------
    def _get(self, table: str, params=None) -> list[dict]:
        try:
            return self._fetch(table, params)
        except httpx.TransportError as e:
            raise ConnectionError(
                f"Cannot reach the backend while fetching {table}. "
                "Check DATA_API_URL and network access."
            ) from e

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _fetch(self, table: str, params=None) -> list[dict]:
        query = {"select": "*"}
        query.update(params or {})
        try:
            with self._client() as client:
                resp = client.get(f"{self.base_url}/rest/v1/{table}", params=query)
                resp.raise_for_status()
                result = resp.json()
                logger.info(f"GET {table} → {len(result)} records")
                return result
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error on {table}: {e.response.status_code}")
            raise
        except httpx.TransportError as e:
            logger.error(f"Error on {table}: {e}")
            raise

    # ==================================================================
    # MOCK DATA
    # ==================================================================
    def _mock_divisions(self):
        return [
            {"id": "d-b2b", "name": "B2B", "description": "Business customers",
             "created_at": "2026-01-05T09:00:00Z", "created_by": "u-admin"},
            {"id": "d-b2c", "name": "B2C", "description": "Consumer products",
             "created_at": "2026-01-05T09:05:00Z", "created_by": "u-admin"},
            {"id": "d-b2e", "name": "B2E", "description": "Employee platforms",
             "created_at": "2026-01-05T09:10:00Z", "created_by": "u-admin"},
        ]

    def _mock_teams(self):
        return [
            {"id": "t-zeus", "name": "Zeus", "division_id": "d-b2b"},
            {"id": "t-hermes", "name": "Hermes", "division_id": "d-b2b"},
            {"id": "t-athena", "name": "Athena", "division_id": "d-b2c"},
            {"id": "t-apollo", "name": "Apollo", "division_id": "d-b2e"},
        ]

    def _mock_services(self):
        return [
            {"id": "s-001", "name": "Checkout API", "description": "Order payment flow",
             "division_id": "d-b2b", "team_id": "t-zeus",
             "created_at": "2026-02-01T10:00:00Z", "created_by": "u-anna"},
            {"id": "s-002", "name": "Partner Portal", "description": "Reseller self-service",
             "division_id": "d-b2b", "team_id": "t-zeus",
             "created_at": "2026-02-03T10:00:00Z", "created_by": "u-anna"},
            {"id": "s-003", "name": "Loyalty App", "description": "Points and rewards",
             "division_id": "d-b2c", "team_id": "t-athena",
             "created_at": "2026-02-10T10:00:00Z", "created_by": "u-marc"},
            {"id": "s-004", "name": "Legacy Billing", "description": None,
             "division_id": None, "team_id": None,
             "created_at": "2026-03-01T10:00:00Z", "created_by": "u-marc"},
            {"id": "s-005", "name": "Data Lake", "description": "Analytics storage",
             "division_id": "d-b2b", "team_id": "t-retired",
             "created_at": "2026-03-15T10:00:00Z", "created_by": "u-anna"},
        ]

    def _mock_risk_assessments(self):
        base = {
            "data_interface": "REST API", "data_location": "EU-West",
            "revenue_impact": "no", "has_global_revenue_impact": False,
            "has_local_revenue_impact": False, "pi_data_at_risk": "no",
            "created_by": "u-anna",
        }
        rows = [
            {"id": "r-001", "service_id": "s-001", "risk_category": "Error",
             "risk_description": "Vulnerable component gets deployed to production environment",
             "risk_level": "critical", "data_classification": "Confidential",
             "likelihood_per_year": 40, "mitigation": "SCA scanning in CI",
             "risk_owner": "Anna Weber", "created_at": "2026-09-28T08:30:00Z",
             "revenue_impact": "yes", "has_global_revenue_impact": True,
             "global_revenue_impact_hours": 6, "pi_data_at_risk": "yes",
             "pi_data_amount": "between_1m_and_99m", "hours_to_remediate": 12,
             "additional_loss_event_costs": 250000},
            {"id": "r-002", "service_id": "s-001", "risk_category": "Failure",
             "risk_description": "Third party dependency disrupts core component",
             "risk_level": "high", "data_classification": "Internal",
             "likelihood_per_year": 25, "mitigation": "",
             "risk_owner": "Anna Weber", "created_at": "2026-09-12T14:00:00Z",
             "revenue_impact": "yes", "has_local_revenue_impact": True,
             "local_revenue_impact_hours": 4, "hours_to_remediate": 24},
            {"id": "r-003", "service_id": "s-002", "risk_category": "Malicious",
             "risk_description": "An attacker exposes PI data",
             "risk_level": "critical", "data_classification": "Restricted",
             "likelihood_per_year": 10, "mitigation": "WAF and rate limiting",
             "risk_owner": "Jonas Keller", "created_at": "2026-08-30T11:15:00Z",
             "revenue_impact": "unclear", "pi_data_at_risk": "yes",
             "pi_data_amount": "more_than_99m", "hours_to_remediate": 48,
             "additional_loss_event_costs": 450000},
            {"id": "r-004", "service_id": "s-002", "risk_category": "Vendor Lock-in",
             "risk_description": "Portal hosting contract cannot be migrated",
             "risk_level": "medium", "data_classification": "Internal",
             "likelihood_per_year": 15, "mitigation": None,
             "risk_owner": "Jonas Keller", "created_at": "2026-07-19T09:45:00Z"},
            {"id": "r-005", "service_id": "s-003", "risk_category": "Failure",
             "risk_description": "Insufficient Monitoring and Alerting",
             "risk_level": "low", "data_classification": "Public",
             "likelihood_per_year": 60, "mitigation": "On-call rota",
             "risk_owner": "Marc Dubois", "created_at": "2026-09-02T16:20:00Z",
             "hours_to_remediate": 8},
            {"id": "r-006", "service_id": "s-004", "risk_category": "Error",
             "risk_description": "Unauthorized internal access to confidential information",
             "risk_level": "high", "data_classification": "Confidential",
             "likelihood_per_year": 20, "mitigation": "Quarterly access review",
             "risk_owner": "Marc Dubois", "created_at": "2026-06-11T13:00:00Z",
             "pi_data_at_risk": "yes", "pi_data_amount": "less_than_1m"},
            {"id": "r-007", "service_id": "s-404", "risk_category": "Failure",
             "risk_description": "Resource exhaustion (CPU, memory, storage)",
             "risk_level": "medium", "data_classification": "Internal",
             "likelihood_per_year": 30, "mitigation": "Autoscaling",
             "risk_owner": "Unassigned", "created_at": "2026-05-20T07:00:00Z"},
        ]
        return [{**base, **row} for row in rows]
