"""
Entity resolver.
Joins the flat division / team / service collections into the denormalized
service view used by every table, detail page and report.
"""
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional
from loguru import logger
from models.risk import Division, RiskAssessment, Service, ServiceDetail, Team

UNKNOWN_SERVICE = "Unknown Service"
UNKNOWN_DIVISION = "Unknown Division"
UNKNOWN_TEAM = "Unknown Team"


def _stringify(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class EntityResolver:
    """Id-indexed view over one version of the fetched collections.

    Build one per dataset snapshot; lookups are then O(1) instead of a
    scan per row. The resolver never mutates its inputs.
    """

    def __init__(self, services: Iterable[Service], divisions: Iterable[Division],
                 teams: Iterable[Team]):
        self.services = list(services)
        self._services = {}
        for s in self.services:
            # first occurrence wins, matching a linear find
            self._services.setdefault(s.id, s)
        self._divisions = {}
        for d in divisions:
            self._divisions.setdefault(d.id, d)
        self._teams = {}
        for t in teams:
            self._teams.setdefault(t.id, t)

    def division_name(self, division_id: Optional[str]) -> str:
        division = self._divisions.get(division_id) if division_id is not None else None
        return division.name if division else UNKNOWN_DIVISION

    def team_name(self, team_id: Optional[str]) -> str:
        team = self._teams.get(team_id) if team_id is not None else None
        return team.name if team else UNKNOWN_TEAM

    def resolve(self, service_id: Optional[str]) -> ServiceDetail:
        service = self._services.get(service_id) if service_id is not None else None
        if service is None:
            logger.debug(f"Service not found: {service_id}")
            return ServiceDetail(name=UNKNOWN_SERVICE, division=UNKNOWN_DIVISION,
                                 team=UNKNOWN_TEAM)
        return ServiceDetail(
            name=service.name,
            division=self.division_name(service.division_id),
            team=self.team_name(service.team_id),
        )

    def find_by_name(self, name: str) -> Optional[ServiceDetail]:
        wanted = name.lower()
        service = next((s for s in self.services if s.name.lower() == wanted), None)
        if service is None:
            logger.debug(f'Service "{name}" not found')
            return None
        return ServiceDetail(
            id=service.id,
            name=service.name,
            description=service.description or "",
            division=self.division_name(service.division_id),
            division_id=service.division_id,
            team=self.team_name(service.team_id),
            team_id=service.team_id,
            created_at=service.created_at,
            created_by=service.created_by,
        )

    def services_in_scope(self, division: Optional[str] = None,
                          team: Optional[str] = None) -> list[Service]:
        """Services whose resolved division/team names match; None matches any."""
        selected = []
        for s in self.services:
            if division is not None and self.division_name(s.division_id) != division:
                continue
            if team is not None and self.team_name(s.team_id) != team:
                continue
            selected.append(s)
        return selected

    def filter_by_scope(self, records: Iterable[RiskAssessment],
                        division: Optional[str] = None,
                        team: Optional[str] = None) -> list[RiskAssessment]:
        ids = {s.id for s in self.services_in_scope(division, team)}
        return [r for r in records if r.service_id in ids]


def resolve_service_details(service_id, services, divisions, teams) -> ServiceDetail:
    return EntityResolver(services, divisions, teams).resolve(service_id)


def find_service_by_name(name, services, divisions, teams) -> Optional[ServiceDetail]:
    return EntityResolver(services, divisions, teams).find_by_name(name)


def matches_search_term(record: RiskAssessment, term: str,
                        resolved_details: ServiceDetail) -> bool:
    """Free-text match used by the table search box.

    True when the lowercased term occurs in any non-null field of the record
    or in the resolved service, division or team name. Empty term matches all.
    """
    needle = (term or "").lower()
    if not needle:
        return True
    for value in record.model_dump().values():
        if value is None:
            continue
        if needle in _stringify(value).lower():
            return True
    return any(
        needle in text.lower()
        for text in (resolved_details.name, resolved_details.division, resolved_details.team)
    )
