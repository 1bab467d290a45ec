from __future__ import annotations

from conftest import make_assessment
from core.resolver import (
    UNKNOWN_DIVISION,
    UNKNOWN_SERVICE,
    UNKNOWN_TEAM,
    EntityResolver,
    find_service_by_name,
    matches_search_term,
    resolve_service_details,
)
from models.risk import Service, ServiceDetail


def test_unknown_service_resolves_to_all_sentinels(services, divisions, teams) -> None:
    for service_id in ("s-404", "", None):
        detail = resolve_service_details(service_id, services, divisions, teams)
        assert (detail.name, detail.division, detail.team) == (
            UNKNOWN_SERVICE, UNKNOWN_DIVISION, UNKNOWN_TEAM
        )
    assert UNKNOWN_SERVICE == "Unknown Service"


def test_known_service_resolves_names(services, divisions, teams) -> None:
    detail = resolve_service_details("s-1", services, divisions, teams)
    assert (detail.name, detail.division, detail.team) == ("Checkout API", "B2B", "Zeus")


def test_dangling_team_keeps_real_division(services, divisions, teams) -> None:
    detail = resolve_service_details("s-4", services, divisions, teams)
    assert detail.division == "B2B"
    assert detail.team == "Unknown Team"


def test_unassigned_service_uses_same_fallback_as_dangling(services, divisions, teams) -> None:
    detail = resolve_service_details("s-3", services, divisions, teams)
    assert detail.name == "Legacy Billing"
    assert detail.division == "Unknown Division"
    assert detail.team == "Unknown Team"


def test_resolver_tolerates_empty_collections() -> None:
    detail = resolve_service_details("s-1", [], [], [])
    assert detail.name == UNKNOWN_SERVICE


def test_find_service_by_name_is_case_insensitive(services, divisions, teams) -> None:
    detail = find_service_by_name("checkout api", services, divisions, teams)
    assert detail is not None
    assert detail.id == "s-1"
    assert detail.name == "Checkout API"
    assert detail.description == "Payments"
    assert detail.division == "B2B"
    assert detail.division_id == "d-1"
    assert detail.team_id == "t-1"
    assert detail.created_by == "u-1"


def test_find_service_by_name_requires_exact_match(services, divisions, teams) -> None:
    assert find_service_by_name("Checkout", services, divisions, teams) is None
    assert find_service_by_name("Nope", services, divisions, teams) is None


def test_find_service_by_name_first_match_wins(divisions, teams) -> None:
    duplicated = [
        Service(id="s-a", name="Portal", division_id="d-1"),
        Service(id="s-b", name="PORTAL", division_id="d-2"),
    ]
    detail = find_service_by_name("portal", duplicated, divisions, teams)
    assert detail.id == "s-a"
    assert detail.description == ""


def test_search_matches_enum_field_regardless_of_case() -> None:
    record = make_assessment(risk_level="critical")
    details = ServiceDetail(name="Checkout API", division="B2B", team="Zeus")
    assert matches_search_term(record, "CRITICAL", details)
    assert matches_search_term(record, "Crit", details)


def test_search_matches_resolved_names() -> None:
    record = make_assessment()
    details = ServiceDetail(name="Checkout API", division="B2B", team="Zeus")
    assert matches_search_term(record, "zeus", details)
    assert matches_search_term(record, "checkout", details)
    assert not matches_search_term(record, "athena", details)


def test_search_stringifies_booleans_and_numbers() -> None:
    record = make_assessment(has_global_revenue_impact=True, likelihood_per_year=25,
                             hours_to_remediate=12.5)
    details = ServiceDetail(name="x", division="y", team="z")
    assert matches_search_term(record, "true", details)
    assert matches_search_term(record, "25", details)
    assert matches_search_term(record, "12.5", details)
    assert not matches_search_term(record, "25.0", details)


def test_search_ignores_null_fields() -> None:
    record = make_assessment(pi_data_amount=None)
    details = ServiceDetail(name="x", division="y", team="z")
    assert not matches_search_term(record, "none", details)


def test_empty_term_matches_everything() -> None:
    record = make_assessment()
    details = ServiceDetail(name="", division="", team="")
    assert matches_search_term(record, "", details)


def test_filter_by_scope_uses_resolved_names(services, divisions, teams) -> None:
    resolver = EntityResolver(services, divisions, teams)
    records = [
        make_assessment(id="r-1", service_id="s-1"),
        make_assessment(id="r-2", service_id="s-2"),
        make_assessment(id="r-3", service_id="s-4"),
        make_assessment(id="r-4", service_id="s-404"),
    ]
    assert [r.id for r in resolver.filter_by_scope(records, "B2B", "Zeus")] == ["r-1"]
    assert [r.id for r in resolver.filter_by_scope(records, "B2B")] == ["r-1", "r-3"]
    assert [s.id for s in resolver.services_in_scope(team="Unknown Team")] == ["s-3", "s-4"]


def test_resolution_is_idempotent(services, divisions, teams) -> None:
    first = resolve_service_details("s-4", services, divisions, teams)
    second = resolve_service_details("s-4", services, divisions, teams)
    assert first == second
    assert first.model_dump_json() == second.model_dump_json()
