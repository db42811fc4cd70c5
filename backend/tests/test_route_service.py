from __future__ import annotations

from typing import Any

import pytest

from roadroute.catalogue import catalogue_from_payload, load_catalogue
from roadroute.graph_builder import RoadCategory, RoadSettings
from roadroute.route_errors import RoutePlanningError
from roadroute.route_service import MOUNTAIN_HINT, build_route_response, plan_routes
from roadroute.settings import settings


@pytest.fixture
def catalogue():
    return load_catalogue(settings.catalogue_path)


def test_two_point_plan_ranks_k_shortest_routes(catalogue) -> None:
    plan = plan_routes(catalogue, ["Town Hall", "Harbor"], max_routes=3)

    assert plan.no_route_reason is None
    assert [group.distance for group in plan.routes] == [4.0, 4.0, 10.0]
    assert plan.routes[0].paths == (("Town Hall", "Station", "Harbor"),)
    assert plan.routes[1].paths == (("Town Hall", "Temple", "Harbor"),)
    assert plan.routes[2].paths == (("Town Hall", "Station", "North Junction", "Lake", "Harbor"),)
    assert plan.graph["Station"]["Harbor"] == 2.0


def test_via_plan_reports_visible_legs(catalogue) -> None:
    plan = plan_routes(catalogue, ["Town Hall", "Station", "Lake"])
    response = build_route_response(plan, catalogue)

    assert len(response.routes) == 1
    group = response.routes[0]
    assert group.rank == 1
    assert group.distance == 6.0
    assert group.paths[0].nodes == ["Town Hall", "Station", "North Junction", "Lake"]
    assert [(leg.node, leg.distance) for leg in group.paths[0].legs] == [
        ("Town Hall", 0.0),
        ("Station", 2.0),
        ("Lake", 4.0),
    ]


def test_disconnected_point_under_mountain_avoidance(catalogue) -> None:
    plan = plan_routes(catalogue, ["Town Hall", "Farm"], road_settings=RoadSettings(avoid_mountain=True))

    assert plan.routes == []
    assert plan.no_route_reason == "disconnected_point"
    assert plan.offending_point == "Farm"
    assert plan.message is not None and MOUNTAIN_HINT in plan.message


def test_empty_graph_reports_no_roads(catalogue) -> None:
    road_settings = RoadSettings(excluded_categories=frozenset({RoadCategory.DEFAULT, RoadCategory.MOUNTAIN}))

    plan = plan_routes(catalogue, ["Town Hall", "Harbor"], road_settings=road_settings)

    assert plan.graph == {}
    assert plan.no_route_reason == "no_roads"
    assert build_route_response(plan, catalogue).routes == []


def test_connected_points_in_separate_components_report_no_route() -> None:
    islands = catalogue_from_payload(
        {
            "nodes": [{"id": "A"}, {"id": "B"}, {"id": "C"}, {"id": "D"}],
            "edges": [["A", "B", 1], ["C", "D", 1]],
        }
    )

    plan = plan_routes(islands, ["A", "D"])

    assert plan.no_route_reason == "no_route"
    assert plan.routes == []
    assert plan.message is not None and MOUNTAIN_HINT not in plan.message


@pytest.mark.parametrize(
    ("points", "reason_code"),
    [
        (["Town Hall"], "invalid_request"),
        (["Town Hall", "Atlantis"], "unknown_point"),
        (["Town Hall", "North Junction"], "hidden_point"),
        (["Town Hall", "Station", "Temple", "Harbor", "Lake", "Station", "Temple", "Harbor"], "too_many_via_points"),
    ],
)
def test_invalid_requests_raise_reason_coded_errors(catalogue, points: list[str], reason_code: str) -> None:
    with pytest.raises(RoutePlanningError) as exc_info:
        plan_routes(catalogue, points)
    assert exc_info.value.reason_code == reason_code


def test_max_routes_outside_limits_is_rejected(catalogue) -> None:
    with pytest.raises(RoutePlanningError) as exc_info:
        plan_routes(catalogue, ["Town Hall", "Harbor"], max_routes=0)
    assert exc_info.value.reason_code == "invalid_request"


def test_plan_emits_structured_event(catalogue, monkeypatch) -> None:
    logged: list[dict[str, Any]] = []

    def _capture_log_event(event: str, **fields: Any) -> None:
        logged.append({"event": event, **fields})

    monkeypatch.setattr("roadroute.route_service.log_event", _capture_log_event)

    plan_routes(catalogue, ["Town Hall", "Harbor"], road_settings=RoadSettings(avoid_mountain=True), max_routes=2)

    assert len(logged) == 1
    entry = logged[0]
    assert entry["event"] == "route_plan"
    assert entry["points"] == ["Town Hall", "Harbor"]
    assert entry["excluded_categories"] == ["mountain"]
    assert entry["route_count"] == 2
    assert entry["no_route_reason"] is None
