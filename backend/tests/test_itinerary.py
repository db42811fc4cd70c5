from __future__ import annotations

from math import prod

from roadroute.itinerary import compose_waypoints
from roadroute.path_utils import UNREACHABLE, path_distance
from roadroute.tied_paths import all_shortest_paths


def _undirected(*edges: tuple[str, str, float]) -> dict[str, dict[str, float]]:
    graph: dict[str, dict[str, float]] = {}
    for a, b, w in edges:
        graph.setdefault(a, {})[b] = w
        graph.setdefault(b, {})[a] = w
    return graph


def _tied_legs() -> dict[str, dict[str, float]]:
    return _undirected(
        ("A", "P", 1),
        ("P", "B", 1),
        ("A", "Q", 1),
        ("Q", "B", 1),
        ("B", "R", 2),
        ("R", "D", 1),
        ("B", "S", 1),
        ("S", "D", 2),
        ("E", "F", 1),
    )


def test_itinerary_enumerates_product_of_tied_legs() -> None:
    graph = _tied_legs()

    result = compose_waypoints(graph, ["A", "B", "D"])

    assert result.distance == 5
    assert len(result.paths) == 4
    assert len(set(result.paths)) == 4
    for path in result.paths:
        assert path[0] == "A" and path[2] == "B" and path[-1] == "D"
        assert len(path) == 5
        assert path_distance(path, graph) == 5


def test_itinerary_additivity_matches_leg_searches() -> None:
    graph = _tied_legs()
    points = ["A", "B", "D", "B"]

    legs = [all_shortest_paths(graph, a, b) for a, b in zip(points, points[1:])]
    result = compose_waypoints(graph, points)

    assert result.distance == sum(leg.distance for leg in legs)
    assert len(result.paths) == prod(len(leg.paths) for leg in legs)


def test_unreachable_leg_fails_whole_itinerary() -> None:
    graph = _tied_legs()

    assert compose_waypoints(graph, ["A", "B", "E"]) == UNREACHABLE
    assert compose_waypoints(graph, ["A", "Z", "D"]) == UNREACHABLE


def test_repeated_point_contributes_zero_length_leg() -> None:
    result = compose_waypoints(_tied_legs(), ["A", "A", "B"])

    assert result.distance == 2
    assert set(result.paths) == {("A", "P", "B"), ("A", "Q", "B")}


def test_fewer_than_two_points_is_unreachable() -> None:
    assert compose_waypoints(_tied_legs(), ["A"]) == UNREACHABLE
    assert compose_waypoints(_tied_legs(), []) == UNREACHABLE
