from __future__ import annotations

from roadroute.graph_builder import (
    Edge,
    RoadCategory,
    RoadSettings,
    build_graph,
    category_filter,
    is_connected_point,
)


def _edges() -> list[Edge]:
    return [
        Edge("A", "B", 2.0),
        Edge("B", "D", 2.0),
        Edge("A", "C", 3.0),
        Edge("C", "D", 1.0),
        Edge("D", "M", 4.0, RoadCategory.MOUNTAIN),
    ]


def test_build_graph_is_symmetric() -> None:
    graph = build_graph(_edges(), lambda _category: True)

    for edge in _edges():
        assert graph[edge.a][edge.b] == edge.weight
        assert graph[edge.b][edge.a] == edge.weight
    assert set(graph) == {"A", "B", "C", "D", "M"}


def test_excluded_category_drops_edges_and_isolated_nodes() -> None:
    graph = build_graph(_edges(), RoadSettings(avoid_mountain=True).include_category)

    assert "M" not in graph
    assert "M" not in graph["D"]
    assert graph["C"]["D"] == 1.0
    assert not is_connected_point(graph, "M")
    assert is_connected_point(graph, "A")


def test_everything_excluded_yields_empty_graph() -> None:
    graph = build_graph(_edges(), lambda _category: False)
    assert graph == {}


def test_category_filter_accepts_raw_values() -> None:
    include = category_filter(["mountain"])

    assert include(RoadCategory.DEFAULT)
    assert not include(RoadCategory.MOUNTAIN)
    assert build_graph(_edges(), include) == build_graph(_edges(), RoadSettings(avoid_mountain=True).include_category)


def test_road_settings_merge_explicit_exclusions() -> None:
    settings_off = RoadSettings()
    settings_both = RoadSettings(avoid_mountain=True, excluded_categories=frozenset({RoadCategory.DEFAULT}))

    assert settings_off.excluded() == frozenset()
    assert settings_both.excluded() == {RoadCategory.DEFAULT, RoadCategory.MOUNTAIN}
    assert build_graph(_edges(), settings_both.include_category) == {}


def test_repeated_pair_keeps_last_weight_in_both_directions() -> None:
    graph = build_graph([Edge("A", "B", 5.0), Edge("B", "A", 3.0)], lambda _category: True)
    assert graph == {"A": {"B": 3.0}, "B": {"A": 3.0}}


def test_build_graph_is_deterministic_and_fresh() -> None:
    first = build_graph(_edges(), lambda _category: True)
    second = build_graph(_edges(), lambda _category: True)

    assert first == second
    first["A"]["B"] = 99.0
    assert second["A"]["B"] == 2.0


def test_road_settings_predicate_matches_category_filter() -> None:
    for road_settings in (
        RoadSettings(),
        RoadSettings(avoid_mountain=True),
        RoadSettings(excluded_categories=frozenset({RoadCategory.DEFAULT})),
    ):
        include = category_filter(road_settings.excluded())
        for category in RoadCategory:
            assert road_settings.include_category(category) is include(category)
