from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

Graph = dict[str, dict[str, float]]
CategoryPredicate = Callable[["RoadCategory"], bool]


class RoadCategory(str, Enum):
    DEFAULT = "default"
    MOUNTAIN = "mountain"


@dataclass(frozen=True)
class Edge:
    a: str
    b: str
    weight: float
    category: RoadCategory = RoadCategory.DEFAULT


@dataclass(frozen=True)
class RoadSettings:
    """Road-category toggles supplied by the settings provider.

    ``avoid_mountain`` is the toggle exposed to users; ``excluded_categories``
    lets callers switch off any other category explicitly.
    """

    avoid_mountain: bool = False
    excluded_categories: frozenset[RoadCategory] = field(default_factory=frozenset)

    def excluded(self) -> frozenset[RoadCategory]:
        if self.avoid_mountain:
            return self.excluded_categories | {RoadCategory.MOUNTAIN}
        return self.excluded_categories

    def include_category(self, category: RoadCategory) -> bool:
        return category_filter(self.excluded())(category)


def category_filter(excluded: Iterable[RoadCategory | str]) -> CategoryPredicate:
    blocked = frozenset(RoadCategory(value) for value in excluded)

    def include(category: RoadCategory) -> bool:
        return category not in blocked

    return include


def build_graph(edges: Iterable[Edge], include_category: CategoryPredicate) -> Graph:
    """Build a symmetric adjacency map from the edges whose category is included.

    Nodes without any included edge do not appear as keys. A repeated pair keeps
    the last weight seen, in both directions.
    """
    graph: Graph = {}
    for edge in edges:
        if not include_category(edge.category):
            continue
        weight = float(edge.weight)
        graph.setdefault(edge.a, {})[edge.b] = weight
        graph.setdefault(edge.b, {})[edge.a] = weight
    return graph


def is_connected_point(graph: Graph, node: str) -> bool:
    return bool(graph.get(node))
