from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from math import inf, isinf

from .graph_builder import Graph

Path = tuple[str, ...]


@dataclass(frozen=True)
class RouteGroup:
    """One rank of a result list: a distance and every path found at that distance."""

    distance: float
    paths: tuple[Path, ...] = ()

    @property
    def reachable(self) -> bool:
        return bool(self.paths) and not isinf(self.distance)


UNREACHABLE = RouteGroup(distance=inf, paths=())


def path_distance(path: Sequence[str], graph: Graph) -> float:
    total = 0.0
    for src, dst in zip(path, path[1:]):
        weight = graph.get(src, {}).get(dst)
        if weight is None:
            return inf
        total += weight
    return total


def edge_in_path(node_a: str, node_b: str, path: Sequence[str]) -> bool:
    for src, dst in zip(path, path[1:]):
        if (src == node_a and dst == node_b) or (src == node_b and dst == node_a):
            return True
    return False


def node_in_path(node: str, path: Sequence[str]) -> bool:
    return node in path


def visible_legs(
    path: Sequence[str],
    graph: Graph,
    is_hidden: Callable[[str], bool],
) -> list[tuple[str, float]]:
    """Pair each visible node with the distance travelled since the previous visible node.

    Hidden junctions still contribute their edge weights to the following leg.
    The first visible node carries ``0.0``.
    """
    legs: list[tuple[str, float]] = []
    accumulated = 0.0
    for index, node in enumerate(path):
        if index > 0:
            accumulated += graph.get(path[index - 1], {}).get(node, 0.0)
        if is_hidden(node):
            continue
        legs.append((node, accumulated if legs else 0.0))
        accumulated = 0.0
    return legs
