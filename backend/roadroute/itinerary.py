from __future__ import annotations

from collections.abc import Sequence
from itertools import product

from .graph_builder import Graph
from .path_utils import UNREACHABLE, Path, RouteGroup
from .tied_paths import all_shortest_paths


def _concat_segments(segments: Sequence[Path]) -> Path:
    nodes: list[str] = []
    for index, segment in enumerate(segments):
        # Each later segment starts on the previous segment's last node.
        nodes.extend(segment if index == 0 else segment[1:])
    return tuple(nodes)


def compose_waypoints(
    graph: Graph,
    points: Sequence[str],
    *,
    round_factor: int | None = None,
    tie_epsilon: float | None = None,
) -> RouteGroup:
    """Shortest route visiting ``points`` in order, with every tied combination.

    The result holds one path per element of the Cartesian product of the
    per-leg tied path sets, so its size grows multiplicatively with the
    number of ties. A single unreachable leg makes the whole itinerary
    unreachable.
    """
    if len(points) < 2:
        return UNREACHABLE

    total_distance = 0.0
    segment_paths: list[tuple[Path, ...]] = []
    for leg_origin, leg_destination in zip(points, points[1:]):
        leg = all_shortest_paths(
            graph,
            leg_origin,
            leg_destination,
            round_factor=round_factor,
            tie_epsilon=tie_epsilon,
        )
        if not leg.reachable:
            return UNREACHABLE
        total_distance += leg.distance
        segment_paths.append(leg.paths)

    paths = tuple(_concat_segments(combo) for combo in product(*segment_paths))
    return RouteGroup(distance=total_distance, paths=paths)
