from __future__ import annotations

from collections.abc import Sequence

from .graph_builder import Graph
from .itinerary import compose_waypoints
from .k_shortest import top_k_distinct
from .path_utils import RouteGroup


def find_top_routes(points: Sequence[str], max_routes: int, graph: Graph) -> list[RouteGroup]:
    """Ranked route groups for an ordered point list.

    Two points get up to ``max_routes`` single-path groups from the K-shortest
    search. Longer itineraries get one group holding every tied combination of
    the minimum total distance.
    """
    if len(points) < 2 or max_routes <= 0:
        return []
    if len(points) == 2:
        return [
            RouteGroup(distance=result.cost, paths=(result.nodes,))
            for result in top_k_distinct(graph, points[0], points[1], max_routes)
        ]
    itinerary = compose_waypoints(graph, points)
    if not itinerary.reachable:
        return []
    return [itinerary]
