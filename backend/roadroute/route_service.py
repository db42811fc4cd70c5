from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from .catalogue import Catalogue
from .graph_builder import Graph, RoadCategory, RoadSettings, is_connected_point
from .logging_utils import log_event
from .models import LegModel, PathModel, RouteGroupModel, RouteResponse
from .path_utils import RouteGroup, visible_legs
from .route_errors import RoutePlanningError
from .route_ranking import find_top_routes
from .settings import settings

NO_ROADS_MESSAGE = "No roads are available. Check the road category settings."
NO_ROUTE_MESSAGE = "No route was found."
MOUNTAIN_HINT = "Mountain roads are being avoided; try changing the setting."


@dataclass(frozen=True)
class RoutePlan:
    """Outcome of one planning request.

    ``graph`` is the filtered graph the routes were computed on, so formatters
    can read per-edge weights from the same structure.
    """

    points: tuple[str, ...]
    road_settings: RoadSettings
    graph: Graph
    routes: list[RouteGroup] = field(default_factory=list)
    no_route_reason: str | None = None
    message: str | None = None
    offending_point: str | None = None


def validate_points(
    catalogue: Catalogue,
    points: Sequence[str],
    *,
    max_via_points: int | None = None,
) -> tuple[str, ...]:
    cleaned = tuple(str(point).strip() for point in points)
    if len(cleaned) < 2:
        raise RoutePlanningError(
            reason_code="invalid_request",
            message="select both a start and an end point",
            details={"point_count": len(cleaned)},
        )
    via_limit = settings.max_via_points if max_via_points is None else max_via_points
    if len(cleaned) - 2 > via_limit:
        raise RoutePlanningError(
            reason_code="too_many_via_points",
            message=f"at most {via_limit} via points are allowed",
            details={"via_points": len(cleaned) - 2, "max_via_points": via_limit},
        )
    for point in cleaned:
        if point not in catalogue.nodes:
            raise RoutePlanningError(
                reason_code="unknown_point",
                message=f"unknown point: {point}",
                details={"point": point},
            )
        if not catalogue.is_selectable(point):
            raise RoutePlanningError(
                reason_code="hidden_point",
                message=f"point is not selectable: {point}",
                details={"point": point},
            )
    return cleaned


def _with_hint(message: str, road_settings: RoadSettings) -> str:
    if road_settings.avoid_mountain:
        return f"{message}\n{MOUNTAIN_HINT}"
    return message


def plan_routes(
    catalogue: Catalogue,
    points: Sequence[str],
    *,
    road_settings: RoadSettings | None = None,
    max_routes: int | None = None,
) -> RoutePlan:
    """Rebuild the graph for the current road settings and rank routes over it.

    Invalid requests raise ``RoutePlanningError``. A request that is valid but
    has no route comes back as a plan with ``no_route_reason`` set.
    """
    t0 = time.perf_counter()
    road_settings = road_settings or RoadSettings()
    route_limit = settings.max_routes if max_routes is None else int(max_routes)
    if not 1 <= route_limit <= settings.max_routes_limit:
        raise RoutePlanningError(
            reason_code="invalid_request",
            message=f"max_routes must be between 1 and {settings.max_routes_limit}",
            details={"max_routes": route_limit},
        )
    checked = validate_points(catalogue, points)
    graph = catalogue.build_graph(road_settings)

    plan = _plan_on_graph(checked, graph, road_settings, route_limit)

    log_event(
        "route_plan",
        points=list(checked),
        excluded_categories=sorted(category.value for category in road_settings.excluded()),
        graph_nodes=len(graph),
        route_count=len(plan.routes),
        path_count=sum(len(group.paths) for group in plan.routes),
        no_route_reason=plan.no_route_reason,
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return plan


def _plan_on_graph(
    points: tuple[str, ...],
    graph: Graph,
    road_settings: RoadSettings,
    max_routes: int,
) -> RoutePlan:
    if not graph:
        return RoutePlan(
            points=points,
            road_settings=road_settings,
            graph=graph,
            no_route_reason="no_roads",
            message=NO_ROADS_MESSAGE,
        )
    for point in points:
        if not is_connected_point(graph, point):
            return RoutePlan(
                points=points,
                road_settings=road_settings,
                graph=graph,
                no_route_reason="disconnected_point",
                message=_with_hint(f"{point} is not connected to any other point.", road_settings),
                offending_point=point,
            )

    routes = find_top_routes(points, max_routes, graph)
    if not routes:
        return RoutePlan(
            points=points,
            road_settings=road_settings,
            graph=graph,
            no_route_reason="no_route",
            message=_with_hint(NO_ROUTE_MESSAGE, road_settings),
        )
    return RoutePlan(points=points, road_settings=road_settings, graph=graph, routes=routes)


def build_route_response(plan: RoutePlan, catalogue: Catalogue) -> RouteResponse:
    groups: list[RouteGroupModel] = []
    for rank, group in enumerate(plan.routes, start=1):
        paths = [
            PathModel(
                nodes=list(path),
                legs=[
                    LegModel(node=node, distance=distance)
                    for node, distance in visible_legs(path, plan.graph, catalogue.is_hidden)
                ],
            )
            for path in group.paths
        ]
        groups.append(RouteGroupModel(rank=rank, distance=group.distance, paths=paths))
    excluded: list[RoadCategory] = sorted(plan.road_settings.excluded(), key=lambda c: c.value)
    return RouteResponse(
        points=list(plan.points),
        excluded_categories=excluded,
        routes=groups,
        no_route_reason=plan.no_route_reason,
        message=plan.message,
    )
