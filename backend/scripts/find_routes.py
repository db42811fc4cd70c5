from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

from roadroute.catalogue import load_catalogue
from roadroute.graph_builder import RoadCategory, RoadSettings
from roadroute.route_errors import RoutePlanningError
from roadroute.route_service import build_route_response, plan_routes
from roadroute.settings import settings


def run_find_routes(args: argparse.Namespace) -> dict[str, Any]:
    catalogue = load_catalogue(args.catalogue)
    road_settings = RoadSettings(
        avoid_mountain=bool(args.avoid_mountain),
        excluded_categories=frozenset(RoadCategory(value) for value in (args.exclude or [])),
    )
    plan = plan_routes(
        catalogue,
        args.points,
        road_settings=road_settings,
        max_routes=args.max_routes,
    )
    return build_route_response(plan, catalogue).model_dump(mode="json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rank routes between catalogue points.")
    parser.add_argument("--catalogue", default=settings.catalogue_path)
    parser.add_argument(
        "--points",
        nargs="+",
        required=True,
        help="start, optional via points, end (in visiting order)",
    )
    parser.add_argument("--max-routes", type=int, default=settings.max_routes)
    parser.add_argument("--avoid-mountain", action="store_true")
    parser.add_argument(
        "--exclude",
        action="append",
        choices=[category.value for category in RoadCategory],
        default=None,
        help="road category to leave out of the graph (repeatable)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    try:
        payload = run_find_routes(args)
    except RoutePlanningError as e:
        print(json.dumps({"reason_code": e.reason_code, "message": e.message}, indent=2), file=sys.stderr)
        return 2
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
