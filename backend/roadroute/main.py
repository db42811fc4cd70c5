from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .catalogue import Catalogue, load_catalogue
from .graph_builder import RoadSettings
from .logging_utils import log_event
from .models import NodeListResponse, RouteRequest, RouteResponse
from .route_errors import REQUEST_REASON_CODES, RoutePlanningError, normalize_reason_code
from .route_service import build_route_response, plan_routes
from .settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        app.state.catalogue = load_catalogue(settings.catalogue_path)
    except RoutePlanningError as e:
        app.state.catalogue = None
        log_event(
            "catalogue_load_failed",
            level=logging.ERROR,
            reason_code=e.reason_code,
            catalogue_path=settings.catalogue_path,
            error=str(e),
        )
    yield


app = FastAPI(title="Road Route Finder", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def route_catalogue(request: Request) -> Catalogue:
    catalogue: Catalogue | None = getattr(request.app.state, "catalogue", None)  # type: ignore[attr-defined]
    if catalogue is None:
        raise HTTPException(status_code=503, detail="route catalogue not loaded")
    return catalogue


CatalogueDep = Annotated[Catalogue, Depends(route_catalogue)]


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/nodes", response_model=NodeListResponse)
async def list_nodes(catalogue: CatalogueDep) -> NodeListResponse:
    return NodeListResponse(nodes=catalogue.selectable_nodes())


@app.post("/routes", response_model=RouteResponse)
def compute_routes(req: RouteRequest, catalogue: CatalogueDep) -> RouteResponse:
    request_id = str(uuid.uuid4())
    t0 = time.perf_counter()
    road_settings = RoadSettings(
        avoid_mountain=req.avoid_mountain,
        excluded_categories=frozenset(req.excluded_categories),
    )
    try:
        plan = plan_routes(
            catalogue,
            req.points,
            road_settings=road_settings,
            max_routes=req.max_routes,
        )
    except RoutePlanningError as e:
        code = normalize_reason_code(e.reason_code)
        status = 422 if code in REQUEST_REASON_CODES else 503
        raise HTTPException(
            status_code=status,
            detail={"reason_code": code, "message": e.message},
        ) from e

    response = build_route_response(plan, catalogue)
    log_event(
        "routes_request",
        request_id=request_id,
        points=response.points,
        avoid_mountain=req.avoid_mountain,
        max_routes=req.max_routes,
        route_count=len(response.routes),
        no_route_reason=response.no_route_reason,
        duration_ms=round((time.perf_counter() - t0) * 1000, 2),
    )
    return response
