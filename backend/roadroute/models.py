from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from .catalogue import CatalogueNode
from .graph_builder import RoadCategory
from .settings import settings


class RouteRequest(BaseModel):
    """Ordered route points: origin, optional via points, destination."""

    points: list[str] = Field(..., min_length=2)
    max_routes: int = Field(default_factory=lambda: settings.max_routes, ge=1)
    avoid_mountain: bool = False
    excluded_categories: list[RoadCategory] = Field(default_factory=list)

    @field_validator("points")
    @classmethod
    def strip_points(cls, v: list[str]) -> list[str]:
        cleaned = [str(point).strip() for point in v]
        if any(not point for point in cleaned):
            raise ValueError("points must be non-empty node ids")
        return cleaned


class LegModel(BaseModel):
    node: str
    distance: float = Field(..., ge=0.0)


class PathModel(BaseModel):
    nodes: list[str]
    legs: list[LegModel]


class RouteGroupModel(BaseModel):
    rank: int = Field(..., ge=1)
    distance: float = Field(..., ge=0.0)
    paths: list[PathModel]


class RouteResponse(BaseModel):
    points: list[str]
    excluded_categories: list[RoadCategory]
    routes: list[RouteGroupModel]
    no_route_reason: str | None = None
    message: str | None = None


class NodeListResponse(BaseModel):
    nodes: list[CatalogueNode]
