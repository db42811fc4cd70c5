from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .graph_builder import Edge, Graph, RoadCategory, RoadSettings, build_graph, category_filter
from .route_errors import RoutePlanningError


class CatalogueNode(BaseModel):
    id: str = Field(..., min_length=1)
    x: float = 0.0
    y: float = 0.0
    hidden: bool = False


class CatalogueEdge(BaseModel):
    a: str = Field(..., min_length=1)
    b: str = Field(..., min_length=1)
    weight: float = Field(..., ge=0.0)
    category: RoadCategory = RoadCategory.DEFAULT

    @model_validator(mode="before")
    @classmethod
    def accept_tuple_form(cls, value: object) -> object:
        # Edges are usually written as [a, b, weight] or [a, b, weight, category].
        if not isinstance(value, (list, tuple)):
            return value
        if len(value) not in (3, 4):
            raise ValueError("edge rows must be [a, b, weight] or [a, b, weight, category]")
        data: dict[str, Any] = {"a": value[0], "b": value[1], "weight": value[2]}
        if len(value) == 4 and value[3] is not None:
            data["category"] = value[3]
        return data

    @field_validator("weight")
    @classmethod
    def finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("weight must be finite")
        return v

    @model_validator(mode="after")
    def no_self_loop(self) -> "CatalogueEdge":
        if self.a == self.b:
            raise ValueError(f"self-loop edge on {self.a!r}")
        return self


class CatalogueFile(BaseModel):
    nodes: list[CatalogueNode]
    edges: list[CatalogueEdge]

    @model_validator(mode="after")
    def endpoints_declared(self) -> "CatalogueFile":
        ids = [node.id for node in self.nodes]
        if len(set(ids)) != len(ids):
            raise ValueError("duplicate node ids")
        known = set(ids)
        for edge in self.edges:
            missing = [end for end in (edge.a, edge.b) if end not in known]
            if missing:
                raise ValueError(f"edge {edge.a}-{edge.b} references unknown node(s) {missing}")
        return self


@dataclass(frozen=True)
class Catalogue:
    """The master point/edge list. Read-only once loaded."""

    nodes: dict[str, CatalogueNode]
    edges: tuple[Edge, ...]
    source: str = ""

    def is_hidden(self, node_id: str) -> bool:
        node = self.nodes.get(node_id)
        return node is not None and node.hidden

    def is_selectable(self, node_id: str) -> bool:
        node = self.nodes.get(node_id)
        return node is not None and not node.hidden

    def selectable_nodes(self) -> list[CatalogueNode]:
        return [node for node in self.nodes.values() if not node.hidden]

    def build_graph(self, road_settings: RoadSettings) -> Graph:
        return build_graph(self.edges, category_filter(road_settings.excluded()))


def catalogue_from_payload(payload: Any, *, source: str = "") -> Catalogue:
    try:
        parsed = CatalogueFile.model_validate(payload)
    except ValidationError as e:
        raise RoutePlanningError(
            reason_code="catalogue_invalid",
            message="catalogue failed validation",
            details={"source": source, "errors": e.errors(include_url=False)},
        ) from e
    return Catalogue(
        nodes={node.id: node for node in parsed.nodes},
        edges=tuple(
            Edge(a=edge.a, b=edge.b, weight=edge.weight, category=edge.category) for edge in parsed.edges
        ),
        source=source,
    )


def load_catalogue(path: str | Path) -> Catalogue:
    catalogue_path = Path(path)
    if not catalogue_path.exists():
        raise RoutePlanningError(
            reason_code="catalogue_unavailable",
            message=f"catalogue file not found: {catalogue_path}",
            details={"catalogue_path": str(catalogue_path)},
        )
    try:
        payload = json.loads(catalogue_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise RoutePlanningError(
            reason_code="catalogue_invalid",
            message=f"invalid JSON in catalogue: {catalogue_path}",
            details={"catalogue_path": str(catalogue_path)},
        ) from e
    return catalogue_from_payload(payload, source=str(catalogue_path))
