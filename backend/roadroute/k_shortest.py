from __future__ import annotations

import heapq
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from math import inf, isinf

from .graph_builder import Graph
from .logging_utils import log_event
from .path_utils import Path, path_distance
from .settings import settings


@dataclass(frozen=True)
class PathResult:
    nodes: Path
    cost: float


class PathNotFoundError(ValueError):
    pass


@dataclass(frozen=True)
class ExcludedEdgeView:
    """Read-only view of a graph minus a small set of undirected edges and nodes."""

    graph: Graph
    excluded_edges: frozenset[frozenset[str]] = field(default_factory=frozenset)
    banned_nodes: frozenset[str] = field(default_factory=frozenset)

    def __contains__(self, node: object) -> bool:
        return node in self.graph and node not in self.banned_nodes

    def neighbors(self, node: str) -> Iterator[tuple[str, float]]:
        if node not in self:
            return
        for nxt, weight in self.graph[node].items():
            if nxt not in self:
                continue
            if self.excluded_edges and frozenset((node, nxt)) in self.excluded_edges:
                continue
            yield nxt, weight


def _dijkstra_shortest_path(
    *,
    view: ExcludedEdgeView,
    start: str,
    goal: str,
    max_rounds: int,
) -> PathResult:
    if start not in view.graph or goal not in view.graph:
        raise PathNotFoundError("start/goal absent")
    if start not in view or goal not in view:
        raise PathNotFoundError("start/goal blocked")
    if start == goal:
        return PathResult(nodes=(start,), cost=0.0)

    distance: dict[str, float] = {start: 0.0}
    previous: dict[str, str] = {}
    finalized: set[str] = set()
    heap: list[tuple[float, int, str]] = [(0.0, 0, start)]
    push_seq = 1
    rounds = 0
    while heap:
        cost, _seq, node = heapq.heappop(heap)
        if node in finalized or cost > distance.get(node, inf):
            continue
        if rounds >= max_rounds:
            raise PathNotFoundError("round cap exceeded")
        rounds += 1
        finalized.add(node)
        if node == goal:
            nodes = [goal]
            while nodes[-1] != start:
                nodes.append(previous[nodes[-1]])
            return PathResult(nodes=tuple(reversed(nodes)), cost=cost)
        for nxt, edge_cost in view.neighbors(node):
            if nxt in finalized:
                continue
            new_cost = cost + edge_cost
            # Strict comparison keeps the first-pushed route on ties.
            if new_cost < distance.get(nxt, inf):
                distance[nxt] = new_cost
                previous[nxt] = node
                heapq.heappush(heap, (new_cost, push_seq, nxt))
                push_seq += 1
    raise PathNotFoundError("no path")


def normalize_no_path_reason(message: str) -> str:
    lowered = str(message or "").strip().lower()
    if "round cap" in lowered:
        return "round_cap_exceeded"
    if "start/goal absent" in lowered:
        return "start_or_goal_absent"
    if "start/goal blocked" in lowered:
        return "start_or_goal_blocked"
    if "no path" in lowered:
        return "no_path"
    return "path_search_exhausted"


def top_k_distinct_with_stats(
    graph: Graph,
    source: str,
    target: str,
    k: int,
    *,
    round_factor: int | None = None,
    search_round_factor: int | None = None,
) -> tuple[list[PathResult], dict[str, int | str]]:
    """Up to ``k`` shortest routes with distinct node sequences, cheapest first.

    Each round branches only from the most recently accepted path. The total
    number of spur searches is capped at ``k * round_factor``; hitting the cap
    truncates the list and is reported as ``round_cap_reached``.
    """
    if k <= 0:
        return [], {
            "spur_rounds": 0,
            "generated_candidates": 0,
            "termination_reason": "invalid_k",
            "no_path_reason": "invalid_k",
            "first_error": "",
        }
    spur_factor = settings.k_shortest_round_factor if round_factor is None else round_factor
    search_factor = settings.tied_path_round_factor if search_round_factor is None else search_round_factor
    max_spur_rounds = int(k) * max(1, int(spur_factor))
    max_search_rounds = max(1, len(graph)) * max(1, int(search_factor))

    first_error = ""
    try:
        first = _dijkstra_shortest_path(
            view=ExcludedEdgeView(graph),
            start=source,
            goal=target,
            max_rounds=max_search_rounds,
        )
    except PathNotFoundError as exc:
        first_error = str(exc).strip() or "no path"
        return [], {
            "spur_rounds": 0,
            "generated_candidates": 0,
            "termination_reason": "no_initial_path",
            "no_path_reason": normalize_no_path_reason(first_error),
            "first_error": first_error,
        }

    accepted: list[PathResult] = [first]
    candidates: list[tuple[float, int, Path]] = []
    candidate_seen: set[Path] = {first.nodes}
    candidate_seq = 0
    spur_rounds = 0
    termination_reason = "k_paths_collected"

    while len(accepted) < k:
        if spur_rounds >= max_spur_rounds:
            termination_reason = "round_cap_reached"
            break
        previous_nodes = accepted[-1].nodes
        for spur_idx in range(len(previous_nodes) - 1):
            if spur_rounds >= max_spur_rounds:
                break
            spur_rounds += 1
            root_path = previous_nodes[: spur_idx + 1]

            excluded_edges = frozenset(
                frozenset((p.nodes[spur_idx], p.nodes[spur_idx + 1]))
                for p in accepted
                if len(p.nodes) > spur_idx + 1 and p.nodes[: spur_idx + 1] == root_path
            )
            view = ExcludedEdgeView(
                graph,
                excluded_edges=excluded_edges,
                banned_nodes=frozenset(root_path[:-1]),
            )
            try:
                spur = _dijkstra_shortest_path(
                    view=view,
                    start=root_path[-1],
                    goal=target,
                    max_rounds=max_search_rounds,
                )
            except PathNotFoundError as exc:
                if not first_error:
                    first_error = str(exc).strip() or "no path"
                continue

            total_nodes = (*root_path[:-1], *spur.nodes)
            if total_nodes in candidate_seen:
                continue
            total_cost = path_distance(total_nodes, graph)
            if isinf(total_cost):
                continue
            heapq.heappush(candidates, (total_cost, candidate_seq, total_nodes))
            candidate_seq += 1
            candidate_seen.add(total_nodes)

        if not candidates:
            termination_reason = "candidate_pool_exhausted"
            break
        best_cost, _seq, best_nodes = heapq.heappop(candidates)
        accepted.append(PathResult(nodes=best_nodes, cost=best_cost))

    if len(accepted) >= k:
        termination_reason = "k_paths_collected"
    if termination_reason == "round_cap_reached":
        log_event(
            "k_shortest_round_cap_reached",
            level=logging.DEBUG,
            source=source,
            target=target,
            k=k,
            accepted=len(accepted),
            max_spur_rounds=max_spur_rounds,
        )
    return accepted, {
        "spur_rounds": int(spur_rounds),
        "generated_candidates": int(candidate_seq),
        "termination_reason": termination_reason,
        "no_path_reason": "",
        "first_error": first_error,
    }


def top_k_distinct(
    graph: Graph,
    source: str,
    target: str,
    k: int,
    *,
    round_factor: int | None = None,
    search_round_factor: int | None = None,
) -> list[PathResult]:
    paths, _stats = top_k_distinct_with_stats(
        graph,
        source,
        target,
        k,
        round_factor=round_factor,
        search_round_factor=search_round_factor,
    )
    return paths
