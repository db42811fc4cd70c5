from __future__ import annotations

import heapq
import logging
from math import inf

from .graph_builder import Graph
from .logging_utils import log_event
from .path_utils import UNREACHABLE, Path, RouteGroup
from .settings import settings


def _shortest_path_dag(
    *,
    graph: Graph,
    source: str,
    target: str,
    max_rounds: int,
    tie_epsilon: float,
) -> tuple[dict[str, float], dict[str, list[str]], bool]:
    """Label-setting Dijkstra that keeps every predecessor tied at the minimum distance.

    Zero-weight edges can tie a node with one finalized before it, so ties are
    also recorded against finalized nodes, and the search keeps finalizing until
    every node at the target's distance is settled.

    Returns the distance map, the predecessor lists and whether the target was
    finalized before the round cap ran out.
    """
    distance: dict[str, float] = {source: 0.0}
    predecessors: dict[str, list[str]] = {source: []}
    finalized: set[str] = set()
    heap: list[tuple[float, int, str]] = [(0.0, 0, source)]
    push_seq = 1
    rounds = 0
    reached = False

    while heap:
        dist_u, _seq, u = heapq.heappop(heap)
        if u in finalized or dist_u > distance.get(u, inf):
            continue
        if reached and dist_u > distance[target] + tie_epsilon:
            break
        if rounds >= max_rounds:
            log_event(
                "tied_path_round_cap_reached",
                level=logging.DEBUG,
                source=source,
                target=target,
                max_rounds=max_rounds,
            )
            return distance, predecessors, reached
        rounds += 1
        finalized.add(u)
        if u == target:
            reached = True

        for v, weight in graph.get(u, {}).items():
            if v == source or v not in graph:
                continue
            candidate = dist_u + weight
            current = distance.get(v, inf)
            if v not in finalized and candidate < current - tie_epsilon:
                distance[v] = candidate
                predecessors[v] = [u]
                heapq.heappush(heap, (candidate, push_seq, v))
                push_seq += 1
            elif abs(candidate - current) <= tie_epsilon and u not in predecessors[v]:
                predecessors[v].append(u)

    return distance, predecessors, reached


def _expand_paths(predecessors: dict[str, list[str]], source: str, target: str) -> tuple[Path, ...]:
    # Zero-weight ties can make the predecessor graph cyclic; a node already in
    # the suffix is never revisited, so every expanded path is simple.
    paths: list[Path] = []
    stack: list[tuple[str, Path]] = [(target, (target,))]
    while stack:
        node, suffix = stack.pop()
        if node == source:
            paths.append(suffix)
            continue
        for prev in reversed(predecessors.get(node, ())):
            if prev not in suffix:
                stack.append((prev, (prev, *suffix)))
    return tuple(paths)


def all_shortest_paths(
    graph: Graph,
    source: str,
    target: str,
    *,
    round_factor: int | None = None,
    tie_epsilon: float | None = None,
    max_rounds: int | None = None,
) -> RouteGroup:
    """Every minimum-distance path between ``source`` and ``target``.

    The search finalizes at most ``max_rounds`` nodes, by default the node
    count times ``round_factor``. Unreachable pairs, absent endpoints and
    searches stopped by that cap all come back as ``UNREACHABLE``.
    """
    if source not in graph or target not in graph:
        return UNREACHABLE
    if source == target:
        return RouteGroup(distance=0.0, paths=((source,),))

    factor = settings.tied_path_round_factor if round_factor is None else round_factor
    epsilon = settings.tie_epsilon if tie_epsilon is None else tie_epsilon
    distance, predecessors, reached = _shortest_path_dag(
        graph=graph,
        source=source,
        target=target,
        max_rounds=max_rounds if max_rounds is not None else max(1, len(graph)) * max(1, int(factor)),
        tie_epsilon=max(0.0, float(epsilon)),
    )
    if not reached:
        return UNREACHABLE
    paths = _expand_paths(predecessors, source, target)
    if not paths:
        return UNREACHABLE
    return RouteGroup(distance=distance[target], paths=paths)
