"""Path search over segment adjacency graphs.

- `shortest_path`: fewest-segment path, BFS seeded from every start candidate at once
- `all_paths`: depth-bounded enumeration of simple paths (diagnostics)

Neighbors are explored in graph insertion order, so results are reproducible.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable

import networkx as nx

from railchain.core.config import DEFAULT_MAX_DEPTH
from railchain.core.errors import InvalidInput
from railchain.models.entities import Path

LOGGER = logging.getLogger(__name__)


def _ordered_unique(ids: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(str(i) for i in ids))


def shortest_path(
    start_candidates: Iterable[str],
    end_candidates: Iterable[str],
    G: nx.Graph,
) -> Path | None:
    """Fewest-segment path from any start candidate to any end candidate, or None.

    Candidates missing from `G` are ignored. The first end candidate dequeued wins.
    """
    starts = [s for s in _ordered_unique(start_candidates) if s in G]
    ends = {e for e in _ordered_unique(end_candidates) if e in G}
    if not starts or not ends:
        return None

    parent: dict[str, str | None] = {}
    queue: deque[str] = deque()
    for s in starts:
        parent[s] = None
        queue.append(s)

    while queue:
        node = queue.popleft()
        if node in ends:
            path = [node]
            while parent[path[-1]] is not None:
                path.append(parent[path[-1]])  # type: ignore[arg-type]
            return tuple(reversed(path))
        for nbr in G.adj[node]:
            if nbr not in parent:
                parent[nbr] = node
                queue.append(nbr)
    return None


def all_paths(
    start: str,
    end: str,
    G: nx.Graph,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[Path]:
    """All simple paths from `start` to `end` with at most `max_depth` hops.

    Depth-first over an explicit stack; each frame carries its own visited set, so a
    segment may appear on several branches but never twice in one path.
    """
    if max_depth < 0:
        raise InvalidInput(f"max_depth must be >= 0, got {max_depth}", max_depth=max_depth)
    for sid in (start, end):
        if sid not in G:
            raise InvalidInput(f"segment {sid!r} not in graph", segment_id=sid)
    if start == end:
        return [(start,)]

    found: list[Path] = []
    stack: list[tuple[str, Path, frozenset[str]]] = [(start, (start,), frozenset((start,)))]
    while stack:
        node, path, visited = stack.pop()
        if len(path) - 1 >= max_depth:
            continue
        children: list[tuple[str, Path, frozenset[str]]] = []
        for nbr in G.adj[node]:
            if nbr == end:
                found.append((*path, nbr))
            elif nbr not in visited:
                children.append((nbr, (*path, nbr), visited | {nbr}))
        # Reversed so the first neighbor is expanded first.
        stack.extend(reversed(children))
    LOGGER.debug("all_paths %s -> %s (max_depth=%d): %d path(s)", start, end, max_depth, len(found))
    return found
