"""Backtracking: detect sharp reversals along a path and search for paths without them."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Mapping, Sequence

import networkx as nx

from railchain.core.config import BACKTRACK_ANGLE_DEG, CONNECT_RADIUS_M
from railchain.geo.geometry import bearing_deg, haversine_m, turn_angle_deg
from railchain.models.entities import Coordinate, Path, Segment

LOGGER = logging.getLogger(__name__)


def _closest_endpoint(seg: Segment, other: Segment) -> Coordinate:
    return min(
        (seg.start, seg.end),
        key=lambda p: min(haversine_m(p, other.start), haversine_m(p, other.end)),
    )


def orient_path(segments: Sequence[Segment]) -> list[tuple[Coordinate, Coordinate]]:
    """(entry, exit) endpoint pair of every segment along a path."""
    out: list[tuple[Coordinate, Coordinate]] = []
    for i, seg in enumerate(segments):
        if i + 1 < len(segments):
            exit_ = _closest_endpoint(seg, segments[i + 1])
            entry = seg.end if exit_ == seg.start else seg.start
        elif i > 0:
            entry = _closest_endpoint(seg, segments[i - 1])
            exit_ = seg.end if entry == seg.start else seg.start
        else:
            entry, exit_ = seg.start, seg.end
        out.append((entry, exit_))
    return out


def max_turn_deg(segments: Sequence[Segment]) -> float:
    """Largest heading change between consecutive open segments (0.0 if fewer than two)."""
    oriented = [
        (entry, exit_)
        for (entry, exit_), seg in zip(orient_path(segments), segments, strict=True)
        if not seg.is_closed
    ]
    bearings = [bearing_deg(entry, exit_) for entry, exit_ in oriented]
    turns = [turn_angle_deg(a, b) for a, b in zip(bearings[:-1], bearings[1:], strict=True)]
    return max(turns, default=0.0)


def has_backtracking(
    path: Path,
    segments: Mapping[str, Segment],
    threshold_deg: float = BACKTRACK_ANGLE_DEG,
) -> bool:
    """True when any turn along `path` exceeds `threshold_deg`."""
    turn = max_turn_deg([segments[sid] for sid in path])
    if turn > threshold_deg:
        LOGGER.warning("Backtracking detected: %.1f deg > %.1f deg", turn, threshold_deg)
        return True
    return False


def _endpoint(seg: Segment, index: int) -> Coordinate:
    return seg.start if index == 0 else seg.end


def shortest_path_without_backtracking(
    start_candidates: Iterable[str],
    end_candidates: Iterable[str],
    G: nx.Graph,
    segments: Mapping[str, Segment],
    *,
    junction_m: float = CONNECT_RADIUS_M,
    threshold_deg: float = BACKTRACK_ANGLE_DEG,
) -> Path | None:
    """Fewest-segment path whose turns all stay within `threshold_deg`, or None.

    BFS over (segment, exit endpoint) states. A segment is entered at the endpoint that
    touches the previous exit and left by its other endpoint, so a path can never double
    back through the junction it arrived at.
    """
    ends = {e for e in end_candidates if e in G}
    parent: dict[tuple[str, int], tuple[str, int] | None] = {}
    queue: deque[tuple[str, int]] = deque()
    for sid in dict.fromkeys(start_candidates):
        if sid not in G:
            continue
        for exit_index in (1, 0):
            parent[(sid, exit_index)] = None
            queue.append((sid, exit_index))

    while queue:
        state = queue.popleft()
        sid, exit_index = state
        if sid in ends:
            path = [state]
            while parent[path[-1]] is not None:
                path.append(parent[path[-1]])  # type: ignore[arg-type]
            return tuple(s for s, _ in reversed(path))

        seg = segments[sid]
        exit_pt = _endpoint(seg, exit_index)
        heading = None if seg.is_closed else bearing_deg(_endpoint(seg, 1 - exit_index), exit_pt)
        for nbr in G.adj[sid]:
            other = segments[nbr]
            gaps = (haversine_m(other.start, exit_pt), haversine_m(other.end, exit_pt))
            entry_index = 0 if gaps[0] <= gaps[1] else 1
            nxt = (nbr, 1 - entry_index)
            if gaps[entry_index] > junction_m or nxt in parent:
                continue
            if heading is not None and not other.is_closed:
                turn = turn_angle_deg(
                    heading, bearing_deg(_endpoint(other, entry_index), _endpoint(other, 1 - entry_index))
                )
                if turn > threshold_deg:
                    continue
            parent[nxt] = state
            queue.append(nxt)
    return None
