"""Segment splitting and trimming (compound/split segments, partial end segments).

A split divides one segment at a resolved point into two children sharing that point.
Points landing within `min_distance_m` of an existing vertex snap to it, so a split never
creates a near-zero-length child.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from shapely.geometry import LineString, Point

from railchain.core.config import MIN_SPLIT_DISTANCE_M
from railchain.core.errors import SplitError
from railchain.geo.geometry import haversine_m, is_valid_split, nearest_segment, split_at
from railchain.models.entities import Coordinate, Polyline, Segment, as_polyline

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitLocation:
    index: int
    point: Coordinate
    snapped: bool  # True when `point` is an existing vertex


@dataclass(frozen=True)
class SegmentSplit:
    parent_id: str
    point: Coordinate
    fraction: float
    snapped: bool
    left: Segment
    right: Segment


def resolve_split(
    polyline: Sequence[Sequence[float]],
    query: Sequence[float],
    *,
    min_distance_m: float = MIN_SPLIT_DISTANCE_M,
) -> SplitLocation:
    """Locate where `query` splits `polyline`, snapping to a vertex when too close to one."""
    coords = as_polyline(polyline)
    idx, projected = nearest_segment(coords, query)
    a, b = coords[idx], coords[idx + 1]

    if projected not in (a, b) and is_valid_split(projected, a, b, min_distance_m):
        return SplitLocation(index=idx, point=projected, snapped=False)

    k = idx if haversine_m(projected, a) <= haversine_m(projected, b) else idx + 1
    if k == 0 or k == len(coords) - 1:
        raise SplitError(
            "Split point is too close to an endpoint; choose a point along the middle of the segment.",
            vertex_index=k,
            min_distance_m=min_distance_m,
        )
    return SplitLocation(index=k, point=coords[k], snapped=True)


def split_segment(
    polyline: Sequence[Sequence[float]],
    query: Sequence[float],
    *,
    min_distance_m: float = MIN_SPLIT_DISTANCE_M,
) -> tuple[Polyline, Polyline]:
    """Split `polyline` at the point nearest to `query`. Raises `SplitError`."""
    coords = as_polyline(polyline)
    loc = resolve_split(coords, query, min_distance_m=min_distance_m)
    if loc.snapped:
        return coords[: loc.index + 1], coords[loc.index :]
    return split_at(coords, loc.index, loc.point)


def rejoin(left: Sequence[Coordinate], right: Sequence[Coordinate], *, snapped: bool) -> Polyline:
    """Inverse of `split_segment`: a synthetic split point is dropped from both halves."""
    if snapped:
        return (*left[:-1], *right)
    return (*left[:-1], *right[1:])


def split_part(
    segment: Segment,
    query: Sequence[float],
    *,
    min_distance_m: float = MIN_SPLIT_DISTANCE_M,
) -> SegmentSplit:
    """Split a stored segment into `<id>-1` / `<id>-2` children."""
    loc = resolve_split(segment.coords, query, min_distance_m=min_distance_m)
    if loc.snapped:
        left, right = segment.coords[: loc.index + 1], segment.coords[loc.index :]
    else:
        left, right = split_at(segment.coords, loc.index, loc.point)

    fraction = float(LineString(segment.coords).project(Point(loc.point), normalized=True))
    LOGGER.info(
        "Split segment %s at (%.7f, %.7f) fraction=%.4f snapped=%s",
        segment.segment_id,
        loc.point[0],
        loc.point[1],
        fraction,
        loc.snapped,
    )
    return SegmentSplit(
        parent_id=segment.segment_id,
        point=loc.point,
        fraction=fraction,
        snapped=loc.snapped,
        left=Segment(segment_id=f"{segment.segment_id}-1", coords=tuple(left)),
        right=Segment(segment_id=f"{segment.segment_id}-2", coords=tuple(right)),
    )


def _dedupe(coords: Sequence[Coordinate]) -> Polyline:
    out: list[Coordinate] = []
    for c in coords:
        if not out or out[-1] != c:
            out.append(c)
    return tuple(out)


def trim_to_junction(
    polyline: Sequence[Sequence[float]], query: Sequence[float], junction: Sequence[float]
) -> Polyline:
    """Cut `polyline` at the projection of `query`, keeping the part that ends at `junction`.

    `junction` picks the polyline end (nearest by haversine) that the kept part runs to; the
    result keeps the input's vertex order. A projection onto that end leaves a single point.
    """
    coords = as_polyline(polyline)
    idx, projected = nearest_segment(coords, query)
    left, right = split_at(coords, idx, projected)
    keep_left = haversine_m(coords[0], junction) <= haversine_m(coords[-1], junction)
    return _dedupe(left if keep_left else right)


def trim_between(
    polyline: Sequence[Sequence[float]], start: Sequence[float], end: Sequence[float]
) -> Polyline:
    """Part of `polyline` between the projections of `start` and `end`, in travel order."""
    coords = as_polyline(polyline)
    ia, pa = nearest_segment(coords, start)
    ib, pb = nearest_segment(coords, end)
    if (ia, haversine_m(coords[ia], pa)) <= (ib, haversine_m(coords[ib], pb)):
        return _dedupe((pa, *coords[ia + 1 : ib + 1], pb))
    return _dedupe((pa, *reversed(coords[ib + 1 : ia + 1]), pb))
