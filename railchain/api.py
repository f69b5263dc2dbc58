"""Public entry points.

    plan_path        waypoints -> fewest-segment route (PlanResult, never raises)
    merge_chain      polylines -> one oriented polyline (raises BrokenChain/InvalidInput)
    split_segment    polyline + point -> (left, right) (raises SplitError)
    assemble_route   segment path -> merged geometry fetched from a store, optionally
                     trimmed to the points where the route starts and ends
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from railchain.core.errors import InvalidInput
from railchain.geo import split
from railchain.geo.geometry import haversine_m
from railchain.geo.merge import MergedGeometry, merge_chain
from railchain.io.store import SegmentStore
from railchain.models.entities import Coordinate, Path, Polyline
from railchain.models.routing import RoutingConfig
from railchain.routing.planner import PlanResult, Waypoint, plan_path

LOGGER = logging.getLogger(__name__)

__all__ = [
    "MergedGeometry",
    "PlanResult",
    "Waypoint",
    "assemble_route",
    "merge_chain",
    "plan_path",
    "split_segment",
]


def split_segment(
    polyline: Sequence[Sequence[float]],
    query_point: Sequence[float],
    *,
    config: RoutingConfig | None = None,
) -> tuple[Polyline, Polyline]:
    """Split `polyline` at `query_point`, snapping within `config.min_split_distance_m`."""
    cfg = config if config is not None else RoutingConfig()
    return split.split_segment(polyline, query_point, min_distance_m=cfg.min_split_distance_m)


def _end_towards(polyline: Polyline, other: Polyline) -> Coordinate:
    return min(
        (polyline[0], polyline[-1]),
        key=lambda p: min(haversine_m(p, other[0]), haversine_m(p, other[-1])),
    )


def _trim_ends(
    polylines: list[Polyline],
    start_point: Sequence[float] | None,
    end_point: Sequence[float] | None,
) -> list[Polyline]:
    if len(polylines) == 1:
        only = polylines[0]
        trimmed = split.trim_between(
            only,
            start_point if start_point is not None else only[0],
            end_point if end_point is not None else only[-1],
        )
        if len(trimmed) < 2:
            raise InvalidInput("route start and end project to the same point")
        return [trimmed]

    out = list(polylines)
    if start_point is not None:
        out[0] = split.trim_to_junction(out[0], start_point, _end_towards(out[0], out[1]))
    if end_point is not None:
        out[-1] = split.trim_to_junction(out[-1], end_point, _end_towards(out[-1], out[-2]))
    # An end segment cut down to its junction point adds nothing to the line.
    return [p for p in out if len(p) >= 2]


def assemble_route(
    path: Path,
    store: SegmentStore,
    *,
    start_point: Sequence[float] | None = None,
    end_point: Sequence[float] | None = None,
) -> MergedGeometry:
    """Fetch the geometry of every segment on `path` in one batch and merge it.

    With `start_point` / `end_point` the first and last segments are cut at the
    projection of those points, and the merged line runs from start to end.
    """
    with store.session() as session:
        geoms = session.fetch_segment_geometry(path)
    polylines = [geoms[sid] for sid in path]
    trimmed = start_point is not None or end_point is not None
    if trimmed:
        polylines = _trim_ends(polylines, start_point, end_point)
    merged = merge_chain(polylines)

    if trimmed:
        first, last = merged.coords[0], merged.coords[-1]
        if start_point is not None:
            flip = haversine_m(last, start_point) < haversine_m(first, start_point)
        else:
            flip = haversine_m(first, end_point) < haversine_m(last, end_point)
        merged = replace(
            merged,
            coords=tuple(reversed(merged.coords)) if flip else merged.coords,
            segment_count=len(path),
        )
    LOGGER.info(
        "Assembled route: %d segment(s), %d point(s), %.0f m%s",
        merged.segment_count,
        len(merged.coords),
        merged.length_m,
        " (trimmed)" if trimmed else "",
    )
    return merged
