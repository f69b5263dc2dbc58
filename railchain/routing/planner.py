"""Multi-waypoint planning with an escalating tolerance schedule.

Each leg (consecutive waypoint pair) is tried at every `ToleranceStep` in order. A step
resolves both waypoints to candidate segments, loads the segments around the pair from
the store, builds a fresh adjacency graph and runs `shortest_path`. The first step that
yields a path wins.

A leg whose path turns sharper than `RoutingConfig.backtrack_angle_deg` is searched
again with reversing transitions pruned. The flagged path is kept only when no such
alternative exists inside the loaded area.

Failures are returned in `PlanResult.error`; legs resolved before the failure stay in
`PlanResult.legs`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import ValidationError

from railchain.core.errors import InvalidInput, NoCandidates, NoPathFound, RoutingError
from railchain.graph.pathfinding import shortest_path
from railchain.graph.topology import build_topology
from railchain.io.store import SegmentStore
from railchain.models.entities import Coordinate, Path
from railchain.models.routing import RoutingConfig, ToleranceStep
from railchain.routing.backtracking import has_backtracking, shortest_path_without_backtracking

LOGGER = logging.getLogger(__name__)

WaypointKind = Literal["station", "segment", "point"]


@dataclass(frozen=True)
class Waypoint:
    """A stop on the route: a station, a directly chosen segment or a bare coordinate."""

    kind: WaypointKind
    ref: str | None = None
    coord: Coordinate | None = None

    @classmethod
    def station(cls, station_id: object) -> Waypoint:
        return cls(kind="station", ref=str(station_id))

    @classmethod
    def segment(cls, segment_id: object) -> Waypoint:
        return cls(kind="segment", ref=str(segment_id))

    @classmethod
    def at(cls, lon: float, lat: float) -> Waypoint:
        return cls(kind="point", coord=(float(lon), float(lat)))

    def __str__(self) -> str:
        return f"{self.kind}:{self.ref}" if self.ref is not None else f"point:{self.coord}"


@dataclass(frozen=True)
class LegResult:
    leg_index: int
    path: Path
    step: ToleranceStep
    backtracking: bool = False
    rerouted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "leg_index": self.leg_index,
            "path": list(self.path),
            "candidate_radius_m": self.step.candidate_radius_m,
            "search_buffer_m": self.step.search_buffer_m,
            "backtracking": self.backtracking,
            "rerouted": self.rerouted,
        }


@dataclass(frozen=True)
class PlanResult:
    path: Path | None
    legs: list[LegResult] = field(default_factory=list)
    error: RoutingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.path is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "path": list(self.path) if self.path is not None else None,
            "legs": [leg.to_dict() for leg in self.legs],
            "error": self.error.to_dict() if self.error is not None else None,
        }


@dataclass(frozen=True)
class _Resolved:
    candidates: list[str]
    anchors: list[Coordinate]


def _resolve(store: SegmentStore, waypoint: Waypoint, radius_m: float) -> _Resolved:
    if waypoint.kind == "segment":
        if waypoint.ref is None:
            raise InvalidInput("segment waypoint without an id", waypoint=str(waypoint))
        coords = store.fetch_segment_geometry([waypoint.ref])[waypoint.ref]
        return _Resolved(candidates=[waypoint.ref], anchors=[coords[0], coords[-1]])

    if waypoint.kind == "station":
        if waypoint.ref is None:
            raise InvalidInput("station waypoint without an id", waypoint=str(waypoint))
        point = store.station(waypoint.ref).coord
    elif waypoint.coord is not None:
        point = waypoint.coord
    else:
        raise InvalidInput("point waypoint without a coordinate", waypoint=str(waypoint))
    return _Resolved(candidates=store.find_segments_near(point, radius_m), anchors=[point])


def concatenate_legs(legs: Sequence[LegResult]) -> Path:
    """Join leg paths, dropping a leading segment equal to the previous leg's last."""
    out: list[str] = []
    for leg in legs:
        ids = list(leg.path)
        if out and ids and ids[0] == out[-1]:
            ids = ids[1:]
        out.extend(ids)
    return tuple(out)


def _plan_leg(
    leg_index: int,
    origin: Waypoint,
    destination: Waypoint,
    previous_end: str | None,
    store: SegmentStore,
    schedule: Sequence[ToleranceStep],
    config: RoutingConfig,
) -> LegResult | RoutingError:
    origin_seen = False
    destination_seen = False
    start_c: list[str] = []
    end_c: list[str] = []

    for step_no, step in enumerate(schedule):
        if step_no:
            LOGGER.info(
                "Leg %d: escalating to candidate radius %.0f m, buffer %.0f m",
                leg_index,
                step.candidate_radius_m,
                step.search_buffer_m,
            )
        with store.session() as session:
            start = _resolve(session, origin, step.candidate_radius_m)
            end = _resolve(session, destination, step.candidate_radius_m)
            origin_seen = origin_seen or bool(start.candidates)
            destination_seen = destination_seen or bool(end.candidates)
            if not start.candidates or not end.candidates:
                continue

            start_c, end_c = start.candidates, end.candidates
            if previous_end is not None and previous_end in start_c:
                start_c = [previous_end]

            segments = session.segments_near_points(
                start.anchors + end.anchors, step.search_buffer_m
            )
        G = build_topology(
            segments,
            mode=config.graph_mode,
            precision=config.precision,
            radius_m=config.connect_radius_m,
        )
        path = shortest_path(start_c, end_c, G)
        if path is None:
            continue

        by_id = {s.segment_id: s for s in segments}
        backtracking = has_backtracking(path, by_id, config.backtrack_angle_deg)
        rerouted = False
        if backtracking and config.avoid_backtracking:
            alternative = shortest_path_without_backtracking(
                start_c,
                end_c,
                G,
                by_id,
                junction_m=config.connect_radius_m,
                threshold_deg=config.backtrack_angle_deg,
            )
            if alternative is not None:
                LOGGER.info(
                    "Leg %d: rerouted around reversal (%d -> %d segments)",
                    leg_index,
                    len(path),
                    len(alternative),
                )
                path, backtracking, rerouted = alternative, False, True
            else:
                LOGGER.warning("Leg %d: no non-reversing alternative, keeping path", leg_index)
        result = LegResult(
            leg_index=leg_index,
            path=path,
            step=step,
            backtracking=backtracking,
            rerouted=rerouted,
        )
        LOGGER.info(
            "Leg %d (%s -> %s): %d segment(s) at buffer %.0f m",
            leg_index,
            origin,
            destination,
            len(path),
            step.search_buffer_m,
        )
        return result

    radii = tuple(s.candidate_radius_m for s in schedule)
    if not origin_seen:
        return NoCandidates(leg_index, tolerances_m=radii)
    if not destination_seen:
        return NoCandidates(leg_index + 1, tolerances_m=radii)
    return NoPathFound(
        leg_index,
        start_candidates=tuple(start_c),
        end_candidates=tuple(end_c),
        buffer_m=schedule[-1].search_buffer_m,
    )


def plan_path(
    waypoints: Sequence[Waypoint],
    store: SegmentStore,
    *,
    schedule: Sequence[ToleranceStep] | None = None,
    config: RoutingConfig | None = None,
) -> PlanResult:
    """Plan a fewest-segment route through `waypoints` in order."""
    cfg = config if config is not None else RoutingConfig()
    if len(waypoints) < 2:
        return PlanResult(
            path=None,
            error=InvalidInput("need at least two waypoints", n_waypoints=len(waypoints)),
        )
    if schedule is not None:
        try:
            cfg = RoutingConfig.model_validate(
                {**cfg.model_dump(), "tolerance_schedule": [s.model_dump() for s in schedule]}
            )
        except ValidationError as exc:
            return PlanResult(
                path=None,
                error=InvalidInput("invalid tolerance schedule", detail=str(exc)),
            )
    steps = cfg.tolerance_schedule

    legs: list[LegResult] = []
    previous_end: str | None = None
    for i, (origin, destination) in enumerate(zip(waypoints[:-1], waypoints[1:], strict=True)):
        try:
            outcome = _plan_leg(i, origin, destination, previous_end, store, steps, cfg)
        except InvalidInput as exc:
            exc.context.setdefault("leg_index", i)
            outcome = exc
        if isinstance(outcome, RoutingError):
            LOGGER.warning("Planning stopped at leg %d: %s", i, outcome.message)
            return PlanResult(path=None, legs=legs, error=outcome)
        legs.append(outcome)
        previous_end = outcome.path[-1]

    path = concatenate_legs(legs)
    LOGGER.info("Planned %d leg(s): %d segment(s)", len(legs), len(path))
    return PlanResult(path=path, legs=legs)

