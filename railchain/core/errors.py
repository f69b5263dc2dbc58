"""Structured routing errors.

Planner failures are returned inside `PlanResult`; merge and split failures are raised.
Every error carries a `kind` and enough context (waypoint, leg, segment) to report which
part of a request failed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NO_CANDIDATES = "no_candidates"
    NO_PATH_FOUND = "no_path_found"
    BROKEN_CHAIN = "broken_chain"
    AMBIGUOUS_START = "ambiguous_start"
    INVALID_INPUT = "invalid_input"


class RoutingError(Exception):
    """Base class for all routing failures."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, **self.context}


class InvalidInput(RoutingError):
    """Malformed identifiers or degenerate geometry (fewer than 2 points)."""

    kind = ErrorKind.INVALID_INPUT


class SplitError(InvalidInput):
    """A segment cannot be split at the requested point."""


class NoCandidates(RoutingError):
    """No segment was found near a waypoint at any tried tolerance."""

    kind = ErrorKind.NO_CANDIDATES

    def __init__(self, waypoint_index: int, *, tolerances_m: tuple[float, ...] = ()) -> None:
        super().__init__(
            f"No segments found near waypoint {waypoint_index} "
            f"(tried tolerances: {list(tolerances_m)} m)",
            waypoint_index=waypoint_index,
            tolerances_m=list(tolerances_m),
        )
        self.waypoint_index = waypoint_index


class NoPathFound(RoutingError):
    """The graph components never joined for one leg, even at maximum tolerance."""

    kind = ErrorKind.NO_PATH_FOUND

    def __init__(
        self,
        leg_index: int,
        *,
        start_candidates: tuple[str, ...] = (),
        end_candidates: tuple[str, ...] = (),
        buffer_m: float | None = None,
    ) -> None:
        super().__init__(
            f"No path found for leg {leg_index} "
            f"(waypoint {leg_index} -> {leg_index + 1}, max buffer {buffer_m} m)",
            leg_index=leg_index,
            start_candidates=list(start_candidates),
            end_candidates=list(end_candidates),
            buffer_m=buffer_m,
        )
        self.leg_index = leg_index


class BrokenChain(RoutingError):
    """Chain merge found no polyline continuing the current tail."""

    kind = ErrorKind.BROKEN_CHAIN

    def __init__(
        self,
        tail: tuple[float, float],
        *,
        merged_count: int,
        remaining: tuple[int, ...],
    ) -> None:
        super().__init__(
            f"Chain is broken at {tail}: no remaining polyline connects "
            f"({merged_count} merged, {len(remaining)} left)",
            tail=list(tail),
            merged_count=merged_count,
            remaining=list(remaining),
        )
        self.tail = tail
        self.remaining = remaining


@dataclass(frozen=True)
class AmbiguousStart:
    """Notice attached to a merge whose orientation is a best-effort guess."""

    polyline_count: int
    start_index: int = 0
    kind: ErrorKind = field(default=ErrorKind.AMBIGUOUS_START, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": "No polyline has an unshared endpoint; orientation is a guess.",
            "polyline_count": self.polyline_count,
            "start_index": self.start_index,
        }
