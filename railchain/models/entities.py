"""Core value types: coordinates, segments, stations."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from railchain.core.errors import InvalidInput

Coordinate = tuple[float, float]
Polyline = tuple[Coordinate, ...]
Path = tuple[str, ...]


def as_polyline(coords: Iterable[Sequence[float]]) -> Polyline:
    """Normalise any iterable of (x, y[, z]) sequences to a tuple of float pairs."""
    out = tuple((float(c[0]), float(c[1])) for c in coords)
    return out


@dataclass(frozen=True)
class Segment:
    """An atomic track polyline with a stable identifier."""

    segment_id: str
    coords: Polyline

    def __post_init__(self) -> None:
        if not isinstance(self.segment_id, str) or not self.segment_id:
            raise InvalidInput("segment_id must be a non-empty string", segment_id=self.segment_id)
        if len(self.coords) < 2:
            raise InvalidInput(
                f"segment {self.segment_id!r} has {len(self.coords)} coordinate(s); need >= 2",
                segment_id=self.segment_id,
            )

    @classmethod
    def from_coords(cls, segment_id: object, coords: Iterable[Sequence[float]]) -> Segment:
        return cls(segment_id=str(segment_id), coords=as_polyline(coords))

    @property
    def start(self) -> Coordinate:
        return self.coords[0]

    @property
    def end(self) -> Coordinate:
        return self.coords[-1]

    @property
    def is_closed(self) -> bool:
        return self.coords[0] == self.coords[-1]


@dataclass(frozen=True)
class Station:
    station_id: str
    name: str
    coord: Coordinate
