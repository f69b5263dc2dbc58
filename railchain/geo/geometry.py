"""Geometry primitives on (lon, lat) polylines: distance, bearing, projection, splitting."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from railchain.core.config import COORD_PRECISION, EARTH_RADIUS_M, MIN_SPLIT_DISTANCE_M
from railchain.core.errors import InvalidInput, SplitError
from railchain.models.entities import Coordinate, Polyline


def coordinate_key(coord: Sequence[float], precision: int = COORD_PRECISION) -> tuple[float, float]:
    """Endpoint key for exact matching; rounding absorbs float noise from one vertex source."""
    return (round(float(coord[0]), precision), round(float(coord[1]), precision))


def haversine_m(a: Sequence[float], b: Sequence[float]) -> float:
    """Great-circle distance in metres between two (lon, lat) points."""
    lon1, lat1 = math.radians(a[0]), math.radians(a[1])
    lon2, lat2 = math.radians(b[0]), math.radians(b[1])
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def _haversine_many(q: np.ndarray, pts: np.ndarray) -> np.ndarray:
    lon1, lat1 = np.radians(q[0]), np.radians(q[1])
    lon2, lat2 = np.radians(pts[:, 0]), np.radians(pts[:, 1])
    h = (
        np.sin((lat2 - lat1) / 2) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def bearing_deg(a: Sequence[float], b: Sequence[float]) -> float:
    """Initial bearing from a to b in degrees, normalised to [0, 360)."""
    lon1, lat1 = math.radians(a[0]), math.radians(a[1])
    lon2, lat2 = math.radians(b[0]), math.radians(b[1])
    y = math.sin(lon2 - lon1) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(lon2 - lon1)
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def turn_angle_deg(b1: float, b2: float) -> float:
    """Absolute change of heading between two bearings, in [0, 180]."""
    diff = abs(b2 - b1) % 360.0
    return 360.0 - diff if diff > 180.0 else diff


def polyline_length_m(coords: Sequence[Sequence[float]]) -> float:
    if len(coords) < 2:
        return 0.0
    return float(sum(haversine_m(a, b) for a, b in zip(coords[:-1], coords[1:], strict=True)))


def coordinates_to_wkt(coords: Sequence[Sequence[float]]) -> str:
    return "LINESTRING(" + ",".join(f"{c[0]} {c[1]}" for c in coords) + ")"


def nearest_segment(polyline: Sequence[Sequence[float]], query: Sequence[float]) -> tuple[int, Coordinate]:
    """Index of the vertex pair closest to `query` and the projected point on it.

    Ties resolve to the earliest pair.
    """
    if len(polyline) < 2:
        raise InvalidInput(
            f"polyline has {len(polyline)} point(s); need >= 2", n_points=len(polyline)
        )
    pts = np.asarray(polyline, dtype=float)[:, :2]
    q = np.asarray(query, dtype=float)[:2]
    a = pts[:-1]
    d = pts[1:] - a
    len2 = (d * d).sum(axis=1)
    dot = ((q - a) * d).sum(axis=1)
    t = np.divide(dot, len2, out=np.zeros_like(dot), where=len2 > 0)
    t = np.clip(t, 0.0, 1.0)
    proj = a + t[:, None] * d
    dist = _haversine_many(q, proj)
    i = int(np.argmin(dist))
    return i, (float(proj[i, 0]), float(proj[i, 1]))


def split_at(
    polyline: Sequence[Sequence[float]], index: int, point: Sequence[float]
) -> tuple[Polyline, Polyline]:
    """Split a polyline on vertex pair `index`; both halves share `point`."""
    n = len(polyline)
    if index < 0 or index >= n - 1:
        raise SplitError(
            f"invalid vertex-pair index {index} for polyline of {n} points", index=index
        )
    p = (float(point[0]), float(point[1]))
    coords = [(float(c[0]), float(c[1])) for c in polyline]
    left = (*coords[: index + 1], p)
    right = (p, *coords[index + 1 :])
    return left, right


def is_valid_split(
    point: Sequence[float],
    seg_start: Sequence[float],
    seg_end: Sequence[float],
    min_distance_m: float = MIN_SPLIT_DISTANCE_M,
) -> bool:
    """False when `point` lands closer than `min_distance_m` to either vertex."""
    return (
        haversine_m(point, seg_start) >= min_distance_m
        and haversine_m(point, seg_end) >= min_distance_m
    )
