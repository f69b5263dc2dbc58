"""Segment/station store: the external spatial collaborator of the routing core.

`SegmentStore` is the interface the planner consumes. Every query runs inside
`with store.session() as session:` so backing connections are acquired and released
around each graph-construction step, including on failure.

`GeoDataFrameSegmentStore` is an in-memory implementation over GeoDataFrames (loaded from
GeoJSON), with an R-tree for proximity queries in a metric CRS.
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

import geopandas as gpd
from pyproj import Transformer
from shapely.geometry import Point
from shapely.ops import nearest_points, unary_union

from railchain.core.config import CRS_METRIC, CRS_WGS84
from railchain.core.errors import InvalidInput
from railchain.geo.geometry import haversine_m
from railchain.io import (
    prepare_segments,
    prepare_stations,
    read_segments_geojson,
    read_stations_geojson,
    segments_from_gdf,
)
from railchain.models.entities import Coordinate, Polyline, Segment, Station

LOGGER = logging.getLogger(__name__)

_NUM_SPLIT = re.compile(r"(\d+)")


def id_sort_key(segment_id: str) -> tuple:
    """Natural ordering: "9" < "10" < "10-1"."""
    return tuple(int(p) if p.isdigit() else p for p in _NUM_SPLIT.split(segment_id))


class SegmentStore(ABC):
    """Interface consumed by the planner and route assembly."""

    @contextmanager
    def session(self) -> Iterator[SegmentStore]:
        """Scoped access; subclasses backed by connections acquire/release here."""
        yield self

    @abstractmethod
    def find_segments_near(self, point: Sequence[float], tolerance_m: float) -> list[str]:
        """Ids of segments within `tolerance_m` of `point`, in natural id order."""

    @abstractmethod
    def segments_near_points(
        self, points: Sequence[Sequence[float]], buffer_m: float
    ) -> list[Segment]:
        """Segments intersecting the union of `buffer_m` buffers around `points`."""

    @abstractmethod
    def fetch_segment_geometry(self, segment_ids: Iterable[str]) -> dict[str, Polyline]:
        """Batched geometry fetch; raises `InvalidInput` for unknown ids."""

    @abstractmethod
    def station(self, station_id: str) -> Station:
        """Station record; raises `InvalidInput` for unknown ids."""


class GeoDataFrameSegmentStore(SegmentStore):
    def __init__(
        self,
        segments: gpd.GeoDataFrame,
        stations: gpd.GeoDataFrame | None = None,
        *,
        metric_crs: str = CRS_METRIC,
    ) -> None:
        self._segments = prepare_segments(segments)
        self._stations = prepare_stations(stations) if stations is not None else None
        self._metric_crs = metric_crs
        self._metric = self._segments.to_crs(metric_crs)
        self._to_metric = Transformer.from_crs(CRS_WGS84, metric_crs, always_xy=True)
        self._to_wgs84 = Transformer.from_crs(metric_crs, CRS_WGS84, always_xy=True)
        self._by_id: dict[str, int] = {
            sid: i for i, sid in enumerate(self._segments["segment_id"].astype(str))
        }
        self.active_sessions = 0
        self.sessions_opened = 0
        LOGGER.debug("Segment store ready: %d segments", len(self._segments))

    @classmethod
    def from_geojson(
        cls, segments_path: Path, stations_path: Path | None = None
    ) -> GeoDataFrameSegmentStore:
        segments = read_segments_geojson(segments_path)
        stations = (
            read_stations_geojson(stations_path)
            if stations_path is not None and Path(stations_path).exists()
            else None
        )
        return cls(segments, stations)

    @contextmanager
    def session(self) -> Iterator[GeoDataFrameSegmentStore]:
        self.active_sessions += 1
        self.sessions_opened += 1
        try:
            yield self
        finally:
            self.active_sessions -= 1

    def __len__(self) -> int:
        return len(self._segments)

    def __contains__(self, segment_id: object) -> bool:
        return str(segment_id) in self._by_id

    def _metric_buffer(self, point: Sequence[float], radius_m: float):
        # Web Mercator stretches distances by 1/cos(lat); widen the buffer so it covers
        # at least `radius_m` of true ground distance.
        scale = 1.0 / max(math.cos(math.radians(float(point[1]))), 1e-6)
        x, y = self._to_metric.transform(float(point[0]), float(point[1]))
        return Point(x, y).buffer(radius_m * scale)

    def find_segments_near(self, point: Sequence[float], tolerance_m: float) -> list[str]:
        if tolerance_m < 0:
            raise InvalidInput(f"tolerance_m must be >= 0, got {tolerance_m}", tolerance_m=tolerance_m)
        idx = self._metric.sindex.query(self._metric_buffer(point, tolerance_m), predicate="intersects")
        # Nearest point is found in the conformal metric frame; planar degrees skew it
        # towards the poles.
        q = (float(point[0]), float(point[1]))
        q_metric = Point(self._to_metric.transform(*q))
        out: list[str] = []
        for i in sorted(int(j) for j in idx):
            near = nearest_points(q_metric, self._metric.geometry.iloc[i])[1]
            if haversine_m(q, self._to_wgs84.transform(near.x, near.y)) <= tolerance_m:
                out.append(str(self._segments["segment_id"].iloc[i]))
        return sorted(out, key=id_sort_key)

    def segments_near_points(
        self, points: Sequence[Sequence[float]], buffer_m: float
    ) -> list[Segment]:
        if not points:
            return []
        area = unary_union([self._metric_buffer(p, buffer_m) for p in points])
        idx = sorted(int(j) for j in self._metric.sindex.query(area, predicate="intersects"))
        sub = self._segments.iloc[idx]
        segs = sorted(segments_from_gdf(sub), key=lambda s: id_sort_key(s.segment_id))
        LOGGER.debug("Loaded %d segment(s) within %.0f m of %d point(s)", len(segs), buffer_m, len(points))
        return segs

    def fetch_segment_geometry(self, segment_ids: Iterable[str]) -> dict[str, Polyline]:
        ids = [str(s) for s in segment_ids]
        missing = [s for s in ids if s not in self._by_id]
        if missing:
            raise InvalidInput(f"unknown segment id(s): {missing[:10]}", segment_ids=missing)
        out: dict[str, Polyline] = {}
        for sid in ids:
            geom = self._segments.geometry.iloc[self._by_id[sid]]
            out[sid] = tuple((float(c[0]), float(c[1])) for c in geom.coords)
        return out

    def station(self, station_id: str) -> Station:
        if self._stations is None:
            raise InvalidInput("store has no station layer", station_id=station_id)
        row = self._stations[self._stations["station_id"] == str(station_id)]
        if row.empty:
            raise InvalidInput(f"unknown station id {station_id!r}", station_id=station_id)
        r = row.iloc[0]
        coord: Coordinate = (float(r.geometry.x), float(r.geometry.y))
        return Station(station_id=str(r["station_id"]), name=str(r["name"]), coord=coord)
