"""Lightweight I/O helpers.

This module centralises:
- validated GeoJSON reads of segment/station datasets at the boundary
- conversion between GeoDataFrames and `Segment`/`Station` values
- simple JSON helpers used by scripts
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import geopandas as gpd
from shapely.geometry import LineString, Point

from railchain.core.config import CRS_WGS84
from railchain.io.compressed import ensure_unzipped
from railchain.models.entities import Segment, Station, as_polyline
from railchain.models.schemas import SEGMENTS, STATIONS
from railchain.models.validate import validate_df

LOGGER = logging.getLogger(__name__)

# Id columns tried in order when a dataset has no explicit id column.
SEGMENT_ID_COLUMNS: tuple[str, ...] = ("segment_id", "@id", "id")
STATION_ID_COLUMNS: tuple[str, ...] = ("station_id", "@id", "id")


def ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_json(obj: Any, path: Path) -> None:
    ensure_parent_dir(path)
    path.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")


def _infer_id_column(gdf: gpd.GeoDataFrame, candidates: tuple[str, ...], id_col: str | None) -> str:
    if id_col is not None:
        if id_col not in gdf.columns:
            raise ValueError(f"id column {id_col!r} not found in columns {list(gdf.columns)[:20]}")
        return id_col
    for c in candidates:
        if c in gdf.columns:
            return c
    raise ValueError(f"Could not infer id column (tried {list(candidates)}) from {list(gdf.columns)[:20]}")


def _to_wgs84(gdf: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    if gdf.crs is None:
        return gdf.set_crs(CRS_WGS84)
    if str(gdf.crs) != CRS_WGS84:
        return gdf.to_crs(CRS_WGS84)
    return gdf


def prepare_segments(gdf: gpd.GeoDataFrame, *, id_col: str | None = None) -> gpd.GeoDataFrame:
    """Normalise a raw segment layer to the `SEGMENTS` contract (WGS84, string ids).

    Non-LineString features and lines with fewer than 2 points are dropped with a warning.
    """
    col = _infer_id_column(gdf, SEGMENT_ID_COLUMNS, id_col)
    df = _to_wgs84(gdf).copy()
    df["segment_id"] = df[col].astype(str)

    is_line = df.geometry.geom_type == "LineString"
    if (~is_line).any():
        LOGGER.warning(
            "Skipping %d non-LineString feature(s) (e.g. %s)",
            int((~is_line).sum()),
            df.loc[~is_line, "segment_id"].head(5).tolist(),
        )
    df = df[is_line].copy()
    df["n_points"] = [len(g.coords) for g in df.geometry]
    short = df["n_points"] < 2
    if short.any():
        LOGGER.warning(
            "Skipping %d segment(s) with fewer than 2 coordinates (e.g. %s)",
            int(short.sum()),
            df.loc[short, "segment_id"].head(5).tolist(),
        )
    df = df[~short]
    keep = [c for c in ("segment_id", "parent_id", "name", "n_points", "geometry") if c in df.columns]
    out = gpd.GeoDataFrame(df[keep].reset_index(drop=True), geometry="geometry", crs=CRS_WGS84)
    return validate_df(out, SEGMENTS)


def read_segments_geojson(path: Path, *, id_col: str | None = None) -> gpd.GeoDataFrame:
    src = ensure_unzipped(Path(path))
    LOGGER.info("Loading segments: %s", src)
    gdf = gpd.read_file(src)
    out = prepare_segments(gdf, id_col=id_col)
    LOGGER.info("Segments loaded: %d", len(out))
    return out


def prepare_stations(gdf: gpd.GeoDataFrame, *, id_col: str | None = None) -> gpd.GeoDataFrame:
    col = _infer_id_column(gdf, STATION_ID_COLUMNS, id_col)
    df = _to_wgs84(gdf).copy()
    df = df[df.geometry.geom_type == "Point"].copy()
    df["station_id"] = df[col].astype(str)
    if "name" not in df.columns:
        df["name"] = df["station_id"]
    df["name"] = df["name"].fillna(df["station_id"])
    df["lon"] = df.geometry.x
    df["lat"] = df.geometry.y
    out = gpd.GeoDataFrame(
        df[["station_id", "name", "lon", "lat", "geometry"]].reset_index(drop=True),
        geometry="geometry",
        crs=CRS_WGS84,
    )
    return validate_df(out, STATIONS)


def read_stations_geojson(path: Path, *, id_col: str | None = None) -> gpd.GeoDataFrame:
    src = ensure_unzipped(Path(path))
    LOGGER.info("Loading stations: %s", src)
    return prepare_stations(gpd.read_file(src), id_col=id_col)


def segments_from_gdf(gdf: gpd.GeoDataFrame) -> list[Segment]:
    return [
        Segment(segment_id=str(sid), coords=as_polyline(geom.coords))
        for sid, geom in zip(gdf["segment_id"], gdf.geometry, strict=True)
    ]


def segments_to_gdf(segments: Iterable[Segment]) -> gpd.GeoDataFrame:
    segs = list(segments)
    return gpd.GeoDataFrame(
        {
            "segment_id": [s.segment_id for s in segs],
            "n_points": [len(s.coords) for s in segs],
        },
        geometry=[LineString(s.coords) for s in segs],
        crs=CRS_WGS84,
    )


def stations_to_gdf(stations: Iterable[Station]) -> gpd.GeoDataFrame:
    sts = list(stations)
    return gpd.GeoDataFrame(
        {
            "station_id": [s.station_id for s in sts],
            "name": [s.name for s in sts],
            "lon": [s.coord[0] for s in sts],
            "lat": [s.coord[1] for s in sts],
        },
        geometry=[Point(s.coord) for s in sts],
        crs=CRS_WGS84,
    )
