"""Project configuration (paths, geodesy constants, search defaults)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

# CRS defaults
CRS_WGS84: str = "EPSG:4326"
CRS_METRIC: str = "EPSG:3857"  # Web Mercator, used for metre buffers around waypoints
CRS_GEOCENTRIC: str = "EPSG:4978"  # ECEF metres, used for endpoint proximity

EARTH_RADIUS_M: float = 6_371_000.0

# Endpoint keys are rounded to this many decimals in exact mode.
COORD_PRECISION: int = 7

# Tolerant mode: endpoints closer than this are treated as shared.
CONNECT_RADIUS_M: float = 5.0

# Diagnostics
DEFAULT_MAX_DEPTH: int = 50

# A turn sharper than this between consecutive segments counts as backtracking.
BACKTRACK_ANGLE_DEG: float = 140.0

# Splits closer than this to an existing vertex snap to that vertex.
MIN_SPLIT_DISTANCE_M: float = 10.0

DEFAULT_SEGMENTS_FILE = "segments.geojson"
DEFAULT_STATIONS_FILE = "stations.geojson"
ROUTING_CONFIG_FILE = "routing_config.yaml"


def project_root() -> Path:
    """Return repository root assuming this file lives in `<root>/railchain/core/config.py`."""
    return Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class Paths:
    root: Path
    config: Path
    data: Path
    data_processed: Path

    segments_geojson: Path
    stations_geojson: Path
    routing_config: Path


def get_paths(root: Path | None = None) -> Paths:
    r = project_root() if root is None else Path(root).resolve()
    data = r / "data"
    data_processed = data / "processed"
    return Paths(
        root=r,
        config=r / "config",
        data=data,
        data_processed=data_processed,
        segments_geojson=data_processed / DEFAULT_SEGMENTS_FILE,
        stations_geojson=data_processed / DEFAULT_STATIONS_FILE,
        routing_config=r / "config" / ROUTING_CONFIG_FILE,
    )


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
