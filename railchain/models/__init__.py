"""Data contracts: value types, pydantic config models, table schemas.

These keep the routing core deterministic:
- Loaders validate segment/station tables at the I/O boundary.
- Routing logic works on plain `Segment`/`Station` values only.
"""

from __future__ import annotations

from railchain.models.entities import Coordinate, Path, Polyline, Segment, Station, as_polyline
from railchain.models.routing import (
    DEFAULT_TOLERANCE_SCHEDULE,
    RoutingConfig,
    ToleranceStep,
    load_routing_config,
)
from railchain.models.schemas import SEGMENTS, STATIONS, TableSchema
from railchain.models.validate import validate_df

__all__ = [
    "Coordinate",
    "Path",
    "Polyline",
    "Segment",
    "Station",
    "as_polyline",
    "ToleranceStep",
    "RoutingConfig",
    "DEFAULT_TOLERANCE_SCHEDULE",
    "load_routing_config",
    "TableSchema",
    "SEGMENTS",
    "STATIONS",
    "validate_df",
]
