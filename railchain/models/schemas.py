"""Table contracts for the segment and station layers.

A `TableSchema` names the id column, the expected geometry type and the pandas dtypes
that loaders coerce to. `validate_df` enforces it at the I/O boundary.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, Field


class TableSchema(BaseModel):
    """Column-level contract of a GeoDataFrame layer."""

    name: str
    id_column: str
    geometry_type: str
    optional_columns: tuple[str, ...] = Field(default_factory=tuple)
    # pandas dtype strings, e.g. "string", "Float64", "Int64"
    dtypes: Mapping[str, str] = Field(default_factory=dict)

    @property
    def required_columns(self) -> tuple[str, ...]:
        return (self.id_column, "geometry")


SEGMENTS = TableSchema(
    name="segments",
    id_column="segment_id",
    geometry_type="LineString",
    optional_columns=("parent_id", "name", "n_points"),
    dtypes={
        "segment_id": "string",
        "parent_id": "string",
        "name": "string",
        "n_points": "Int64",
    },
)

STATIONS = TableSchema(
    name="stations",
    id_column="station_id",
    geometry_type="Point",
    optional_columns=("name", "lon", "lat"),
    dtypes={
        "station_id": "string",
        "name": "string",
        "lon": "Float64",
        "lat": "Float64",
    },
)
