"""Boundary validation for segment/station layers."""

from __future__ import annotations

import pandas as pd

from railchain.models.schemas import TableSchema


def _coerce(df: pd.DataFrame, schema: TableSchema) -> pd.DataFrame:
    out = df.copy()
    for col, dtype in schema.dtypes.items():
        if col not in out.columns:
            continue
        try:
            out[col] = out[col].astype(dtype)
        except (TypeError, ValueError) as exc:
            raise TypeError(f"{schema.name}: column {col!r} is not coercible to {dtype!r}: {exc}") from exc
    return out


def validate_df(df: pd.DataFrame, schema: TableSchema) -> pd.DataFrame:
    """Check required columns, null/duplicate ids and geometry type; return a coerced copy."""
    missing = [c for c in schema.required_columns if c not in df.columns]
    if missing:
        raise ValueError(f"{schema.name}: missing required columns: {missing}")

    out = _coerce(df, schema)
    ids = out[schema.id_column]
    nulls = int(ids.isna().sum()) + int(out["geometry"].isna().sum())
    if nulls:
        raise ValueError(f"{schema.name}: {nulls} row(s) with a null id or geometry")

    dupes = sorted(set(ids[ids.duplicated(keep="first")].astype(str)))
    if dupes:
        raise ValueError(f"{schema.name}: duplicate ids (e.g. {dupes[:5]})")

    geom_types = pd.Series([g.geom_type for g in out["geometry"]], index=out.index)
    wrong = geom_types != schema.geometry_type
    if wrong.any():
        raise ValueError(
            f"{schema.name}: expected {schema.geometry_type} geometries, "
            f"got {sorted(set(geom_types[wrong]))}"
        )
    return out
