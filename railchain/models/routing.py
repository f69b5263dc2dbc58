"""Pydantic models for planner configuration.

A tolerance schedule is an increasing sequence of steps tried in order until a leg
resolves. Each step widens both the waypoint-to-segment radius and the buffer used to
load the leg's candidate graph.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from railchain.core.config import (
    BACKTRACK_ANGLE_DEG,
    COORD_PRECISION,
    CONNECT_RADIUS_M,
    MIN_SPLIT_DISTANCE_M,
)


class ToleranceStep(BaseModel):
    """One rung of the escalation ladder."""

    model_config = {"frozen": True}

    candidate_radius_m: float = Field(gt=0)
    search_buffer_m: float = Field(gt=0)


DEFAULT_TOLERANCE_SCHEDULE: tuple[ToleranceStep, ...] = (
    ToleranceStep(candidate_radius_m=100.0, search_buffer_m=50_000.0),
    ToleranceStep(candidate_radius_m=500.0, search_buffer_m=100_000.0),
    ToleranceStep(candidate_radius_m=1_000.0, search_buffer_m=150_000.0),
)


class RoutingConfig(BaseModel):
    model_config = {"frozen": True}

    graph_mode: Literal["exact", "tolerant"] = "tolerant"
    connect_radius_m: float = Field(default=CONNECT_RADIUS_M, gt=0)
    precision: int = Field(default=COORD_PRECISION, ge=0, le=12)
    min_split_distance_m: float = Field(default=MIN_SPLIT_DISTANCE_M, ge=0)
    avoid_backtracking: bool = True
    backtrack_angle_deg: float = Field(default=BACKTRACK_ANGLE_DEG, gt=0, le=180)
    tolerance_schedule: tuple[ToleranceStep, ...] = DEFAULT_TOLERANCE_SCHEDULE

    @field_validator("tolerance_schedule")
    @classmethod
    def _schedule_increasing(cls, v: tuple[ToleranceStep, ...]) -> tuple[ToleranceStep, ...]:
        if not v:
            raise ValueError("tolerance_schedule must contain at least one step")
        for prev, cur in zip(v[:-1], v[1:], strict=True):
            if (
                cur.candidate_radius_m < prev.candidate_radius_m
                or cur.search_buffer_m < prev.search_buffer_m
            ):
                raise ValueError("tolerance_schedule must be non-decreasing in both radii")
        return v


def load_routing_config(path: Path) -> RoutingConfig:
    """Load a YAML routing config file; missing keys fall back to defaults."""
    raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    return RoutingConfig.model_validate(raw)
