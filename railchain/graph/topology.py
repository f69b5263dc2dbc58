"""Segment adjacency graphs.

Two equality modes for shared endpoints:
- exact: endpoints keyed after rounding to a fixed precision (one authoritative vertex set)
- tolerant: endpoints within a radius in metres (independently digitised or buffered data)

Graphs are plain `networkx.Graph`s over segment ids, built fresh per search.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Literal

import networkx as nx
import numpy as np
from pyproj import Transformer
from scipy.spatial import cKDTree

from railchain.core.config import (
    COORD_PRECISION,
    CONNECT_RADIUS_M,
    CRS_GEOCENTRIC,
    CRS_WGS84,
)
from railchain.core.errors import InvalidInput
from railchain.geo.geometry import coordinate_key
from railchain.models.entities import Segment

LOGGER = logging.getLogger(__name__)

GraphMode = Literal["exact", "tolerant"]


@dataclass
class EndpointIndex:
    """Endpoint key -> segment ids, in insertion order."""

    precision: int = COORD_PRECISION
    by_key: dict[tuple[float, float], list[str]] = field(default_factory=dict)
    segments: dict[str, Segment] = field(default_factory=dict)

    def add(self, segment: Segment) -> None:
        if segment.segment_id in self.segments:
            raise InvalidInput(
                f"duplicate segment id {segment.segment_id!r}", segment_id=segment.segment_id
            )
        self.segments[segment.segment_id] = segment
        start_key = coordinate_key(segment.start, self.precision)
        end_key = coordinate_key(segment.end, self.precision)
        self.by_key.setdefault(start_key, []).append(segment.segment_id)
        # A closed loop is indexed once at its single endpoint.
        if end_key != start_key:
            self.by_key.setdefault(end_key, []).append(segment.segment_id)

    def at(self, coord: Sequence[float]) -> list[str]:
        return list(self.by_key.get(coordinate_key(coord, self.precision), []))


@dataclass(frozen=True)
class SegmentConnections:
    segment_id: str
    start: tuple[float, float]
    end: tuple[float, float]
    start_connections: tuple[str, ...]
    end_connections: tuple[str, ...]

    @property
    def connected(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(self.start_connections + self.end_connections))


def _new_graph(segments: Sequence[Segment]) -> nx.Graph:
    G = nx.Graph()
    for s in segments:
        if s.segment_id in G:
            raise InvalidInput(f"duplicate segment id {s.segment_id!r}", segment_id=s.segment_id)
        G.add_node(s.segment_id, start=s.start, end=s.end)
    return G


def build_endpoint_index(
    segments: Iterable[Segment], *, precision: int = COORD_PRECISION
) -> EndpointIndex:
    index = EndpointIndex(precision=precision)
    for s in segments:
        index.add(s)
    return index


def build_exact_graph(
    segments: Sequence[Segment], *, precision: int = COORD_PRECISION
) -> nx.Graph:
    """Adjacency by rounded-coordinate equality of endpoints."""
    index = build_endpoint_index(segments, precision=precision)
    G = _new_graph(segments)
    for ids in index.by_key.values():
        for i, u in enumerate(ids):
            for v in ids[i + 1 :]:
                if u != v:
                    G.add_edge(u, v)
    LOGGER.debug(
        "Exact graph: %d segments, %d edges, %d endpoint keys",
        G.number_of_nodes(),
        G.number_of_edges(),
        len(index.by_key),
    )
    return G


def _geocentric_xyz(lonlat: np.ndarray) -> np.ndarray:
    transformer = Transformer.from_crs(CRS_WGS84, CRS_GEOCENTRIC, always_xy=True)
    x, y, z = transformer.transform(lonlat[:, 0], lonlat[:, 1], np.zeros(len(lonlat)))
    return np.column_stack([x, y, z])


def build_tolerant_graph(
    segments: Sequence[Segment], *, radius_m: float = CONNECT_RADIUS_M
) -> nx.Graph:
    """Adjacency when any endpoint of one segment lies within `radius_m` of another's.

    Endpoints go to geocentric metres so a KD-tree radius query equals a chord distance,
    indistinguishable from great-circle distance at connection radii.
    """
    if radius_m <= 0:
        raise InvalidInput(f"radius_m must be > 0, got {radius_m}", radius_m=radius_m)
    G = _new_graph(segments)
    if len(segments) < 2:
        return G

    owners: list[int] = []
    pts: list[tuple[float, float]] = []
    for i, s in enumerate(segments):
        owners.append(i)
        pts.append(s.start)
        if not s.is_closed:
            owners.append(i)
            pts.append(s.end)

    xyz = _geocentric_xyz(np.asarray(pts, dtype=float))
    tree = cKDTree(xyz)
    pairs = tree.query_pairs(r=float(radius_m), output_type="ndarray")

    seg_pairs = {
        (min(owners[a], owners[b]), max(owners[a], owners[b]))
        for a, b in pairs
        if owners[a] != owners[b]
    }
    for a, b in sorted(seg_pairs):
        G.add_edge(segments[a].segment_id, segments[b].segment_id)
    LOGGER.debug(
        "Tolerant graph (r=%.1f m): %d segments, %d edges",
        radius_m,
        G.number_of_nodes(),
        G.number_of_edges(),
    )
    return G


def build_topology(
    segments: Sequence[Segment],
    *,
    mode: GraphMode = "exact",
    precision: int = COORD_PRECISION,
    radius_m: float = CONNECT_RADIUS_M,
) -> nx.Graph:
    if mode == "exact":
        return build_exact_graph(segments, precision=precision)
    if mode == "tolerant":
        return build_tolerant_graph(segments, radius_m=radius_m)
    raise InvalidInput(f"unknown graph mode {mode!r}", mode=mode)


def segment_connections(index: EndpointIndex, segment_id: str) -> SegmentConnections:
    """Segments touching each endpoint of `segment_id` (itself excluded)."""
    seg = index.segments.get(segment_id)
    if seg is None:
        raise InvalidInput(f"unknown segment id {segment_id!r}", segment_id=segment_id)
    return SegmentConnections(
        segment_id=segment_id,
        start=seg.start,
        end=seg.end,
        start_connections=tuple(i for i in index.at(seg.start) if i != segment_id),
        end_connections=tuple(i for i in index.at(seg.end) if i != segment_id),
    )
