"""Shared fixtures: a small equatorial rail network and an in-memory store.

Segments 1-5 form one straight chain along the equator, 0.01 deg (~1.1 km) each.
Segment 9 is isolated, about 157 km away.
"""
import pytest

from railchain.io import segments_to_gdf, stations_to_gdf
from railchain.io.store import GeoDataFrameSegmentStore
from railchain.models.entities import Segment, Station

CHAIN = {
    "1": [(0.00, 0.0), (0.005, 0.0), (0.01, 0.0)],
    "2": [(0.01, 0.0), (0.02, 0.0)],
    "3": [(0.02, 0.0), (0.025, 0.0), (0.03, 0.0)],
    "4": [(0.03, 0.0), (0.04, 0.0)],
    "5": [(0.04, 0.0), (0.05, 0.0)],
}
ISOLATED = {"9": [(1.00, 1.0), (1.01, 1.0)]}

STATIONS = {
    "A": ("Alpha", (0.0005, 0.0002)),  # ~22 m from segment 1
    "B": ("Bravo", (0.0255, 0.0003)),  # ~33 m from segment 3
    "C": ("Charlie", (0.0455, -0.0002)),  # ~22 m from segment 5
    "D": ("Delta", (0.0155, 0.003)),  # ~334 m from segment 2
    "ISO": ("Island", (1.005, 1.0003)),  # ~33 m from segment 9
    "FAR": ("Nowhere", (0.5, 0.5)),
}


def make_segments(coords_by_id):
    return [Segment.from_coords(sid, coords) for sid, coords in coords_by_id.items()]


@pytest.fixture
def chain_segments():
    return make_segments(CHAIN)


@pytest.fixture
def segments_gdf():
    return segments_to_gdf(make_segments({**CHAIN, **ISOLATED}))


@pytest.fixture
def stations_gdf():
    return stations_to_gdf(
        Station(station_id=sid, name=name, coord=coord) for sid, (name, coord) in STATIONS.items()
    )


@pytest.fixture
def store(segments_gdf, stations_gdf):
    return GeoDataFrameSegmentStore(segments_gdf, stations_gdf)


@pytest.fixture
def segments_geojson(tmp_path, segments_gdf):
    path = tmp_path / "segments.geojson"
    segments_gdf.to_file(path, driver="GeoJSON")
    return path
