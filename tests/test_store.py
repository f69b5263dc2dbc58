"""Tests for railchain/io/store.py and the GeoJSON loaders it builds on."""
import zipfile

import geopandas as gpd
import pytest
from shapely.geometry import LineString, Point

from railchain.core.errors import InvalidInput
from railchain.io import prepare_segments, read_segments_geojson
from railchain.io.compressed import archive_candidates, ensure_unzipped
from railchain.io.store import GeoDataFrameSegmentStore, id_sort_key


def test_id_sort_key_is_natural():
    assert sorted(["10", "9", "10-1", "2"], key=id_sort_key) == ["2", "9", "10", "10-1"]


class TestProximity:
    def test_junction_returns_both_segments_in_id_order(self, store):
        assert store.find_segments_near((0.01, 0.0), 1.0) == ["1", "2"]

    def test_station_radius(self, store):
        assert store.find_segments_near((0.0005, 0.0002), 100) == ["1"]
        assert store.find_segments_near((0.0155, 0.003), 100) == []
        assert store.find_segments_near((0.0155, 0.003), 500) == ["2"]

    def test_diagonal_segment_at_high_latitude(self):
        # True minimum distance from the query to the line is ~143.5 m.
        northern = GeoDataFrameSegmentStore(
            gpd.GeoDataFrame(
                {"segment_id": ["1"]},
                geometry=[LineString([(10.0, 65.0), (10.02, 65.01)])],
                crs="EPSG:4326",
            )
        )
        query = (10.012, 65.004)
        assert northern.find_segments_near(query, 150.7) == ["1"]
        assert northern.find_segments_near(query, 140.0) == []

    def test_negative_tolerance(self, store):
        with pytest.raises(InvalidInput):
            store.find_segments_near((0.0, 0.0), -1)

    def test_segments_near_points(self, store):
        near_a = store.segments_near_points([(0.0005, 0.0002)], 50_000)
        assert [s.segment_id for s in near_a] == ["1", "2", "3", "4", "5"]
        both = store.segments_near_points([(0.0005, 0.0002), (1.005, 1.0003)], 50_000)
        assert [s.segment_id for s in both] == ["1", "2", "3", "4", "5", "9"]
        assert store.segments_near_points([], 50_000) == []


class TestLookups:
    def test_fetch_is_batched_and_ordered(self, store):
        geoms = store.fetch_segment_geometry(["3", "1"])
        assert list(geoms) == ["3", "1"]
        assert geoms["1"] == ((0.0, 0.0), (0.005, 0.0), (0.01, 0.0))

    def test_fetch_unknown(self, store):
        with pytest.raises(InvalidInput) as exc_info:
            store.fetch_segment_geometry(["1", "404"])
        assert exc_info.value.context["segment_ids"] == ["404"]

    def test_station(self, store):
        station = store.station("B")
        assert station.name == "Bravo"
        assert station.coord == pytest.approx((0.0255, 0.0003))
        with pytest.raises(InvalidInput):
            store.station("ZZZ")

    def test_store_without_stations(self, segments_gdf):
        bare = GeoDataFrameSegmentStore(segments_gdf)
        assert len(bare) == 6
        assert "9" in bare
        with pytest.raises(InvalidInput):
            bare.station("A")


class TestSessions:
    def test_released_after_use(self, store):
        with store.session() as s:
            assert s is store
            assert store.active_sessions == 1
        assert store.active_sessions == 0
        assert store.sessions_opened == 1

    def test_released_on_error(self, store):
        with pytest.raises(InvalidInput):
            with store.session() as s:
                s.fetch_segment_geometry(["404"])
        assert store.active_sessions == 0


class TestLoading:
    def test_from_geojson(self, segments_geojson):
        loaded = GeoDataFrameSegmentStore.from_geojson(segments_geojson)
        assert len(loaded) == 6
        assert loaded.find_segments_near((0.03, 0.0), 1.0) == ["3", "4"]

    def test_read_segments_geojson_validates(self, segments_geojson):
        gdf = read_segments_geojson(segments_geojson)
        assert str(gdf["segment_id"].dtype) == "string"
        assert gdf["n_points"].tolist() == [3, 2, 3, 2, 2, 2]

    def test_non_linestring_features_are_skipped(self, caplog):
        gdf = gpd.GeoDataFrame(
            {"@id": [1, 2]},
            geometry=[LineString([(0, 0), (1, 0)]), Point(0, 0)],
            crs="EPSG:4326",
        )
        with caplog.at_level("WARNING"):
            out = prepare_segments(gdf)
        assert out["segment_id"].tolist() == ["1"]
        assert "non-LineString" in caplog.text

    def test_duplicate_ids_rejected(self):
        gdf = gpd.GeoDataFrame(
            {"segment_id": ["1", "1"]},
            geometry=[LineString([(0, 0), (1, 0)]), LineString([(1, 0), (2, 0)])],
            crs="EPSG:4326",
        )
        with pytest.raises(ValueError, match="duplicate ids"):
            prepare_segments(gdf)

    def test_missing_id_column(self):
        gdf = gpd.GeoDataFrame({"foo": [1]}, geometry=[LineString([(0, 0), (1, 0)])], crs="EPSG:4326")
        with pytest.raises(ValueError, match="Could not infer id column"):
            prepare_segments(gdf)


class TestZippedDatasets:
    @pytest.mark.parametrize(
        "archive_name, member",
        [
            ("segments.geojson.zip", "segments.geojson"),
            ("segments.zip", "export/segments.geojson"),
        ],
    )
    def test_loaded_from_archive(self, tmp_path, segments_geojson, archive_name, member):
        data = tmp_path / "data"
        data.mkdir()
        with zipfile.ZipFile(data / archive_name, "w") as zf:
            zf.write(segments_geojson, member)
        target = data / "segments.geojson"

        gdf = read_segments_geojson(target)
        assert len(gdf) == 6
        assert target.exists()
        assert not (data / "segments.geojson.part").exists()

    def test_missing_dataset_lists_archives(self, tmp_path):
        with pytest.raises(FileNotFoundError, match=r"segments\.zip"):
            ensure_unzipped(tmp_path / "segments.geojson")

    def test_ambiguous_archive(self, tmp_path, segments_geojson):
        data = tmp_path / "data"
        data.mkdir()
        with zipfile.ZipFile(data / "segments.zip", "w") as zf:
            zf.write(segments_geojson, "a/segments.geojson")
            zf.write(segments_geojson, "b/segments.geojson")
        with pytest.raises(ValueError, match="exactly one file"):
            ensure_unzipped(data / "segments.geojson")

    def test_archive_candidates(self, tmp_path):
        assert [p.name for p in archive_candidates(tmp_path / "segments.geojson")] == [
            "segments.geojson.zip",
            "segments.zip",
        ]
