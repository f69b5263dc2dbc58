"""Tests for the railchain-find-path diagnostic CLI."""
import pytest

from railchain.diagnostics.find_path import main


def run(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr()
    return code, out.out, out.err


class TestListOutput:
    def test_shortest(self, capsys, segments_geojson):
        code, out, _ = run(capsys, "1", "5", "--data", str(segments_geojson), "--list")
        assert code == 0
        assert out.strip() == '"1;2;3;4;5"'

    def test_no_path_prints_empty_token(self, capsys, segments_geojson):
        code, out, _ = run(capsys, "1", "9", "--data", str(segments_geojson), "--list")
        assert code == 0
        assert out.strip() == '""'

    def test_all_paths_list_prints_shortest(self, capsys, segments_geojson):
        code, out, _ = run(
            capsys, "5", "2", "--data", str(segments_geojson), "--all-paths", "--list"
        )
        assert code == 0
        assert out.strip() == '"5;4;3;2"'


def test_human_readable(capsys, segments_geojson):
    code, out, _ = run(capsys, "1", "3", "--data", str(segments_geojson))
    assert code == 0
    assert "Path found: 1 -> 2 -> 3" in out
    assert "Hops: 2" in out


def test_all_paths_respects_depth(capsys, segments_geojson):
    code, out, _ = run(
        capsys, "1", "5", "--data", str(segments_geojson), "--all-paths", "--max-depth", "2"
    )
    assert code == 0
    assert "No paths found" in out


def test_info(capsys, segments_geojson):
    code, out, _ = run(capsys, "2", "4", "--data", str(segments_geojson), "--info")
    assert code == 0
    assert "Start connections: 1" in out
    assert "End connections: 5" in out
    assert "Connected segments: 3, 5" in out


@pytest.mark.parametrize("bad", ["abc", "1.5", "-3"])
def test_malformed_id_is_usage_error(capsys, segments_geojson, bad):
    with pytest.raises(SystemExit) as exc_info:
        main(["1", bad, "--data", str(segments_geojson)])
    assert exc_info.value.code == 2


def test_unknown_id(capsys, segments_geojson):
    code, _, err = run(capsys, "1", "404", "--data", str(segments_geojson))
    assert code == 1
    assert "404" in err


def test_missing_data_file(capsys, tmp_path):
    code, _, err = run(capsys, "1", "2", "--data", str(tmp_path / "missing.geojson"))
    assert code == 1
    assert "Dataset not found" in err
