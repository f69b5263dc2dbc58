"""Tests for railchain/graph/pathfinding.py."""
import networkx as nx
import pytest

from railchain.core.errors import InvalidInput
from railchain.graph.pathfinding import all_paths, shortest_path
from railchain.graph.topology import build_exact_graph
from railchain.models.entities import Segment


@pytest.fixture
def star():
    G = nx.Graph()
    G.add_edges_from([("1", "2"), ("2", "3"), ("2", "4")])
    return G


def chain_graph(k):
    segs = [Segment.from_coords(i, [(i * 0.01, 0.0), ((i + 1) * 0.01, 0.0)]) for i in range(k)]
    return build_exact_graph(segs)


class TestShortestPath:
    def test_star(self, star):
        assert shortest_path(["1"], ["4"], star) == ("1", "2", "4")

    @pytest.mark.parametrize("k", [1, 2, 5, 12])
    def test_chain_length_either_direction(self, k):
        G = chain_graph(k)
        forward = shortest_path(["0"], [str(k - 1)], G)
        backward = shortest_path([str(k - 1)], ["0"], G)
        assert len(forward) == k
        assert backward == tuple(reversed(forward))

    def test_multiple_candidates(self, star):
        path = shortest_path(["3", "1"], ["4", "9"], star)
        assert path == ("3", "2", "4")

    def test_unknown_candidates_are_ignored(self, star):
        assert shortest_path(["x"], ["4"], star) is None
        assert shortest_path(["1"], ["y"], star) is None

    def test_disconnected(self, star):
        star.add_edge("7", "8")
        assert shortest_path(["1"], ["8"], star) is None

    def test_start_is_end(self, star):
        assert shortest_path(["2"], ["2"], star) == ("2",)


class TestAllPaths:
    def test_star_single_path(self, star):
        assert all_paths("1", "4", star, max_depth=5) == [("1", "2", "4")]

    def test_enumerates_every_simple_path(self):
        G = nx.complete_graph(5)
        G = nx.relabel_nodes(G, str)
        paths = all_paths("0", "4", G)
        assert len(paths) == 16
        assert len(set(paths)) == 16
        assert all(len(set(p)) == len(p) for p in paths)

    @pytest.mark.parametrize("depth", [0, 1, 2, 3])
    def test_depth_bound(self, depth):
        G = nx.relabel_nodes(nx.complete_graph(6), str)
        paths = all_paths("0", "5", G, max_depth=depth)
        assert all(len(p) <= depth + 1 for p in paths)
        if depth >= 1:
            assert ("0", "5") in paths

    def test_start_is_end(self, star):
        assert all_paths("3", "3", star) == [("3",)]

    def test_unknown_ids(self, star):
        with pytest.raises(InvalidInput):
            all_paths("1", "99", star)

    def test_negative_depth(self, star):
        with pytest.raises(InvalidInput):
            all_paths("1", "4", star, max_depth=-1)
