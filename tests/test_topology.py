"""Tests for railchain/graph/topology.py adjacency builders."""
import networkx as nx
import pytest

from railchain.core.errors import InvalidInput
from railchain.graph.topology import (
    build_endpoint_index,
    build_exact_graph,
    build_tolerant_graph,
    build_topology,
    segment_connections,
)
from railchain.models.entities import Segment


def seg(sid, *coords):
    return Segment.from_coords(sid, coords)


class TestExactGraph:
    def test_chain_edges(self, chain_segments):
        G = build_exact_graph(chain_segments)
        assert sorted(G.edges) == [("1", "2"), ("2", "3"), ("3", "4"), ("4", "5")]
        assert G.nodes["1"]["start"] == (0.0, 0.0)

    def test_rounding_absorbs_float_noise(self):
        G = build_exact_graph([seg("a", (0, 0), (1, 0)), seg("b", (1.00000000001, 0), (2, 0))])
        assert G.has_edge("a", "b")

    def test_distinct_points_do_not_connect(self):
        G = build_exact_graph([seg("a", (0, 0), (1, 0)), seg("b", (1.000001, 0), (2, 0))])
        assert G.number_of_edges() == 0

    def test_closed_loop_has_no_self_edge(self):
        loop = seg("L", (0, 0), (1, 0), (1, 1), (0, 0))
        spur = seg("S", (0, 0), (-1, 0))
        G = build_exact_graph([loop, spur])
        assert nx.number_of_selfloops(G) == 0
        assert list(G.edges) == [("L", "S")]

    def test_interior_vertices_are_not_junctions(self):
        G = build_exact_graph([seg("a", (0, 0), (1, 0), (2, 0)), seg("b", (1, 0), (1, 1))])
        assert G.number_of_edges() == 0

    def test_duplicate_ids_rejected(self):
        with pytest.raises(InvalidInput):
            build_exact_graph([seg("a", (0, 0), (1, 0)), seg("a", (1, 0), (2, 0))])


class TestTolerantGraph:
    # 0.00003 deg at the equator is ~3.3 m.
    GAP = [seg("a", (0.0, 0.0), (0.01, 0.0)), seg("b", (0.01003, 0.0), (0.02, 0.0))]

    def test_connects_within_radius(self):
        assert build_tolerant_graph(self.GAP, radius_m=5.0).has_edge("a", "b")

    def test_does_not_connect_beyond_radius(self):
        assert not build_tolerant_graph(self.GAP, radius_m=1.0).has_edge("a", "b")

    def test_loop_touching_itself_has_no_self_edge(self):
        G = build_tolerant_graph([seg("L", (0, 0), (0.001, 0), (0.001, 0.001), (0, 0))], radius_m=5)
        assert nx.number_of_selfloops(G) == 0
        assert list(G.nodes) == ["L"]

    def test_rejects_non_positive_radius(self):
        with pytest.raises(InvalidInput):
            build_tolerant_graph(self.GAP, radius_m=0)


def test_build_topology_dispatches_on_mode(chain_segments):
    assert build_topology(chain_segments, mode="exact").number_of_edges() == 4
    assert build_topology(chain_segments, mode="tolerant").number_of_edges() == 4
    with pytest.raises(InvalidInput):
        build_topology(chain_segments, mode="fuzzy")


def test_segment_connections(chain_segments):
    index = build_endpoint_index(chain_segments)
    info = segment_connections(index, "2")
    assert info.start_connections == ("1",)
    assert info.end_connections == ("3",)
    assert info.connected == ("1", "3")
    with pytest.raises(InvalidInput):
        segment_connections(index, "42")


def test_graphs_are_independent(chain_segments):
    G1 = build_exact_graph(chain_segments)
    G1.remove_node("3")
    G2 = build_exact_graph(chain_segments)
    assert "3" in G2
