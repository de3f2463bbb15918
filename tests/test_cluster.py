"""Tests for tuan_graph.cluster: threshold clustering with union-find."""

import math

import pytest

from tuan_graph.builder import Entity, build_graph
from tuan_graph.cluster import Cluster, _UnionFind, threshold_clusters
from tuan_graph.errors import ValidationError


def _partition(clusters):
    return sorted(sorted(c.members) for c in clusters)


def _assert_partition(graph, clusters):
    seen = [m for c in clusters for m in c.members]
    assert sorted(seen) == sorted(n.id for n in graph.nodes)
    assert len(seen) == len(set(seen))
    assert all(c.members for c in clusters)


# ---------------------------------------------------------------------------
# _UnionFind
# ---------------------------------------------------------------------------

class TestUnionFind:
    def test_singletons(self):
        uf = _UnionFind(3)
        assert [uf.find(i) for i in range(3)] == [0, 1, 2]

    def test_union_merges(self):
        uf = _UnionFind(4)
        assert uf.union(0, 1)
        assert uf.union(2, 3)
        assert uf.union(1, 3)
        assert len({uf.find(i) for i in range(4)}) == 1

    def test_union_same_set_is_noop(self):
        uf = _UnionFind(2)
        uf.union(0, 1)
        assert not uf.union(1, 0)


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestThresholdClusters:
    def test_scenario_a(self, scenario_a):
        """A-B (5), B-C (1) at threshold 3 -> {A, B} and {C}."""
        clusters = scenario_a.clusterize(3)
        assert [c.members for c in clusters] == [[0, 1], [2]]
        assert [c.id for c in clusters] == [1, 2]

    def test_low_threshold_merges_everything(self, scenario_a):
        clusters = scenario_a.clusterize(1)
        assert [c.members for c in clusters] == [[0, 1, 2]]

    def test_high_threshold_all_singletons(self, scenario_a):
        clusters = scenario_a.clusterize(6)
        assert _partition(clusters) == [[0], [1], [2]]

    def test_threshold_is_inclusive(self, scenario_a):
        clusters = scenario_a.clusterize(5)
        assert [c.members for c in clusters] == [[0, 1], [2]]

    def test_single_node(self):
        g = build_graph([Entity("only.ts")]).graph
        for t in (0, 1, 1000):
            assert [c.members for c in g.clusterize(t)] == [[0]]

    def test_empty_graph(self):
        assert build_graph([]).graph.clusterize(1) == []

    def test_isolated_nodes_are_singletons(self, make_graph):
        g = make_graph([("a", "b", 4)], nodes=["a", "b", "c", "d"])
        clusters = g.clusterize(2)
        assert [c.members for c in clusters] == [[0, 1], [2], [3]]

    def test_parallel_edges_summed(self, make_graph):
        g = make_graph([("a", "b", 2), ("b", "a", 2)])
        assert [c.members for c in g.clusterize(3)] == [[0, 1]]

    def test_self_loop_does_not_merge(self, make_graph):
        g = make_graph([("a", "a", 10)], nodes=["a", "b"])
        assert _partition(g.clusterize(1)) == [[0], [1]]

    def test_transitive_merge(self, make_graph):
        g = make_graph([("a", "b", 3), ("b", "c", 3), ("c", "d", 3)])
        assert [c.members for c in g.clusterize(3)] == [[0, 1, 2, 3]]

    def test_order_larger_first_then_earliest(self, make_graph):
        g = make_graph([("e", "f", 2), ("a", "b", 2), ("c", "d", 2), ("d", "g", 2)])
        clusters = g.clusterize(2)
        keys = [[g.node(m).key for m in c.members] for c in clusters]
        assert keys == [["c", "d", "g"], ["e", "f"], ["a", "b"]]

    def test_returns_cluster_objects(self, scenario_a):
        clusters = threshold_clusters(scenario_a, 3)
        assert all(isinstance(c, Cluster) for c in clusters)
        assert all(c.label == "" for c in clusters)
        assert len(clusters[0]) == 2


class TestDistanceMode:
    def test_distance_merges_small_weights(self, scenario_a):
        clusters = scenario_a.clusterize(3, mode="distance")
        assert [c.members for c in clusters] == [[1, 2], [0]]

    def test_distance_mode_from_config(self):
        from tuan_graph.config import ClusterConfig, EngineConfig
        config = EngineConfig(cluster=ClusterConfig(mode="distance"))
        g = build_graph([Entity("a"), Entity("b")],
                        [{"source": "a", "target": "b", "weight": 1}],
                        config=config).graph
        assert [c.members for c in g.clusterize(2)] == [[0, 1]]
        assert _partition(g.clusterize(0.5)) == [[0], [1]]

    def test_unknown_mode(self, scenario_a):
        with pytest.raises(ValidationError):
            scenario_a.clusterize(1, mode="similarity")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestThresholdValidation:
    @pytest.mark.parametrize("threshold", [-1, -0.001, math.nan, math.inf, -math.inf])
    def test_invalid_numbers(self, scenario_a, threshold):
        with pytest.raises(ValidationError):
            scenario_a.clusterize(threshold)

    @pytest.mark.parametrize("threshold", ["3", None, True, [1]])
    def test_non_numbers(self, scenario_a, threshold):
        with pytest.raises(ValidationError):
            scenario_a.clusterize(threshold)

    def test_zero_threshold_is_valid(self, scenario_a):
        assert [c.members for c in scenario_a.clusterize(0)] == [[0, 1, 2]]


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_graph(make_graph):
    edges = [
        ("src/a.ts", "src/b.ts", 5), ("src/b.ts", "src/c.ts", 1),
        ("src/c.ts", "src/d.ts", 3), ("src/d.ts", "src/a.ts", 2),
        ("lib/x.ts", "lib/y.ts", 4), ("lib/y.ts", "lib/z.ts", 4),
        ("lib/z.ts", "src/a.ts", 0.5), ("src/e.ts", "src/e.ts", 7),
        ("lib/y.ts", "lib/x.ts", 1),
    ]
    return make_graph(edges, nodes=None)


class TestProperties:
    THRESHOLDS = [0, 0.5, 1, 1.5, 2, 3, 4, 5, 6, 100]

    def test_always_a_partition(self, sample_graph):
        g = sample_graph
        for t in self.THRESHOLDS:
            _assert_partition(g, g.clusterize(t))

    def test_cluster_count_monotonic(self, sample_graph):
        g = sample_graph
        counts = [len(g.clusterize(t)) for t in self.THRESHOLDS]
        assert counts == sorted(counts)

    def test_higher_threshold_refines(self, sample_graph):
        """Every cluster at a stricter threshold sits inside one looser cluster."""
        g = sample_graph
        for lo, hi in zip(self.THRESHOLDS, self.THRESHOLDS[1:]):
            coarse = [set(c.members) for c in g.clusterize(lo)]
            for fine in g.clusterize(hi):
                assert any(set(fine.members) <= c for c in coarse)

    def test_idempotent(self, sample_graph):
        g = sample_graph
        assert _partition(g.clusterize(2)) == _partition(g.clusterize(2))

    def test_does_not_touch_graph(self, sample_graph):
        g = sample_graph
        g.positioning()
        positions = g.positions
        edges = g.edges
        g.clusterize(1)
        assert g.positions == positions
        assert g.edges == edges
