"""Shared test fixtures for tuan_graph tests."""

import pytest

from tuan_graph.builder import build_graph


def _build_from_edges(edges, nodes=None):
    if nodes is None:
        nodes = []
        for src, dst, _ in edges:
            for key in (src, dst):
                if key not in nodes:
                    nodes.append(key)
    relations = [{"source": s, "target": t, "weight": w} for s, t, w in edges]
    return build_graph([{"key": k} for k in nodes], relations).graph


@pytest.fixture
def make_graph():
    """Factory building a graph from ``(source, target, weight)`` triples.

    Nodes default to every key mentioned by the edges, in first-seen order.
    """
    return _build_from_edges


@pytest.fixture
def scenario_a():
    """A-B (weight 5), B-C (weight 1)."""
    return _build_from_edges([("a", "b", 5), ("b", "c", 1)])


@pytest.fixture
def two_pairs():
    """Two disconnected pairs: a-b and c-d."""
    return _build_from_edges([("a", "b", 1), ("c", "d", 1)])
