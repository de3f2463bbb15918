"""Threshold clustering over the module graph."""

import logging
from dataclasses import dataclass, field

from tuan_graph.config import CLUSTER_MODES, check_threshold
from tuan_graph.errors import ValidationError
from tuan_graph.graph import Graph

_log = logging.getLogger("tuan.cluster")


@dataclass
class Cluster:
    id: int
    members: list[int] = field(default_factory=list)
    label: str = ""

    def __len__(self) -> int:
        return len(self.members)


class _UnionFind:
    """Union-find arena over dense indices 0..n-1."""

    def __init__(self, size: int):
        self.parent: list[int] = list(range(size))
        self.rank: list[int] = [0] * size

    def find(self, x: int) -> int:
        while self.parent[x] != x:
            self.parent[x] = self.parent[self.parent[x]]
            x = self.parent[x]
        return x

    def union(self, x: int, y: int) -> bool:
        """Merge sets containing x and y. Returns False if already merged."""
        rx, ry = self.find(x), self.find(y)
        if rx == ry:
            return False
        if self.rank[rx] < self.rank[ry]:
            rx, ry = ry, rx
        self.parent[ry] = rx
        if self.rank[rx] == self.rank[ry]:
            self.rank[rx] += 1
        return True


def _qualifies(weight: float, threshold: float, mode: str) -> bool:
    if mode == "distance":
        return weight <= threshold
    return weight >= threshold


def threshold_clusters(graph: Graph, threshold: float,
                       mode: str = "strength") -> list[Cluster]:
    """Partition *graph* into clusters joined by qualifying edges.

    Args:
        graph: Graph to partition. Positions are not used.
        threshold: Relationship-strength cutoff. In "strength" mode edges at
            or above it merge their endpoints' clusters; in "distance" mode
            edges at or below it do.
        mode: "strength" or "distance".

    Returns:
        Clusters covering every node exactly once, largest first (ties by
        earliest member), with ids 1..k in that order.

    Raises:
        ValidationError: if threshold is negative, non-finite or not a
            number, or mode is unknown.
    """
    threshold = check_threshold(threshold)
    if mode not in CLUSTER_MODES:
        raise ValidationError(f"unknown cluster mode {mode!r}")

    n = len(graph)
    uf = _UnionFind(n)

    # Strongest first (weakest first for distances); sorted() is stable, so
    # equal weights keep their first-insertion order.
    pairs = graph.pair_weights()
    pairs = sorted(pairs, key=lambda p: p[2], reverse=(mode == "strength"))

    merges = 0
    for i, j, weight in pairs:
        if not _qualifies(weight, threshold, mode):
            # Everything after this one is weaker (or farther) still.
            break
        if uf.union(i, j):
            merges += 1

    # Cluster membership: root -> member indices, in insertion order
    groups: dict[int, list[int]] = {}
    for idx in range(n):
        groups.setdefault(uf.find(idx), []).append(idx)

    ordered = sorted(groups.values(), key=lambda members: (-len(members), members[0]))
    nodes = graph.nodes
    clusters = [
        Cluster(id=k, members=[nodes[idx].id for idx in members])
        for k, members in enumerate(ordered, start=1)
    ]
    _log.debug("clusterize(threshold=%s, mode=%s): %d merges, %d clusters",
               threshold, mode, merges, len(clusters))
    return clusters
