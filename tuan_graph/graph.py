"""Graph model: nodes, edges and the per-graph position buffer."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping

from tuan_graph.errors import ValidationError

# Position of a node that has never been laid out.  NaN never compares equal
# to a real coordinate, so "unplaced" can't be confused with "at the origin".
UNPLACED: tuple[float, float] = (math.nan, math.nan)


def is_unplaced(position: tuple[float, float]) -> bool:
    return math.isnan(position[0]) or math.isnan(position[1])


@dataclass(frozen=True)
class Node:
    id: int
    key: str | int                 # normalized natural key, e.g. "src/app.ts"
    label: str
    position: tuple[float, float] = UNPLACED
    metadata: Mapping = field(default_factory=dict, compare=False)

    @property
    def placed(self) -> bool:
        return not is_unplaced(self.position)


@dataclass(frozen=True)
class Edge:
    source: int
    target: int
    weight: float = 1.0

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class Graph:
    """Validated graph with an owned, mutable position buffer.

    Nodes and edges are fixed at construction.  The only mutable state is
    the position of each node, written through :meth:`set_position` /
    :meth:`set_positions` (in practice only by the layout engine).
    """

    def __init__(self, nodes: Iterable[Node] = (), edges: Iterable[Edge] = (),
                 config=None):
        from tuan_graph.config import EngineConfig

        self._nodes: list[Node] = []
        self._index: dict[int, int] = {}
        self._positions: list[tuple[float, float]] = []
        self.config = config or EngineConfig()

        for node in nodes:
            if node.id in self._index:
                raise ValidationError(f"duplicate node id {node.id!r}")
            self._index[node.id] = len(self._nodes)
            if not isinstance(node.metadata, Mapping):
                raise ValidationError(f"node {node.id!r} metadata must be a mapping")
            self._positions.append(_check_position(node.position, allow_unplaced=True))
            self._nodes.append(replace(node, metadata=MappingProxyType(dict(node.metadata))))

        self._edges: tuple[Edge, ...] = tuple(self._check_edge(e) for e in edges)
        self._node_view: tuple[Node, ...] | None = None

    def _check_edge(self, edge: Edge) -> Edge:
        missing = [n for n in (edge.source, edge.target) if n not in self._index]
        if missing:
            raise ValidationError(
                f"edge {edge.source!r} -> {edge.target!r} references unknown node(s): "
                + ", ".join(repr(m) for m in missing))
        w = edge.weight
        if isinstance(w, bool) or not isinstance(w, (int, float)) or not math.isfinite(w) or w < 0:
            raise ValidationError(
                f"edge {edge.source!r} -> {edge.target!r} has invalid weight {w!r}")
        return edge

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> tuple[Node, ...]:
        """Nodes in insertion order, each carrying its current position."""
        if self._node_view is None:
            self._node_view = tuple(
                n if n.position == p else replace(n, position=p)
                for n, p in zip(self._nodes, self._positions)
            )
        return self._node_view

    @property
    def edges(self) -> tuple[Edge, ...]:
        return self._edges

    @property
    def positions(self) -> tuple[tuple[float, float], ...]:
        """Snapshot of the position buffer, indexed like :attr:`nodes`."""
        return tuple(self._positions)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._index

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    def index_of(self, node_id: int) -> int:
        """Dense index of *node_id* in insertion order."""
        try:
            return self._index[node_id]
        except KeyError:
            raise KeyError(f"unknown node id {node_id!r}") from None

    def node(self, node_id: int) -> Node:
        return self.nodes[self.index_of(node_id)]

    def pair_weights(self) -> list[tuple[int, int, float]]:
        """Summed undirected edge weights as ``(i, j, weight)`` index triples.

        Parallel edges (in either direction) collapse into one pair whose
        weight is their sum.  Self-loops are dropped.  Pairs are ordered by
        the first edge that mentions them, and ``i < j`` always holds.
        """
        totals: dict[tuple[int, int], float] = {}
        for e in self._edges:
            if e.is_self_loop:
                continue
            a, b = self._index[e.source], self._index[e.target]
            pair = (a, b) if a < b else (b, a)
            totals[pair] = totals.get(pair, 0.0) + float(e.weight)
        return [(i, j, w) for (i, j), w in totals.items()]

    # ------------------------------------------------------------------
    # Position writes
    # ------------------------------------------------------------------

    def set_position(self, node_id: int, position: tuple[float, float]) -> None:
        idx = self.index_of(node_id)
        self._positions[idx] = _check_position(position)
        self._node_view = None

    def set_positions(self, positions) -> None:
        """Replace the whole position buffer at once (indexed like nodes)."""
        positions = list(positions)
        if len(positions) != len(self._nodes):
            raise ValidationError(
                f"expected {len(self._nodes)} positions, got {len(positions)}")
        self._positions = [_check_position(p) for p in positions]
        self._node_view = None

    # ------------------------------------------------------------------
    # Engine entry points
    # ------------------------------------------------------------------

    def positioning(self, config=None) -> None:
        """Lay out every node in place with the force-directed engine."""
        from tuan_graph.layout import LayoutEngine

        LayoutEngine(self, config or self.config.layout).run()

    def clusterize(self, threshold: float, mode: str | None = None) -> list:
        """Partition nodes into clusters of edges meeting *threshold*."""
        from tuan_graph.cluster import threshold_clusters

        return threshold_clusters(self, threshold, mode=mode or self.config.cluster.mode)


def _check_position(position, allow_unplaced: bool = False) -> tuple[float, float]:
    try:
        x, y = position
        x, y = float(x), float(y)
    except (TypeError, ValueError):
        raise ValidationError(f"position must be an (x, y) pair, got {position!r}") from None
    if allow_unplaced and math.isnan(x) and math.isnan(y):
        return UNPLACED
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValidationError(f"position must be finite, got {position!r}")
    return (x, y)
