"""Force-directed layout for module graphs.

Positions every node with a spring-electric simulation:

1. **Seeding** - unplaced nodes go on a circle of radius
   ``seed_radius * sqrt(n)`` in insertion order.
2. **Iteration** - from one snapshot of the position buffer, compute
   pairwise repulsion, attraction along (weight-summed) edges and a weak
   centering force; scale by a geometrically cooling step, clamp each
   displacement, then move every node at once.
3. **Termination** - stop once the largest displacement drops below
   ``convergence_epsilon`` or after ``max_iterations``.

Disconnected components are pushed apart by repulsion alone; only the
configured gravity keeps the whole layout bounded.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass

import numpy as np

from tuan_graph.config import LayoutConfig
from tuan_graph.graph import Graph, is_unplaced

_log = logging.getLogger("tuan.layout")

# Golden angle; spreads fallback directions for coincident node pairs.
_GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))


class LayoutPhase(enum.Enum):
    UNINITIALIZED = "uninitialized"
    SEEDED = "seeded"
    SIMULATING = "simulating"
    CONVERGED = "converged"


@dataclass
class LayoutReport:
    """Outcome of one layout run."""

    iterations: int = 0
    converged: bool = False
    max_displacement: float = 0.0


def seed_positions(count: int, radius_scale: float) -> list[tuple[float, float]]:
    """Deterministic, pairwise-distinct seed points on a circle.

    A single node lands at ``(radius_scale, 0)``, never at the origin.
    """
    if count <= 0:
        return []
    radius = radius_scale * math.sqrt(count)
    return [
        (radius * math.cos(2 * math.pi * i / count),
         radius * math.sin(2 * math.pi * i / count))
        for i in range(count)
    ]


class LayoutEngine:
    """Runs the simulation for one graph.

    The engine reads the graph's position buffer, simulates on a private
    copy and commits the result back with one ``set_positions`` call.
    """

    def __init__(self, graph: Graph, config: LayoutConfig | None = None):
        self.graph = graph
        self.config = (config or LayoutConfig()).validate()
        self.phase = LayoutPhase.UNINITIALIZED
        self.report = LayoutReport()

    def run(self) -> LayoutReport:
        n = len(self.graph)
        if n == 0:
            self.phase = LayoutPhase.CONVERGED
            self.report.converged = True
            return self.report

        positions = self.seed()
        if n == 1:
            self.graph.set_positions(positions)
            self.phase = LayoutPhase.CONVERGED
            self.report.converged = True
            return self.report

        _log.info("layout start: %d nodes, %d edges", n, len(self.graph.edges))
        positions = self.simulate(positions)
        self.graph.set_positions(positions.tolist())
        _log.info("layout done: %d iterations, converged=%s, last max displacement %.4g",
                  self.report.iterations, self.report.converged, self.report.max_displacement)
        return self.report

    def seed(self) -> list[tuple[float, float]]:
        """Place every still-unplaced node on the seed circle."""
        current = list(self.graph.positions)
        seeds = seed_positions(len(current), self.config.seed_radius)
        seeded = 0
        for i, p in enumerate(current):
            if is_unplaced(p):
                current[i] = seeds[i]
                seeded += 1
        if seeded:
            _log.debug("seeded %d of %d nodes", seeded, len(current))
        self.phase = LayoutPhase.SEEDED
        return current

    def simulate(self, positions) -> np.ndarray:
        """Iterate from *positions*; returns the final ``(n, 2)`` array."""
        cfg = self.config
        pairs = self.graph.pair_weights()
        positions = np.asarray(positions, dtype=float).reshape(-1, 2)
        self.phase = LayoutPhase.SIMULATING
        step = cfg.initial_step

        for iteration in range(1, int(cfg.max_iterations) + 1):
            forces = compute_forces(positions, pairs, cfg)
            positions, max_move = apply_forces(positions, forces, step, cfg.max_displacement)
            self.report.iterations = iteration
            self.report.max_displacement = max_move
            if max_move < cfg.convergence_epsilon:
                self.report.converged = True
                self.phase = LayoutPhase.CONVERGED
                break
            step *= cfg.cooling
        else:
            # Iteration cap reached: the run is over either way.
            _log.debug("layout hit iteration cap (%d)", cfg.max_iterations)
            self.phase = LayoutPhase.CONVERGED

        return positions


def compute_forces(positions, pairs: list[tuple[int, int, float]],
                   cfg: LayoutConfig) -> np.ndarray:
    """Net force on every node as an ``(n, 2)`` array, from one snapshot."""
    pos = np.asarray(positions, dtype=float).reshape(-1, 2)
    n = len(pos)
    forces = np.zeros((n, 2))
    if n == 0:
        return forces

    # Repulsion between every pair; delta[i, j] points from j to i
    delta = pos[:, None, :] - pos[None, :, :]
    dist = np.hypot(delta[..., 0], delta[..., 1])
    safe = np.maximum(dist, cfg.min_distance)
    unit = delta / safe[..., None]

    coincident = dist < cfg.min_distance
    np.fill_diagonal(coincident, False)
    if coincident.any():
        # Repel along a direction fixed by the pair, opposite for each end.
        ii, jj = np.indices((n, n))
        angle = _GOLDEN_ANGLE * (np.minimum(ii, jj) * n + np.maximum(ii, jj) + 1)
        sign = np.where(ii < jj, 1.0, -1.0)
        fallback = sign[..., None] * np.stack([np.cos(angle), np.sin(angle)], axis=-1)
        unit = np.where(coincident[..., None], fallback, unit)

    strength = cfg.repulsion / (safe * safe)
    np.fill_diagonal(strength, 0.0)
    forces += (strength[..., None] * unit).sum(axis=1)

    # Attraction along edges; parallel weights are already summed
    if cfg.attraction > 0 and pairs:
        src = np.fromiter((p[0] for p in pairs), dtype=np.intp, count=len(pairs))
        dst = np.fromiter((p[1] for p in pairs), dtype=np.intp, count=len(pairs))
        weight = np.fromiter((p[2] for p in pairs), dtype=float, count=len(pairs))
        d = pos[dst] - pos[src]
        length = np.hypot(d[:, 0], d[:, 1])
        active = length >= cfg.min_distance
        f = np.where(active, cfg.attraction * (length - cfg.ideal_length) * weight
                     / np.maximum(length, cfg.min_distance), 0.0)
        pull = f[:, None] * d
        np.add.at(forces, src, pull)
        np.add.at(forces, dst, -pull)

    if cfg.gravity > 0:
        forces -= cfg.gravity * pos

    return forces


def apply_forces(positions, forces, step: float,
                 max_displacement: float) -> tuple[np.ndarray, float]:
    """Move all nodes at once; returns new positions and the largest move."""
    pos = np.asarray(positions, dtype=float).reshape(-1, 2)
    disp = np.asarray(forces, dtype=float).reshape(-1, 2) * step
    if len(pos) == 0:
        return pos, 0.0
    length = np.hypot(disp[:, 0], disp[:, 1])
    over = length > max_displacement
    if over.any():
        disp[over] *= (max_displacement / length[over])[:, None]
        length = np.minimum(length, max_displacement)
    return pos + disp, float(length.max())


def positioning(graph: Graph, config: LayoutConfig | None = None) -> LayoutReport:
    """Lay out *graph* in place and return the run report."""
    return LayoutEngine(graph, config).run()
