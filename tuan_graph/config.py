"""Engine configuration: layout force constants and clustering semantics.

Configuration is plain dataclasses with defaults; ``load_config`` reads
overrides from a YAML file shaped like::

    layout:
      ideal_length: 12
      max_iterations: 800
    cluster:
      mode: strength
      threshold: 2
"""

import math
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from tuan_graph.errors import ValidationError

CLUSTER_MODES = ("strength", "distance")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class LayoutConfig:
    """Force-directed layout tuning parameters."""

    ideal_length: float = 10.0
    repulsion: float = 100.0
    attraction: float = 0.1
    gravity: float = 0.01
    min_distance: float = 0.01
    initial_step: float = 1.0
    cooling: float = 0.99
    max_displacement: float = 5.0
    convergence_epsilon: float = 0.01
    max_iterations: int = 500
    seed_radius: float = 10.0

    def validate(self) -> "LayoutConfig":
        for f in fields(self):
            value = getattr(self, f.name)
            if not _is_number(value) or not math.isfinite(value):
                raise ValidationError(f"layout.{f.name} must be a finite number, got {value!r}")
        if isinstance(self.max_iterations, float) and not self.max_iterations.is_integer():
            raise ValidationError(f"layout.max_iterations must be an integer, got {self.max_iterations!r}")
        for name in ("ideal_length", "repulsion", "min_distance", "initial_step",
                     "max_displacement", "convergence_epsilon", "seed_radius"):
            if getattr(self, name) <= 0:
                raise ValidationError(f"layout.{name} must be positive")
        for name in ("attraction", "gravity", "max_iterations"):
            if getattr(self, name) < 0:
                raise ValidationError(f"layout.{name} must not be negative")
        if not 0 < self.cooling < 1:
            raise ValidationError("layout.cooling must be between 0 and 1 (exclusive)")
        return self


@dataclass
class ClusterConfig:
    """Clustering semantics.

    ``mode`` is "strength" (edges at or above the threshold merge) or
    "distance" (edges at or below it merge).
    """

    mode: str = "strength"
    threshold: float = 1.0

    def validate(self) -> "ClusterConfig":
        if self.mode not in CLUSTER_MODES:
            raise ValidationError(
                f"cluster.mode must be one of {', '.join(CLUSTER_MODES)}, got {self.mode!r}")
        check_threshold(self.threshold)
        return self


@dataclass
class EngineConfig:
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    cluster: ClusterConfig = field(default_factory=ClusterConfig)


def check_threshold(threshold) -> float:
    """Return *threshold* as a float, or raise ValidationError."""
    if not _is_number(threshold):
        raise ValidationError(f"threshold must be a number, got {threshold!r}")
    if not math.isfinite(threshold):
        raise ValidationError(f"threshold must be finite, got {threshold!r}")
    if threshold < 0:
        raise ValidationError(f"threshold must not be negative, got {threshold!r}")
    return float(threshold)


def _section(cls, data, name: str):
    """Build a config dataclass from a mapping, rejecting unknown keys."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ValidationError(f"config section '{name}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValidationError(f"unknown {name} option(s): {', '.join(map(str, unknown))}")
    return cls(**data).validate()


def config_from_dict(data: dict | None) -> EngineConfig:
    """Build an EngineConfig from already-parsed data."""
    data = data or {}
    if not isinstance(data, dict):
        raise ValidationError("config must be a mapping with 'layout'/'cluster' sections")
    unknown = sorted(set(data) - {"layout", "cluster"})
    if unknown:
        raise ValidationError(f"unknown config section(s): {', '.join(map(str, unknown))}")
    return EngineConfig(
        layout=_section(LayoutConfig, data.get("layout"), "layout"),
        cluster=_section(ClusterConfig, data.get("cluster"), "cluster"),
    )


def load_config(path: Path | str | None = None) -> EngineConfig:
    """Load engine configuration from a YAML file.

    Args:
        path: YAML file to read. None returns the defaults.
    """
    if path is None:
        return EngineConfig()
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValidationError(f"invalid config file {path}: {e}") from e
    return config_from_dict(data)
