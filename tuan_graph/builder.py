"""Build a validated Graph from collaborator-supplied entities and relations.

The analysis layer (module parser, import resolver) hands over two ordered
lists: entities (files/modules) and relations (imports).  The builder:

1. Normalizes each entity's natural key and deduplicates by it, first wins.
2. Assigns dense integer node ids in first-seen order, so the same input
   always yields the same ids and ordering.
3. Drops relations whose endpoints don't resolve and reports each one as a
   :class:`ReferentialWarning` instead of failing the build.
"""

import logging
import math
import posixpath
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from tuan_graph.errors import ReferentialWarning, ValidationError
from tuan_graph.graph import Edge, Graph, Node

_log = logging.getLogger("tuan.builder")


@dataclass
class Entity:
    key: str | int                 # natural key, e.g. a module path
    label: str | None = None
    metadata: dict = field(default_factory=dict)


@dataclass
class Relation:
    source: str | int
    target: str | int
    weight: float | None = None    # None means 1.0


@dataclass
class BuildResult:
    graph: Graph
    warnings: list[ReferentialWarning] = field(default_factory=list)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


def normalize_key(key) -> str | int:
    """Normalize a natural key.

    Strings are treated as POSIX-style paths: backslashes become slashes,
    ``.``/``..`` segments collapse and a leading ``./`` or trailing ``/`` is
    dropped.  Integers pass through unchanged.
    """
    if isinstance(key, bool):
        raise ValidationError(f"entity key must be a string or integer, got {key!r}")
    if isinstance(key, int):
        return key
    if not isinstance(key, str):
        raise ValidationError(f"entity key must be a string or integer, got {key!r}")
    raw = key.strip().replace("\\", "/")
    if not raw:
        raise ValidationError("entity key must not be empty")
    norm = posixpath.normpath(raw)
    if norm == ".":
        raise ValidationError(f"entity key {key!r} normalizes to an empty path")
    return norm


def default_label(key: str | int) -> str:
    """Display name for a key: the last path component."""
    if isinstance(key, int):
        return str(key)
    return posixpath.basename(key) or key


def _coerce(item, cls):
    if isinstance(item, cls):
        return item
    if isinstance(item, Mapping):
        try:
            return cls(**item)
        except TypeError as e:
            raise ValidationError(f"invalid {cls.__name__.lower()} {dict(item)!r}: {e}") from None
    raise ValidationError(f"expected {cls.__name__} or mapping, got {item!r}")


def _check_weight(relation: Relation, index: int) -> float:
    w = relation.weight
    if w is None:
        return 1.0
    if isinstance(w, bool) or not isinstance(w, (int, float)):
        raise ValidationError(f"relation #{index} weight must be a number, got {w!r}")
    if not math.isfinite(w) or w < 0:
        raise ValidationError(f"relation #{index} weight must be finite and >= 0, got {w!r}")
    return float(w)


def build_graph(entities: Iterable, relations: Iterable = (), config=None) -> BuildResult:
    """Build a Graph from entity and relation descriptors.

    Args:
        entities: Ordered Entity objects (or mappings with the same fields).
        relations: Ordered Relation objects (or mappings).
        config: Optional EngineConfig attached to the graph.

    Returns:
        A BuildResult with the graph (all nodes unplaced) and the list of
        dropped-relation warnings.

    Raises:
        ValidationError: on a malformed key, descriptor or weight.
    """
    merged: dict[str | int, Entity] = {}
    for item in entities:
        entity = _coerce(item, Entity)
        if entity.metadata is not None and not isinstance(entity.metadata, Mapping):
            raise ValidationError(
                f"entity {entity.key!r} metadata must be a mapping, got {entity.metadata!r}")
        key = normalize_key(entity.key)
        existing = merged.get(key)
        if existing is None:
            label = entity.label if entity.label is not None else default_label(key)
            merged[key] = Entity(key=key, label=str(label), metadata=dict(entity.metadata or {}))
            continue
        # First wins: only keys the earlier entity didn't set are added.
        for k, v in (entity.metadata or {}).items():
            existing.metadata.setdefault(k, v)
        _log.debug("merged duplicate entity %r", key)

    ids = {key: i for i, key in enumerate(merged)}
    nodes = [
        Node(id=ids[key], key=key, label=e.label, metadata=e.metadata)
        for key, e in merged.items()
    ]

    edges: list[Edge] = []
    warnings: list[ReferentialWarning] = []
    for index, item in enumerate(relations):
        rel = _coerce(item, Relation)
        weight = _check_weight(rel, index)
        src = _resolve(rel.source, ids)
        dst = _resolve(rel.target, ids)
        if src is None or dst is None:
            missing = tuple(k for k, r in ((rel.source, src), (rel.target, dst)) if r is None)
            warning = ReferentialWarning(index=index, source=rel.source,
                                         target=rel.target, missing=missing)
            _log.warning("%s", warning)
            warnings.append(warning)
            continue
        edges.append(Edge(source=src, target=dst, weight=weight))

    graph = Graph(nodes, edges, config=config)
    _log.info("built graph: %d nodes, %d edges, %d dropped relations",
              len(nodes), len(edges), len(warnings))
    return BuildResult(graph=graph, warnings=warnings)


def _resolve(key, ids: dict) -> int | None:
    try:
        return ids.get(normalize_key(key))
    except ValidationError:
        return None
