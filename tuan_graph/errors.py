"""Exception types and non-fatal build diagnostics."""

from dataclasses import dataclass


class TuanError(Exception):
    """Base class for all tuan-graph errors."""


class ValidationError(TuanError, ValueError):
    """Malformed input to the builder, the graph, the clusterer or config.

    Fatal to the call that raised it; no partial result is returned.
    """


@dataclass(frozen=True)
class ReferentialWarning:
    """A relation dropped because one of its endpoints is unknown."""

    index: int                     # position in the relation input
    source: object
    target: object
    missing: tuple = ()            # the endpoint keys that did not resolve

    def __str__(self) -> str:
        missing = ", ".join(repr(k) for k in self.missing)
        return (f"relation #{self.index} {self.source!r} -> {self.target!r} "
                f"dropped: unknown entity {missing}")
