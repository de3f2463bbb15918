"""tuan-graph - build, lay out and cluster module dependency graphs."""

from tuan_graph.errors import TuanError, ValidationError, ReferentialWarning
from tuan_graph.graph import Graph, Node, Edge, UNPLACED, is_unplaced
from tuan_graph.builder import Entity, Relation, BuildResult, build_graph
from tuan_graph.config import EngineConfig, LayoutConfig, ClusterConfig, load_config
from tuan_graph.layout import LayoutEngine, LayoutPhase, LayoutReport, positioning
from tuan_graph.cluster import Cluster, threshold_clusters
from tuan_graph.labeler import ClusterLabeler, label_clusters

__all__ = [
    "TuanError",
    "ValidationError",
    "ReferentialWarning",
    "Graph",
    "Node",
    "Edge",
    "UNPLACED",
    "is_unplaced",
    "Entity",
    "Relation",
    "BuildResult",
    "build_graph",
    "EngineConfig",
    "LayoutConfig",
    "ClusterConfig",
    "load_config",
    "LayoutEngine",
    "LayoutPhase",
    "LayoutReport",
    "positioning",
    "Cluster",
    "threshold_clusters",
    "ClusterLabeler",
    "label_clusters",
]
