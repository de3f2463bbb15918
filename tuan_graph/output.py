"""Output formatters for graphs and clusters - dicts, JSON and text."""

import json

from tuan_graph.cluster import Cluster
from tuan_graph.graph import Graph, Node


def _position(node: Node) -> list[float] | None:
    if not node.placed:
        return None
    return [node.position[0], node.position[1]]


def graph_to_dict(graph: Graph) -> dict:
    """Plain-data view of a graph; unplaced positions become None."""
    return {
        "nodes": [
            {
                "id": n.id,
                "key": n.key,
                "label": n.label,
                "position": _position(n),
                "metadata": dict(n.metadata),
            }
            for n in graph.nodes
        ],
        "edges": [
            {"source": e.source, "target": e.target, "weight": e.weight}
            for e in graph.edges
        ],
    }


def graph_to_json(graph: Graph, indent: int | None = 2) -> str:
    return json.dumps(graph_to_dict(graph), indent=indent, default=str)


def clusters_to_json(clusters: list[Cluster], graph: Graph) -> str:
    """Convert clusters to JSON, resolving member ids to keys."""
    result = []
    for cluster in clusters:
        result.append({
            "id": cluster.id,
            "label": cluster.label,
            "size": len(cluster.members),
            "members": cluster.members,
            "keys": [graph.node(m).key for m in cluster.members],
        })
    return json.dumps(result, indent=2, default=str)


def clusters_to_text(clusters: list[Cluster], graph: Graph, max_members: int = 10) -> str:
    """Convert clusters to human-readable text summary."""
    lines = [f"Found {len(clusters)} clusters:", ""]

    for cluster in clusters:
        name = cluster.label or f"cluster-{cluster.id}"
        lines.append(f"  [{cluster.id}] {name}")
        lines.append(f"       {len(cluster.members)} modules")
        for m in cluster.members[:max_members]:
            lines.append(f"         {graph.node(m).key}")
        if len(cluster.members) > max_members:
            lines.append(f"         ... and {len(cluster.members) - max_members} more")
        lines.append("")

    return "\n".join(lines)


def layout_to_text(graph: Graph) -> str:
    """One line per node: key and position."""
    lines = [f"Laid out {len(graph)} nodes:", ""]
    for n in graph.nodes:
        if n.placed:
            pos = f"({n.position[0]:.2f}, {n.position[1]:.2f})"
        else:
            pos = "(unplaced)"
        lines.append(f"  {n.key} {pos}")
    return "\n".join(lines)
