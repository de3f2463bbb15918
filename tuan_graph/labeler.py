"""Name clusters from the paths of their members.

Every node key is a document; its tokens are the words of the path
(camelCase split, lowercased, at least 3 characters).  A cluster's label is
the pooled member tokens ranked by TF-IDF against the whole graph, so words
shared by every module (``src``, ``index``) sink and words specific to the
cluster rise.
"""

import math
import re
from collections import Counter

from tuan_graph.graph import Graph

_CAMEL_RE = re.compile(r'([a-z0-9])([A-Z])|([A-Z]+)([A-Z][a-z])')
_SPLIT_RE = re.compile(r'[^a-z0-9]+')
_MIN_TOKEN_LEN = 3


def tokenize_path(path) -> list[str]:
    """Split a path into lowercase word tokens."""
    text = _CAMEL_RE.sub(lambda m: " ".join(g for g in m.groups() if g), str(path))
    return [t for t in _SPLIT_RE.split(text.lower()) if len(t) >= _MIN_TOKEN_LEN]


class Corpus:
    """Document frequencies over a set of token lists."""

    def __init__(self):
        self.n_docs = 0
        self.df: Counter = Counter()

    def ingest(self, tokens: list[str]) -> None:
        self.n_docs += 1
        self.df.update(set(tokens))

    def tfidf(self, tokens: list[str]) -> list[tuple[str, float]]:
        """Score *tokens* (one pooled document), best first."""
        if not tokens:
            return []
        tf = Counter(tokens)
        length = len(tokens)
        scored = []
        for tok, count in tf.items():
            idf = math.log((self.n_docs + 1) / (self.df.get(tok, 0) + 1)) + 1
            scored.append((tok, count / length * idf))
        scored.sort(key=lambda x: (-x[1], x[0]))
        return scored


class ClusterLabeler:
    def __init__(self, graph: Graph):
        self.graph = graph
        self._tokens = {n.id: tokenize_path(n.key) for n in graph.nodes}
        self.corpus = Corpus()
        for toks in self._tokens.values():
            self.corpus.ingest(toks)

    def score_tokens(self, cluster) -> list[tuple[str, float]]:
        pooled: list[str] = []
        for node_id in cluster.members:
            pooled.extend(self._tokens.get(node_id, ()))
        return self.corpus.tfidf(pooled)

    def label(self, cluster, top_n: int = 3) -> str:
        top = [tok for tok, _ in self.score_tokens(cluster)[:top_n]]
        return ", ".join(top) or f"cluster-{cluster.id}"

    def label_clusters(self, clusters: list, top_n: int = 3) -> list:
        """Set ``label`` on every cluster in place; returns the same list."""
        for cluster in clusters:
            cluster.label = self.label(cluster, top_n=top_n)
        return clusters


def label_clusters(graph: Graph, clusters: list, top_n: int = 3) -> list:
    return ClusterLabeler(graph).label_clusters(clusters, top_n=top_n)
