"""Tests for tuan_graph.labeler: TF-IDF cluster names from paths."""

import math

import pytest

from tuan_graph.builder import Entity, build_graph
from tuan_graph.cluster import Cluster
from tuan_graph.labeler import ClusterLabeler, Corpus, label_clusters, tokenize_path


class TestTokenizePath:
    def test_splits_on_separators(self):
        assert tokenize_path("src/auth/login.ts") == ["src", "auth", "login"]

    def test_camel_case(self):
        assert tokenize_path("src/authService/LoginHandler.ts") == [
            "src", "auth", "service", "login", "handler",
        ]

    def test_acronyms(self):
        assert tokenize_path("HTTPServer.py") == ["http", "server"]

    def test_short_tokens_dropped(self):
        assert tokenize_path("a/io/ui.js") == []

    def test_integer_key(self):
        assert tokenize_path(12345) == ["12345"]


class TestCorpus:
    def test_document_frequency_counts_once_per_doc(self):
        corpus = Corpus()
        corpus.ingest(["src", "src", "auth"])
        corpus.ingest(["src"])
        assert corpus.n_docs == 2
        assert corpus.df["src"] == 2
        assert corpus.df["auth"] == 1

    def test_tfidf_values(self):
        corpus = Corpus()
        corpus.ingest(["src", "auth"])
        corpus.ingest(["src", "db"])
        scores = dict(corpus.tfidf(["src", "auth"]))
        assert scores["src"] == pytest.approx(0.5 * (math.log(3 / 3) + 1))
        assert scores["auth"] == pytest.approx(0.5 * (math.log(3 / 2) + 1))

    def test_empty_tokens(self):
        assert Corpus().tfidf([]) == []


class TestClusterLabeler:
    @pytest.fixture
    def graph(self):
        return build_graph([
            Entity("src/auth/login.ts"),
            Entity("src/auth/session.ts"),
            Entity("src/db/pool.ts"),
        ]).graph

    def test_specific_tokens_rank_first(self, graph):
        labeler = ClusterLabeler(graph)
        scores = labeler.score_tokens(Cluster(id=1, members=[0, 1]))
        assert [tok for tok, _ in scores] == ["auth", "src", "login", "session"]

    def test_label(self, graph):
        labeler = ClusterLabeler(graph)
        assert labeler.label(Cluster(id=1, members=[0, 1])) == "auth, src, login"
        assert labeler.label(Cluster(id=1, members=[0, 1]), top_n=1) == "auth"

    def test_fallback_label(self):
        g = build_graph([Entity(7)]).graph
        clusters = label_clusters(g, [Cluster(id=4, members=[0])])
        assert clusters[0].label == "cluster-4"

    def test_label_clusters_in_place(self, graph):
        clusters = graph.clusterize(1)
        result = label_clusters(graph, clusters)
        assert result is clusters
        assert all(c.label for c in clusters)
