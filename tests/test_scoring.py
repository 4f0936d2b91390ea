import dataclasses

import networkx as nx
import pytest

from keyword_sieve.datatypes import Edge, Graph
from keyword_sieve.graphing import build_graph
from keyword_sieve.scoring import RankConfig, pagerank, transition_matrix


def graph_from_edges(n, weighted_edges):
    edges = []
    for i, j, w in weighted_edges:
        edges.append(Edge(i=i, j=j, weight=w))
        edges.append(Edge(i=j, j=i, weight=w))
    return Graph(tokens=[f"t{k}" for k in range(n)], nodes=list(range(n)), edges=edges)


def test_empty_and_single_node():
    assert pagerank(Graph(tokens=[], nodes=[], edges=[])) == {}
    assert pagerank(Graph(tokens=["solo"], nodes=[0], edges=[])) == {0: 1.0}


def test_mass_is_conserved(topic_table):
    tokens = sorted(topic_table.terms())
    scores = pagerank(build_graph(tokens, topic_table))
    assert sum(scores.values()) == pytest.approx(1.0, abs=1e-9)
    assert all(s >= 0.0 for s in scores.values())


def test_dangling_node_gets_uniform_share():
    # 0 <-> 1 strongly linked, 2 has no positive edges
    graph = graph_from_edges(3, [(0, 1, 1.0), (0, 2, 0.0), (1, 2, 0.0)])
    d = 0.85
    scores = pagerank(graph)
    bird = (1 - d) / 3 / (1 - d / 3)
    assert scores[2] == pytest.approx(bird, abs=1e-4)
    assert scores[0] == pytest.approx((1 - bird) / 2, abs=1e-4)
    assert scores[0] == pytest.approx(scores[1], abs=1e-9)


def test_all_dangling_is_uniform():
    graph = graph_from_edges(4, [])
    scores = pagerank(graph)
    for s in scores.values():
        assert s == pytest.approx(0.25)


def test_negative_similarity_is_not_followed():
    graph = graph_from_edges(2, [(0, 1, -0.5)])
    P, dangling = transition_matrix(graph)
    assert dangling.tolist() == [True, True]
    assert (P == 0).all()
    assert pagerank(graph) == pytest.approx({0: 0.5, 1: 0.5})


def test_matches_networkx_pagerank(topic_table):
    tokens = sorted(topic_table.terms())
    graph = build_graph(tokens, topic_table)
    config = RankConfig(tolerance=1e-10)
    ours = pagerank(graph, config)

    G = nx.DiGraph()
    G.add_nodes_from(graph.nodes)
    for e in graph.edges:
        if e.weight > 0:
            G.add_edge(e.i, e.j, weight=e.weight)
    theirs = nx.pagerank(G, alpha=config.damping, tol=1e-12, max_iter=1000, weight="weight")
    for node in graph.nodes:
        assert ours[node] == pytest.approx(theirs[node], abs=1e-6)


def test_deterministic(topic_table):
    tokens = sorted(topic_table.terms())
    graph = build_graph(tokens, topic_table)
    assert pagerank(graph) == pagerank(graph)


def test_max_iterations_caps_the_loop(topic_table, caplog):
    tokens = sorted(topic_table.terms())
    graph = build_graph(tokens, topic_table)
    with caplog.at_level("WARNING", logger="keyword_sieve.scoring"):
        scores = pagerank(graph, RankConfig(tolerance=1e-15, max_iterations=1))
    assert len(scores) == len(tokens)
    assert sum(scores.values()) == pytest.approx(1.0)
    assert "without converging" in caplog.text


@pytest.mark.parametrize("kwargs", [
    {"damping": 1.0},
    {"damping": -0.1},
    {"tolerance": 0.0},
    {"max_iterations": 0},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        RankConfig(**kwargs).validate()


def test_config_is_immutable():
    config = RankConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.damping = 1.0
