from __future__ import annotations
import logging
from typing import Dict, List, Sequence

import networkx as nx
import numpy as np

from .datatypes import Edge, Embedder, Graph, Vector

logger = logging.getLogger(__name__)

def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine of the angle between a and b; 0.0 when either norm is zero."""
    na = float(np.linalg.norm(a))
    nb = float(np.linalg.norm(b))
    if na == 0.0 or nb == 0.0:
        return 0.0
    sim = float(np.dot(a, b)) / (na * nb)
    # rounding can push parallel vectors just past +-1
    return max(-1.0, min(1.0, sim))

def lookup_vectors(tokens: Sequence[str], embed: Embedder) -> Dict[int, Vector]:
    """Embed each token once; tokens without a vector are left out."""
    vectors: Dict[int, Vector] = {}
    dim = None
    for i, tok in enumerate(tokens):
        try:
            raw = embed(tok)
        except KeyError:
            raw = None
        if raw is None:
            logger.debug("no embedding for %r, skipping", tok)
            continue
        vec = np.asarray(raw, dtype=float).ravel()
        if dim is None:
            dim = vec.shape[0]
        elif vec.shape[0] != dim:
            raise ValueError(
                f"embedding for {tok!r} has dimension {vec.shape[0]}, expected {dim}"
            )
        vectors[i] = vec
    return vectors

def build_graph(tokens: Sequence[str], embed: Embedder) -> Graph:
    tokens = list(tokens)
    vectors = lookup_vectors(tokens, embed)
    nodes = sorted(vectors)
    edges: List[Edge] = []
    n = len(nodes)
    for a in range(n):
        i = nodes[a]
        for b in range(a+1, n):
            j = nodes[b]
            w = cosine_similarity(vectors[i], vectors[j])
            edges.append(Edge(i=i, j=j, weight=w))
            edges.append(Edge(i=j, j=i, weight=w))
    logger.debug("graph: %d of %d tokens embedded, %d edges", n, len(tokens), len(edges))
    return Graph(tokens=tokens, nodes=nodes, edges=edges, vectors=vectors)

def weight_matrix(graph: Graph) -> np.ndarray:
    """Dense node x node weights, rows/cols in ``graph.nodes`` order."""
    pos = {node: k for k, node in enumerate(graph.nodes)}
    W = np.zeros((len(graph.nodes), len(graph.nodes)))
    for e in graph.edges:
        W[pos[e.i], pos[e.j]] += e.weight
    return W

def to_networkx(graph: Graph) -> nx.DiGraph:
    G = nx.DiGraph()
    for i in graph.nodes:
        G.add_node(i, label=graph.tokens[i])
    for e in graph.edges:
        G.add_edge(e.i, e.j, weight=e.weight)
    return G
