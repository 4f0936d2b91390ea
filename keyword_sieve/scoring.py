from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from .datatypes import Graph
from .graphing import weight_matrix

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class RankConfig:
    damping: float = 0.85          # probability of following an edge
    tolerance: float = 1e-6        # stop once the L1 change drops below this
    max_iterations: Optional[int] = None  # None: iterate until converged

    def validate(self) -> None:
        if not 0.0 <= self.damping < 1.0:
            raise ValueError(f"damping must be in [0, 1), got {self.damping}")
        if self.tolerance <= 0.0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.max_iterations is not None and self.max_iterations <= 0:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")

def transition_matrix(graph: Graph):
    """
    Row-stochastic transition matrix over ``graph.nodes``.

    Only positive similarities are followed. Rows of nodes without positive
    outgoing weight stay zero and are reported in the dangling mask.

    Returns:
        (P, dangling) where P[a, b] is the probability of stepping from
        node a to node b
    """
    W = np.clip(weight_matrix(graph), 0.0, None)
    outflow = W.sum(axis=1)
    dangling = outflow <= 0.0
    P = np.zeros_like(W)
    live = ~dangling
    P[live] = W[live] / outflow[live, None]
    return P, dangling

def pagerank(graph: Graph, config: Optional[RankConfig] = None) -> Dict[int, float]:
    """
    Weighted PageRank by power iteration.

    PR(i) = (1-d)/N + d * (sum_{j->i} w(j,i) * PR(j) / out(j) + dangling/N)

    Rank held by dangling nodes is spread uniformly each step, so the
    scores always sum to 1.

    Args:
        graph: similarity graph
        config: damping, tolerance and optional iteration cap

    Returns:
        node index -> centrality score
    """
    config = config or RankConfig()
    config.validate()

    nodes = graph.nodes
    n = len(nodes)
    if n == 0:
        return {}
    if n == 1:
        return {nodes[0]: 1.0}

    P, dangling = transition_matrix(graph)
    d = config.damping
    teleport = (1.0 - d) / n

    rank = np.full(n, 1.0 / n)
    iteration = 0
    while True:
        iteration += 1
        leak = rank[dangling].sum()
        new_rank = teleport + d * leak / n + d * (P.T @ rank)

        diff = np.abs(new_rank - rank).sum()
        rank = new_rank
        if diff < config.tolerance:
            logger.debug("pagerank converged after %d iterations (n=%d)", iteration, n)
            break
        if config.max_iterations is not None and iteration >= config.max_iterations:
            logger.warning("pagerank stopped after %d iterations without converging (delta=%.3g)",
                           iteration, diff)
            break

    return {node: float(r) for node, r in zip(nodes, rank)}
