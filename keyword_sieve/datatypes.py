from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

Vector = np.ndarray
Bag = Set[str]
Embedder = Callable[[str], Optional[Sequence[float]]]  # term -> vector or None
Tokenizer = Callable[[str], Sequence[str]]

@dataclass
class Edge:
    i: int
    j: int
    weight: float  # cosine similarity, in [-1, 1]

@dataclass
class Graph:
    tokens: List[str]                  # filtered tokens; node ids index into this
    nodes: List[int]                   # tokens that have an embedding
    edges: List[Edge]                  # directed, both i->j and j->i
    vectors: Dict[int, Vector] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.nodes)

@dataclass
class Keywords:
    """Ranked keywords, lowest centrality first.

    ``tokens[i]`` is scored by ``rankings[i]``.
    """
    tokens: List[str] = field(default_factory=list)
    rankings: List[float] = field(default_factory=list)

    def __len__(self) -> int:
        return min(len(self.tokens), len(self.rankings))

    def rank_map(self) -> Dict[str, float]:
        """Associative mapping of terms to their centrality."""
        n = len(self)
        return dict(zip(self.tokens[:n], self.rankings[:n]))

    def top(self, n: int) -> List[Tuple[str, float]]:
        # highest first
        size = len(self)
        if n <= 0 or size == 0:
            return []
        pairs = list(zip(self.tokens[:size], self.rankings[:size]))
        return pairs[::-1][:n]
