from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, List, Optional, Sequence

from .datatypes import Embedder, Keywords, Tokenizer
from .graphing import build_graph
from .preprocessing import default_tokenize, filter_stopwords, normalize_stopwords, normalize_text
from .scoring import RankConfig, pagerank

logger = logging.getLogger(__name__)

def assemble_keywords(tokens: Sequence[str], rankings: Sequence[float]) -> Keywords:
    # rankings may be longer than tokens; extra entries are dropped
    rankings = list(rankings)[:len(tokens)]
    pairs = sorted(zip(tokens, rankings), key=lambda p: p[1])  # stable
    return Keywords(tokens=[t for t, _ in pairs], rankings=[r for _, r in pairs])

@dataclass(frozen=True)
class Sieve:
    """Extracts keywords from a document.

    Terms are ranked by their PageRank centrality in a graph whose edges
    are the cosine similarities of the terms' word embeddings, so a term
    with many topically related siblings in the document ranks high.
    Terms for which ``embed`` returns None are ignored.
    """
    embed: Embedder
    stopwords: FrozenSet[str] = frozenset()
    tokenize: Tokenizer = default_tokenize
    config: RankConfig = field(default_factory=RankConfig)

    def __post_init__(self):
        # normalized like document words
        object.__setattr__(self, "stopwords", frozenset(normalize_stopwords(self.stopwords)))
        self.config.validate()

    def with_stopwords(self, *stops: str) -> "Sieve":
        """Copy of this sieve with its stop set replaced by ``stops``."""
        return replace(self, stopwords=frozenset(stops))

    def rank(self, bag: Iterable[str]) -> Keywords:
        """Rank a pre-built bag of normalized words."""
        kept = filter_stopwords(bag, self.stopwords)
        # sorted so node indices (and ties) are reproducible
        tokens: List[str] = sorted(kept)
        graph = build_graph(tokens, self.embed)
        scores = pagerank(graph, self.config)
        return assemble_keywords(
            [tokens[i] for i in graph.nodes],
            [scores[i] for i in graph.nodes],
        )

    def sift(self, document: str) -> Keywords:
        """Normalize raw text into a bag, then rank it."""
        bag = normalize_text(document, self.tokenize)
        keywords = self.rank(bag)
        logger.debug("sifted %d keywords from %d unique words", len(keywords), len(bag))
        return keywords

def build_sieve(embed: Embedder,
                stops: Optional[Iterable[str]] = None,
                tokenize: Optional[Tokenizer] = None,
                config: Optional[RankConfig] = None) -> Sieve:
    return Sieve(
        embed=embed,
        stopwords=frozenset(stops or ()),
        tokenize=tokenize or default_tokenize,
        config=config or RankConfig(),
    )

def sift(document: str, embed: Embedder, stops: Optional[Iterable[str]] = None) -> Keywords:
    # Pipeline glue
    return build_sieve(embed, stops).sift(document)
