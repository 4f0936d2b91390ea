"""
In-memory word vectors.

``EmbeddingTable`` is a ready-made embedding lookup for the sieve: call it
with a normalized term and it returns that term's vector, or ``None`` when
the term is unknown. Tables are built from a mapping or read from the
plain-text GloVe / word2vec format (one ``word v1 v2 ... vd`` per line).
"""
from __future__ import annotations
import logging
from typing import Dict, Iterable, Mapping, Optional, Sequence, TextIO, Union

import numpy as np

from .datatypes import Vector
from .preprocessing import normalize_token

logger = logging.getLogger(__name__)


class EmbeddingTable:
    """Term -> vector lookup with a fixed dimensionality."""

    def __init__(self, vectors: Mapping[str, Sequence[float]], normalize: bool = True):
        """
        Args:
            vectors: term -> vector mapping
            normalize: normalize keys the way document tokens are normalized;
                on collision the first vector wins
        """
        self._vectors: Dict[str, Vector] = {}
        self.dim: Optional[int] = None
        for term, vec in vectors.items():
            key = normalize_token(term) if normalize else term
            if not key or key in self._vectors:
                continue
            arr = np.asarray(vec, dtype=float)
            if arr.ndim != 1:
                raise ValueError(f"vector for {term!r} is not one-dimensional")
            if self.dim is None:
                self.dim = arr.shape[0]
            elif arr.shape[0] != self.dim:
                raise ValueError(
                    f"vector for {term!r} has dimension {arr.shape[0]}, expected {self.dim}"
                )
            self._vectors[key] = arr

    def __call__(self, term: str) -> Optional[Vector]:
        return self._vectors.get(term)

    def __contains__(self, term: str) -> bool:
        return term in self._vectors

    def __len__(self) -> int:
        return len(self._vectors)

    def terms(self) -> Iterable[str]:
        return self._vectors.keys()

    @classmethod
    def from_lines(cls, lines: Iterable[str], normalize: bool = True) -> "EmbeddingTable":
        vectors: Dict[str, Vector] = {}
        for lineno, line in enumerate(lines, start=1):
            parts = line.split()
            if len(parts) < 2:
                continue
            # word2vec text files start with a "count dim" header
            if lineno == 1 and len(parts) == 2 and parts[0].isdigit() and parts[1].isdigit():
                continue
            word, values = parts[0], parts[1:]
            if word in vectors:
                continue
            try:
                vectors[word] = np.array([float(v) for v in values])
            except ValueError as e:
                raise ValueError(f"line {lineno}: malformed vector for {word!r}") from e
        table = cls(vectors, normalize=normalize)
        logger.info("loaded %d word vectors (dim=%s)", len(table), table.dim)
        return table

    @classmethod
    def load(cls, source: Union[str, TextIO], normalize: bool = True) -> "EmbeddingTable":
        """Read a GloVe / word2vec text file from a path or an open text stream."""
        if isinstance(source, str):
            with open(source, encoding="utf-8") as fh:
                return cls.from_lines(fh, normalize=normalize)
        return cls.from_lines(source, normalize=normalize)
