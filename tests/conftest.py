"""
Shared fixtures: a toy embedding table and a whitespace tokenizer, so the
tests never need NLTK data files.
"""
import os
import sys

import numpy as np
import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from keyword_sieve.embeddings import EmbeddingTable


@pytest.fixture
def split_tokenize():
    return str.split


@pytest.fixture
def animal_vectors():
    # cat and dog nearly parallel, bird orthogonal to both
    return {
        "cat": [1.0, 0.0, 0.0],
        "dog": [0.99, 0.01, 0.0],
        "bird": [0.0, 0.0, 1.0],
    }


@pytest.fixture
def animal_table(animal_vectors):
    return EmbeddingTable(animal_vectors)


@pytest.fixture
def topic_table():
    rng = np.random.default_rng(7)
    fruit = rng.normal(size=8)
    tools = rng.normal(size=8)
    words = {
        "apple": fruit + 0.1 * rng.normal(size=8),
        "banana": fruit + 0.1 * rng.normal(size=8),
        "cherry": fruit + 0.1 * rng.normal(size=8),
        "mango": fruit + 0.1 * rng.normal(size=8),
        "hammer": tools + 0.1 * rng.normal(size=8),
        "wrench": tools + 0.1 * rng.normal(size=8),
        "cafe": rng.normal(size=8),
    }
    return EmbeddingTable(words)
