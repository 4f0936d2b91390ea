from __future__ import annotations
import logging
import re
import unicodedata
from typing import Iterable, List, Optional, Set

import nltk
from nltk.corpus import stopwords
from nltk.tokenize import word_tokenize

from .datatypes import Bag, Tokenizer

logger = logging.getLogger(__name__)

_FRAGMENT_RE = re.compile(r"[^\W_]+")  # runs of unicode letters/digits

DEFAULT_STOPWORDS = frozenset({
    # minimal English stopword set (extend as needed)
    'the','a','an','and','or','but','if','then','else','for','to','of','in','on','at','by','with','as',
    'is','are','was','were','be','been','being','this','that','these','those','it','its','from','into',
    'we','you','they','he','she','i','me','my','your','our','their','his','her','them','us','do','does',
    'did','not','no','so','than','too','very','can','could','should','would','will','shall'
})

def default_tokenize(text: str) -> List[str]:
    return word_tokenize(text)

def load_nltk_stopwords(language: str = "english", download: bool = True) -> Set[str]:
    """Stopwords from the NLTK corpus, normalized like document tokens."""
    if download:
        nltk.download('stopwords', quiet=True)
    return normalize_stopwords(stopwords.words(language))

def normalize_token(fragment: str) -> str:
    """lowercase -> NFD -> drop combining marks -> NFC"""
    decomposed = unicodedata.normalize("NFD", fragment.lower())
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return unicodedata.normalize("NFC", stripped)

def split_fragments(token: str) -> List[str]:
    return _FRAGMENT_RE.findall(token)

def normalize_text(text: str, tokenize: Optional[Tokenizer] = None) -> Bag:
    """Turn raw text into a bag of unique normalized words.

    Tokenizer errors are not caught: without a tokenization there is no bag.
    """
    tokenize = tokenize or default_tokenize
    bag: Bag = set()
    raw = tokenize(text)
    for tok in raw:
        for frag in split_fragments(tok):
            word = normalize_token(frag)
            if word:
                bag.add(word)
    logger.debug("normalized %d raw tokens into %d unique words", len(raw), len(bag))
    return bag

def normalize_stopwords(stops: Iterable[str]) -> Set[str]:
    out = set()
    for s in stops:
        w = normalize_token(s.strip())
        if w:
            out.add(w)
    return out

def filter_stopwords(bag: Iterable[str], stops: Iterable[str]) -> Bag:
    stops = stops if isinstance(stops, (set, frozenset)) else set(stops)
    return {t for t in bag if t not in stops}
