from .datatypes import Edge, Graph, Keywords
from .preprocessing import DEFAULT_STOPWORDS, normalize_text, normalize_token, filter_stopwords, load_nltk_stopwords
from .embeddings import EmbeddingTable
from .graphing import build_graph, cosine_similarity, to_networkx
from .scoring import RankConfig, pagerank
from .sieve import Sieve, assemble_keywords, build_sieve, sift
