from __future__ import annotations
import streamlit as st
import re
import logging
import pandas as pd
import numpy as np
from typing import List, Optional
import matplotlib.pyplot as plt
import networkx as nx
import nltk
import io

from keyword_sieve.datatypes import Graph, Keywords
from keyword_sieve.embeddings import EmbeddingTable
from keyword_sieve.preprocessing import DEFAULT_STOPWORDS, filter_stopwords, load_nltk_stopwords, normalize_stopwords, normalize_text
from keyword_sieve.graphing import build_graph, to_networkx, weight_matrix
from keyword_sieve.scoring import RankConfig, pagerank
from keyword_sieve.sieve import assemble_keywords, build_sieve

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

_RTF_UNICODE = re.compile(r'\\u(-?\d+)\??')
_RTF_HEX = re.compile(r"\\'([0-9a-fA-F]{2})")

def extract_rtf_text(rtf_content: str) -> str:
    """Plain words from RTF; \\uN and \\'hh escapes are decoded so accented words survive."""
    text = _RTF_UNICODE.sub(lambda m: chr(int(m.group(1)) % 65536), rtf_content)
    text = _RTF_HEX.sub(lambda m: bytes([int(m.group(1), 16)]).decode('cp1252', errors='replace'), text)
    text = re.sub(r'\\[a-zA-Z]+-?\d* ?', ' ', text)  # control words
    text = re.sub(r'\\[^a-zA-Z]', ' ', text)          # control symbols
    text = re.sub(r'[{}]', ' ', text)
    return re.sub(r'\s+', ' ', text).strip()

def extract_markdown_text(md_content: str) -> str:
    """Prose from Markdown. Code, URLs and markup are not keyword material."""
    text = re.sub(r'```.*?```', ' ', md_content, flags=re.DOTALL)
    text = re.sub(r'`[^`]*`', ' ', text)
    text = re.sub(r'!?\[([^\]]*)\]\([^)]*\)', r'\1', text)  # keep link text, drop target
    text = re.sub(r'https?://\S+', ' ', text)
    text = re.sub(r'<[^>]+>', ' ', text)
    text = re.sub(r'^\s{0,3}(#{1,6}|>|[-*+]|\d+\.)\s+', '', text, flags=re.MULTILINE)
    return text.strip()

def decode_upload(raw: bytes) -> str:
    # tolerate a BOM and stray non-UTF-8 bytes rather than failing the upload
    return raw.decode("utf-8-sig", errors="replace")

def load_text_from_file(uploaded_file) -> str:
    """Document text from an upload, stripped of its file format's markup."""
    file_extension = uploaded_file.name.lower().rsplit('.', 1)[-1]
    content = decode_upload(uploaded_file.getvalue())

    if file_extension == 'rtf':
        return extract_rtf_text(content)
    if file_extension == 'md':
        return extract_markdown_text(content)
    return content

@st.cache_resource
def ensure_nltk_data():
    # word_tokenize needs punkt (punkt_tab on newer NLTK releases)
    nltk.download('punkt', quiet=True)
    nltk.download('punkt_tab', quiet=True)

@st.cache_resource
def nltk_stopwords(language: str):
    return frozenset(load_nltk_stopwords(language))

@st.cache_resource
def load_embeddings(name: str, raw: bytes) -> EmbeddingTable:
    return EmbeddingTable.from_lines(decode_upload(raw).splitlines())

def draw_keyword_graph(graph: Graph, scores, top_nodes: Optional[List[int]] = None):
    """Plot the similarity graph; node size follows centrality."""
    G = to_networkx(graph).to_undirected()
    # only draw positive similarities, those are the ones the ranker follows
    G.remove_edges_from([(u, v) for u, v, d in G.edges(data=True) if d['weight'] <= 0])

    fig, ax = plt.subplots(figsize=(10, 8))
    ax.set_title("Keyword Similarity Graph", fontsize=14, fontweight='bold')

    if len(G.nodes) > 0:
        pos = nx.spring_layout(G, k=2, iterations=50, seed=42, weight='weight')
        max_score = max(scores.values()) if scores else 1.0
        sizes = [300 + 2500 * scores.get(i, 0.0) / max_score for i in G.nodes()]
        colors = ['orange' if top_nodes and i in top_nodes else 'lightblue' for i in G.nodes()]
        nx.draw_networkx_nodes(G, pos, ax=ax, node_size=sizes, node_color=colors, alpha=0.8)

        edges = G.edges(data=True)
        if edges:
            weights = [d['weight'] for _, _, d in edges]
            max_weight = max(weights)
            nx.draw_networkx_edges(G, pos, ax=ax,
                                   width=[3 * (w / max_weight) for w in weights],
                                   alpha=0.4, edge_color='gray')

        labels = {i: graph.tokens[i] for i in G.nodes()}
        nx.draw_networkx_labels(G, pos, labels, ax=ax, font_size=9)

    ax.axis('off')
    plt.tight_layout()

    buf = io.BytesIO()
    plt.savefig(buf, format='png', dpi=150, bbox_inches='tight')
    buf.seek(0)
    plt.close()
    return buf

def create_sidebar_controls():
    """Create sidebar controls for parameters."""
    st.sidebar.header("Parameters")
    damping = st.sidebar.slider(
        "Damping factor",
        min_value=0.05,
        max_value=0.95,
        value=0.85,
        step=0.05,
        help="Probability of following a similarity edge instead of teleporting"
    )
    tolerance = st.sidebar.select_slider(
        "Convergence tolerance",
        options=[1e-3, 1e-4, 1e-5, 1e-6, 1e-7, 1e-8],
        value=1e-6,
    )
    top_n = st.sidebar.number_input("Keywords to show", min_value=1, max_value=200, value=15)

    st.sidebar.header("Stopwords")
    source = st.sidebar.radio("Stopword list", ["Built-in", "NLTK", "None"], index=0)
    extra = st.sidebar.text_area("Extra stopwords (comma or newline separated)", "")

    st.sidebar.header("Debug Options")
    debug_mode = st.sidebar.checkbox("Enable Debug Mode", value=False, help="Show detailed pipeline steps")

    config = RankConfig(damping=damping, tolerance=tolerance)
    return config, int(top_n), source, extra, debug_mode

def resolve_stopwords(source: str, extra: str):
    if source == "Built-in":
        stops = set(DEFAULT_STOPWORDS)
    elif source == "NLTK":
        stops = set(nltk_stopwords("english"))
    else:
        stops = set()
    stops |= normalize_stopwords(w for w in re.split(r'[,\n]', extra) if w.strip())
    return stops

def keywords_frame(keywords: Keywords, top_n: int) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Rank": k + 1, "Keyword": tok, "Centrality": f"{score:.5f}"}
         for k, (tok, score) in enumerate(keywords.top(top_n))]
    )

def debug_pipeline(text: str, table: EmbeddingTable, stops, config: RankConfig, top_n: int) -> Keywords:
    """Run the pipeline with detailed debugging information."""

    # Step 1: Normalization
    st.header("Step 1: Normalization")
    with st.expander("Normalization Details", expanded=True):
        st.write("**Running:** Tokenization, case folding, diacritic stripping")
        with st.spinner("Normalizing text..."):
            bag = normalize_text(text)
        col1, col2 = st.columns(2)
        with col1:
            st.metric("Total Words (original)", len(text.split()))
        with col2:
            st.metric("Unique Words (bag)", len(bag))
        st.write(", ".join(sorted(bag)[:200]) + (" ..." if len(bag) > 200 else ""))

    # Step 2: Stopwords
    st.header("Step 2: Stopword Filter")
    with st.expander("Stopword Details", expanded=True):
        kept = filter_stopwords(bag, stops)
        tokens = sorted(kept)
        col1, col2 = st.columns(2)
        with col1:
            st.metric("Stopwords Removed", len(bag) - len(kept))
        with col2:
            st.metric("Remaining Words", len(kept))

    # Step 3: Graph Construction
    st.header("Step 3: Similarity Graph")
    with st.expander("Graph Construction Details", expanded=True):
        st.write("**Running:** Embedding lookup and pairwise cosine similarity")
        with st.spinner("Building graph..."):
            graph = build_graph(tokens, table)

        missing = [t for i, t in enumerate(tokens) if i not in graph.vectors]
        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Nodes (embedded words)", len(graph.nodes))
        with col2:
            st.metric("Directed Edges", len(graph.edges))
        with col3:
            st.metric("Words Without Vectors", len(missing))
        if missing:
            st.write("**Skipped:** " + ", ".join(missing[:100]))

        n_nodes = len(graph.nodes)
        if 0 < n_nodes <= 50:
            names = [graph.tokens[i] for i in graph.nodes]
            sim_df = pd.DataFrame(weight_matrix(graph), columns=names, index=names)
            st.dataframe(sim_df, use_container_width=True)
        elif n_nodes > 50:
            st.info(f"Matrix too large to display ({n_nodes}×{n_nodes} = {n_nodes**2:,} cells)")
            W = weight_matrix(graph)
            flat = W[np.triu_indices(n_nodes, k=1)]
            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("Min Similarity", f"{flat.min():.3f}")
            with col2:
                st.metric("Max Similarity", f"{flat.max():.3f}")
            with col3:
                st.metric("Mean Similarity", f"{flat.mean():.3f}")

    # Step 4: Ranking
    st.header("Step 4: Centrality Ranking")
    with st.expander("PageRank Details", expanded=True):
        st.write(f"**Running:** PageRank with damping {config.damping} and tolerance {config.tolerance:g}")
        with st.spinner("Ranking..."):
            scores = pagerank(graph, config)
            keywords = assemble_keywords([tokens[i] for i in graph.nodes],
                                         [scores[i] for i in graph.nodes])
        st.metric("Total Rank Mass", f"{sum(scores.values()):.6f}")

        if 0 < len(graph.nodes) <= 80:
            top_tokens = {tok for tok, _ in keywords.top(top_n)}
            top_nodes = [i for i in graph.nodes if graph.tokens[i] in top_tokens]
            try:
                with st.spinner("Generating graph visualization..."):
                    image = draw_keyword_graph(graph, scores, top_nodes)
                st.image(image, caption="Similarity graph (orange = top keywords)", use_container_width=True)
            except Exception as e:
                st.error(f"Could not generate graph visualization: {str(e)}")

    return keywords

def main():
    st.title("Embedding Keyword Sieve")
    st.write("Upload a document and a word-embedding file to rank its keywords by PageRank centrality")

    config, top_n, stop_source, extra_stops, debug_mode = create_sidebar_controls()

    embeddings_file = st.file_uploader(
        "Word embeddings (GloVe / word2vec text format)",
        type=['txt', 'vec'],
        help="One word per line followed by its vector components"
    )
    uploaded_file = st.file_uploader(
        "Choose a text file",
        type=['txt', 'rtf', 'md'],
        help="Upload a document to extract keywords from (supports .txt, .rtf, .md formats)"
    )

    if uploaded_file is not None:
        text = load_text_from_file(uploaded_file)
        file_extension = uploaded_file.name.lower().split('.')[-1]

        st.subheader(f"Original Text ({file_extension.upper()} format)")
        st.text_area("Content", text, height=200, disabled=True)

        if embeddings_file is None:
            st.warning("Upload a word-embedding file to rank keywords")
            return

        if st.button("Extract Keywords", type="primary"):
            try:
                ensure_nltk_data()
                table = load_embeddings(embeddings_file.name, embeddings_file.getvalue())
                stops = resolve_stopwords(stop_source, extra_stops)

                if debug_mode:
                    st.markdown("---")
                    st.title("Pipeline Debug Mode")
                    keywords = debug_pipeline(text, table, stops, config, top_n)
                else:
                    with st.spinner("Ranking keywords..."):
                        keywords = build_sieve(table, stops, config=config).sift(text)

                st.markdown("---")
                st.header("Keywords")
                if len(keywords) == 0:
                    st.warning("No keywords found - none of the document's words have an embedding")
                else:
                    st.dataframe(keywords_frame(keywords, top_n), use_container_width=True)

                col1, col2, col3 = st.columns(3)
                with col1:
                    st.metric("Vocabulary", len(table))
                with col2:
                    st.metric("Vector Dimension", table.dim or 0)
                with col3:
                    st.metric("Ranked Words", len(keywords))

            except Exception as e:
                logger.exception("keyword extraction failed")
                st.error(f"Error extracting keywords: {str(e)}")
                st.exception(e)

if __name__ == "__main__":
    main()
