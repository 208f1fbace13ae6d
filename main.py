from __future__ import annotations
import streamlit as st
import re
import io
import warnings
import matplotlib.pyplot as plt
import networkx as nx

from text_ranker.config import TextRankConfig, Selection
from text_ranker.errors import DidNotConverge, TextRankError
from text_ranker.preprocessing import preprocess_text, PreprocessConfig, WORD, NUM, STOP
from text_ranker.summarize import textrank_keywords, textrank_sentences, generate_summary
from text_ranker.candidates import minhash_candidates
from text_ranker.tables import keywords_to_frame, sentences_to_frame

def extract_rtf_text(rtf_content):
    """Extract plain text from RTF content."""
    text = re.sub(r'\\[a-z]+\d*', '', rtf_content)
    text = re.sub(r'[{}]', '', text)
    text = re.sub(r'\\\*.*?;', '', text)
    text = re.sub(r'\\[^a-z]', '', text)
    text = re.sub(r'\s+', ' ', text)
    return text.strip()

def extract_markdown_text(md_content):
    """Extract plain text from Markdown content."""
    text = re.sub(r'^#{1,6}\s+', '', md_content, flags=re.MULTILINE)
    text = re.sub(r'\*{1,2}(.*?)\*{1,2}', r'\1', text)
    text = re.sub(r'\[([^\]]+)\]\([^)]+\)', r'\1', text)
    text = re.sub(r'```.*?```', '', text, flags=re.DOTALL)
    text = re.sub(r'`([^`]+)`', r'\1', text)
    text = re.sub(r'\n\s*\n', '\n\n', text)
    return text.strip()

def load_text_from_file(uploaded_file):
    """Load text content from uploaded file based on file type."""
    file_extension = uploaded_file.name.lower().split('.')[-1]
    content = uploaded_file.read().decode("utf-8")
    if file_extension == 'rtf':
        return extract_rtf_text(content)
    elif file_extension == 'md':
        return extract_markdown_text(content)
    return content

def draw_graph(graph, label=str, top_n: int = 40):
    """Draw the exported ranking graph; node size follows score."""
    G = graph.to_networkx()
    if G.number_of_nodes() > top_n:
        keep = sorted(G.nodes, key=lambda n: G.nodes[n]["score"], reverse=True)[:top_n]
        G = G.subgraph(keep)

    fig, ax = plt.subplots(figsize=(10, 8))
    if G.number_of_nodes() > 0:
        pos = nx.spring_layout(G, k=2, iterations=50, seed=42)
        scores = [G.nodes[n]["score"] for n in G.nodes]
        max_score = max(scores) if scores else 1.0
        nx.draw_networkx_nodes(G, pos, ax=ax,
                               node_color='lightblue',
                               node_size=[300 + 1200 * s / max_score for s in scores],
                               alpha=0.8)
        weights = [d['weight'] for _, _, d in G.edges(data=True)]
        if weights:
            max_weight = max(weights)
            nx.draw_networkx_edges(G, pos, ax=ax,
                                   width=[3 * w / max_weight for w in weights],
                                   alpha=0.6,
                                   edge_color='gray')
        nx.draw_networkx_labels(G, pos, {n: label(n) for n in G.nodes}, ax=ax, font_size=9)
    ax.axis('off')
    plt.tight_layout()

    buf = io.BytesIO()
    plt.savefig(buf, format='png', dpi=150, bbox_inches='tight')
    buf.seek(0)
    plt.close()
    return buf

def create_sidebar_controls() -> TextRankConfig:
    """Build the ranking configuration from sidebar controls."""
    st.sidebar.header("Graph")
    window = st.sidebar.slider("Co-occurrence window", min_value=2, max_value=10, value=2)
    categories = st.sidebar.multiselect("Relevant categories", [WORD, NUM, STOP], default=[WORD])
    ngram_max = st.sidebar.slider("Max phrase length", min_value=1, max_value=5, value=3)
    similarity = st.sidebar.selectbox("Sentence similarity", ["overlap", "jaccard"])

    st.sidebar.header("Solver")
    damping = st.sidebar.slider("Damping factor", min_value=0.05, max_value=0.95, value=0.85, step=0.05)
    max_iter = st.sidebar.number_input("Max iterations", min_value=1, max_value=10000, value=100)
    redistribute = st.sidebar.checkbox("Redistribute isolated-node mass", value=False)

    st.sidebar.header("Selection")
    mode = st.sidebar.selectbox("Mode", ["fraction", "count", "threshold"])
    if mode == "fraction":
        value = st.sidebar.slider("Fraction", min_value=0.05, max_value=1.0, value=0.3, step=0.05)
    elif mode == "count":
        value = st.sidebar.number_input("Count", min_value=1, value=5)
    else:
        value = st.sidebar.number_input("Minimum score", min_value=0.0, value=1.0, step=0.1)
    order = st.sidebar.radio("Order", ["by_rank", "by_original_position"])

    return TextRankConfig(
        window_size=int(window),
        ngram_max=int(ngram_max),
        relevant_categories=set(categories),
        damping_factor=float(damping),
        max_iterations=int(max_iter),
        isolated_node_policy="uniform_redistribution" if redistribute else "no_redistribution",
        similarity=similarity,
        selection=Selection(mode=mode, value=value, order=order),
    )

def show_convergence(pr):
    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Iterations", pr.iterations)
    with col2:
        st.metric("Converged", "yes" if pr.converged else "no")
    with col3:
        st.metric("Last max delta", f"{pr.max_delta:.2e}")
    if not pr.converged:
        st.warning("PageRank hit the iteration cap; scores are best-effort")

def main():
    st.title("TextRank Explorer")
    st.write("Upload a text file to rank its keywords and sentences with TextRank")

    config = create_sidebar_controls()
    use_lsh = st.sidebar.checkbox("MinHash candidate pairs", value=False)

    uploaded_file = st.file_uploader(
        "Choose a text file",
        type=['txt', 'rtf', 'md'],
        help="Supports .txt, .rtf, .md formats"
    )
    if uploaded_file is None:
        return

    text = load_text_from_file(uploaded_file)
    st.text_area("Content", text, height=200, disabled=True)

    if st.button("Rank", type="primary"):
        try:
            config.validate()
            doc = preprocess_text(text, cfg=PreprocessConfig())
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", DidNotConverge)
                kw = textrank_keywords(doc.tokens, config=config)
                sent = textrank_sentences(doc.sentences, doc.terms, config=config,
                                          candidates=minhash_candidates if use_lsh else None)
        except TextRankError as e:
            st.error(f"Error ranking text: {str(e)}")
            return

        st.header("Keywords")
        show_convergence(kw.pagerank)
        st.dataframe(keywords_to_frame(kw.keywords), use_container_width=True)
        st.image(draw_graph(kw.graph), caption="Co-occurrence graph")

        st.header("Sentences")
        show_convergence(sent.pagerank)
        st.dataframe(sentences_to_frame(sent.sentences), use_container_width=True)
        st.image(draw_graph(sent.graph, label=lambda n: f"S{n+1}"), caption="Sentence similarity graph")

        st.header("Summary")
        st.text_area("Generated Summary", generate_summary(sent, n=len(sent.sentences)), height=150, disabled=True)
        st.download_button("Download edges (CSV)", kw.graph.edge_frame().to_csv(index=False),
                           file_name="keyword_edges.csv")

if __name__ == "__main__":
    main()
