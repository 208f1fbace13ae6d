from __future__ import annotations
import dataclasses
import logging
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Union

from .config import TextRankConfig
from .datatypes import (Graph, Keyword, KeywordResult, PageRankResult, RankedSentence, SentenceRecord,
                        SentenceResult, SentenceTerm, TokenRecord)
from .graphing import build_keyword_graph, build_sentence_graph
from .phrases import aggregate_phrases
from .preprocessing import PreprocessConfig, preprocess_text
from .scoring import pagerank
from .selection import position_order, rank_order, select

logger = logging.getLogger(__name__)


def _solve(graph: Graph, cfg: TextRankConfig) -> PageRankResult:
    result = pagerank(graph,
                      damping=cfg.damping_factor,
                      max_iter=cfg.max_iterations,
                      tolerance=cfg.convergence_threshold,
                      isolated_node_policy=cfg.isolated_node_policy,
                      timeout=cfg.timeout)
    for node_id, score in result.scores.items():
        graph.nodes[node_id].score = score
    return result


def textrank_keywords(records: Iterable[TokenRecord], config: Optional[TextRankConfig] = None) -> KeywordResult:
    """
    Rank lemmas with TextRank and merge neighbouring winners into phrases.

    The configured selection decides which unigrams survive; surviving
    unigrams that are adjacent in the text are merged into phrases of up to
    ``ngram_max`` terms. The phrase table is returned in the selection's
    order, with ``min_freq`` applied.
    """
    cfg = (config or TextRankConfig()).validate()
    records = list(records)
    relevant = cfg.relevance()

    graph = build_keyword_graph(records, window_size=cfg.window_size, relevant=relevant, workers=cfg.workers)
    pr = _solve(graph, cfg)

    freq = Counter(r.lemma for r in records if relevant(r.category_tag))
    terms = rank_order([
        Keyword(keyword=node.id, terms=(node.id,), score=pr.scores[node.id], freq=freq[node.id], position=node.position)
        for node in graph.nodes.values()
    ])
    survivors = select(terms, dataclasses.replace(cfg.selection, order="by_rank", min_freq=None))
    logger.debug("%d of %d terms survive for phrase merging", len(survivors), len(terms))

    rows = aggregate_phrases({k.keyword: k.score for k in survivors}, records,
                             ngram_max=cfg.ngram_max, relevant=relevant, sep=cfg.phrase_separator)
    if cfg.selection.min_freq is not None:
        rows = [r for r in rows if r.freq >= cfg.selection.min_freq]
    if cfg.selection.order == "by_original_position":
        rows = position_order(rows)
    else:
        rows = rank_order(rows)
    return KeywordResult(keywords=rows, terms=terms, pagerank=pr, graph=graph)


def textrank_sentences(sentences: Sequence[SentenceRecord],
                       terms: Iterable[SentenceTerm],
                       config: Optional[TextRankConfig] = None,
                       candidates=None) -> SentenceResult:
    """
    Rank sentences by TextRank over their shared-term similarity graph.

    ``candidates`` limits which sentence pairs are compared, see
    ``build_sentence_graph``.
    """
    cfg = (config or TextRankConfig()).validate()
    sentences = list(sentences)
    graph = build_sentence_graph(sentences, terms,
                                 relevant=cfg.relevance(),
                                 similarity=cfg.similarity,
                                 candidates=candidates,
                                 workers=cfg.workers)
    pr = _solve(graph, cfg)

    ranked = rank_order([
        RankedSentence(sentence_id=s.sentence_id, sentence=s.sentence_text,
                       score=pr.scores[s.sentence_id], position=s.original_order)
        for s in sentences
    ])
    chosen = select(ranked, dataclasses.replace(cfg.selection, min_freq=None))
    return SentenceResult(sentences=chosen, ranked=ranked, pagerank=pr, graph=graph)


def summary(result: Union[SentenceResult, Sequence[RankedSentence]], n: int = 3, keep_order: bool = True) -> List[str]:
    """Texts of the ``n`` best sentences, in document order when ``keep_order``."""
    ranked = result.ranked if isinstance(result, SentenceResult) else rank_order(result)
    top = ranked[:max(0, n)]
    if keep_order:
        top = position_order(top)
    return [s.sentence for s in top]


def generate_summary(result: Union[SentenceResult, Sequence[RankedSentence]], n: int = 3) -> str:
    return " ".join(summary(result, n=n, keep_order=True))


def summarize(text: str, n: int = 3, config: Optional[TextRankConfig] = None,
              cfg: Optional[PreprocessConfig] = None) -> str:
    # Pipeline glue
    doc = preprocess_text(text, cfg=cfg)
    config = config or TextRankConfig(relevant_categories={"WORD"})
    result = textrank_sentences(doc.sentences, doc.terms, config=config)
    return generate_summary(result, n=n)


def extract_keywords(text: str, config: Optional[TextRankConfig] = None,
                     cfg: Optional[PreprocessConfig] = None) -> List[Keyword]:
    doc = preprocess_text(text, cfg=cfg)
    config = config or TextRankConfig(relevant_categories={"WORD"})
    return textrank_keywords(doc.tokens, config=config).keywords
