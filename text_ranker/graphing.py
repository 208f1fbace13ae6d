from __future__ import annotations
import logging
import math
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from itertools import groupby
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .candidates import all_pairs
from .datatypes import Graph, SentenceRecord, SentenceTerm, TokenRecord
from .errors import EmptyInputError, InvalidConfigurationError, InvalidInputError

logger = logging.getLogger(__name__)

Relevance = Callable[[Optional[str]], bool]
Similarity = Callable[[Set[str], Set[str]], float]
Pair = Tuple[Hashable, Hashable]


def _all_relevant(tag: Optional[str]) -> bool:
    return True


def _shards(items: Sequence, n: int) -> List[Sequence]:
    n = max(1, min(n, len(items)))
    size = math.ceil(len(items) / n) if items else 0
    return [items[i:i + size] for i in range(0, len(items), size)] if size else []


def _map_shards(fn, items: Sequence, workers: int) -> list:
    """Run ``fn`` over contiguous shards of ``items``; results come back in shard order."""
    shards = _shards(items, workers)
    if workers <= 1 or len(shards) <= 1:
        return [fn(s) for s in shards]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(fn, shards))


# ---------------------------------------------------------------- keyword mode

def relevant_sentences(records: Iterable[TokenRecord], relevant: Relevance = _all_relevant) -> List[List[TokenRecord]]:
    """Group the stream into sentences of relevant records; irrelevant records are dropped."""
    out: List[List[TokenRecord]] = []
    for _, group in groupby(records, key=lambda r: (r.doc_id, r.sentence_id)):
        kept = [r for r in group if relevant(r.category_tag)]
        if kept:
            out.append(kept)
    return out


def _window_pairs(window_size: int, sentences: Sequence[List[TokenRecord]]) -> Counter:
    pairs: Counter = Counter()
    for sent in sentences:
        lemmas = [r.lemma for r in sent]
        for i, w1 in enumerate(lemmas):
            for j in range(i + 1, min(i + window_size, len(lemmas))):
                w2 = lemmas[j]
                if w1 != w2:
                    pairs[(w1, w2)] += 1
    return pairs


def build_keyword_graph(records: Iterable[TokenRecord],
                        window_size: int = 2,
                        relevant: Relevance = _all_relevant,
                        workers: int = 1) -> Graph:
    """
    Co-occurrence graph over the lemmas of relevant tokens.

    Each relevant token is linked to the next ``window_size - 1`` relevant
    tokens of the same sentence. Irrelevant tokens are skipped without
    breaking the window; sentence (and document) boundaries do break it.
    Edges are undirected and their weights count co-occurrences.
    """
    if window_size < 1:
        raise InvalidConfigurationError(f"window_size must be > 0, got {window_size}")
    sentences = relevant_sentences(records, relevant)
    if not sentences:
        raise EmptyInputError("No relevant tokens to build a keyword graph from")

    graph = Graph(directed=False)
    for sent in sentences:
        for r in sent:
            graph.add_node(r.lemma, r.document_position)

    # partition, count privately, merge in shard order
    pairs: Counter = Counter()
    for part in _map_shards(lambda shard: _window_pairs(window_size, shard), sentences, workers):
        pairs.update(part)
    for (a, b), count in pairs.items():
        graph.add_edge(a, b, float(count))

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Keyword graph: %d nodes, %d edges from %d sentences", len(graph), graph.n_edges, len(sentences))
    return graph


# --------------------------------------------------------------- sentence mode

def overlap_similarity(a: Set[str], b: Set[str]) -> float:
    """|A ∩ B| / (log|A| + log|B|); 0 when either sentence has fewer than two terms."""
    if len(a) < 2 or len(b) < 2:
        return 0.0
    common = len(a & b)
    if common == 0:
        return 0.0
    return common / (math.log(len(a)) + math.log(len(b)))


def jaccard_similarity(a: Set[str], b: Set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


_SIMILARITIES: Dict[str, Similarity] = {
    "overlap": overlap_similarity,
    "jaccard": jaccard_similarity,
}


def resolve_similarity(similarity: Union[str, Similarity]) -> Similarity:
    if callable(similarity):
        return similarity
    try:
        return _SIMILARITIES[similarity]
    except KeyError:
        raise InvalidConfigurationError(f"Unknown similarity: {similarity!r}") from None


def sentence_terms(sentences: Sequence[SentenceRecord],
                   terms: Iterable[SentenceTerm],
                   relevant: Relevance = _all_relevant) -> Dict[Hashable, Set[str]]:
    """sentence id -> set of relevant terms, in original sentence order.

    Membership rows without a category tag are always relevant.
    """
    ordered = sorted(sentences, key=lambda s: s.original_order)
    out: Dict[Hashable, Set[str]] = {s.sentence_id: set() for s in ordered}
    if len(out) != len(ordered):
        raise InvalidInputError("Duplicate sentence_id in sentence table")
    for t in terms:
        if t.category_tag is not None and not relevant(t.category_tag):
            continue
        if t.sentence_id not in out:
            raise InvalidInputError(f"Term {t.lemma!r} refers to unknown sentence {t.sentence_id!r}")
        out[t.sentence_id].add(t.lemma)
    return out


def _unique_pairs(pairs: Iterable[Pair]) -> List[Pair]:
    seen = set()
    out = []
    for a, b in pairs:
        key = frozenset((a, b))
        if a == b or key in seen:
            continue
        seen.add(key)
        out.append((a, b))
    return out


def build_sentence_graph(sentences: Sequence[SentenceRecord],
                         terms: Iterable[SentenceTerm],
                         relevant: Relevance = _all_relevant,
                         similarity: Union[str, Similarity] = "overlap",
                         candidates: Union[None, Callable, Iterable[Pair]] = None,
                         workers: int = 1) -> Graph:
    """
    Similarity graph over sentences.

    Args:
        sentences: sentence table
        terms: term-membership table
        relevant: predicate over the terms' category tags
        similarity: "overlap", "jaccard" or a callable (set, set) -> float
        candidates: pairs to compare; None compares every pair, a callable is
            called with the sentence -> terms mapping (see ``minhash_candidates``)
        workers: threads used to score candidate pairs

    Returns:
        Undirected Graph with one node per sentence; pairs with zero
        similarity get no edge.
    """
    sim = resolve_similarity(similarity)
    by_sentence = sentence_terms(sentences, terms, relevant)
    if not by_sentence or not any(by_sentence.values()):
        raise EmptyInputError("No sentences with relevant terms to build a sentence graph from")

    graph = Graph(directed=False)
    for s in sorted(sentences, key=lambda s: s.original_order):
        graph.add_node(s.sentence_id, s.original_order)

    if candidates is None:
        pairs = all_pairs(by_sentence)
    elif callable(candidates):
        pairs = list(candidates(by_sentence))
    else:
        pairs = list(candidates)
    pairs = _unique_pairs(pairs)

    def score_pairs(shard):
        out = []
        for a, b in shard:
            w = sim(by_sentence[a], by_sentence[b])
            if w > 0:
                out.append((a, b, w))
        return out

    for part in _map_shards(score_pairs, pairs, workers):
        for a, b, w in part:
            graph.add_edge(a, b, w)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Sentence graph: %d nodes, %d edges from %d candidate pairs", len(graph), graph.n_edges, len(pairs))
    return graph
