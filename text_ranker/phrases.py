from __future__ import annotations
from collections import Counter
from itertools import groupby
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .datatypes import Keyword, TokenRecord
from .graphing import _all_relevant


def aggregate_phrases(scores: Dict[str, float],
                      records: Iterable[TokenRecord],
                      ngram_max: int = 3,
                      relevant: Callable[[Optional[str]], bool] = _all_relevant,
                      sep: str = " ") -> List[Keyword]:
    """
    Merge surviving unigrams that sit next to each other in the text into phrases.

    Every contiguous run of 2..ngram_max tokens whose lemmas all survived
    becomes a candidate, including runs nested inside longer ones. A token
    breaks a run when its lemma did not survive, when it is not relevant, or
    at a sentence boundary. Phrase score is the sum of its unigram scores and
    ``freq`` counts verbatim occurrences of the sequence.

    Returns one row per distinct phrase (unigrams included), in no particular
    order; pass the rows to ``select`` or ``rank_order``.
    """
    if ngram_max < 1:
        raise ValueError(f"ngram_max must be >= 1, got {ngram_max}")

    freq: Counter = Counter()
    first_seen: Dict[Tuple[str, ...], int] = {}
    for _, group in groupby(records, key=lambda r: (r.doc_id, r.sentence_id)):
        sent = list(group)
        hit = [r.lemma in scores and relevant(r.category_tag) for r in sent]
        for i in range(len(sent)):
            if not hit[i]:
                continue
            for j in range(i, min(i + ngram_max, len(sent))):
                if not hit[j]:
                    break
                terms = tuple(r.lemma for r in sent[i:j + 1])
                freq[terms] += 1
                first_seen.setdefault(terms, sent[i].document_position)

    rows: List[Keyword] = []
    for terms, count in freq.items():
        rows.append(Keyword(
            keyword=sep.join(terms),
            terms=terms,
            score=sum(scores[t] for t in terms),
            freq=count,
            position=first_seen[terms],
        ))
    return rows


def filter_ngram(rows: Iterable[Keyword], min_n: int = 1, max_n: Optional[int] = None) -> List[Keyword]:
    return [r for r in rows if r.ngram >= min_n and (max_n is None or r.ngram <= max_n)]
