"""pandas views of the input records and the ranking results."""
from __future__ import annotations
from typing import Dict, Iterable, List

import pandas as pd

from .datatypes import Keyword, RankedSentence, SentenceRecord, SentenceTerm, TokenRecord

TOKEN_COLUMNS = ["text_unit", "lemma", "category_tag", "sentence_id", "document_position"]
SENTENCE_COLUMNS = ["sentence_id", "sentence_text", "original_order"]
TERM_COLUMNS = ["sentence_id", "lemma"]


def _require(df: pd.DataFrame, columns: List[str]) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Missing column(s): {', '.join(missing)}")


def token_records_from_frame(df: pd.DataFrame) -> List[TokenRecord]:
    """Records in frame order; an optional ``doc_id`` column separates documents."""
    _require(df, TOKEN_COLUMNS)
    has_doc = "doc_id" in df.columns
    return [
        TokenRecord(text_unit=row.text_unit, lemma=row.lemma, category_tag=row.category_tag,
                    sentence_id=row.sentence_id, document_position=int(row.document_position),
                    doc_id=row.doc_id if has_doc else None)
        for row in df.itertuples(index=False)
    ]


def sentences_from_frame(df: pd.DataFrame) -> List[SentenceRecord]:
    _require(df, SENTENCE_COLUMNS)
    return [
        SentenceRecord(sentence_id=row.sentence_id, sentence_text=row.sentence_text,
                       original_order=int(row.original_order))
        for row in df.itertuples(index=False)
    ]


def terms_from_frame(df: pd.DataFrame) -> List[SentenceTerm]:
    _require(df, TERM_COLUMNS)
    has_tag = "category_tag" in df.columns
    return [
        SentenceTerm(sentence_id=row.sentence_id, lemma=row.lemma,
                     category_tag=row.category_tag if has_tag else None)
        for row in df.itertuples(index=False)
    ]


def keywords_to_frame(rows: Iterable[Keyword]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"keyword": r.keyword, "ngram": r.ngram, "freq": r.freq, "score": r.score, "position": r.position}
         for r in rows],
        columns=["keyword", "ngram", "freq", "score", "position"],
    )


def sentences_to_frame(rows: Iterable[RankedSentence]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"sentence_id": r.sentence_id, "sentence": r.sentence, "score": r.score, "position": r.position}
         for r in rows],
        columns=["sentence_id", "sentence", "score", "position"],
    )


def scores_to_frame(scores: Dict) -> pd.DataFrame:
    df = pd.DataFrame(list(scores.items()), columns=["identifier", "score"])
    return df.sort_values("score", ascending=False, kind="mergesort").reset_index(drop=True)
