import pytest

from text_ranker.datatypes import TokenRecord


def _records(sentences, doc_id=None):
    """[[lemma or (lemma, tag), ...], ...] -> TokenRecords, one list per sentence."""
    out = []
    position = 0
    for sid, sent in enumerate(sentences):
        for item in sent:
            lemma, tag = item if isinstance(item, tuple) else (item, "NOUN")
            out.append(TokenRecord(text_unit=lemma, lemma=lemma, category_tag=tag,
                                   sentence_id=sid, document_position=position, doc_id=doc_id))
            position += 1
    return out


@pytest.fixture
def make_records():
    return _records
