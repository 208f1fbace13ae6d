import math

import pytest

from text_ranker.datatypes import SentenceRecord, SentenceTerm
from text_ranker.errors import EmptyInputError, InvalidConfigurationError, InvalidInputError, TextRankError
from text_ranker.graphing import (build_keyword_graph, build_sentence_graph, jaccard_similarity,
                                  overlap_similarity, resolve_similarity)


def _sentence_tables(term_sets):
    sentences = [SentenceRecord(sentence_id=f"s{i}", sentence_text=f"sentence {i}", original_order=i)
                 for i in range(len(term_sets))]
    terms = [SentenceTerm(sentence_id=f"s{i}", lemma=t) for i, ts in enumerate(term_sets) for t in ts]
    return sentences, terms


def test_fast_food_cooccurrence(make_records):
    records = make_records([["fast", "food", "staff", "fast", "food"]])
    graph = build_keyword_graph(records, window_size=2)

    assert list(graph.nodes) == ["fast", "food", "staff"]
    assert graph.weight("fast", "food") == 2
    assert graph.weight("food", "fast") == 2
    assert graph.weight("food", "staff") == 1
    assert graph.weight("staff", "fast") == 1
    assert graph.n_edges == 3


def test_window_skips_irrelevant_tokens(make_records):
    records = make_records([[("good", "ADJ"), ("the", "DET"), ("food", "NOUN")]])
    graph = build_keyword_graph(records, window_size=2, relevant=lambda tag: tag in {"ADJ", "NOUN"})

    assert "the" not in graph
    assert graph.weight("good", "food") == 1


def test_window_stops_at_sentence_boundary(make_records):
    records = make_records([["a", "b"], ["c"]])
    graph = build_keyword_graph(records, window_size=3)

    assert graph.weight("b", "c") == 0
    assert graph.out_weight("c") == 0
    assert "c" in graph


def test_window_stops_at_document_boundary(make_records):
    records = make_records([["a"]], doc_id="d1") + make_records([["b"]], doc_id="d2")
    graph = build_keyword_graph(records, window_size=2)
    assert graph.n_edges == 0


def test_wider_window_links_all_pairs_inside(make_records):
    graph = build_keyword_graph(make_records([["a", "b", "c", "d"]]), window_size=3)
    assert graph.weight("a", "b") == 1
    assert graph.weight("a", "c") == 1
    assert graph.weight("a", "d") == 0
    assert graph.weight("b", "d") == 1


def test_no_self_loops(make_records):
    graph = build_keyword_graph(make_records([["a", "a", "b"]]), window_size=2)
    assert graph.weight("a", "a") == 0
    assert graph.weight("a", "b") == 1


def test_node_position_is_first_occurrence(make_records):
    graph = build_keyword_graph(make_records([["x", "y"], ["z", "y"]]), window_size=2)
    assert graph.nodes["y"].position == 1
    assert graph.nodes["z"].position == 2


def test_no_relevant_tokens(make_records):
    records = make_records([[("the", "DET"), ("of", "ADP")]])
    with pytest.raises(EmptyInputError):
        build_keyword_graph(records, relevant=lambda tag: tag == "NOUN")


def test_invalid_window(make_records):
    with pytest.raises(InvalidConfigurationError):
        build_keyword_graph(make_records([["a"]]), window_size=0)


def test_sharded_build_matches_sequential(make_records):
    sentences = [["a", "b", "c"], ["b", "c", "d"], ["a", "d"], ["c", "a", "b", "e"], ["e", "a"]]
    records = make_records(sentences)
    one = build_keyword_graph(records, window_size=3, workers=1)
    many = build_keyword_graph(records, window_size=3, workers=3)
    assert one.adjacency == many.adjacency
    assert list(one.nodes) == list(many.nodes)


def test_sentence_graph_overlap_weights():
    sentences, terms = _sentence_tables([{"a", "b", "c"}, {"a", "b", "d"}, {"c", "e", "f"}])
    graph = build_sentence_graph(sentences, terms)

    assert graph.weight("s0", "s1") == pytest.approx(2 / (2 * math.log(3)))
    assert graph.weight("s0", "s2") == pytest.approx(1 / (2 * math.log(3)))
    # no shared terms: no edge at all
    assert "s2" not in graph.neighbors("s1")
    assert graph.weight("s0", "s1") > graph.weight("s0", "s2")


def test_single_term_sentence_is_isolated():
    sentences, terms = _sentence_tables([{"a"}, {"a", "b"}, {"a", "b", "c"}])
    graph = build_sentence_graph(sentences, terms)
    assert graph.out_weight("s0") == 0
    assert graph.out_weight("s1") > 0


def test_sentence_without_terms_is_a_node():
    sentences, terms = _sentence_tables([{"a", "b"}, set(), {"a", "b"}])
    graph = build_sentence_graph(sentences, terms)
    assert list(graph.nodes) == ["s0", "s1", "s2"]
    assert graph.out_weight("s1") == 0


def test_sentence_graph_requires_terms():
    sentences, terms = _sentence_tables([set(), set()])
    with pytest.raises(EmptyInputError):
        build_sentence_graph(sentences, terms)
    with pytest.raises(EmptyInputError):
        build_sentence_graph([], [])


def test_sentence_graph_category_filter():
    sentences = [SentenceRecord("s0", "x", 0), SentenceRecord("s1", "y", 1)]
    terms = [SentenceTerm("s0", "a", "NOUN"), SentenceTerm("s0", "the", "DET"), SentenceTerm("s0", "b", "NOUN"),
             SentenceTerm("s1", "the", "DET"), SentenceTerm("s1", "c", "NOUN"), SentenceTerm("s1", "d", "NOUN")]
    graph = build_sentence_graph(sentences, terms, relevant=lambda tag: tag == "NOUN")
    assert graph.n_edges == 0


def test_unknown_sentence_in_terms():
    sentences, _ = _sentence_tables([{"a", "b"}])
    with pytest.raises(InvalidInputError):
        build_sentence_graph(sentences, [SentenceTerm("missing", "a")])


def test_duplicate_sentence_id():
    sentences = [SentenceRecord("s0", "one", 0), SentenceRecord("s0", "two", 1)]
    with pytest.raises(InvalidInputError) as exc:
        build_sentence_graph(sentences, [SentenceTerm("s0", "a"), SentenceTerm("s0", "b")])
    assert isinstance(exc.value, TextRankError)


def test_explicit_candidates_restrict_edges():
    sentences, terms = _sentence_tables([{"a", "b"}, {"a", "b"}, {"a", "b"}])
    graph = build_sentence_graph(sentences, terms, candidates=[("s0", "s1"), ("s1", "s0")])
    assert graph.n_edges == 1
    assert graph.weight("s0", "s1") == pytest.approx(2 / (2 * math.log(2)))


def test_sentence_nodes_follow_original_order():
    sentences = [SentenceRecord("late", "b", 5), SentenceRecord("early", "a", 1)]
    terms = [SentenceTerm("late", "x"), SentenceTerm("late", "y"), SentenceTerm("early", "x"), SentenceTerm("early", "y")]
    graph = build_sentence_graph(sentences, terms, workers=2)
    assert list(graph.nodes) == ["early", "late"]
    assert graph.nodes["late"].position == 5


def test_sharded_sentence_graph_matches_sequential():
    sentences, terms = _sentence_tables([
        {"a", "b", "c"}, {"a", "b", "d"}, {"c", "d", "e"}, {"e", "f"},
        {"a", "f", "g"}, {"g", "h"}, {"b", "h", "c"}, {"x", "y"},
    ])
    sequential = build_sentence_graph(sentences, terms, workers=1)
    sharded = build_sentence_graph(sentences, terms, workers=3)

    assert list(sharded.nodes) == list(sequential.nodes)
    assert sharded.adjacency == sequential.adjacency
    assert sharded.n_edges == sequential.n_edges > 0


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ({"a", "b"}, {"a", "b"}, 1.0),
        ({"a", "b"}, {"c", "d"}, 0.0),
        ({"a", "b", "c"}, {"c", "d"}, 0.25),
        (set(), set(), 0.0),
    ],
)
def test_jaccard(a, b, expected):
    assert jaccard_similarity(a, b) == pytest.approx(expected)


def test_overlap_needs_two_terms_each():
    assert overlap_similarity({"a"}, {"a", "b"}) == 0.0
    assert overlap_similarity({"a", "b"}, {"a", "c"}) == pytest.approx(1 / (2 * math.log(2)))


def test_resolve_similarity():
    assert resolve_similarity("jaccard") is jaccard_similarity
    custom = lambda a, b: 1.0
    assert resolve_similarity(custom) is custom
    with pytest.raises(InvalidConfigurationError):
        resolve_similarity("cosine")


def test_graph_exports(make_records):
    graph = build_keyword_graph(make_records([["fast", "food", "staff", "fast", "food"]]))
    G = graph.to_networkx()
    assert G.number_of_nodes() == 3
    assert G["fast"]["food"]["weight"] == 2

    df = graph.edge_frame()
    assert list(df.columns) == ["source", "target", "weight"]
    assert len(df) == 3
    assert df["weight"].sum() == 4
