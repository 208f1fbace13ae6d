import pytest

from text_ranker.config import Selection, TextRankConfig
from text_ranker.errors import InvalidConfigurationError, TextRankError


def test_defaults_are_valid():
    cfg = TextRankConfig().validate()
    assert cfg.damping_factor == 0.85
    assert cfg.selection.mode == "fraction"
    assert cfg.selection.value == pytest.approx(1 / 3)


@pytest.mark.parametrize(
    "options",
    [
        {"window_size": 0},
        {"window_size": 2.5},
        {"ngram_max": 0},
        {"damping_factor": 1.0},
        {"damping_factor": -0.5},
        {"convergence_threshold": 0},
        {"max_iterations": 0},
        {"isolated_node_policy": "teleport"},
        {"timeout": 0},
        {"workers": 0},
        {"similarity": "cosine"},
        {"relevant_categories": "NOUN"},
        {"selection": Selection(order="random")},
    ],
)
def test_invalid_options(options):
    with pytest.raises(InvalidConfigurationError):
        TextRankConfig(**options).validate()


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        TextRankConfig(window_size=-1).validate()
    assert issubclass(InvalidConfigurationError, TextRankError)


def test_from_dict():
    cfg = TextRankConfig.from_dict({
        "window_size": 3,
        "relevant_categories": ["NOUN", "ADJ"],
        "isolated_node_policy": "uniform_redistribution",
        "selection": {"mode": "count", "value": 5, "order": "by_original_position"},
    })
    assert cfg.window_size == 3
    assert cfg.selection == Selection(mode="count", value=5, order="by_original_position")
    assert cfg.relevance()("ADJ")
    assert not cfg.relevance()("VERB")


def test_from_dict_rejects_unknown_keys():
    with pytest.raises(InvalidConfigurationError):
        TextRankConfig.from_dict({"window": 3})
    with pytest.raises(InvalidConfigurationError):
        TextRankConfig.from_dict({"selection": {"size": 3}})


def test_relevance_defaults_to_everything():
    relevant = TextRankConfig().relevance()
    assert relevant("NOUN") and relevant("PUNCT") and relevant(None)
