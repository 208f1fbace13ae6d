from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Collection, Mapping, Optional, Union

from .errors import InvalidConfigurationError

SELECTION_MODES = ("fraction", "count", "threshold")
SELECTION_ORDERS = ("by_rank", "by_original_position")
ISOLATED_NODE_POLICIES = ("no_redistribution", "uniform_redistribution")
SIMILARITIES = ("overlap", "jaccard")


@dataclass
class Selection:
    mode: str = "fraction"            # fraction | count | threshold
    value: float = 1.0 / 3.0
    order: str = "by_rank"            # by_rank | by_original_position
    min_freq: Optional[int] = None    # keyword rows below this frequency are dropped

    def validate(self) -> "Selection":
        if self.mode not in SELECTION_MODES:
            raise InvalidConfigurationError(f"selection.mode must be one of {SELECTION_MODES}, got {self.mode!r}")
        if self.order not in SELECTION_ORDERS:
            raise InvalidConfigurationError(f"selection.order must be one of {SELECTION_ORDERS}, got {self.order!r}")
        if self.mode == "fraction" and not (0.0 < self.value <= 1.0):
            raise InvalidConfigurationError(f"selection.value must be in (0, 1] for fraction mode, got {self.value}")
        if self.mode == "count" and (int(self.value) != self.value or self.value < 1):
            raise InvalidConfigurationError(f"selection.value must be a positive integer for count mode, got {self.value}")
        if self.mode == "threshold" and self.value < 0:
            raise InvalidConfigurationError(f"selection.value must be >= 0 for threshold mode, got {self.value}")
        if self.min_freq is not None and self.min_freq < 1:
            raise InvalidConfigurationError(f"selection.min_freq must be >= 1, got {self.min_freq}")
        return self


@dataclass
class TextRankConfig:
    window_size: int = 2
    ngram_max: int = 3
    relevant_categories: Optional[Collection[str]] = None   # None: every category
    damping_factor: float = 0.85
    convergence_threshold: float = 1e-4
    max_iterations: int = 100
    isolated_node_policy: str = "no_redistribution"
    timeout: Optional[float] = None   # seconds, checked once per iteration
    workers: int = 1
    similarity: Union[str, Callable] = "overlap"
    phrase_separator: str = " "
    selection: Selection = field(default_factory=Selection)

    def validate(self) -> "TextRankConfig":
        if not isinstance(self.window_size, int) or self.window_size < 1:
            raise InvalidConfigurationError(f"window_size must be an int > 0, got {self.window_size!r}")
        if not isinstance(self.ngram_max, int) or self.ngram_max < 1:
            raise InvalidConfigurationError(f"ngram_max must be an int >= 1, got {self.ngram_max!r}")
        if not (0.0 <= self.damping_factor < 1.0):
            raise InvalidConfigurationError(f"damping_factor must be in [0, 1), got {self.damping_factor}")
        if not self.convergence_threshold > 0:
            raise InvalidConfigurationError(f"convergence_threshold must be > 0, got {self.convergence_threshold}")
        if not isinstance(self.max_iterations, int) or self.max_iterations < 1:
            raise InvalidConfigurationError(f"max_iterations must be an int > 0, got {self.max_iterations!r}")
        if self.isolated_node_policy not in ISOLATED_NODE_POLICIES:
            raise InvalidConfigurationError(
                f"isolated_node_policy must be one of {ISOLATED_NODE_POLICIES}, got {self.isolated_node_policy!r}")
        if self.timeout is not None and self.timeout <= 0:
            raise InvalidConfigurationError(f"timeout must be > 0, got {self.timeout}")
        if not isinstance(self.workers, int) or self.workers < 1:
            raise InvalidConfigurationError(f"workers must be an int >= 1, got {self.workers!r}")
        if not callable(self.similarity) and self.similarity not in SIMILARITIES:
            raise InvalidConfigurationError(f"similarity must be one of {SIMILARITIES} or a callable, got {self.similarity!r}")
        if isinstance(self.relevant_categories, str):
            raise InvalidConfigurationError("relevant_categories must be a collection of tags, not a string")
        self.selection.validate()
        return self

    def relevance(self) -> Callable[[Optional[str]], bool]:
        """Predicate over category tags built from ``relevant_categories``."""
        if self.relevant_categories is None:
            return lambda tag: True
        allowed = frozenset(self.relevant_categories)
        return lambda tag: tag in allowed

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "TextRankConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise InvalidConfigurationError(f"Unknown option(s): {', '.join(sorted(unknown))}")
        kwargs = dict(options)
        sel = kwargs.get("selection")
        if isinstance(sel, Mapping):
            sel_known = {f.name for f in dataclasses.fields(Selection)}
            sel_unknown = set(sel) - sel_known
            if sel_unknown:
                raise InvalidConfigurationError(f"Unknown selection option(s): {', '.join(sorted(sel_unknown))}")
            kwargs["selection"] = Selection(**sel)
        return cls(**kwargs).validate()
