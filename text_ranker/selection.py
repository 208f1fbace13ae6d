from __future__ import annotations
import math
from typing import List, Optional, Sequence, TypeVar

from .config import Selection

T = TypeVar("T")


def _position(row) -> float:
    return row.position if row.position is not None else math.inf


def rank_order(rows: Sequence[T]) -> List[T]:
    """Descending score; ties by original position, then identifier."""
    return sorted(rows, key=lambda r: (-r.score, _position(r), str(r.identifier)))


def position_order(rows: Sequence[T]) -> List[T]:
    return sorted(rows, key=lambda r: (_position(r), -r.score, str(r.identifier)))


def target_count(n: int, fraction: float) -> int:
    """Rounded-down share of ``n``, at least 1 (0 only for an empty input)."""
    if n == 0:
        return 0
    # guard against 0.9999... from float fractions such as 1/3
    return max(1, int(math.floor(n * fraction + 1e-9)))


def select(rows: Sequence[T], selection: Optional[Selection] = None) -> List[T]:
    """
    Pick rows by the selection policy and return them in the requested order.

    Rows need ``score``, ``position`` and ``identifier`` attributes; the
    ``min_freq`` filter reads ``freq`` where rows have one.
    """
    selection = (selection or Selection()).validate()
    pool = list(rows)
    if selection.min_freq is not None:
        # rows without a frequency (sentences) are not filtered
        pool = [r for r in pool if not hasattr(r, "freq") or r.freq >= selection.min_freq]
    ranked = rank_order(pool)

    if selection.mode == "fraction":
        chosen = ranked[:target_count(len(ranked), selection.value)]
    elif selection.mode == "count":
        chosen = ranked[:int(selection.value)]
    else:
        chosen = [r for r in ranked if r.score >= selection.value]

    if selection.order == "by_original_position":
        return position_order(chosen)
    return chosen
