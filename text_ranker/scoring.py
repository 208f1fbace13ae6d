from __future__ import annotations
import logging
import time
import warnings
from typing import Optional, Tuple

import numpy as np

from .datatypes import Graph, PageRankResult
from .errors import DidNotConverge, EmptyInputError, InvalidConfigurationError

logger = logging.getLogger(__name__)


def _edge_arrays(graph: Graph) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    index = {node_id: i for i, node_id in enumerate(graph.nodes)}
    src, dst, w = [], [], []
    for a, nbrs in graph.adjacency.items():
        for b, weight in nbrs.items():
            src.append(index[a])
            dst.append(index[b])
            w.append(weight)
    return (np.asarray(src, dtype=np.intp),
            np.asarray(dst, dtype=np.intp),
            np.asarray(w, dtype=float))


def pagerank(graph: Graph,
             damping: float = 0.85,
             max_iter: int = 100,
             tolerance: float = 1e-4,
             isolated_node_policy: str = "no_redistribution",
             timeout: Optional[float] = None) -> PageRankResult:
    """
    Weighted PageRank over the graph's nodes.

    PageRank Formula: PR(i) = (1-d) + d × Σ_j w(j,i) × PR(j) / out(j)

    Scores start at 1.0 and are not normalised. Every iteration is computed
    from a frozen copy of the previous one. A node whose outgoing weight is
    zero passes nothing on and settles at (1-d), unless
    ``isolated_node_policy`` is "uniform_redistribution", in which case its
    mass is spread evenly over all nodes.

    Args:
        graph: Graph to rank
        damping: Damping factor (typically 0.85)
        max_iter: Maximum number of iterations
        tolerance: Converged once no score moves by this much or more
        isolated_node_policy: "no_redistribution" or "uniform_redistribution"
        timeout: Wall-clock budget in seconds, checked once per iteration

    Returns:
        PageRankResult; ``converged`` is False (and a DidNotConverge warning
        is issued) when the cap or the timeout stopped the iteration.
    """
    if not (0.0 <= damping < 1.0):
        raise InvalidConfigurationError(f"damping must be in [0, 1), got {damping}")
    if max_iter < 1:
        raise InvalidConfigurationError(f"max_iter must be > 0, got {max_iter}")
    if not tolerance > 0:
        raise InvalidConfigurationError(f"tolerance must be > 0, got {tolerance}")
    if isolated_node_policy not in ("no_redistribution", "uniform_redistribution"):
        raise InvalidConfigurationError(f"Unknown isolated_node_policy: {isolated_node_policy!r}")

    n = len(graph.nodes)
    if n == 0:
        raise EmptyInputError("Cannot rank an empty graph")

    src, dst, w = _edge_arrays(graph)
    out_weight = np.bincount(src, weights=w, minlength=n)
    # transition weight of each edge; zero where the source has no outgoing weight
    coef = np.divide(w, out_weight[src], out=np.zeros_like(w), where=out_weight[src] > 0)
    dangling = out_weight == 0
    redistribute = isolated_node_policy == "uniform_redistribution" and dangling.any()

    pr = np.ones(n)
    deltas = []
    converged = timed_out = False
    started = time.monotonic()
    iteration = 0
    for iteration in range(1, max_iter + 1):
        prev = pr
        new_pr = (1.0 - damping) + damping * np.bincount(dst, weights=coef * prev[src], minlength=n)
        if redistribute:
            new_pr += damping * prev[dangling].sum() / n
        delta = float(np.max(np.abs(new_pr - prev)))
        deltas.append(delta)
        pr = new_pr
        if delta < tolerance:
            converged = True
            break
        if timeout is not None and time.monotonic() - started >= timeout:
            timed_out = True
            break

    max_delta = deltas[-1] if deltas else 0.0
    if converged:
        logger.debug("PageRank converged after %d iterations (max delta %.3g)", iteration, max_delta)
    else:
        reason = "timeout" if timed_out else "iteration cap"
        logger.warning("PageRank stopped on %s after %d iterations (max delta %.3g)", reason, iteration, max_delta)
        warnings.warn(
            f"PageRank did not converge: stopped on {reason} after {iteration} iterations "
            f"(max delta {max_delta:.3g} >= {tolerance:g})",
            DidNotConverge,
            stacklevel=2,
        )

    scores = {node_id: float(pr[i]) for i, node_id in enumerate(graph.nodes)}
    return PageRankResult(scores=scores, iterations=iteration, converged=converged,
                          max_delta=max_delta, timed_out=timed_out, deltas=deltas)
