"""
Sentence-pair candidates for the sentence graph.

Comparing every pair of sentences is quadratic; on long inputs MinHash
locality-sensitive hashing narrows the comparisons down to pairs that are
likely to share terms.
"""
from __future__ import annotations
import zlib
from collections import defaultdict
from itertools import combinations
from typing import Dict, Hashable, Iterable, List, Set, Tuple

import numpy as np

_MERSENNE = (1 << 61) - 1


def all_pairs(sentence_ids: Iterable[Hashable]) -> List[Tuple[Hashable, Hashable]]:
    return list(combinations(list(sentence_ids), 2))


def _term_hash(term: str) -> int:
    # crc32 is stable across processes (unlike hash())
    return zlib.crc32(term.encode("utf-8"))


def minhash_signatures(terms: Dict[Hashable, Set[str]], n_hashes: int, seed: int = 42) -> Dict[Hashable, np.ndarray]:
    """
    MinHash signature per sentence using universal hashes h(x) = (a*x + b) mod p.

    Sentences without terms get no signature.
    """
    rng = np.random.default_rng(seed)
    a = rng.integers(1, 1 << 31, size=n_hashes, dtype=np.uint64)
    b = rng.integers(0, 1 << 31, size=n_hashes, dtype=np.uint64)
    sigs: Dict[Hashable, np.ndarray] = {}
    for sid, ts in terms.items():
        if not ts:
            continue
        x = np.array(sorted(_term_hash(t) for t in ts), dtype=np.uint64)
        # (a*x + b) stays below 2**63 since a, b < 2**31 and x < 2**32
        h = (np.outer(a, x) + b[:, None]) % np.uint64(_MERSENNE)
        sigs[sid] = h.min(axis=1)
    return sigs


def minhash_candidates(terms: Dict[Hashable, Set[str]], bands: int = 10, rows: int = 5,
                       seed: int = 42) -> List[Tuple[Hashable, Hashable]]:
    """
    Candidate sentence pairs that collide in at least one LSH band.

    Args:
        terms: sentence id -> set of relevant terms
        bands: number of bands
        rows: signature rows per band
        seed: seed for the hash family; the same seed gives the same pairs

    Returns:
        Sorted list of (id, id) pairs, each pair in sentence insertion order.
    """
    if bands < 1 or rows < 1:
        raise ValueError("bands and rows must be >= 1")
    sigs = minhash_signatures(terms, bands * rows, seed=seed)
    order = {sid: i for i, sid in enumerate(terms)}
    pairs: Set[Tuple[Hashable, Hashable]] = set()
    for band in range(bands):
        buckets: Dict[bytes, List[Hashable]] = defaultdict(list)
        for sid, sig in sigs.items():
            buckets[sig[band * rows:(band + 1) * rows].tobytes()].append(sid)
        for members in buckets.values():
            for x, y in combinations(members, 2):
                pairs.add((x, y) if order[x] < order[y] else (y, x))
    return sorted(pairs, key=lambda p: (order[p[0]], order[p[1]]))
