"""
lotobonheur/models/statistical/number_selection.py
Color-group bucketing and top-k selection used by every algorithm.
"""
from __future__ import annotations

import random
from typing import Iterable

from lotobonheur.utils.config import NUMBER_RANGE, PICK_COUNT

# (low, high) inclusive; 80-90 is the one 11-number bucket
COLOR_GROUPS: list[tuple[int, int]] = [
    (1, 9), (10, 19), (20, 29), (30, 39), (40, 49),
    (50, 59), (60, 69), (70, 79), (80, 90),
]

RANDOMIZATION_DECAY = 0.8


def color_group_of(n: int) -> int:
    """Index 0-8 of the color bucket containing n."""
    for idx, (lo, hi) in enumerate(COLOR_GROUPS):
        if lo <= n <= hi:
            return idx
    raise ValueError(f"Number out of range: {n}")


def _dedupe(candidates: Iterable[int]) -> list[int]:
    seen: set[int] = set()
    out: list[int] = []
    for n in candidates:
        if n not in seen:
            seen.add(n)
            out.append(n)
    return out


def select_balanced(candidates: Iterable[int], k: int = PICK_COUNT) -> list[int]:
    """
    Take the first candidate of each color group (groups in order of first
    appearance), then fill from the leftovers in candidate order.
    Returns at most k numbers, ascending.
    """
    pool = _dedupe(candidates)
    if len(pool) <= k:
        return sorted(pool)

    by_group: dict[int, list[int]] = {}
    for n in pool:
        by_group.setdefault(color_group_of(n), []).append(n)

    picked = [members[0] for members in by_group.values()]
    chosen = set(picked)
    for n in pool:
        if len(picked) >= k:
            break
        if n not in chosen:
            picked.append(n)
            chosen.add(n)
    return sorted(picked[:k])


def select_with_randomization(
    candidates: Iterable[int],
    k: int = PICK_COUNT,
    rng: random.Random | None = None,
) -> list[int]:
    """Weighted sampling without replacement; rank i in the remaining pool weighs 0.8^i."""
    rng = rng or random.Random()
    pool = _dedupe(candidates)
    picked: list[int] = []
    while pool and len(picked) < k:
        weights = [RANDOMIZATION_DECAY ** i for i in range(len(pool))]
        idx = rng.choices(range(len(pool)), weights=weights, k=1)[0]
        picked.append(pool.pop(idx))
    return sorted(picked)


def rank_numbers(scores: dict[int, float]) -> list[int]:
    """Numbers by score descending, ties broken by ascending number."""
    return sorted(scores, key=lambda n: (-scores[n], n))


def random_numbers(k: int = PICK_COUNT, rng: random.Random | None = None) -> list[int]:
    lo, hi = NUMBER_RANGE
    rng = rng or random.Random()
    return sorted(rng.sample(range(lo, hi + 1), k))


def all_numbers() -> range:
    lo, hi = NUMBER_RANGE
    return range(lo, hi + 1)
