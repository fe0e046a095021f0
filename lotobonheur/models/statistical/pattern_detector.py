"""
lotobonheur/models/statistical/pattern_detector.py
Pair, cyclic-gap and hot/cold pattern mining over a draw history.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from itertools import combinations
from typing import Any, Literal

import numpy as np

from lotobonheur.models.statistical.frequency_analyzer import number_frequencies
from lotobonheur.models.statistical.gap_analyzer import appearance_indices, gaps_between
from lotobonheur.models.statistical.number_selection import all_numbers, rank_numbers
from lotobonheur.utils.config import PICK_COUNT

PatternType = Literal["pair", "cycle", "hot", "cold"]

MAX_PATTERNS = 10
MIN_PAIR_COUNT = 3
MIN_CYCLE_APPEARANCES = 3
HOT_WINDOW = 10
HOT_THRESHOLD = 3
COLD_AFTER = 20
COLD_CONFIDENCE = 0.6


@dataclass
class Pattern:
    type: PatternType
    numbers: list[int]
    frequency: float
    confidence: float
    last_seen: int | None
    description: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def detect_pair_patterns(history) -> list[Pattern]:
    counts: dict[tuple[int, int], int] = defaultdict(int)
    latest: dict[tuple[int, int], int] = {}
    for idx, draw in enumerate(history):
        for pair in combinations(sorted(set(draw.winning_numbers)), 2):
            counts[pair] += 1
            latest.setdefault(pair, idx)

    patterns = []
    for pair, count in counts.items():
        if count < MIN_PAIR_COUNT:
            continue
        patterns.append(Pattern(
            type="pair",
            numbers=list(pair),
            frequency=count / len(history),
            confidence=min(0.9, count / 10),
            last_seen=latest[pair],
            description=f"Paire {pair[0]}-{pair[1]} ({count}x)",
        ))
    return patterns


def detect_cyclic_patterns(history) -> list[Pattern]:
    patterns = []
    for num in all_numbers():
        indices = appearance_indices(history, num)
        if len(indices) < MIN_CYCLE_APPEARANCES:
            continue
        gaps = np.array(gaps_between(indices), dtype=float)
        mean_gap = float(gaps.mean())
        variance = float(gaps.var())
        if variance < 0.5 * mean_gap:
            patterns.append(Pattern(
                type="cycle",
                numbers=[num],
                frequency=1 / mean_gap,
                confidence=min(0.85, 1 / (variance + 1)),
                last_seen=indices[0],
                description=f"N°{num} cycle ~{round(mean_gap)} tirages",
            ))
    return patterns


def detect_hot_cold_patterns(history) -> list[Pattern]:
    """
    Hot: at least 3 appearances in the last 10 draws. Cold: last seen more
    than 20 draws ago. A number never seen is not cold.
    """
    patterns = []
    freqs = number_frequencies(history)
    for num in all_numbers():
        recent = sum(1 for d in history[:HOT_WINDOW] if num in d.winning_numbers)
        indices = appearance_indices(history, num)
        last = indices[0] if indices else None
        frequency = freqs[num] / len(history)

        if recent >= HOT_THRESHOLD:
            patterns.append(Pattern(
                type="hot",
                numbers=[num],
                frequency=frequency,
                confidence=recent / HOT_WINDOW,
                last_seen=last,
                description=f"N°{num} chaud ({recent}/{HOT_WINDOW})",
            ))
        elif last is not None and last > COLD_AFTER:
            patterns.append(Pattern(
                type="cold",
                numbers=[num],
                frequency=frequency,
                confidence=COLD_CONFIDENCE,
                last_seen=last,
                description=f"N°{num} froid ({last} tirages)",
            ))
    return patterns


def detect_patterns(history) -> list[Pattern]:
    """All three passes merged, by confidence descending (stable), top 10."""
    if not history:
        return []
    patterns = (
        detect_pair_patterns(history)
        + detect_cyclic_patterns(history)
        + detect_hot_cold_patterns(history)
    )
    patterns.sort(key=lambda p: -p.confidence)
    return patterns[:MAX_PATTERNS]


def predict_from_patterns(patterns: list[Pattern]) -> list[int]:
    """Top 5 numbers by sum of confidence * frequency * 10, ascending."""
    scores = {n: 0.0 for n in all_numbers()}
    for pattern in patterns:
        for num in pattern.numbers:
            if num in scores:
                scores[num] += pattern.confidence * pattern.frequency * 10
    return sorted(rank_numbers(scores)[:PICK_COUNT])
