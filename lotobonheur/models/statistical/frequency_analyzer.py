"""
lotobonheur/models/statistical/frequency_analyzer.py
Frequency counts, co-occurrence correlation, spread and data quality
over a most-recent-first list of draws.
"""
from __future__ import annotations

from collections import Counter
from datetime import date

import numpy as np

from lotobonheur.models.statistical.number_selection import all_numbers
from lotobonheur.models.types import DrawResult
from lotobonheur.utils.config import PICK_COUNT

VOLUME_TARGET = 100
FRESHNESS_DAYS = 7


def number_frequencies(history: list[DrawResult]) -> dict[int, int]:
    """{number: appearances} for every number 1..90 (zeros included)."""
    counts = Counter(n for draw in history for n in draw.winning_numbers)
    return {n: counts.get(n, 0) for n in all_numbers()}


def population_variance_of_frequencies(history: list[DrawResult]) -> float:
    """
    Population standard deviation of the 1..90 frequency distribution.
    The name follows the historical metric; the value is a std, not a variance.
    """
    freqs = np.array(list(number_frequencies(history).values()), dtype=float)
    return float(freqs.std())


def pairwise_correlation(history: list[DrawResult], a: int, b: int) -> float:
    """Phi coefficient of "draw contains a" x "draw contains b"."""
    both = only_a = only_b = neither = 0
    for draw in history:
        has_a = a in draw.winning_numbers
        has_b = b in draw.winning_numbers
        if has_a and has_b:
            both += 1
        elif has_a:
            only_a += 1
        elif has_b:
            only_b += 1
        else:
            neither += 1

    denom = (both + only_a) * (only_b + neither) * (both + only_b) * (only_a + neither)
    if denom == 0:
        return 0.0
    return (both * neither - only_a * only_b) / float(np.sqrt(denom))


def freshness(history: list[DrawResult], today: date | None = None) -> float:
    """1.0 for a draw today, decaying linearly to 0 at a week old."""
    if not history or history[0].draw_date is None:
        return 0.0
    today = today or date.today()
    days = (today - history[0].draw_date).days
    return max(0.0, 1.0 - days / FRESHNESS_DAYS)


def completeness(history: list[DrawResult]) -> float:
    if not history:
        return 0.0
    complete = sum(1 for d in history if len(d.winning_numbers) == PICK_COUNT)
    return complete / len(history)


def data_quality(history: list[DrawResult], today: date | None = None) -> float:
    """0.4 volume + 0.3 freshness + 0.3 completeness, in [0, 1]."""
    if not history:
        return 0.0
    volume = min(1.0, len(history) / VOLUME_TARGET)
    return 0.4 * volume + 0.3 * freshness(history, today) + 0.3 * completeness(history)


def hot_numbers(history: list[DrawResult], top_n: int = 15) -> list[int]:
    freqs = number_frequencies(history)
    return sorted(freqs, key=lambda n: (-freqs[n], n))[:top_n]


def cold_numbers(history: list[DrawResult], bottom_n: int = 15) -> list[int]:
    freqs = number_frequencies(history)
    return sorted(freqs, key=lambda n: (freqs[n], n))[:bottom_n]
