"""
lotobonheur/models/statistical/gap_analyzer.py
Appearance indices, gaps and short-term trend per number.
Index 0 is the latest draw.
"""
from __future__ import annotations

from typing import Literal

from lotobonheur.models.types import DrawResult

Trend = Literal["rising", "falling", "stable"]

TREND_WINDOW = 10


def appearance_indices(history: list[DrawResult], number: int) -> list[int]:
    return [idx for idx, draw in enumerate(history) if number in draw.winning_numbers]


def last_seen(history: list[DrawResult], number: int) -> int | None:
    """Draws since the number last appeared (0 = latest draw), None if never."""
    for idx, draw in enumerate(history):
        if number in draw.winning_numbers:
            return idx
    return None


def gaps_between(indices: list[int]) -> list[int]:
    return [b - a for a, b in zip(indices, indices[1:])]


def trend_of(history: list[DrawResult], number: int) -> Trend:
    """Compare appearances in the last 10 draws with the 10 before them."""
    recent = sum(1 for d in history[:TREND_WINDOW] if number in d.winning_numbers)
    older = sum(1 for d in history[TREND_WINDOW:2 * TREND_WINDOW] if number in d.winning_numbers)
    if recent > older:
        return "rising"
    if recent < older:
        return "falling"
    return "stable"
