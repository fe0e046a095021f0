"""
lotobonheur/models/explainer.py
Per-number justification of a prediction from frequency, recency and trend.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from lotobonheur.models.statistical.gap_analyzer import Trend, last_seen, trend_of
from lotobonheur.models.types import DrawResult, PredictionResult

HIGH_FREQUENCY = 0.15
HOT_FREQUENCY = 0.10
RECENT_DRAWS = 5
HOT_RECENT_DRAWS = 10


@dataclass
class NumberExplanation:
    number: int
    frequency: float
    last_seen: int | None
    trend: Trend
    reasons: list[str] = field(default_factory=list)
    weight: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def explain_number(number: int, history: list[DrawResult]) -> NumberExplanation:
    appearances = sum(1 for d in history if number in d.winning_numbers)
    frequency = appearances / len(history) if history else 0.0
    seen = last_seen(history, number)
    trend = trend_of(history, number)

    reasons = []
    if frequency > HIGH_FREQUENCY:
        reasons.append(f"Fréquence élevée ({frequency * 100:.1f}%)")
    if seen is not None and seen <= RECENT_DRAWS:
        reasons.append(f"Vu récemment ({seen} tirages)")
    if trend == "rising":
        reasons.append("Tendance à la hausse")
    if frequency > HOT_FREQUENCY and seen is not None and seen <= HOT_RECENT_DRAWS:
        reasons.append("Chaud")

    # never-seen numbers weigh nothing
    weight = frequency / (seen + 1) if seen is not None else 0.0
    return NumberExplanation(number, frequency, seen, trend, reasons, weight)


def explain_prediction(prediction: PredictionResult, history: list[DrawResult]) -> list[NumberExplanation]:
    return [explain_number(n, history) for n in prediction.numbers]
