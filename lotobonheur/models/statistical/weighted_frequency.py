"""
lotobonheur/models/statistical/weighted_frequency.py
Frequency with exponential recency decay over the last 100 draws.
"""
from __future__ import annotations

import math

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.statistical.number_selection import all_numbers, rank_numbers, select_balanced
from lotobonheur.models.types import DrawResult, PredictionResult

WINDOW = 100


class WeightedFrequency(BaseAlgorithm):
    """
    Each draw at index i weighs e^(-decay_rate * i). Scores are normalized by
    the total weight of all numbers seen, so they sum to ~1 over 1..90.
    Regularization shrinks scores toward the uniform 1/90.
    """

    key = "weighted_frequency"
    name = "Analyse Fréquentielle Pondérée"
    category = "statistical"
    min_history = 5

    def get_scores(self, history: list[DrawResult]) -> dict[int, float]:
        scores = {n: 0.0 for n in all_numbers()}
        total_weight = 0.0
        for idx, draw in enumerate(history[:WINDOW]):
            weight = math.exp(-self.params.decay_rate * idx)
            total_weight += weight * len(draw.winning_numbers)
            for num in draw.winning_numbers:
                if num in scores:
                    scores[num] += weight

        total_weight = total_weight or 1.0
        reg = self.params.regularization
        uniform = 1.0 / len(scores)
        return {n: (v / total_weight + reg * uniform) / (1 + reg) for n, v in scores.items()}

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        scores = self.get_scores(history)
        candidates = rank_numbers(scores)[: self.params.candidate_pool]
        numbers = select_balanced(candidates)

        avg_score = sum(scores[n] for n in numbers) / len(numbers)
        confidence = min(0.85, avg_score * 12 + 0.2)
        return self._result(
            numbers,
            confidence,
            ["Fréquence", "Pondération temporelle", "Normalisation"],
            score=confidence * 0.85,
        )
