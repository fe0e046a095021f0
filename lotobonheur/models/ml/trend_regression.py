"""
lotobonheur/models/ml/trend_regression.py
Per-number least-squares trend of appearance positions, extrapolated one
step past the available history.
"""
from __future__ import annotations

import numpy as np

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.statistical.gap_analyzer import appearance_indices
from lotobonheur.models.statistical.number_selection import all_numbers, rank_numbers, select_balanced
from lotobonheur.models.types import DrawResult, PredictionResult


def fit_line(x: np.ndarray, y: np.ndarray) -> tuple[float, float]:
    """Slope and intercept of the least-squares line. Slope 0 when x is constant."""
    n = len(x)
    denom = n * float(np.dot(x, x)) - float(x.sum()) ** 2
    slope = (n * float(np.dot(x, y)) - float(x.sum()) * float(y.sum())) / denom if denom else 0.0
    intercept = (float(y.sum()) - slope * float(x.sum())) / n
    return slope, intercept


class TrendRegression(BaseAlgorithm):
    """
    For each number, x = indices where it appeared and y = 0..k-1 its
    occurrence rank. The fitted line is evaluated at x = len(history) and
    scored 1 / (1 + reg + |ŷ - k|): numbers whose appearances follow a
    steady rhythm score close to 1.
    """

    key = "trend_regression"
    name = "Régression de Tendance"
    category = "neural"
    min_history = 10

    def get_scores(self, history: list[DrawResult]) -> dict[int, float]:
        next_index = len(history)
        reg = self.params.regularization
        scores: dict[int, float] = {}
        for num in all_numbers():
            positions = np.array(appearance_indices(history, num), dtype=float)
            k = len(positions)
            if k < 2:
                scores[num] = 0.0
                continue
            slope, intercept = fit_line(positions, np.arange(k, dtype=float))
            extrapolated = slope * next_index + intercept
            scores[num] = 1.0 / (1.0 + reg + abs(extrapolated - k))
        return scores

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        scores = self.get_scores(history)
        numbers = select_balanced(rank_numbers(scores)[: self.params.candidate_pool])

        confidence = min(0.9, max(scores.values()) * 1.5)
        return self._result(
            numbers,
            confidence,
            ["Régression linéaire", "Extrapolation des positions", "Régularité d'apparition"],
            score=confidence * 0.82,
        )
