"""
lotobonheur/models/statistical/variance_analysis.py
Raw frequency damped by the spread of the frequency distribution.
"""
from __future__ import annotations

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.statistical.frequency_analyzer import (
    number_frequencies,
    population_variance_of_frequencies,
)
from lotobonheur.models.statistical.number_selection import rank_numbers, select_balanced
from lotobonheur.models.types import DrawResult, PredictionResult


class VarianceAnalysis(BaseAlgorithm):
    key = "variance"
    name = "Analyse Variance"
    category = "variance"
    min_history = 5

    def get_scores(self, history: list[DrawResult]) -> dict[int, float]:
        spread = population_variance_of_frequencies(history)
        damping = spread + 1 + self.params.regularization
        n_draws = len(history)
        return {n: (count / n_draws) / damping for n, count in number_frequencies(history).items()}

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        scores = self.get_scores(history)
        numbers = select_balanced(rank_numbers(scores)[: self.params.candidate_pool])

        avg_score = sum(scores[n] for n in numbers) / len(numbers)
        confidence = min(0.80, avg_score * 10 + 0.3)
        return self._result(
            numbers,
            confidence,
            ["Variance réelle", "Fréquence ajustée", "Normalisation"],
            score=confidence * 0.80,
        )
