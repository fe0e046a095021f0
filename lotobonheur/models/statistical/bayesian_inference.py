"""
lotobonheur/models/statistical/bayesian_inference.py
Beta-smoothed posterior probability that a number appears in a draw.
"""
from __future__ import annotations

import math

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.statistical.number_selection import all_numbers, rank_numbers, select_balanced
from lotobonheur.models.types import DrawResult, PredictionResult


class BayesianInference(BaseAlgorithm):
    """
    posterior(n) = (count_n + a) / (N + 2a) with a = 1 + regularization,
    i.e. Laplace smoothing when regularization is 0. A non-zero decay_rate
    turns counts and N into recency-weighted sums.
    """

    key = "bayesian"
    name = "Inférence Bayésienne"
    category = "bayesian"
    min_history = 5
    default_parameters = {"decay_rate": 0.0}

    def get_posteriors(self, history: list[DrawResult]) -> dict[int, float]:
        alpha = 1.0 + self.params.regularization
        decay = self.params.decay_rate
        counts = {n: 0.0 for n in all_numbers()}
        total = 0.0
        for idx, draw in enumerate(history):
            weight = math.exp(-decay * idx)
            total += weight
            for num in draw.winning_numbers:
                if num in counts:
                    counts[num] += weight
        return {n: (c + alpha) / (total + 2 * alpha) for n, c in counts.items()}

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        posteriors = self.get_posteriors(history)
        numbers = select_balanced(rank_numbers(posteriors)[: self.params.candidate_pool])

        uniform = 1.0 / len(posteriors)
        confidence = min(0.8, max(posteriors.values()) / uniform)
        return self._result(
            numbers,
            confidence,
            ["Théorème de Bayes", "Lissage de Laplace", "Posterior normalisé"],
            score=confidence * 0.78,
        )
