"""
lotobonheur/models/ml/gradient_boosting.py
LightGBM-like residual boosting over number scores, written with numpy.
"""
from __future__ import annotations

import numpy as np

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.schemas import BoostingParameters
from lotobonheur.models.statistical.number_selection import (
    all_numbers,
    color_group_of,
    rank_numbers,
    select_balanced,
)
from lotobonheur.models.types import DrawResult, PredictionResult
from lotobonheur.utils.config import NUMBER_RANGE

WINDOW = 200
TARGET_DECAY = 0.01

LO, HI = NUMBER_RANGE


class GradientBoosting(BaseAlgorithm):
    """
    Target: recency-weighted appearance rate of each number. Starting from
    the mean rate, each round fits the residuals with a two-level learner
    (one leaf per color group, then one leaf per number) whose leaf values
    are shrunk by `regularization` (λ), and adds `learning_rate` times it.
    """

    key = "gradient_boosting"
    name = "Gradient Boosting (LightGBM-like)"
    category = "lightgbm"
    min_history = 15
    parameters_model = BoostingParameters

    def __init__(self, parameters=None, rng=None):
        super().__init__(parameters, rng)
        self.groups = np.array([color_group_of(n) for n in all_numbers()])

    def target(self, history: list[DrawResult]) -> np.ndarray:
        rate = np.zeros(HI - LO + 1)
        window = history[:WINDOW]
        weights = np.exp(-TARGET_DECAY * np.arange(len(window)))
        for weight, draw in zip(weights, window):
            for num in draw.winning_numbers:
                if LO <= num <= HI:
                    rate[num - LO] += weight
        return rate / weights.sum()

    def _fit_learner(self, residuals: np.ndarray) -> np.ndarray:
        lam = self.params.regularization
        leaves = np.zeros_like(residuals)
        for group in np.unique(self.groups):
            mask = self.groups == group
            leaves[mask] = residuals[mask].sum() / (mask.sum() + lam)
        return leaves + (residuals - leaves) / (1.0 + lam)

    def boost(self, history: list[DrawResult]) -> dict[int, float]:
        target = self.target(history)
        prediction = np.full_like(target, target.mean())
        for _ in range(self.params.num_estimators):
            prediction += self.params.learning_rate * self._fit_learner(target - prediction)
        return {n: float(prediction[n - LO]) for n in all_numbers()}

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        scores = self.boost(history)
        numbers = select_balanced(rank_numbers(scores)[:15])

        max_score = max(scores.values())
        ratio = (sum(scores[n] for n in numbers) / len(numbers)) / max_score if max_score > 0 else 0.0
        confidence = min(0.89, ratio * 0.9 + 0.15)
        return self._result(
            numbers,
            confidence,
            [
                f"{self.params.num_estimators} estimateurs",
                f"LR={self.params.learning_rate:.3f}",
                "Résidus pondérés",
            ],
            score=confidence * 0.89,
        )
