"""
lotobonheur/models/ml/arima.py
ARIMA-like scoring of each number's 0/1 appearance series.
"""
from __future__ import annotations

import numpy as np

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.schemas import SequenceParameters
from lotobonheur.models.statistical.number_selection import all_numbers, rank_numbers, select_balanced
from lotobonheur.models.types import DrawResult, PredictionResult
from lotobonheur.utils.config import NUMBER_RANGE

WINDOW = 200

LO, HI = NUMBER_RANGE


class Arima(BaseAlgorithm):
    """
    Series are chronological (last element = latest draw).
    score = 0.5 * MA(window_size) + 0.5 * (φ·s[t] + (1-φ)·s[t-1]), φ = learning_rate,
    then shrunk toward the long-run appearance rate by `regularization`.
    """

    key = "arima"
    name = "ARIMA (Séries Temporelles)"
    category = "arima"
    min_history = 15
    parameters_model = SequenceParameters

    def series(self, history: list[DrawResult]) -> np.ndarray:
        """(90, T) indicator matrix, oldest draw in column 0."""
        window = list(reversed(history[:WINDOW]))
        matrix = np.zeros((HI - LO + 1, len(window)))
        for t, draw in enumerate(window):
            for num in draw.winning_numbers:
                if LO <= num <= HI:
                    matrix[num - LO, t] = 1.0
        return matrix

    def get_scores(self, history: list[DrawResult]) -> dict[int, float]:
        matrix = self.series(history)
        phi = self.params.learning_rate
        reg = self.params.regularization

        moving_average = matrix[:, -self.params.window_size:].mean(axis=1)
        autoregressive = phi * matrix[:, -1] + (1 - phi) * matrix[:, -2]
        long_run = matrix.mean(axis=1)
        raw = 0.5 * moving_average + 0.5 * autoregressive
        # long-run rate also breaks ties between numbers with identical recent series
        scores = (raw + reg * long_run) / (1 + reg) + 1e-3 * long_run
        return {n: float(scores[n - LO]) for n in all_numbers()}

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        scores = self.get_scores(history)
        numbers = select_balanced(rank_numbers(scores)[:15])

        max_score = max(scores.values())
        ratio = (sum(scores[n] for n in numbers) / len(numbers)) / max_score if max_score > 0 else 0.0
        confidence = min(0.86, ratio * 0.85 + 0.1)
        return self._result(
            numbers,
            confidence,
            [
                f"Moyenne mobile ({self.params.window_size})",
                f"Autorégression φ={self.params.learning_rate:.2f}",
                "Analyse de séries temporelles",
            ],
            score=confidence * 0.86,
        )
