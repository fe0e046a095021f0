"""
lotobonheur/models/ml/attention.py
Transformer-like attention from each draw onto its successor.
"""
from __future__ import annotations

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.schemas import SequenceParameters
from lotobonheur.models.statistical.number_selection import all_numbers, rank_numbers, select_balanced
from lotobonheur.models.types import DrawResult, PredictionResult


class Attention(BaseAlgorithm):
    """
    Over the last `window_size` transitions, each number a of the older draw
    attends to each number b of the newer draw with 1 / (|a - b| + 1)^(1 + reg),
    and b accumulates it. Transition k (0 = most recent) weighs
    (1 - learning_rate)^k.
    """

    key = "attention"
    name = "Transformer-like (Attention)"
    category = "transformer"
    min_history = 20
    parameters_model = SequenceParameters
    default_parameters = {"learning_rate": 0.02, "window_size": 100}

    def get_scores(self, history: list[DrawResult]) -> dict[int, float]:
        scores = {n: 0.0 for n in all_numbers()}
        keep = 1.0 - self.params.learning_rate
        sharpness = 1.0 + self.params.regularization
        transitions = min(self.params.window_size, len(history) - 1)

        for k in range(transitions):
            newer, older = history[k].winning_numbers, history[k + 1].winning_numbers
            weight = keep ** k
            for b in newer:
                if b not in scores:
                    continue
                scores[b] += weight * sum(1.0 / (abs(a - b) + 1) ** sharpness for a in older)
        return scores

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        scores = self.get_scores(history)
        numbers = select_balanced(rank_numbers(scores)[:15])

        max_score = max(scores.values())
        ratio = (sum(scores[n] for n in numbers) / len(numbers)) / max_score if max_score > 0 else 0.0
        confidence = min(0.9, ratio * 0.92 + 0.08)
        return self._result(
            numbers,
            confidence,
            ["Mécanisme d'attention", "Co-occurrences séquentielles", "Poids inverses à la distance"],
            score=confidence * 0.9,
        )
