"""
lotobonheur/models/ml/markov_chain.py
First-order Markov chain over number transitions between consecutive draws.
"""
from __future__ import annotations

import math

import numpy as np

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.statistical.number_selection import all_numbers, rank_numbers, select_balanced
from lotobonheur.models.types import DrawResult, PredictionResult
from lotobonheur.utils.config import NUMBER_RANGE
from lotobonheur.utils.logger import get_logger

log = get_logger("model.markov")

LO, HI = NUMBER_RANGE
SIZE = HI - LO + 1


class MarkovChain(BaseAlgorithm):
    """
    P(next contains j | previous contains i), counted from every number of
    the older draw to every number of the newer one. Rows are normalized,
    with `regularization` as Laplace smoothing and `decay_rate` down-weighting
    older transitions. A number's score is the mean transition probability
    out of the latest draw's numbers.
    """

    key = "markov_chain"
    name = "Markov Chain"
    category = "markov"
    min_history = 5
    default_parameters = {"decay_rate": 0.0}

    def __init__(self, parameters=None, rng=None):
        super().__init__(parameters, rng)
        self.matrix: np.ndarray | None = None
        self._trained = False

    def train(self, history: list[DrawResult]) -> dict[str, float]:
        """Build the row-normalized transition matrix from a most-recent-first history."""
        counts = np.zeros((SIZE, SIZE), dtype=float)
        decay = self.params.decay_rate

        # history[age] is newer than history[age + 1]
        for age in range(len(history) - 1):
            newer = [n - LO for n in history[age].winning_numbers if LO <= n <= HI]
            older = [n - LO for n in history[age + 1].winning_numbers if LO <= n <= HI]
            weight = math.exp(-decay * age)
            for i in older:
                counts[i, newer] += weight

        counts += self.params.regularization
        totals = counts.sum(axis=1, keepdims=True)
        self.matrix = np.divide(counts, totals, out=np.zeros_like(counts), where=totals > 0)
        self._trained = True

        states = int((totals > 0).sum())
        log.debug(f"Markov chain trained: {states} transition states")
        return {"states": states}

    def get_scores(self, history: list[DrawResult]) -> dict[int, float]:
        if not self._trained or self.matrix is None:
            raise RuntimeError("Markov chain not trained.")

        current = [n - LO for n in history[0].winning_numbers if LO <= n <= HI]
        if not current:
            return {n: 0.0 for n in all_numbers()}
        probs = self.matrix[current].mean(axis=0)
        return {n: float(probs[n - LO]) for n in all_numbers()}

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        self.train(history)
        scores = self.get_scores(history)
        numbers = select_balanced(rank_numbers(scores)[: self.params.candidate_pool])

        avg_strength = sum(scores[n] for n in numbers) / len(numbers)
        confidence = min(0.85, math.tanh(avg_strength * 10) + 0.2)
        return self._result(
            numbers,
            confidence,
            [
                "Matrice de transition",
                "Probabilités d'état",
                f"{len(history[0].winning_numbers)} états actuels",
            ],
            score=confidence * 0.75,
        )
