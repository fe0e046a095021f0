"""
lotobonheur/models/statistical/categorical_boost.py
CatBoost-like scoring: decayed frequency boosted by color-group density.
"""
from __future__ import annotations

import math
from collections import Counter

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.statistical.number_selection import (
    all_numbers,
    color_group_of,
    rank_numbers,
    select_balanced,
)
from lotobonheur.models.types import DrawResult, PredictionResult

WINDOW = 150


class CategoricalBoost(BaseAlgorithm):
    """
    Each appearance adds e^(-decay_rate * i) times the number of draw members
    sharing its color group, so numbers drawn inside dense groups rank higher.
    """

    key = "categorical_boost"
    name = "CatBoost-like (Groupes Catégoriels)"
    category = "catboost"
    min_history = 10
    default_parameters = {"decay_rate": 0.04}

    def get_scores(self, history: list[DrawResult]) -> dict[int, float]:
        scores = {n: 0.0 for n in all_numbers()}
        for idx, draw in enumerate(history[:WINDOW]):
            weight = math.exp(-self.params.decay_rate * idx)
            nums = [n for n in draw.winning_numbers if n in scores]
            groups = Counter(color_group_of(n) for n in nums)
            for num in nums:
                scores[num] += weight * groups[color_group_of(num)]
        return scores

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        scores = self.get_scores(history)
        numbers = select_balanced(rank_numbers(scores)[: self.params.candidate_pool])

        max_score = max(scores.values()) or 1.0
        avg_score = sum(scores[n] for n in numbers) / len(numbers)
        confidence = min(0.87, (avg_score / max_score) * 0.88 + 0.12)
        return self._result(
            numbers,
            confidence,
            ["Groupes catégoriels", "Pondération par fréquence de groupe", "Boost catégoriel"],
            score=confidence * 0.87,
        )
