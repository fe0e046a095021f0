"""
lotobonheur/models/statistical/cross_draw.py
Correlation between two draw schedules (e.g. the midday and evening draws
of the same day), aligned by index.
"""
from __future__ import annotations

from dataclasses import dataclass
from random import Random

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.schemas import StatisticalParameters
from lotobonheur.models.statistical.number_selection import all_numbers, rank_numbers, select_balanced
from lotobonheur.models.types import DrawResult, PredictionResult
from lotobonheur.utils.config import NUMBER_RANGE
from lotobonheur.utils.errors import InsufficientDataError

PROXIMITY = 5
MIN_CORRELATION = 0.1
TOP_CORRELATIONS = 20
NEIGHBOUR_BOOST = 2.0
FIXED_CONFIDENCE = 0.78


@dataclass
class CrossDrawCorrelation:
    number: int
    correlation: float
    common_appearances: int
    proximity_score: float


def analyze_cross_draw_correlation(
    history: list[DrawResult],
    paired_history: list[DrawResult],
) -> list[CrossDrawCorrelation]:
    """Strongest per-number correlations (> 0.1, top 20) between two aligned series."""
    common = {n: 0 for n in all_numbers()}
    proximity = {n: 0.0 for n in all_numbers()}
    min_length = min(len(history), len(paired_history))
    if min_length == 0:
        return []

    for draw, paired in zip(history[:min_length], paired_history[:min_length]):
        paired_nums = paired.winning_numbers
        for n1 in draw.winning_numbers:
            if n1 not in common:
                continue
            if n1 in paired_nums:
                common[n1] += 1
            for n2 in paired_nums:
                if n1 != n2 and abs(n1 - n2) <= PROXIMITY and n2 in proximity:
                    proximity[n1] += 0.5
                    proximity[n2] += 0.5

    correlations = [
        CrossDrawCorrelation(
            number=n,
            correlation=(common[n] + proximity[n]) / min_length,
            common_appearances=common[n],
            proximity_score=proximity[n],
        )
        for n in all_numbers()
    ]
    kept = [c for c in correlations if c.correlation > MIN_CORRELATION]
    kept.sort(key=lambda c: (-c.correlation, c.number))
    return kept[:TOP_CORRELATIONS]


class CrossDrawAnalysis(BaseAlgorithm):
    key = "cross_draw"
    name = "Analyse Multi-Tirages"
    category = "statistical"
    min_history = 5

    def __init__(
        self,
        paired_history: list[DrawResult] | None = None,
        parameters: StatisticalParameters | None = None,
        rng: Random | None = None,
    ):
        super().__init__(parameters, rng)
        self.paired_history = paired_history or []

    def get_scores(self, history: list[DrawResult]) -> dict[int, float]:
        if len(self.paired_history) < self.min_history:
            raise InsufficientDataError(self.min_history, len(self.paired_history))

        scores = {n: 0.0 for n in all_numbers()}
        for corr in analyze_cross_draw_correlation(history, self.paired_history):
            scores[corr.number] += corr.correlation * 10

        lo, hi = NUMBER_RANGE
        for num in self.paired_history[0].winning_numbers:
            for neighbour in range(max(lo, num - PROXIMITY), min(hi, num + PROXIMITY) + 1):
                scores[neighbour] += NEIGHBOUR_BOOST
        return scores

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        scores = self.get_scores(history)
        numbers = select_balanced(rank_numbers(scores)[: self.params.candidate_pool])
        return self._result(
            numbers,
            FIXED_CONFIDENCE,
            ["Corrélation inter-tirages", "Proximité numérique", "Patterns croisés"],
        )
