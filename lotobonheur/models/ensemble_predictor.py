"""
lotobonheur/models/ensemble_predictor.py
Confidence-weighted voting ensemble over the member algorithms → 5 numbers.
"""
from __future__ import annotations

import random

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.statistical.number_selection import all_numbers, random_numbers, rank_numbers
from lotobonheur.models.types import (
    ERROR_SUFFIX,
    FALLBACK_CONFIDENCE,
    FALLBACK_FACTORS,
    INSUFFICIENT_DATA_SUFFIX,
    DrawResult,
    PredictionResult,
)
from lotobonheur.utils.config import PICK_COUNT, WEIGHT_MAX, WEIGHT_MIN
from lotobonheur.utils.logger import get_logger

log = get_logger("ensemble")

MIN_HISTORY = 5
CONFIDENCE_CAP = 0.92
ENSEMBLE_SCORE = 0.92


class EnsemblePredictor:
    """
    Every member adds confidence x member weight to each number it predicts.
    The top 5 by tally win, ties broken by ascending number. Members that
    raise are dropped; a member that degraded to its fallback still votes
    with its fallback confidence.
    """

    category = "ensemble"

    def __init__(
        self,
        members: dict[str, BaseAlgorithm],
        weights: dict[str, float] | None = None,
        rng: random.Random | None = None,
    ):
        if not members:
            raise ValueError("Ensemble needs at least one member.")
        self.members = members
        self.rng = rng or random.Random()
        self.weights: dict[str, float] = {}
        self.update_weights(weights or {})

    @property
    def name(self) -> str:
        return f"Ensemble ({len(self.members)} modèles)"

    # ── Weights ───────────────────────────────────────────────────

    def update_weights(self, weights: dict[str, float]) -> None:
        """Set member weights (default 1.0), clamped to [WEIGHT_MIN, WEIGHT_MAX]."""
        self.weights = {
            key: max(WEIGHT_MIN, min(WEIGHT_MAX, float(weights.get(key, 1.0))))
            for key in self.members
        }
        log.debug(f"Ensemble weights: {self.weights}")

    # ── Prediction ────────────────────────────────────────────────

    def predict(self, history: list[DrawResult]) -> PredictionResult:
        if len(history) < MIN_HISTORY:
            return self.fallback()
        return self.combine(self.run_members(history))

    def __call__(self, history: list[DrawResult]) -> PredictionResult:
        return self.predict(history)

    def run_members(self, history: list[DrawResult]) -> dict[str, PredictionResult]:
        """Run every member, isolating failures."""
        results: dict[str, PredictionResult] = {}
        for key, member in self.members.items():
            try:
                results[key] = member.predict(history)
            except Exception as exc:
                log.error(f"Ensemble member {key} failed: {exc}")
        return results

    def combine(self, results: dict[str, PredictionResult]) -> PredictionResult:
        """Vote over already-computed member results (unknown keys are ignored)."""
        results = {k: r for k, r in results.items() if k in self.members}
        voters = results
        if not voters:
            log.warning("No ensemble member produced a result.")
            return self.fallback(ERROR_SUFFIX)

        votes = {n: 0.0 for n in all_numbers()}
        for key, result in voters.items():
            weight = self.weights.get(key, 1.0)
            for num in result.numbers:
                if num in votes:
                    votes[num] += result.confidence * weight

        numbers = sorted(rank_numbers(votes)[:PICK_COUNT])
        avg_confidence = sum(r.confidence for r in voters.values()) / len(voters)
        confidence = max(0.0, min(CONFIDENCE_CAP, avg_confidence * 1.1))

        log.info(f"Ensemble prediction: {numbers} ({len(voters)}/{len(self.members)} voters)")
        return PredictionResult(
            numbers=numbers,
            confidence=confidence,
            algorithm=self.name,
            category="ensemble",
            factors=["Voting pondéré", f"{len(voters)} algorithmes", "Consensus"],
            score=ENSEMBLE_SCORE,
        )

    def fallback(self, suffix: str = INSUFFICIENT_DATA_SUFFIX) -> PredictionResult:
        return PredictionResult(
            numbers=random_numbers(rng=self.rng),
            confidence=FALLBACK_CONFIDENCE,
            algorithm=f"Ensemble {suffix}",
            category="ensemble",
            factors=list(FALLBACK_FACTORS),
            score=FALLBACK_CONFIDENCE,
        )
