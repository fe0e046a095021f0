"""
lotobonheur/models/base_algorithm.py
Abstract base for every prediction algorithm: minimum-history guard,
failure isolation and the degraded fallback prediction.
"""
from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Any

from lotobonheur.models.schemas import StatisticalParameters, ParametersBase
from lotobonheur.models.statistical.number_selection import random_numbers
from lotobonheur.models.types import (
    ERROR_SUFFIX,
    FALLBACK_CONFIDENCE,
    FALLBACK_FACTORS,
    INSUFFICIENT_DATA_SUFFIX,
    Category,
    DrawResult,
    PredictionResult,
    is_valid_pick,
)
from lotobonheur.utils.errors import InsufficientDataError
from lotobonheur.utils.logger import get_logger

log = get_logger("model")


class BaseAlgorithm(ABC):
    """
    Subclasses set the class attributes and implement `_predict`.
    `predict` never raises: short histories, InsufficientDataError, any
    other exception and malformed output all yield `fallback()`.
    """

    key: str = ""
    name: str = ""
    category: Category = "statistical"
    min_history: int = 5
    parameters_model: type[ParametersBase] = StatisticalParameters
    default_parameters: dict[str, Any] = {}

    def __init__(self, parameters: ParametersBase | None = None, rng: random.Random | None = None):
        if parameters is None:
            parameters = self.parameters_model(**self.default_parameters)
        if not isinstance(parameters, self.parameters_model):
            raise TypeError(
                f"{self.key} expects {self.parameters_model.__name__}, got {type(parameters).__name__}"
            )
        self.params = parameters
        self.rng = rng or random.Random()

    # ── Contract ──────────────────────────────────────────────────

    @abstractmethod
    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        """Compute a prediction. `history` is most-recent-first and long enough."""

    def predict(self, history: list[DrawResult]) -> PredictionResult:
        if len(history) < self.min_history:
            log.debug(f"{self.key}: {len(history)} draws < {self.min_history}, fallback")
            return self.fallback()

        try:
            result = self._predict(history)
        except InsufficientDataError as exc:
            log.debug(f"{self.key}: {exc}, fallback")
            return self.fallback()
        except Exception as exc:
            log.error(f"{self.key} failed: {exc}", exc_info=True)
            return self.fallback(ERROR_SUFFIX)

        if not is_valid_pick(result.numbers):
            log.error(f"{self.key} produced an invalid pick {result.numbers}")
            return self.fallback(ERROR_SUFFIX)
        return result

    def __call__(self, history: list[DrawResult]) -> PredictionResult:
        return self.predict(history)

    # ── Helpers ───────────────────────────────────────────────────

    def fallback(self, suffix: str = INSUFFICIENT_DATA_SUFFIX) -> PredictionResult:
        return PredictionResult(
            numbers=random_numbers(rng=self.rng),
            confidence=FALLBACK_CONFIDENCE,
            algorithm=f"{self.name} {suffix}",
            category=self.category,
            factors=list(FALLBACK_FACTORS),
            score=FALLBACK_CONFIDENCE,
        )

    def _result(
        self,
        numbers: list[int],
        confidence: float,
        factors: list[str],
        score: float | None = None,
    ) -> PredictionResult:
        return PredictionResult(
            numbers=sorted(int(n) for n in numbers),
            confidence=float(confidence),
            algorithm=self.name,
            category=self.category,
            factors=factors,
            score=float(confidence if score is None else score),
        )

    def describe(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "category": self.category,
            "min_history": self.min_history,
            "parameters": self.params.model_dump(),
        }
