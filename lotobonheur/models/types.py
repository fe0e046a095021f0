"""
lotobonheur/models/types.py
Draw and prediction value types shared by every algorithm.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Literal

from lotobonheur.utils.config import NUMBER_RANGE, PICK_COUNT

Category = Literal[
    "statistical", "ml", "bayesian", "neural", "variance",
    "lightgbm", "catboost", "transformer", "arima", "markov", "ensemble",
]

INSUFFICIENT_DATA_SUFFIX = "(Données Insuffisantes)"
ERROR_SUFFIX = "(Erreur)"
FALLBACK_FACTORS = ["Données insuffisantes", "Mode dégradé"]
FALLBACK_CONFIDENCE = 0.2


def _parse_date(value: Any) -> date | None:
    if value is None or isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


@dataclass(frozen=True)
class DrawResult:
    draw_name: str
    draw_date: date | None
    winning_numbers: tuple[int, ...]
    machine_numbers: tuple[int, ...] | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "DrawResult":
        """Build from a draw_results row. Malformed numbers are kept as-is."""
        machine = row.get("machine_numbers")
        return cls(
            draw_name=row.get("draw_name", ""),
            draw_date=_parse_date(row.get("draw_date")),
            winning_numbers=tuple(int(n) for n in (row.get("winning_numbers") or [])),
            machine_numbers=tuple(int(n) for n in machine) if machine else None,
        )

    @property
    def is_complete(self) -> bool:
        lo, hi = NUMBER_RANGE
        nums = self.winning_numbers
        return len(nums) == PICK_COUNT and len(set(nums)) == PICK_COUNT and all(lo <= n <= hi for n in nums)

    def __contains__(self, number: int) -> bool:
        return number in self.winning_numbers


@dataclass
class PredictionResult:
    numbers: list[int]
    confidence: float
    algorithm: str
    category: Category
    factors: list[str] = field(default_factory=list)
    score: float = 0.0

    @property
    def is_fallback(self) -> bool:
        return self.algorithm.endswith(INSUFFICIENT_DATA_SUFFIX) or self.algorithm.endswith(ERROR_SUFFIX)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def is_valid_pick(numbers: list[int]) -> bool:
    lo, hi = NUMBER_RANGE
    return (
        len(numbers) == PICK_COUNT
        and len(set(numbers)) == PICK_COUNT
        and all(isinstance(n, int) and lo <= n <= hi for n in numbers)
    )
