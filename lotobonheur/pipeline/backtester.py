"""
lotobonheur/pipeline/backtester.py
Replay an algorithm over the most recent draws without look-ahead.
"""
from __future__ import annotations

import random
from dataclasses import asdict, dataclass, field
from typing import Any, Callable

import numpy as np

from lotobonheur.models.model_loader import (
    ENSEMBLE_KEY,
    build_algorithms,
    build_ensemble,
    load_algorithm_configs,
    resolve_algorithm_key,
)
from lotobonheur.models.types import DrawResult, PredictionResult
from lotobonheur.pipeline.prediction_generator import load_history
from lotobonheur.utils.cache import TTLCache
from lotobonheur.utils.errors import RequestValidationError
from lotobonheur.utils.logger import get_logger

log = get_logger("pipeline.backtest")

MAX_TEST_POINTS = 20
DEFAULT_WINDOW = 50

AlgorithmFn = Callable[[list[DrawResult]], PredictionResult]


@dataclass
class BacktestResult:
    algorithm: str
    accuracy: float = 0.0
    avg_matches: float = 0.0
    best_match: int = 0
    worst_match: int = 0
    consistency: float = 0.0
    total_tests: int = 0
    match_scores: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def count_matches(predicted: list[int], actual: tuple[int, ...] | list[int]) -> int:
    return len(set(predicted) & set(actual))


def backtest(
    algorithm_fn: AlgorithmFn,
    name: str,
    history: list[DrawResult],
    window_size: int = DEFAULT_WINDOW,
) -> BacktestResult:
    """
    `history` is most-recent-first. Test points are the latest (up to 20)
    draws that have `window_size` strictly older draws; each is predicted
    from exactly those older draws. A raising algorithm scores 0 there.
    """
    chronological = list(reversed(history))
    n = len(chronological)
    start = max(window_size, n - MAX_TEST_POINTS)

    scores: list[int] = []
    for i in range(start, n):
        training = list(reversed(chronological[i - window_size:i]))
        actual = chronological[i]
        try:
            prediction = algorithm_fn(training)
            matches = count_matches(prediction.numbers, actual.winning_numbers)
        except Exception as exc:
            log.warning(f"[BACKTEST] {name} failed at test point {i}: {exc}")
            matches = 0
        scores.append(matches)

    if not scores:
        log.info(f"[BACKTEST] {name}: not enough history ({n} draws, window {window_size})")
        return BacktestResult(algorithm=name)

    arr = np.array(scores, dtype=float)
    avg = float(arr.mean())
    result = BacktestResult(
        algorithm=name,
        accuracy=avg / 5 * 100,
        avg_matches=avg,
        best_match=int(arr.max()),
        worst_match=int(arr.min()),
        consistency=float(arr.std()),
        total_tests=len(scores),
        match_scores=scores,
    )
    log.info(f"[BACKTEST] {name}: {result.accuracy:.1f}% over {result.total_tests} tests")
    return result


def backtest_catalog(
    algorithms: dict[str, AlgorithmFn],
    history: list[DrawResult],
    window_size: int = DEFAULT_WINDOW,
) -> list[BacktestResult]:
    """Backtest several algorithms, best accuracy first."""
    results = [backtest(fn, name, history, window_size) for name, fn in algorithms.items()]
    results.sort(key=lambda r: -r.accuracy)
    return results


def run_backtests(
    draw_name: str,
    algorithm: str | None = None,
    *,
    window_size: int = DEFAULT_WINDOW,
    limit: int = 300,
    cache: TTLCache | None = None,
    rng: random.Random | None = None,
) -> list[BacktestResult]:
    """Backtest one algorithm (or every enabled one plus the ensemble) on a draw's history."""
    history = load_history(draw_name, limit, cache)
    configs = load_algorithm_configs(cache)
    algorithms: dict[str, AlgorithmFn] = dict(build_algorithms(configs, rng=rng))
    try:
        algorithms[ENSEMBLE_KEY] = build_ensemble(configs, rng=rng)
    except ValueError:
        log.warning("No enabled ensemble member, ensemble not backtested")

    if algorithm is not None:
        key = resolve_algorithm_key(algorithm)
        if key not in algorithms:
            raise RequestValidationError(f"Algorithme inconnu: {algorithm}", reason="unknown_algorithm")
        algorithms = {key: algorithms[key]}

    log.info(f"[BACKTEST] {draw_name}: {len(algorithms)} algorithms over {len(history)} draws")
    return backtest_catalog(algorithms, history, window_size)
