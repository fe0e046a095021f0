"""
lotobonheur/pipeline/prediction_generator.py
Prediction flow for one draw name:
1. Load history (and the paired draw's history) through the cache
2. Load algorithm configs
3. Run every enabled algorithm concurrently, dropping failures
4. Vote the ensemble from the member results
5. Rank by quality-adjusted score, explain the top prediction
"""
from __future__ import annotations

import asyncio
import random
from datetime import date
from typing import Any

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.explainer import explain_prediction
from lotobonheur.models.model_loader import build_algorithms, build_ensemble, load_algorithm_configs
from lotobonheur.models.statistical.frequency_analyzer import data_quality, freshness
from lotobonheur.models.types import DrawResult, PredictionResult
from lotobonheur.utils import supabase_client as db
from lotobonheur.utils.cache import TTLCache
from lotobonheur.utils.config import (
    HISTORY_LIMIT,
    LOW_QUALITY_THRESHOLD,
    MIN_DRAWS_FOR_PREDICTIONS,
    STALE_FRESHNESS_THRESHOLD,
)
from lotobonheur.utils.logger import get_logger

log = get_logger("pipeline.generator")


def load_history(draw_name: str, limit: int = HISTORY_LIMIT, cache: TTLCache | None = None) -> list[DrawResult]:
    """Most-recent-first draws for `draw_name`. UpstreamStoreError propagates."""
    if cache is None:
        rows = db.fetch_history(draw_name, limit)
    else:
        key = cache.build_key("history", {"draw_name": draw_name, "limit": limit})
        rows = cache.get_or_set(key, lambda: db.fetch_history(draw_name, limit))
    return [DrawResult.from_row(row) for row in rows]


async def run_algorithms(
    algorithms: dict[str, BaseAlgorithm],
    history: list[DrawResult],
) -> dict[str, PredictionResult]:
    """Run all algorithms in worker threads; keep the ones that returned."""
    keys = list(algorithms)
    outcomes = await asyncio.gather(
        *(asyncio.to_thread(algorithms[key].predict, history) for key in keys),
        return_exceptions=True,
    )
    results: dict[str, PredictionResult] = {}
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, Exception):
            log.error(f"{key} raised past its boundary: {outcome}")
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        results[key] = outcome
    return results


def quality_multiplier(quality: float, fresh: float) -> float:
    return 0.5 + quality * 0.3 + fresh * 0.2


def build_warning(history_size: int, quality: float, fresh: float) -> str | None:
    if history_size == 0:
        return "Aucune donnée historique - Prédictions générées en mode dégradé"
    warnings = []
    if history_size < MIN_DRAWS_FOR_PREDICTIONS:
        warnings.append(f"Données limitées ({history_size} tirages) - Prédictions avec confiance réduite")
    if quality < LOW_QUALITY_THRESHOLD:
        warnings.append(f"Qualité des données faible ({quality * 100:.0f}%) - Résultats moins fiables")
    if fresh < STALE_FRESHNESS_THRESHOLD:
        warnings.append("Données anciennes - Prédictions moins précises")
    return " | ".join(warnings) or None


async def generate_predictions(
    draw_name: str,
    *,
    cache: TTLCache | None = None,
    paired_draw_name: str | None = None,
    limit: int = HISTORY_LIMIT,
    explain: bool = True,
    today: date | None = None,
    rng: random.Random | None = None,
) -> dict[str, Any]:
    log.info(f"[PREDICT] {draw_name} (limit={limit}, paired={paired_draw_name})")

    history = load_history(draw_name, limit, cache)
    paired_history = load_history(paired_draw_name, limit, cache) if paired_draw_name else None
    configs = load_algorithm_configs(cache)

    algorithms = build_algorithms(configs, rng=rng, paired_history=paired_history)
    results = await run_algorithms(algorithms, history)

    predictions = list(results.values())
    try:
        ensemble = build_ensemble(configs, rng=rng, members=algorithms)
    except ValueError:
        log.warning("No enabled ensemble member, ensemble skipped")
    else:
        if len(history) < 5:
            predictions.append(ensemble.fallback())
        else:
            predictions.append(ensemble.combine(results))

    quality = data_quality(history, today)
    fresh = freshness(history, today)
    multiplier = quality_multiplier(quality, fresh)
    for prediction in predictions:
        prediction.score = round(prediction.score * multiplier, 6)
    predictions.sort(key=lambda p: -p.score)

    payload: dict[str, Any] = {
        "drawName": draw_name,
        "predictions": [p.to_dict() for p in predictions],
        "dataQuality": {
            "quality": round(quality, 4),
            "freshness": round(fresh, 4),
            "historySize": len(history),
            "multiplier": round(multiplier, 4),
        },
    }
    if explain and history and predictions:
        payload["explanations"] = [e.to_dict() for e in explain_prediction(predictions[0], history)]

    warning = build_warning(len(history), quality, fresh)
    if warning:
        payload["warning"] = warning
        log.warning(f"[PREDICT] {draw_name}: {warning}")

    log.info(f"[PREDICT] {draw_name}: {len(predictions)} predictions, top={predictions[0].algorithm if predictions else None}")
    return payload
