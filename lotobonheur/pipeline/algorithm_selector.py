"""
lotobonheur/pipeline/algorithm_selector.py
Rank algorithms by their evaluated track record for a draw name.
"""
from __future__ import annotations

from typing import Any

from lotobonheur.models.model_loader import load_algorithm_configs, resolve_algorithm_key
from lotobonheur.models.schemas import PerformanceRecord
from lotobonheur.pipeline.performance_evaluator import EXCELLENT_MATCHES
from lotobonheur.utils import supabase_client as db
from lotobonheur.utils.cache import TTLCache
from lotobonheur.utils.logger import get_logger

log = get_logger("pipeline.selector")

RECORD_LIMIT = 1000
ALTERNATIVES = 2
VOLUME_TARGET = 30


def composite_score(avg_accuracy: float, best_match: int, excellent: int, total: int, weight: float) -> float:
    accuracy = avg_accuracy / 100
    match = best_match / 5
    excellence = excellent / total if total else 0.0
    volume = min(1.0, total / VOLUME_TARGET)
    return (accuracy * 0.35 + match * 0.30 + excellence * 0.20 + volume * 0.15) * weight


def rank_algorithms(records: list[PerformanceRecord], weights: dict[str, float]) -> list[dict[str, Any]]:
    grouped: dict[str, list[PerformanceRecord]] = {}
    for record in records:
        name = resolve_algorithm_key(record.model_used) or record.model_used
        grouped.setdefault(name, []).append(record)

    ranking = []
    for name, group in grouped.items():
        total = len(group)
        avg_accuracy = sum(r.accuracy_score for r in group) / total
        best_match = max(r.matches_count for r in group)
        excellent = sum(1 for r in group if r.matches_count >= EXCELLENT_MATCHES)
        weight = weights.get(name, 1.0)
        ranking.append({
            "algorithm": name,
            "score": round(composite_score(avg_accuracy, best_match, excellent, total, weight), 6),
            "weight": weight,
            "metrics": {
                "avg_accuracy": round(avg_accuracy, 2),
                "total_predictions": total,
                "best_match": best_match,
                "excellent_predictions": excellent,
            },
        })
    ranking.sort(key=lambda r: (-r["score"], r["algorithm"]))
    return ranking


def select_best_algorithm(draw_name: str, *, cache: TTLCache | None = None) -> dict[str, Any]:
    """Primary recommendation plus two alternatives; global records when the draw has none."""
    rows = db.fetch_performance_records(draw_name=draw_name, limit=RECORD_LIMIT)
    using_global = False
    if not rows:
        log.info(f"No performance data for {draw_name}, using global records")
        rows = db.fetch_performance_records(limit=RECORD_LIMIT)
        using_global = True

    configs = load_algorithm_configs(cache)
    weights = {key: cfg.weight for key, cfg in configs.items() if cfg.is_enabled}
    ranking = rank_algorithms([PerformanceRecord.model_validate(r) for r in rows], weights)

    if not ranking:
        return {
            "success": False,
            "drawName": draw_name,
            "message": "Aucune donnée de performance disponible",
            "recommendation": None,
        }

    log.info(f"Best algorithm for {draw_name}: {ranking[0]['algorithm']} ({ranking[0]['score']:.3f})")
    return {
        "success": True,
        "drawName": draw_name,
        "recommendation": {
            "primary": ranking[0],
            "alternatives": ranking[1:1 + ALTERNATIVES],
        },
        "usingGlobalData": using_global,
        "totalAlgorithmsAnalyzed": len(ranking),
    }
