"""
lotobonheur/pipeline/performance_evaluator.py
Score stored predictions against realized draws and record the results
in algorithm_performance.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from lotobonheur.models.types import is_valid_pick
from lotobonheur.utils import supabase_client as db
from lotobonheur.utils.config import PICK_COUNT
from lotobonheur.utils.logger import get_logger

log = get_logger("pipeline.evaluator")

MAX_EVALUATIONS_PER_RUN = 1000
EXCELLENT_MATCHES = 3


def score_prediction(predicted: list[int], actual: list[int], expected: int = PICK_COUNT) -> dict[str, float]:
    """Matches, accuracy (0-100), precision, recall and F1 of one prediction."""
    if not predicted or not actual:
        return {"matches": 0, "accuracy": 0.0, "precision": 0.0, "recall": 0.0, "f1": 0.0}
    matches = len(set(predicted) & set(actual))
    precision = matches / len(predicted)
    recall = matches / len(actual)
    f1 = 2 * precision * recall / (precision + recall) if precision > 0 and recall > 0 else 0.0
    return {
        "matches": matches,
        "accuracy": matches / expected * 100,
        "precision": precision,
        "recall": recall,
        "f1": f1,
    }


def evaluate_predictions(draw_name: str | None = None, now: datetime | None = None) -> dict[str, Any]:
    """
    For every stored draw, score each prediction made on or before its date
    and upsert one algorithm_performance row per (prediction, draw).
    """
    created_at = (now or datetime.now(timezone.utc)).isoformat()
    log.info(f"[EVALUATE] {draw_name or 'all draws'}")

    evaluated = 0
    invalid = 0
    stats: dict[str, dict[str, float]] = {}

    for draw in db.fetch_draw_results(draw_name):
        if evaluated >= MAX_EVALUATIONS_PER_RUN:
            break
        winning = draw.get("winning_numbers") or []
        if not is_valid_pick(winning):
            log.error(f"Invalid winning numbers for {draw.get('draw_name')} {draw.get('draw_date')}: {winning}")
            invalid += 1
            continue

        for prediction in db.fetch_predictions_until(draw["draw_name"], draw["draw_date"]):
            if evaluated >= MAX_EVALUATIONS_PER_RUN:
                log.warning(f"[EVALUATE] Limit of {MAX_EVALUATIONS_PER_RUN} evaluations reached")
                break
            predicted = prediction.get("predicted_numbers") or []
            if not is_valid_pick(predicted):
                invalid += 1
                continue

            score = score_prediction(predicted, winning)
            model = prediction.get("model_used") or "unknown"
            db.upsert_performance_record({
                "draw_name": draw["draw_name"],
                "model_used": model,
                "prediction_date": prediction.get("prediction_date"),
                "draw_date": draw["draw_date"],
                "predicted_numbers": predicted,
                "winning_numbers": winning,
                "matches_count": score["matches"],
                "accuracy_score": score["accuracy"],
                "confidence_score": prediction.get("confidence_score") or score["accuracy"] / 100,
                "precision_score": score["precision"],
                "recall_score": score["recall"],
                "f1_score": score["f1"],
                "execution_time": prediction.get("execution_time"),
                "created_at": created_at,
            })
            evaluated += 1

            algo = stats.setdefault(model, {"evaluated": 0, "best_match": 0, "total_accuracy": 0.0, "excellent": 0})
            algo["evaluated"] += 1
            algo["best_match"] = max(algo["best_match"], score["matches"])
            algo["total_accuracy"] += score["accuracy"]
            if score["matches"] >= EXCELLENT_MATCHES:
                algo["excellent"] += 1

    summary = {
        model: {
            "evaluated": s["evaluated"],
            "best_match": s["best_match"],
            "excellent": s["excellent"],
            "avg_accuracy": round(s["total_accuracy"] / s["evaluated"], 2),
        }
        for model, s in stats.items()
    }
    log.info(f"[EVALUATE] {evaluated} evaluations, {invalid} invalid rows skipped")
    return {"success": True, "evaluated": evaluated, "invalid": invalid, "algorithms": summary}
