"""
lotobonheur/pipeline/auto_tuner.py
Training loop: adjust each algorithm's weight and hyperparameters from its
evaluated performance, persist meaningful changes, record an audit entry.

Concurrent runs are not serialized; two runs started together may both
read the same configs and the last upsert wins.
"""
from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

import numpy as np

from lotobonheur.models.model_loader import ENSEMBLE_KEY, load_algorithm_configs, resolve_algorithm_key
from lotobonheur.models.schemas import ParametersBase, PerformanceRecord, TrainingHistoryEntry
from lotobonheur.utils import supabase_client as db
from lotobonheur.utils.cache import TTLCache
from lotobonheur.utils.config import MIN_EVALUATIONS, PERFORMANCE_LIMIT, WEIGHT_MAX, WEIGHT_MIN
from lotobonheur.utils.logger import get_logger

log = get_logger("pipeline.tuner")

RECENCY_DECAY = 0.95
MAX_WEIGHT_CHANGE = 0.3
MOMENTUM = 0.3
MIN_CHANGE_PERCENT = 1.0

HIGH_SCORE = 0.7
LOW_SCORE = 0.4
STABLE_VARIANCE = 0.01
UNSTABLE_VARIANCE = 0.05
INCREASE = 1.15
DECREASE = 0.85
REGULARIZATION_STEP = 0.1
MIN_LEARNING_STEP = 0.005

FETCH_LIMIT = 1000


@dataclass
class TuningMetrics:
    evaluations: int
    weighted_accuracy: float
    weighted_f1: float
    weighted_overall: float
    composite_score: float
    accuracy_variance: float
    stability_penalty: float
    adjustment: float

    def to_dict(self) -> dict[str, Any]:
        return {k: round(v, 6) if isinstance(v, float) else v for k, v in asdict(self).items()}


def compute_metrics(records: list[PerformanceRecord]) -> TuningMetrics:
    """`records` oldest first; the newest weighs 1, the one before 0.95, ..."""
    n = len(records)
    weights = np.array([RECENCY_DECAY ** (n - 1 - i) for i in range(n)])
    accuracy = np.array([r.accuracy for r in records])
    f1 = np.array([r.f1_score or 0.0 for r in records])
    overall = np.array([
        r.overall_score if r.overall_score is not None else (a + f) / 2
        for r, a, f in zip(records, accuracy, f1)
    ])

    total = weights.sum()
    w_acc = float((weights * accuracy).sum() / total)
    w_f1 = float((weights * f1).sum() / total)
    w_overall = float((weights * overall).sum() / total)
    composite = 0.4 * w_acc + 0.4 * w_f1 + 0.2 * w_overall

    variance = float(accuracy.var())
    penalty = min(0.2, variance * 5)
    adjustment = (composite - 0.5) * 0.4 * (1 - penalty)
    adjustment = max(-MAX_WEIGHT_CHANGE, min(MAX_WEIGHT_CHANGE, adjustment))

    return TuningMetrics(
        evaluations=n,
        weighted_accuracy=w_acc,
        weighted_f1=w_f1,
        weighted_overall=w_overall,
        composite_score=composite,
        accuracy_variance=variance,
        stability_penalty=penalty,
        adjustment=adjustment,
    )


def adjust_weight(current: float, adjustment: float) -> float:
    """Momentum blend of the current and adjusted weight, clamped."""
    new_weight = current * MOMENTUM + current * (1 + adjustment) * (1 - MOMENTUM)
    return round(max(WEIGHT_MIN, min(WEIGHT_MAX, new_weight)), 6)


def adjust_parameters(params: ParametersBase, composite: float, variance: float) -> ParametersBase:
    """
    High and stable: learning-rate-like and capacity-like up by 15%. The
    learning-rate-like value grows by at least MIN_LEARNING_STEP so a zero
    rate can still rise; capacity is rounded up, so it grows by at least one.
    Poor or unstable: both down by 15% (capacity rounded down) and
    regularization up by 0.1.
    Everything stays inside the family's bounds.
    """
    family = type(params)
    data = params.model_dump()
    lr_field, cap_field = family.LEARNING_FIELD, family.CAPACITY_FIELD

    if composite > HIGH_SCORE and variance < STABLE_VARIANCE:
        raised = max(data[lr_field] * INCREASE, data[lr_field] + MIN_LEARNING_STEP)
        data[lr_field] = round(family.clamp(lr_field, raised), 6)
        grown = math.ceil(round(data[cap_field] * INCREASE, 6))
        data[cap_field] = int(family.clamp(cap_field, grown))
    elif composite < LOW_SCORE or variance > UNSTABLE_VARIANCE:
        data[lr_field] = round(family.clamp(lr_field, data[lr_field] * DECREASE), 6)
        shrunk = math.floor(round(data[cap_field] * DECREASE, 6))
        data[cap_field] = int(family.clamp(cap_field, shrunk))
        data["regularization"] = round(
            family.clamp("regularization", data["regularization"] + REGULARIZATION_STEP), 6
        )
    return family(**data)


def group_records(rows: list[dict]) -> dict[str, list[PerformanceRecord]]:
    """Rows (most recent first) grouped by algorithm key, each list oldest first."""
    grouped: dict[str, list[PerformanceRecord]] = defaultdict(list)
    for row in rows:
        key = resolve_algorithm_key(row.get("model_used"))
        if key is None or key == ENSEMBLE_KEY:
            continue
        if len(grouped[key]) < PERFORMANCE_LIMIT:
            grouped[key].append(PerformanceRecord.model_validate(row))
    return {key: list(reversed(records)) for key, records in grouped.items()}


def train_algorithms(
    draw_name: str | None = None,
    *,
    cache: TTLCache | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    One training run over every configured algorithm. Returns a summary with
    the trained and skipped algorithms and the shared training date.
    """
    training_date = (now or datetime.now(timezone.utc)).isoformat()
    log.info(f"[TRAIN] Starting run {training_date} (draw={draw_name or 'all'})")

    configs = load_algorithm_configs()
    records_by_key = group_records(db.fetch_performance_records(draw_name=draw_name, limit=FETCH_LIMIT))

    entries: list[TrainingHistoryEntry] = []
    skipped: list[dict[str, Any]] = []
    updated = 0

    for key, config in configs.items():
        records = records_by_key.get(key, [])
        if len(records) < MIN_EVALUATIONS:
            log.info(f"[TRAIN] {key}: {len(records)} evaluations < {MIN_EVALUATIONS}, skipped")
            skipped.append({"algorithm": key, "evaluations": len(records), "reason": "insufficient_data"})
            continue

        metrics = compute_metrics(records)
        new_weight = adjust_weight(config.weight, metrics.adjustment)
        new_params = adjust_parameters(config.parameters, metrics.composite_score, metrics.accuracy_variance)
        improvement = (new_weight - config.weight) / max(config.weight, 0.01) * 100

        config_updated = abs(improvement) > MIN_CHANGE_PERCENT
        if config_updated:
            db.upsert_algorithm_config(key, new_weight, new_params.model_dump())
            updated += 1
            log.info(f"[TRAIN] {key}: weight {config.weight:.3f} → {new_weight:.3f} ({improvement:+.1f}%)")
        else:
            log.info(f"[TRAIN] {key}: change {improvement:+.2f}% below threshold, config kept")

        entries.append(TrainingHistoryEntry(
            algorithm_name=key,
            training_date=training_date,
            previous_weight=config.weight,
            new_weight=new_weight,
            previous_parameters=config.parameters.model_dump(),
            new_parameters=new_params.model_dump(),
            performance_improvement=round(improvement, 4),
            training_metrics=metrics.to_dict(),
            config_updated=config_updated,
        ))

    db.insert_training_history([e.model_dump() for e in entries])
    if cache is not None:
        cache.delete("algorithm_config")

    log.info(f"[TRAIN] Done: {len(entries)} trained, {updated} updated, {len(skipped)} skipped")
    return {
        "success": True,
        "training_date": training_date,
        "trained": len(entries),
        "updated": updated,
        "skipped": skipped,
        "results": [e.model_dump() for e in entries],
    }
