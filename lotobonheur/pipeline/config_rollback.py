"""
lotobonheur/pipeline/config_rollback.py
Restore algorithm configs to the state recorded before a training run.
"""
from __future__ import annotations

from typing import Any

from lotobonheur.utils import supabase_client as db
from lotobonheur.utils.cache import TTLCache
from lotobonheur.utils.errors import RequestValidationError
from lotobonheur.utils.logger import get_logger

log = get_logger("pipeline.rollback")


def rollback_training(
    training_date: str,
    algorithm_name: str | None = None,
    *,
    confirm: bool = False,
    cache: TTLCache | None = None,
) -> dict[str, Any]:
    """
    Write back `previous_weight` / `previous_parameters` of every history
    entry of `training_date` (optionally one algorithm only). Irreversible,
    so `confirm` must be True.
    """
    if not confirm:
        raise RequestValidationError(
            "La restauration doit être confirmée explicitement",
            reason="confirmation_required",
        )

    entries = db.fetch_training_history(training_date=training_date, algorithm_name=algorithm_name)
    if not entries:
        raise RequestValidationError(
            f"Aucun entraînement trouvé pour {training_date}",
            reason="training_not_found",
        )

    restored = []
    for entry in entries:
        name = entry["algorithm_name"]
        db.upsert_algorithm_config(name, entry["previous_weight"], entry["previous_parameters"])
        restored.append({
            "algorithm": name,
            "weight": entry["previous_weight"],
            "parameters": entry["previous_parameters"],
            "replaced_weight": entry.get("new_weight"),
        })
        log.warning(f"[ROLLBACK] {name} restored to weight {entry['previous_weight']} from {training_date}")

    if cache is not None:
        cache.delete("algorithm_config")

    return {"success": True, "training_date": training_date, "restored": restored}
