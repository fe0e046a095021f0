"""
lotobonheur/utils/supabase_client.py
Supabase client wrapper for the draw, performance, config and audit tables.
Every failure is re-raised as UpstreamStoreError.
"""
from __future__ import annotations

from functools import wraps
from typing import Any, Callable, TypeVar

from supabase import Client, create_client

from lotobonheur.utils.config import SUPABASE_KEY, SUPABASE_URL
from lotobonheur.utils.errors import LotoBonheurError, UpstreamStoreError
from lotobonheur.utils.logger import get_logger

log = get_logger("supabase")

_client: Client | None = None

F = TypeVar("F", bound=Callable[..., Any])


def get_client() -> Client:
    global _client
    if _client is None:
        if not SUPABASE_URL or not SUPABASE_KEY:
            raise UpstreamStoreError("connect", "SUPABASE_URL / SUPABASE_KEY not set")
        _client = create_client(SUPABASE_URL, SUPABASE_KEY)
    return _client


def _store_call(operation: str) -> Callable[[F], F]:
    """Log and wrap any client failure as UpstreamStoreError."""
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except LotoBonheurError:
                raise
            except Exception as exc:
                log.error(f"[{operation}] store call failed: {exc}")
                raise UpstreamStoreError(operation, str(exc)) from exc
        return wrapper  # type: ignore[return-value]
    return decorator


# ── draw_results ──────────────────────────────────────────────────

@_store_call("fetch_history")
def fetch_history(draw_name: str, limit: int = 300) -> list[dict]:
    """Draws for one schedule slot, most recent first."""
    db = get_client()
    resp = (
        db.table("draw_results")
        .select("id, draw_name, draw_date, winning_numbers, machine_numbers")
        .eq("draw_name", draw_name)
        .order("draw_date", desc=True)
        .limit(limit)
        .execute()
    )
    return resp.data or []


@_store_call("fetch_draw_results")
def fetch_draw_results(draw_name: str | None = None, limit: int = 1000) -> list[dict]:
    db = get_client()
    q = (
        db.table("draw_results")
        .select("id, draw_name, draw_date, winning_numbers")
        .order("draw_date", desc=True)
        .limit(limit)
    )
    if draw_name:
        q = q.eq("draw_name", draw_name)
    resp = q.execute()
    return resp.data or []


# ── predictions ───────────────────────────────────────────────────

@_store_call("fetch_predictions_until")
def fetch_predictions_until(draw_name: str, draw_date: str) -> list[dict]:
    """Stored predictions for a draw made on or before `draw_date`."""
    db = get_client()
    resp = (
        db.table("predictions")
        .select("id, draw_name, prediction_date, predicted_numbers, model_used, confidence_score, execution_time")
        .eq("draw_name", draw_name)
        .lte("prediction_date", draw_date)
        .order("prediction_date", desc=True)
        .execute()
    )
    return resp.data or []


# ── algorithm_performance ─────────────────────────────────────────

@_store_call("fetch_performance_records")
def fetch_performance_records(
    model_used: str | None = None,
    draw_name: str | None = None,
    limit: int = 50,
) -> list[dict]:
    """Evaluated predictions, most recent first."""
    db = get_client()
    q = (
        db.table("algorithm_performance")
        .select("*")
        .order("created_at", desc=True)
        .limit(limit)
    )
    if model_used:
        q = q.eq("model_used", model_used)
    if draw_name:
        q = q.eq("draw_name", draw_name)
    resp = q.execute()
    return resp.data or []


@_store_call("upsert_performance_record")
def upsert_performance_record(record: dict[str, Any]) -> dict[str, Any]:
    db = get_client()
    resp = (
        db.table("algorithm_performance")
        .upsert(record, on_conflict="draw_name,model_used,prediction_date,draw_date")
        .execute()
    )
    return resp.data[0] if resp.data else {}


# ── algorithm_config ──────────────────────────────────────────────

@_store_call("fetch_algorithm_configs")
def fetch_algorithm_configs(enabled_only: bool = False) -> list[dict]:
    db = get_client()
    q = (
        db.table("algorithm_config")
        .select("id, algorithm_name, weight, parameters, is_enabled, description")
        .order("algorithm_name")
    )
    if enabled_only:
        q = q.eq("is_enabled", True)
    resp = q.execute()
    return resp.data or []


@_store_call("upsert_algorithm_config")
def upsert_algorithm_config(algorithm_name: str, weight: float, parameters: dict[str, Any]) -> dict[str, Any]:
    db = get_client()
    resp = (
        db.table("algorithm_config")
        .upsert(
            {"algorithm_name": algorithm_name, "weight": weight, "parameters": parameters},
            on_conflict="algorithm_name",
        )
        .execute()
    )
    return resp.data[0] if resp.data else {}


# ── algorithm_training_history ────────────────────────────────────

@_store_call("insert_training_history")
def insert_training_history(entries: list[dict[str, Any]]) -> list[dict]:
    if not entries:
        return []
    db = get_client()
    resp = db.table("algorithm_training_history").insert(entries).execute()
    return resp.data or []


@_store_call("fetch_training_history")
def fetch_training_history(
    training_date: str | None = None,
    algorithm_name: str | None = None,
    limit: int = 100,
) -> list[dict]:
    db = get_client()
    q = (
        db.table("algorithm_training_history")
        .select("*")
        .order("training_date", desc=True)
        .limit(limit)
    )
    if training_date:
        q = q.eq("training_date", training_date)
    if algorithm_name:
        q = q.eq("algorithm_name", algorithm_name)
    resp = q.execute()
    return resp.data or []


# ── auth / user_roles ─────────────────────────────────────────────

def get_user_for_token(token: str) -> dict | None:
    """Resolve a bearer token to {id, email}. None when the token is rejected."""
    db = get_client()
    try:
        resp = db.auth.get_user(token)
    except Exception as exc:
        log.warning(f"Token rejected: {exc}")
        return None
    user = getattr(resp, "user", None)
    if user is None:
        return None
    return {"id": user.id, "email": getattr(user, "email", None)}


@_store_call("user_has_role")
def user_has_role(user_id: str, role: str) -> bool:
    db = get_client()
    resp = (
        db.table("user_roles")
        .select("role")
        .eq("user_id", user_id)
        .eq("role", role)
        .limit(1)
        .execute()
    )
    return bool(resp.data)
