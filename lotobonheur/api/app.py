"""
lotobonheur/api/app.py
HTTP surface: prediction, pattern, backtest and selection endpoints, plus the
admin-only training, rollback and evaluation triggers.

    flask --app lotobonheur.api.app:create_app run
"""
from __future__ import annotations

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from lotobonheur.api.auth import require_admin
from lotobonheur.models.schemas import (
    BacktestRequest,
    BestAlgorithmRequest,
    EvaluateRequest,
    PatternRequest,
    PredictionRequest,
    RollbackRequest,
    TrainingRequest,
    parse_request,
)
from lotobonheur.models.statistical.pattern_detector import detect_patterns, predict_from_patterns
from lotobonheur.pipeline.algorithm_selector import select_best_algorithm
from lotobonheur.pipeline.auto_tuner import train_algorithms
from lotobonheur.pipeline.backtester import run_backtests
from lotobonheur.pipeline.config_rollback import rollback_training
from lotobonheur.pipeline.performance_evaluator import evaluate_predictions
from lotobonheur.pipeline.prediction_generator import generate_predictions, load_history
from lotobonheur.utils.cache import TTLCache
from lotobonheur.utils.errors import LotoBonheurError, UpstreamStoreError
from lotobonheur.utils.logger import get_logger

log = get_logger("api")


def _cache() -> TTLCache:
    return current_app.extensions["lotobonheur_cache"]


def _body(model):
    return parse_request(model, request.get_json(silent=True))


def create_app(cache: TTLCache | None = None) -> Flask:
    app = Flask(__name__)
    app.extensions["lotobonheur_cache"] = cache if cache is not None else TTLCache()

    # ── errors ────────────────────────────────────────────────────

    @app.errorhandler(LotoBonheurError)
    def handle_domain_error(exc: LotoBonheurError):
        if isinstance(exc, UpstreamStoreError):
            log.error(f"Store failure in {exc.operation}: {exc.detail}")
        else:
            log.warning(f"{request.path} → {exc.status}: {exc.message}")
        return jsonify(exc.to_payload()), exc.status

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        log.exception(f"Unhandled error on {request.path}: {exc}")
        return jsonify({"error": "Erreur interne du serveur"}), 500

    # ── public routes ─────────────────────────────────────────────

    @app.post("/api/predictions")
    async def predictions():
        body = _body(PredictionRequest)
        payload = await generate_predictions(
            body.draw_name,
            cache=_cache(),
            paired_draw_name=body.paired_draw_name,
            limit=body.analysis_depth,
            explain=body.explain,
        )
        return jsonify(payload)

    @app.post("/api/patterns")
    def patterns():
        body = _body(PatternRequest)
        history = load_history(body.draw_name, body.analysis_depth, _cache())
        found = detect_patterns(history)
        return jsonify({
            "drawName": body.draw_name,
            "patterns": [p.to_dict() for p in found],
            "suggestedNumbers": predict_from_patterns(found),
            "historySize": len(history),
        })

    @app.post("/api/backtests")
    def backtests():
        body = _body(BacktestRequest)
        results = run_backtests(
            body.draw_name,
            body.algorithm,
            window_size=body.window_size,
            limit=body.analysis_depth,
            cache=_cache(),
        )
        return jsonify({"drawName": body.draw_name, "results": [r.to_dict() for r in results]})

    @app.post("/api/best-algorithm")
    def best_algorithm():
        body = _body(BestAlgorithmRequest)
        return jsonify(select_best_algorithm(body.draw_name, cache=_cache()))

    # ── admin routes ──────────────────────────────────────────────

    @app.post("/api/admin/train")
    @require_admin
    def train():
        body = _body(TrainingRequest)
        return jsonify(train_algorithms(body.draw_name, cache=_cache()))

    @app.post("/api/admin/rollback")
    @require_admin
    def rollback():
        body = _body(RollbackRequest)
        summary = rollback_training(
            body.training_date,
            body.algorithm_name,
            confirm=body.confirm,
            cache=_cache(),
        )
        return jsonify(summary)

    @app.post("/api/admin/evaluate")
    @require_admin
    def evaluate():
        body = _body(EvaluateRequest)
        return jsonify(evaluate_predictions(body.draw_name))

    return app
