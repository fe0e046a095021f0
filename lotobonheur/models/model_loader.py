"""
lotobonheur/models/model_loader.py
Algorithm registry, persisted config loading and predictor construction.
"""
from __future__ import annotations

import random
from typing import Any

from pydantic import ValidationError

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.ensemble_predictor import EnsemblePredictor
from lotobonheur.models.ml.arima import Arima
from lotobonheur.models.ml.attention import Attention
from lotobonheur.models.ml.gradient_boosting import GradientBoosting
from lotobonheur.models.ml.markov_chain import MarkovChain
from lotobonheur.models.ml.trend_regression import TrendRegression
from lotobonheur.models.schemas import AlgorithmConfig, parse_parameters
from lotobonheur.models.statistical.bayesian_inference import BayesianInference
from lotobonheur.models.statistical.categorical_boost import CategoricalBoost
from lotobonheur.models.statistical.cross_draw import CrossDrawAnalysis
from lotobonheur.models.statistical.pair_sequence import PairSequence
from lotobonheur.models.statistical.variance_analysis import VarianceAnalysis
from lotobonheur.models.statistical.weighted_frequency import WeightedFrequency
from lotobonheur.models.types import DrawResult, ERROR_SUFFIX, INSUFFICIENT_DATA_SUFFIX
from lotobonheur.utils import supabase_client as db
from lotobonheur.utils.cache import TTLCache
from lotobonheur.utils.config import (
    CONFIG_CACHE_TTL_SECONDS,
    get_algorithm_defaults,
    get_default_config,
    get_ensemble_members,
)
from lotobonheur.utils.logger import get_logger

log = get_logger("model_loader")

ALGORITHM_CLASSES: dict[str, type[BaseAlgorithm]] = {
    cls.key: cls
    for cls in (
        WeightedFrequency,
        VarianceAnalysis,
        BayesianInference,
        TrendRegression,
        PairSequence,
        MarkovChain,
        CrossDrawAnalysis,
        GradientBoosting,
        CategoricalBoost,
        Attention,
        Arima,
    )
}

ENSEMBLE_KEY = "ensemble"


# ── Names ─────────────────────────────────────────────────────────

def _normalize(name: str) -> str:
    for suffix in (INSUFFICIENT_DATA_SUFFIX, ERROR_SUFFIX):
        if name.endswith(suffix):
            name = name[: -len(suffix)]
    return name.strip().casefold()


def resolve_algorithm_key(name: str | None) -> str | None:
    """
    Map a key, display name or legacy alias (as stored in `model_used`)
    to a registry key. Returns None for unknown names.
    """
    if not name:
        return None
    if name in ALGORITHM_CLASSES:
        return name
    wanted = _normalize(name)
    defaults = get_algorithm_defaults()
    for key, cls in ALGORITHM_CLASSES.items():
        aliases = defaults["algorithms"].get(key, {}).get("aliases", [])
        if wanted in {_normalize(a) for a in [key, cls.name, *aliases]}:
            return key
    ensemble = defaults.get("ensemble", {})
    if wanted == ENSEMBLE_KEY or wanted in {_normalize(a) for a in ensemble.get("aliases", [])} \
            or wanted.startswith("ensemble ("):
        return ENSEMBLE_KEY
    return None


# ── Configs ───────────────────────────────────────────────────────

def default_config(key: str) -> AlgorithmConfig:
    """Config for an algorithm with no stored row (Untrained)."""
    raw = get_default_config(key)
    return AlgorithmConfig(
        algorithm_name=key,
        weight=raw.get("weight", 1.0),
        parameters=parse_parameters({}, raw["parameters"]),
        is_enabled=raw.get("is_enabled", True),
        description=raw.get("description"),
        trained=False,
    )


def config_from_row(key: str, row: dict[str, Any]) -> AlgorithmConfig:
    """
    Stored row merged over the defaults. Parameters that fail validation
    are replaced by the defaults and logged.
    """
    base = default_config(key)
    try:
        params = parse_parameters(row.get("parameters") or {}, base.parameters.model_dump())
    except ValidationError as exc:
        log.warning(f"Invalid stored parameters for {key}, using defaults: {exc.error_count()} errors")
        params = base.parameters
    if not isinstance(params, type(base.parameters)):
        log.warning(f"Stored parameters for {key} are of kind {params.kind!r}, using defaults")
        params = base.parameters
    return AlgorithmConfig(
        algorithm_name=key,
        weight=row.get("weight") if row.get("weight") is not None else base.weight,
        parameters=params,
        is_enabled=row.get("is_enabled", True) is not False,
        description=row.get("description") or base.description,
        trained=True,
    )


def load_algorithm_configs(cache: TTLCache | None = None) -> dict[str, AlgorithmConfig]:
    """One config per registered algorithm: stored rows first, defaults for the rest."""
    if cache is not None:
        rows = cache.get_or_set("algorithm_config", db.fetch_algorithm_configs, ttl=CONFIG_CACHE_TTL_SECONDS)
    else:
        rows = db.fetch_algorithm_configs()

    configs: dict[str, AlgorithmConfig] = {}
    for row in rows:
        key = resolve_algorithm_key(row.get("algorithm_name"))
        if key is None or key == ENSEMBLE_KEY:
            log.warning(f"Ignoring config row for unknown algorithm {row.get('algorithm_name')!r}")
            continue
        configs[key] = config_from_row(key, row)

    for key in ALGORITHM_CLASSES:
        if key not in configs:
            configs[key] = default_config(key)
    return configs


# ── Construction ──────────────────────────────────────────────────

def build_algorithm(
    key: str,
    config: AlgorithmConfig | None = None,
    rng: random.Random | None = None,
    paired_history: list[DrawResult] | None = None,
) -> BaseAlgorithm:
    if key not in ALGORITHM_CLASSES:
        raise ValueError(f"Unknown algorithm: {key}")
    config = config or default_config(key)
    cls = ALGORITHM_CLASSES[key]
    if cls is CrossDrawAnalysis:
        return CrossDrawAnalysis(paired_history=paired_history, parameters=config.parameters, rng=rng)
    return cls(parameters=config.parameters, rng=rng)


def build_algorithms(
    configs: dict[str, AlgorithmConfig] | None = None,
    rng: random.Random | None = None,
    paired_history: list[DrawResult] | None = None,
) -> dict[str, BaseAlgorithm]:
    """Every enabled algorithm. The cross-draw one needs a paired history."""
    configs = configs or {key: default_config(key) for key in ALGORITHM_CLASSES}
    algorithms: dict[str, BaseAlgorithm] = {}
    for key in ALGORITHM_CLASSES:
        config = configs.get(key) or default_config(key)
        if not config.is_enabled:
            log.info(f"{key} disabled, skipping")
            continue
        if key == CrossDrawAnalysis.key and not paired_history:
            continue
        algorithms[key] = build_algorithm(key, config, rng=rng, paired_history=paired_history)
    return algorithms


def build_ensemble(
    configs: dict[str, AlgorithmConfig] | None = None,
    rng: random.Random | None = None,
    members: dict[str, BaseAlgorithm] | None = None,
) -> EnsemblePredictor:
    """
    Ensemble over the configured member list. Disabled members are left out;
    weights come from the configs.
    """
    configs = configs or {key: default_config(key) for key in ALGORITHM_CLASSES}
    if members is None:
        members = {
            key: build_algorithm(key, configs.get(key), rng=rng)
            for key in get_ensemble_members()
            if configs.get(key) is None or configs[key].is_enabled
        }
    else:
        members = {k: m for k, m in members.items() if k in get_ensemble_members()}
    weights = {key: configs[key].weight for key in members if key in configs}
    return EnsemblePredictor(members=members, weights=weights, rng=rng)
