"""
lotobonheur/utils/config.py
Load env vars and the algorithm defaults JSON file.
"""
import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = ROOT / "config"
ALGORITHM_DEFAULTS_FILE = "algorithm_defaults.json"

# ── Supabase ──────────────────────────────────────────────────────
# Read lazily by get_client(); an unset value only fails on first store access.
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")

# ── Game ──────────────────────────────────────────────────────────
NUMBER_RANGE: tuple[int, int] = (1, 90)
PICK_COUNT: int = 5

# ── Logging ───────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR: Path = Path(os.getenv("LOG_DIR", str(ROOT / "logs")))
LOG_MAX_BYTES: int = 10 * 1024 * 1024
LOG_BACKUP_COUNT: int = 5

# ── Prediction endpoint ───────────────────────────────────────────
HISTORY_LIMIT: int = int(os.getenv("HISTORY_LIMIT", "300"))
MIN_DRAWS_FOR_PREDICTIONS: int = 20
LOW_QUALITY_THRESHOLD: float = 0.5
STALE_FRESHNESS_THRESHOLD: float = 0.5

# ── Cache ─────────────────────────────────────────────────────────
CACHE_MAX_ENTRIES: int = int(os.getenv("CACHE_MAX_ENTRIES", "100"))
CACHE_TTL_SECONDS: float = float(os.getenv("CACHE_TTL_SECONDS", "600"))
CACHE_SWEEP_SECONDS: float = float(os.getenv("CACHE_SWEEP_SECONDS", "60"))
CONFIG_CACHE_TTL_SECONDS: float = float(os.getenv("CONFIG_CACHE_TTL_SECONDS", "300"))

# ── Training ──────────────────────────────────────────────────────
WEIGHT_MIN: float = 0.05
WEIGHT_MAX: float = 2.0
MIN_EVALUATIONS: int = 5
PERFORMANCE_LIMIT: int = int(os.getenv("PERFORMANCE_LIMIT", "50"))

_defaults_cache: dict[str, Any] = {}


def get_algorithm_defaults() -> dict[str, Any]:
    """Load and cache the per-algorithm default weights and parameters."""
    if _defaults_cache:
        return _defaults_cache
    path = CONFIG_DIR / ALGORITHM_DEFAULTS_FILE
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        config = json.load(f)
    _defaults_cache.update(config)
    return _defaults_cache


def get_default_config(algorithm_key: str) -> dict[str, Any]:
    """Return the default {weight, parameters, is_enabled} row for one algorithm."""
    algorithms = get_algorithm_defaults()["algorithms"]
    if algorithm_key not in algorithms:
        raise ValueError(f"Unknown algorithm: {algorithm_key}")
    return algorithms[algorithm_key]


def get_ensemble_members() -> list[str]:
    return list(get_algorithm_defaults()["ensemble"]["members"])
