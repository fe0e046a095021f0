"""
lotobonheur/utils/logger.py
Loggers live under one "lotobonheur" parent: the parent owns the Rich console
handler and a single rotating lotobonheur.log, children only carry a name.
"""
import logging
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler

from lotobonheur.utils.config import LOG_BACKUP_COUNT, LOG_DIR, LOG_LEVEL, LOG_MAX_BYTES

ROOT_LOGGER = "lotobonheur"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if root.handlers:
        return root

    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root.propagate = False
    root.addHandler(RichHandler(rich_tracebacks=True, show_path=False))

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        LOG_DIR / f"{ROOT_LOGGER}.log",
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    root.addHandler(file_handler)
    return root


def get_logger(name: str = "") -> logging.Logger:
    """`get_logger("pipeline.tuner")` → the "lotobonheur.pipeline.tuner" logger."""
    root = _root()
    return root.getChild(name) if name else root
