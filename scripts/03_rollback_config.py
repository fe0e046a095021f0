"""
scripts/03_rollback_config.py
Restore algorithm configs recorded before a training run. Irreversible.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lotobonheur.pipeline.config_rollback import rollback_training
from lotobonheur.utils.errors import RequestValidationError
from lotobonheur.utils.logger import get_logger

log = get_logger("rollback_config")


def main():
    parser = argparse.ArgumentParser(description="Roll back a training run")
    parser.add_argument("training_date", help="training_date of the run to undo")
    parser.add_argument("--algorithm", default=None, help="Only roll back this algorithm")
    parser.add_argument("--yes", action="store_true", help="Confirm the rollback")
    args = parser.parse_args()

    try:
        summary = rollback_training(args.training_date, args.algorithm, confirm=args.yes)
    except RequestValidationError as exc:
        log.error(f"{exc.message} ({exc.reason})")
        sys.exit(1)

    for item in summary["restored"]:
        log.info(f"  {item['algorithm']:<20} weight {item['replaced_weight']} → {item['weight']}")


if __name__ == "__main__":
    main()
