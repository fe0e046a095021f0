"""
scripts/01_train_algorithms.py
Run one auto-tuning pass over every algorithm from its evaluated performance.
Run after 04_evaluate_predictions.py has filled algorithm_performance.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lotobonheur.pipeline.auto_tuner import train_algorithms
from lotobonheur.utils.logger import get_logger

log = get_logger("train_algorithms")


def main():
    parser = argparse.ArgumentParser(description="Auto-tune algorithm weights and parameters")
    parser.add_argument("--draw", default=None, help="Only use evaluations of this draw name")
    args = parser.parse_args()

    summary = train_algorithms(args.draw)

    for result in summary["results"]:
        flag = "updated" if result["config_updated"] else "kept"
        log.info(
            f"  {result['algorithm_name']:<20} {result['previous_weight']:.3f} → "
            f"{result['new_weight']:.3f} ({result['performance_improvement']:+.2f}%, {flag})"
        )
    for skipped in summary["skipped"]:
        log.info(f"  {skipped['algorithm']:<20} skipped ({skipped['evaluations']} evaluations)")

    log.info(f"Training date: {summary['training_date']} (use it with 03_rollback_config.py)")


if __name__ == "__main__":
    main()
