"""
scripts/04_evaluate_predictions.py
Score stored predictions against the draws that followed them.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lotobonheur.pipeline.performance_evaluator import evaluate_predictions
from lotobonheur.utils.logger import get_logger

log = get_logger("evaluate_predictions")


def main():
    parser = argparse.ArgumentParser(description="Evaluate stored predictions")
    parser.add_argument("--draw", default=None, help="Only this draw name (default: all)")
    args = parser.parse_args()

    summary = evaluate_predictions(args.draw)
    for model, stats in summary["algorithms"].items():
        log.info(
            f"  {model:<30} n={stats['evaluated']}  avg={stats['avg_accuracy']}%  "
            f"best={stats['best_match']}  ≥3={stats['excellent']}"
        )
    log.info("Evaluation complete. Next: run 01_train_algorithms.py")


if __name__ == "__main__":
    main()
