"""
scripts/02_backtest.py
Backtest the algorithm catalog on one draw's stored history.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lotobonheur.pipeline.backtester import DEFAULT_WINDOW, run_backtests
from lotobonheur.utils.logger import get_logger

log = get_logger("backtest")


def main():
    parser = argparse.ArgumentParser(description="Backtest prediction algorithms")
    parser.add_argument("--draw", required=True, help="Draw name, e.g. 'Reveil'")
    parser.add_argument("--algorithm", default=None, help="Single algorithm (default: all)")
    parser.add_argument("--window", type=int, default=DEFAULT_WINDOW)
    parser.add_argument("--limit", type=int, default=300, help="History depth")
    args = parser.parse_args()

    results = run_backtests(args.draw, args.algorithm, window_size=args.window, limit=args.limit)

    log.info(f"\n{'='*60}\nBacktest {args.draw} (window {args.window})\n{'='*60}")
    for r in results:
        log.info(
            f"  {r.algorithm:<20} acc={r.accuracy:5.1f}%  avg={r.avg_matches:.2f}  "
            f"best={r.best_match} worst={r.worst_match}  σ={r.consistency:.2f}  n={r.total_tests}"
        )


if __name__ == "__main__":
    main()
