"""tests/test_backtester.py"""
import random
from datetime import date, timedelta
from unittest.mock import patch

import pytest

from lotobonheur.models.types import DrawResult, PredictionResult
from lotobonheur.pipeline.backtester import BacktestResult, backtest, backtest_catalog, run_backtests
from lotobonheur.utils.errors import RequestValidationError

TODAY = date(2025, 3, 10)


def make_history(draws):
    return [DrawResult("Reveil", TODAY - timedelta(days=i), tuple(nums)) for i, nums in enumerate(draws)]


def fixed(numbers):
    def algorithm(history):
        return PredictionResult(list(numbers), 0.5, "Fixed", "statistical")
    return algorithm


class TestBacktest:
    def test_test_point_count(self):
        history = make_history([[1, 2, 3, 4, 5]] * 30)
        assert backtest(fixed([1, 2, 3, 4, 5]), "f", history, window_size=5).total_tests == 20
        assert backtest(fixed([1, 2, 3, 4, 5]), "f", history[:12], window_size=5).total_tests == 7

    def test_not_enough_history_yields_zeros(self):
        history = make_history([[1, 2, 3, 4, 5]] * 4)
        result = backtest(fixed([1, 2, 3, 4, 5]), "f", history, window_size=5)
        assert result == BacktestResult(algorithm="f")

    def test_no_look_ahead(self):
        history = make_history([[1, 2, 3, 4, 5]] * 40)
        seen = []

        def spy(training):
            seen.append(training)
            return PredictionResult([1, 2, 3, 4, 5], 0.5, "Spy", "statistical")

        backtest(spy, "spy", history, window_size=10)
        chronological = list(reversed(history))
        start = 40 - 20
        for offset, training in enumerate(seen):
            target = chronological[start + offset]
            assert len(training) == 10
            assert max(d.draw_date for d in training) < target.draw_date
            # training is handed over most-recent-first
            assert training[0].draw_date == target.draw_date - timedelta(days=1)

    def test_metrics(self):
        # alternate 5-match and 0-match test points
        history = make_history([[1, 2, 3, 4, 5] if i % 2 == 0 else [6, 7, 8, 9, 10] for i in range(30)])
        result = backtest(fixed([1, 2, 3, 4, 5]), "f", history, window_size=5)
        assert result.total_tests == 20
        assert result.avg_matches == pytest.approx(2.5)
        assert result.accuracy == pytest.approx(50.0)
        assert result.best_match == 5
        assert result.worst_match == 0
        assert result.consistency == pytest.approx(2.5)

    def test_exception_scores_zero(self):
        calls = {"n": 0}

        def flaky(training):
            calls["n"] += 1
            if calls["n"] % 2:
                raise ValueError("bad")
            return PredictionResult([1, 2, 3, 4, 5], 0.5, "Flaky", "statistical")

        history = make_history([[1, 2, 3, 4, 5]] * 30)
        result = backtest(flaky, "flaky", history, window_size=5)
        assert result.match_scores.count(0) == 10
        assert result.match_scores.count(5) == 10

    def test_catalog_sorted_by_accuracy(self):
        history = make_history([[1, 2, 3, 4, 5]] * 30)
        results = backtest_catalog(
            {"bad": fixed([50, 51, 52, 53, 54]), "good": fixed([1, 2, 3, 4, 5])},
            history,
            window_size=5,
        )
        assert [r.algorithm for r in results] == ["good", "bad"]
        assert results[0].to_dict()["accuracy"] == 100.0


class TestRunBacktests:
    def setup_method(self):
        rng = random.Random(5)
        self.rows = [
            {"draw_name": "Reveil", "draw_date": str(TODAY - timedelta(days=i)),
             "winning_numbers": rng.sample(range(1, 91), 5)}
            for i in range(40)
        ]

    @patch("lotobonheur.models.model_loader.db")
    @patch("lotobonheur.pipeline.prediction_generator.db")
    def test_single_algorithm_by_display_name(self, mock_db, mock_loader_db):
        mock_db.fetch_history.return_value = self.rows
        mock_loader_db.fetch_algorithm_configs.return_value = []

        results = run_backtests("Reveil", "Inférence Bayésienne", window_size=10)

        assert [r.algorithm for r in results] == ["bayesian"]
        assert results[0].total_tests == 20

    @patch("lotobonheur.models.model_loader.db")
    @patch("lotobonheur.pipeline.prediction_generator.db")
    def test_catalog_includes_ensemble(self, mock_db, mock_loader_db):
        mock_db.fetch_history.return_value = self.rows
        mock_loader_db.fetch_algorithm_configs.return_value = []

        results = run_backtests("Reveil", window_size=25)

        names = {r.algorithm for r in results}
        assert "ensemble" in names
        assert "cross_draw" not in names

    @patch("lotobonheur.models.model_loader.db")
    @patch("lotobonheur.pipeline.prediction_generator.db")
    def test_unknown_algorithm(self, mock_db, mock_loader_db):
        mock_db.fetch_history.return_value = self.rows
        mock_loader_db.fetch_algorithm_configs.return_value = []

        with pytest.raises(RequestValidationError) as exc:
            run_backtests("Reveil", "Crystal Ball")
        assert exc.value.reason == "unknown_algorithm"
