"""tests/test_patterns.py"""
from datetime import date, timedelta

import pytest

from lotobonheur.models.explainer import explain_number, explain_prediction
from lotobonheur.models.statistical.pattern_detector import (
    Pattern,
    detect_cyclic_patterns,
    detect_hot_cold_patterns,
    detect_pair_patterns,
    detect_patterns,
    predict_from_patterns,
)
from lotobonheur.models.types import DrawResult, PredictionResult

TODAY = date(2025, 3, 10)


def make_history(draws):
    return [DrawResult("Reveil", TODAY - timedelta(days=i), tuple(nums)) for i, nums in enumerate(draws)]


def filler(i):
    """Five numbers from 41..90 that rotate with i, never touching 1..40."""
    base = 41 + (i * 5) % 50
    return [41 + (base - 41 + k) % 50 for k in range(5)]


class TestPairPatterns:
    def test_pair_needs_three_occurrences(self):
        history = make_history([[1, 2, 50, 60, 70], [1, 2, 51, 61, 71], [1, 2, 52, 62, 72], [3, 4, 53, 63, 73]])
        patterns = detect_pair_patterns(history)
        pairs = {tuple(p.numbers): p for p in patterns}
        assert (1, 2) in pairs
        assert (3, 4) not in pairs
        assert pairs[(1, 2)].frequency == pytest.approx(3 / 4)
        assert pairs[(1, 2)].confidence == pytest.approx(0.3)
        assert pairs[(1, 2)].last_seen == 0


class TestCyclicPatterns:
    def test_regular_gaps_detected(self):
        # 7 at indices 0, 3, 6, 9
        draws = [[7] + filler(i)[:4] if i % 3 == 0 else filler(i) for i in range(10)]
        patterns = [p for p in detect_cyclic_patterns(make_history(draws)) if p.numbers == [7]]
        assert len(patterns) == 1
        assert patterns[0].type == "cycle"
        assert patterns[0].frequency == pytest.approx(1 / 3)
        assert patterns[0].confidence == 0.85

    def test_irregular_gaps_ignored(self):
        # 7 at indices 0, 1, 9: gaps 1 and 8, variance 12.25 > 0.5 * 4.5
        draws = [[7] + filler(i)[:4] if i in (0, 1, 9) else filler(i) for i in range(10)]
        patterns = detect_cyclic_patterns(make_history(draws))
        assert not [p for p in patterns if p.numbers == [7]]


class TestHotColdPatterns:
    def test_hot_number(self):
        draws = [[7] + filler(i)[:4] for i in range(10)]
        patterns = detect_hot_cold_patterns(make_history(draws))
        hot = [p for p in patterns if p.type == "hot" and p.numbers == [7]]
        assert hot and hot[0].confidence == 1.0

    def test_cold_number(self):
        # 3 last seen 25 draws ago
        draws = [filler(i) for i in range(30)]
        draws[25] = [3] + draws[25][:4]
        patterns = detect_hot_cold_patterns(make_history(draws))
        cold = {p.numbers[0]: p for p in patterns if p.type == "cold"}
        assert cold[3].confidence == 0.6
        assert cold[3].last_seen == 25

    def test_never_seen_is_not_cold(self):
        draws = [filler(i) for i in range(25)]
        cold = {p.numbers[0] for p in detect_hot_cold_patterns(make_history(draws)) if p.type == "cold"}
        # 1..40 never appear; 41..90 all reappear within 10 draws
        assert not cold


class TestDetectPatterns:
    def test_capped_and_sorted(self):
        draws = [[1, 2, 3, 4, 5]] * 12 + [filler(i) for i in range(20)]
        patterns = detect_patterns(make_history(draws))
        assert len(patterns) <= 10
        confidences = [p.confidence for p in patterns]
        assert confidences == sorted(confidences, reverse=True)

    def test_empty_history(self):
        assert detect_patterns([]) == []

    def test_predict_from_patterns(self):
        patterns = [
            Pattern("pair", [10, 20], 0.5, 0.9, 0, ""),
            Pattern("hot", [30], 0.4, 0.8, 0, ""),
            Pattern("cycle", [40], 0.2, 0.5, 1, ""),
            Pattern("cold", [50], 0.1, 0.6, 30, ""),
            Pattern("hot", [60], 0.05, 0.3, 0, ""),
            Pattern("hot", [70], 0.01, 0.3, 0, ""),
        ]
        assert predict_from_patterns(patterns) == [10, 20, 30, 40, 50]

    def test_pattern_to_dict(self):
        p = Pattern("pair", [1, 2], 0.5, 0.4, 3, "Paire 1-2 (5x)")
        assert p.to_dict()["type"] == "pair"
        assert p.to_dict()["numbers"] == [1, 2]


class TestExplainer:
    def setup_method(self):
        self.history = make_history([[1] + filler(i)[:4] for i in range(20)])

    def test_frequent_recent_number(self):
        exp = explain_number(1, self.history)
        assert exp.frequency == 1.0
        assert exp.last_seen == 0
        assert exp.trend == "stable"
        assert exp.reasons == ["Fréquence élevée (100.0%)", "Vu récemment (0 tirages)", "Chaud"]
        assert exp.weight == pytest.approx(1.0)

    def test_never_seen_number(self):
        exp = explain_number(2, self.history)
        assert exp.last_seen is None
        assert exp.weight == 0.0
        assert exp.reasons == []

    def test_rising_trend(self):
        history = make_history([[2] + filler(i)[:4] for i in range(10)] + [filler(i) for i in range(10)])
        assert "Tendance à la hausse" in explain_number(2, history).reasons

    def test_explain_prediction_covers_each_number(self):
        prediction = PredictionResult([1, 2, 3, 4, 5], 0.5, "x", "statistical")
        explanations = explain_prediction(prediction, self.history)
        assert [e.number for e in explanations] == [1, 2, 3, 4, 5]
