"""tests/test_algorithms.py"""
import random
from datetime import date, timedelta

import numpy as np
import pytest

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.ml.arima import Arima
from lotobonheur.models.ml.attention import Attention
from lotobonheur.models.ml.gradient_boosting import GradientBoosting
from lotobonheur.models.ml.markov_chain import MarkovChain
from lotobonheur.models.ml.trend_regression import TrendRegression, fit_line
from lotobonheur.models.model_loader import ALGORITHM_CLASSES, build_algorithm, build_algorithms
from lotobonheur.models.schemas import BoostingParameters, SequenceParameters, StatisticalParameters
from lotobonheur.models.statistical.bayesian_inference import BayesianInference
from lotobonheur.models.statistical.cross_draw import CrossDrawAnalysis, analyze_cross_draw_correlation
from lotobonheur.models.statistical.pair_sequence import PairSequence
from lotobonheur.models.statistical.variance_analysis import VarianceAnalysis
from lotobonheur.models.statistical.weighted_frequency import WeightedFrequency
from lotobonheur.models.types import FALLBACK_FACTORS, DrawResult, PredictionResult, is_valid_pick

TODAY = date(2025, 3, 10)


def make_history(draws, name="Reveil"):
    return [DrawResult(name, TODAY - timedelta(days=i), tuple(nums)) for i, nums in enumerate(draws)]


def random_history(n, seed=0, name="Reveil"):
    rng = random.Random(seed)
    return make_history([rng.sample(range(1, 91), 5) for _ in range(n)], name)


IDENTICAL = make_history([[1, 2, 3, 4, 5]] * 20)


class TestEveryAlgorithm:
    def setup_method(self):
        self.history = random_history(60, seed=1)
        self.paired = random_history(60, seed=2, name="Midi")
        self.rng = random.Random(3)

    @pytest.mark.parametrize("key", sorted(ALGORITHM_CLASSES))
    def test_valid_prediction_on_healthy_history(self, key):
        algo = build_algorithm(key, rng=self.rng, paired_history=self.paired)
        result = algo.predict(self.history)
        assert is_valid_pick(result.numbers)
        assert result.numbers == sorted(result.numbers)
        assert 0.0 <= result.confidence <= 1.0
        assert not result.is_fallback
        assert result.category == algo.category

    @pytest.mark.parametrize("key", sorted(ALGORITHM_CLASSES))
    def test_fallback_on_three_draws(self, key):
        algo = build_algorithm(key, rng=self.rng, paired_history=self.paired)
        result = algo.predict(self.history[:3])
        assert result.is_fallback
        assert result.algorithm.endswith("(Données Insuffisantes)")
        assert result.confidence == 0.2
        assert result.score == 0.2
        assert result.factors == FALLBACK_FACTORS
        assert is_valid_pick(result.numbers)

    def test_build_algorithms_skips_cross_draw_without_pair(self):
        assert "cross_draw" not in build_algorithms()
        assert "cross_draw" in build_algorithms(paired_history=self.paired)

    def test_deterministic_algorithms_repeat(self):
        for key in ("weighted_frequency", "variance", "bayesian", "gradient_boosting", "arima"):
            a = build_algorithm(key).predict(self.history)
            b = build_algorithm(key).predict(self.history)
            assert a.numbers == b.numbers, key


class TestBaseAlgorithm:
    class Broken(BaseAlgorithm):
        key = "broken"
        name = "Broken"

        def _predict(self, history):
            raise ZeroDivisionError("boom")

    class Invalid(BaseAlgorithm):
        key = "invalid"
        name = "Invalid"

        def _predict(self, history):
            return self._result([1, 1, 2, 3, 4], 0.9, [])

    def test_exception_becomes_error_fallback(self):
        result = self.Broken().predict(IDENTICAL)
        assert result.algorithm == "Broken (Erreur)"
        assert result.confidence == 0.2

    def test_invalid_pick_becomes_error_fallback(self):
        result = self.Invalid().predict(IDENTICAL)
        assert result.algorithm == "Invalid (Erreur)"
        assert is_valid_pick(result.numbers)

    def test_wrong_parameter_family_rejected(self):
        with pytest.raises(TypeError):
            WeightedFrequency(parameters=BoostingParameters())

    def test_call_delegates_to_predict(self):
        algo = WeightedFrequency()
        assert algo(IDENTICAL).numbers == algo.predict(IDENTICAL).numbers

    def test_describe(self):
        info = GradientBoosting().describe()
        assert info["key"] == "gradient_boosting"
        assert info["parameters"]["kind"] == "boosting"


class TestWeightedFrequency:
    def test_identical_history_concentrates_signal(self):
        algo = WeightedFrequency()
        scores = algo.get_scores(IDENTICAL)
        top = sorted(scores, key=lambda n: (-scores[n], n))[:15]
        assert set(top[:5]) == {1, 2, 3, 4, 5}
        assert all(scores[n] == 0.0 for n in top[5:])

        result = algo.predict(IDENTICAL)
        assert len(set(result.numbers)) == 5
        assert result.confidence > 0.7

    def test_scores_sum_to_one(self):
        scores = WeightedFrequency().get_scores(random_history(30))
        assert sum(scores.values()) == pytest.approx(1.0)

    def test_recent_draws_weigh_more(self):
        history = make_history([[1, 2, 3, 4, 5]] + [[6, 7, 8, 9, 10]])
        scores = WeightedFrequency().get_scores(history)
        assert scores[1] > scores[6]

    def test_regularization_shrinks_toward_uniform(self):
        plain = WeightedFrequency().get_scores(IDENTICAL)
        shrunk = WeightedFrequency(StatisticalParameters(regularization=2.0)).get_scores(IDENTICAL)
        assert shrunk[1] < plain[1]
        assert shrunk[50] > plain[50]


class TestVarianceAnalysis:
    def test_damped_by_spread(self):
        algo = VarianceAnalysis()
        scores = algo.get_scores(IDENTICAL)
        spread = np.std([20] * 5 + [0] * 85)
        assert scores[1] == pytest.approx(1.0 / (spread + 1))
        assert scores[6] == 0.0


class TestBayesianInference:
    def test_laplace_posterior(self):
        history = make_history([[1, 2, 3, 4, 5]] * 10)
        posteriors = BayesianInference().get_posteriors(history)
        assert posteriors[1] == pytest.approx(11 / 12)
        assert posteriors[90] == pytest.approx(1 / 12)

    def test_confidence_capped(self):
        result = BayesianInference().predict(IDENTICAL)
        assert result.confidence == 0.8


class TestTrendRegression:
    def test_fit_line(self):
        slope, intercept = fit_line(np.array([0.0, 1.0, 2.0]), np.array([0.0, 2.0, 4.0]))
        assert slope == pytest.approx(2.0)
        assert intercept == pytest.approx(0.0)

    def test_fit_line_constant_x(self):
        slope, intercept = fit_line(np.array([3.0, 3.0]), np.array([0.0, 1.0]))
        assert slope == 0.0
        assert intercept == pytest.approx(0.5)

    def test_rare_numbers_score_zero(self):
        scores = TrendRegression().get_scores(IDENTICAL)
        assert scores[60] == 0.0
        assert all(0.0 <= s <= 1.0 for s in scores.values())


class TestPairSequence:
    def test_mine_requires_support(self):
        history = make_history([[1, 2, 3, 40, 50], [1, 2, 3, 60, 70], [10, 20, 30, 41, 51]] * 4)
        pairs, triples = PairSequence().mine(history)
        assert (1, 2) in pairs
        assert (1, 2, 3) in triples
        assert (10, 20, 30) in triples

    def test_triples_preferred(self):
        history = make_history([[1, 2, 3, 40, 50], [1, 2, 3, 60, 70]] * 6)
        algo = PairSequence(rng=random.Random(0))
        candidates, source = algo.build_candidates(history)
        assert source == "triples"
        assert candidates[:3] == [1, 2, 3]
        assert len(candidates) == 15
        assert algo.predict(history).confidence == 0.72

    def test_frequency_source_without_recurring_groups(self):
        # 18 disjoint draws: no pair appears twice
        history = make_history([list(range(i * 5 + 1, i * 5 + 6)) for i in range(18)])
        algo = PairSequence(rng=random.Random(0))
        _, source = algo.build_candidates(history)
        assert source == "frequency"
        assert algo.predict(history).confidence == 0.5


class TestMarkovChain:
    def test_untrained_raises(self):
        with pytest.raises(RuntimeError):
            MarkovChain().get_scores(IDENTICAL)

    def test_transitions_point_forward_in_time(self):
        a, b = [1, 2, 3, 4, 5], [10, 11, 12, 13, 14]
        # chronological A, B, A, B, ..., A → latest (index 0) is A, always followed by B
        history = make_history([a if i % 2 == 0 else b for i in range(11)])
        chain = MarkovChain()
        chain.train(history)
        scores = chain.get_scores(history)
        top = sorted(scores, key=lambda n: (-scores[n], n))[:5]
        assert top == b

    def test_rows_normalized(self):
        chain = MarkovChain()
        chain.train(random_history(30))
        sums = chain.matrix.sum(axis=1)
        assert all(s == pytest.approx(1.0) or s == 0.0 for s in sums)


class TestCrossDraw:
    def test_no_paired_history_falls_back(self):
        result = CrossDrawAnalysis().predict(random_history(30))
        assert result.is_fallback

    def test_identical_series_correlate(self):
        paired = make_history([[1, 2, 3, 4, 5]] * 20, name="Midi")
        correlations = analyze_cross_draw_correlation(IDENTICAL, paired)
        assert {c.number for c in correlations} == {1, 2, 3, 4, 5}
        assert all(c.common_appearances == 20 for c in correlations)

    def test_fixed_confidence(self):
        algo = CrossDrawAnalysis(paired_history=random_history(30, seed=9, name="Midi"))
        result = algo.predict(random_history(30))
        assert result.confidence == 0.78
        assert not result.is_fallback


class TestGradientBoosting:
    def test_target_rate(self):
        target = GradientBoosting().target(IDENTICAL)
        assert target.sum() == pytest.approx(5.0)
        assert target[0] == pytest.approx(1.0)

    def test_boosting_moves_toward_target(self):
        algo = GradientBoosting(BoostingParameters(learning_rate=0.5, num_estimators=50, regularization=0.0))
        scores = algo.boost(IDENTICAL)
        assert scores[1] > 0.9
        assert scores[50] < 0.1


class TestSequenceModels:
    def test_attention_favors_near_numbers(self):
        history = make_history([[10, 20, 30, 40, 50]] * 25)
        scores = Attention().get_scores(history)
        assert scores[10] > scores[11]
        assert scores[80] == 0.0

    def test_arima_series_shape(self):
        matrix = Arima().series(random_history(40))
        assert matrix.shape == (90, 40)
        assert matrix.sum() == pytest.approx(200)

    def test_arima_favors_latest_draw(self):
        history = make_history([[1, 2, 3, 4, 5]] + [[60, 61, 62, 63, 64]] * 19)
        algo = Arima(SequenceParameters(learning_rate=0.9, window_size=2))
        scores = algo.get_scores(history)
        assert scores[1] > scores[60]
