"""
lotobonheur/models/statistical/pair_sequence.py
Co-occurring pairs and triples mined with recency decay.
"""
from __future__ import annotations

from collections import defaultdict
from itertools import combinations

from lotobonheur.models.base_algorithm import BaseAlgorithm
from lotobonheur.models.statistical.frequency_analyzer import number_frequencies
from lotobonheur.models.statistical.number_selection import rank_numbers, select_with_randomization
from lotobonheur.models.types import DrawResult, PredictionResult

TRIPLE_BOOST = 1.5
MIN_SUPPORT = 2

CONFIDENCE_BY_SOURCE = {"triples": 0.72, "pairs": 0.65, "frequency": 0.5}


class PairSequence(BaseAlgorithm):
    """
    Draw i weighs (1 - decay_rate)^i, 0.93^i with the default parameters.
    Triples get x1.5. A group must appear in at least two draws to count.
    Candidates come from the strongest triples, then pairs, then raw
    frequency; the final pick is randomized over that shortlist.
    """

    key = "pair_sequence"
    name = "Séquences Paires/Triplets"
    category = "ml"
    min_history = 10
    default_parameters = {"decay_rate": 0.07}

    def mine(self, history: list[DrawResult]) -> tuple[dict[tuple, float], dict[tuple, float]]:
        decay = 1.0 - self.params.decay_rate
        pair_scores: dict[tuple, float] = defaultdict(float)
        triple_scores: dict[tuple, float] = defaultdict(float)
        support: dict[tuple, int] = defaultdict(int)

        for idx, draw in enumerate(history):
            weight = decay ** idx
            nums = sorted(set(draw.winning_numbers))
            for pair in combinations(nums, 2):
                pair_scores[pair] += weight
                support[pair] += 1
            for triple in combinations(nums, 3):
                triple_scores[triple] += weight * TRIPLE_BOOST
                support[triple] += 1

        pairs = {p: s for p, s in pair_scores.items() if support[p] >= MIN_SUPPORT}
        triples = {t: s for t, s in triple_scores.items() if support[t] >= MIN_SUPPORT}
        return pairs, triples

    def build_candidates(self, history: list[DrawResult]) -> tuple[list[int], str]:
        pool_size = self.params.candidate_pool
        pairs, triples = self.mine(history)
        candidates: list[int] = []
        source = "frequency"

        for groups, label in ((triples, "triples"), (pairs, "pairs")):
            if not groups or len(candidates) >= pool_size:
                continue
            if source == "frequency":
                source = label
            for group in sorted(groups, key=lambda g: (-groups[g], g)):
                for num in group:
                    if num not in candidates:
                        candidates.append(num)
                if len(candidates) >= pool_size:
                    break

        freqs = number_frequencies(history)
        for num in rank_numbers({n: float(c) for n, c in freqs.items()}):
            if len(candidates) >= pool_size:
                break
            if num not in candidates:
                candidates.append(num)
        return candidates[:pool_size], source

    def _predict(self, history: list[DrawResult]) -> PredictionResult:
        candidates, source = self.build_candidates(history)
        numbers = select_with_randomization(candidates, rng=self.rng)

        confidence = CONFIDENCE_BY_SOURCE[source]
        factors = {
            "triples": ["Triplets fréquents", "Paires associées", "Décroissance 0.93"],
            "pairs": ["Paires fréquentes", "Décroissance 0.93"],
            "frequency": ["Fréquence brute", "Aucune association récurrente"],
        }[source]
        return self._result(numbers, confidence, factors, score=confidence * 0.8)
