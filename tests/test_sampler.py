import numpy as np
import pytest

from hybrid_lotto.analysis import CooccurrenceIndexer, FrequencyAnalyzer
from hybrid_lotto.config import WeightPolicy
from hybrid_lotto.sampler import (
    SamplingContext,
    build_context,
    clamp_weights,
    main_weight,
    sample,
    sample_special,
    special_weight,
    weighted_pick,
)
from tests.conftest import FixedRandom


@pytest.fixture
def context():
    return SamplingContext(
        hot_set=frozenset({1}),
        cold_set=frozenset({2}),
        date_bias=frozenset({3}),
        pair_index={1: frozenset({5}), 5: frozenset({1})},
        triplet_index={4: frozenset({(5, 6)}), 5: frozenset({(4, 6)}), 6: frozenset({(4, 5)})},
        special_frequency={1: 8, 2: 2, 3: 5},
    )


class TestWeightedPick:
    @pytest.mark.parametrize('draw, expected', [(0.0, 1), (0.3, 2), (0.49, 2), (0.99, 3)])
    def test_cumulative_walk(self, draw, expected):
        assert weighted_pick([1, 2, 3], [1, 1, 2], FixedRandom(draw)) == expected

    def test_all_non_positive_weights_use_epsilon_floor(self):
        rng = FixedRandom(0.5)
        assert weighted_pick([1, 2, 3], [0, -1, -5], rng) == 2
        assert rng.calls == 1

    def test_non_positive_weights_never_chosen_when_others_positive(self):
        for draw in (0.0, 0.5, 0.999999):
            assert weighted_pick([1, 2, 3], [-1, 0, 5], FixedRandom(draw)) == 3

    def test_top_of_range_lands_on_last_positive_entry(self):
        assert weighted_pick([1, 2, 3], [1, 1, 0], FixedRandom(1.0)) == 2

    def test_proportional_to_weight(self):
        rng = np.random.default_rng(1)
        picks = [weighted_pick([1, 2], [1, 3], rng) for _ in range(20000)]
        assert picks.count(2) / len(picks) == pytest.approx(0.75, abs=0.02)

    def test_reproducible_with_seeded_generator(self):
        a = [weighted_pick(list(range(10)), list(range(1, 11)), np.random.default_rng(7)) for _ in range(3)]
        b = [weighted_pick(list(range(10)), list(range(1, 11)), np.random.default_rng(7)) for _ in range(3)]
        assert a == b

    def test_empty_pool(self):
        with pytest.raises(ValueError):
            weighted_pick([], [], FixedRandom(0.5))

    def test_weight_count_mismatch(self):
        with pytest.raises(ValueError):
            weighted_pick([1, 2], [1], FixedRandom(0.5))


def test_clamp_weights():
    assert clamp_weights([2, -1, 0], 0.1) == [2, 0.0, 0.0]
    assert clamp_weights([-2, -1, 0], 0.1) == [0.1, 0.1, 0.1]


class TestMainWeight:
    def test_base(self, context):
        assert main_weight(40, [], context) == 2

    def test_hot_cold_and_date_bias(self, context):
        assert main_weight(1, [], context) == 5
        assert main_weight(2, [], context) == 3
        assert main_weight(3, [], context) == 3.5

    def test_pair_completion(self, context):
        assert main_weight(1, [5], context) == 7
        assert main_weight(5, [1, 9], context) == 4
        assert main_weight(1, [9], context) == 5

    def test_triplet_needs_two_numbers_in_combo(self, context):
        assert main_weight(4, [5], context) == 2
        assert main_weight(4, [6, 5], context) == 5
        assert main_weight(4, [5, 9], context) == 2

    def test_triplet_bonus_applies_once(self, context):
        # 1 completes a top pair with 5 and (4, 6) completes a top triplet
        assert main_weight(5, [4, 6, 1], context) == 2 + 2 + 3

    def test_pure_function(self, context):
        combo = [5]
        main_weight(1, combo, context)
        assert combo == [5]
        assert main_weight(1, combo, context) == main_weight(1, combo, context)

    def test_policy_is_tunable(self, context):
        tuned = context._replace(policy=WeightPolicy(base=1.0, hot_bonus=10.0))
        assert main_weight(1, [], tuned) == 11


class TestSpecialWeight:
    def test_thresholds(self, context):
        assert special_weight(1, context) == 4
        assert special_weight(3, context) == 2
        assert special_weight(2, context) == 1.5

    def test_unseen_special_is_chilly(self, context):
        assert special_weight(17, context) == 1.5

    def test_sample_special_uses_weights(self, context):
        # weights 4, 1.5, 2 -> total 7.5; 0.6 * 7.5 = 4.5 lands on the second entry
        assert sample_special([1, 2, 3], context, FixedRandom(0.6)) == 2


def test_sample_recomputes_weights_per_call():
    seen = []

    def weight(n):
        seen.append(n)
        return 1.0

    sample([4, 5, 6], weight, FixedRandom(0.1))
    sample([4, 5, 6], weight, FixedRandom(0.1))
    assert seen == [4, 5, 6, 4, 5, 6]


def test_build_context(sample_draws):
    frequency = FrequencyAnalyzer(sample_draws)
    cooccurrence = CooccurrenceIndexer(sample_draws)
    context = build_context(frequency, cooccurrence, frozenset({28, 10}))

    assert context.hot_set == frozenset(frequency.hot_main)
    assert context.cold_set == frozenset(frequency.cold_main)
    assert context.date_bias == frozenset({28, 10})
    assert context.special_frequency[3] == 3
    assert 2 in context.pair_index[1]
    assert context.policy == WeightPolicy()
