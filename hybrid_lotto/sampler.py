"""
Weighted sampling of main and special numbers.

Weights are pure functions of (candidate, partial combination, context);
the random source is always passed in by the caller.
"""

from itertools import combinations
from typing import Callable, FrozenSet, Mapping, NamedTuple, Sequence, Tuple

from hybrid_lotto.analysis import CooccurrenceIndexer, FrequencyAnalyzer
from hybrid_lotto.config import WeightPolicy


class SamplingContext(NamedTuple):
    hot_set: FrozenSet[int]
    cold_set: FrozenSet[int]
    date_bias: FrozenSet[int]
    pair_index: Mapping[int, FrozenSet[int]]
    triplet_index: Mapping[int, FrozenSet[Tuple[int, int]]]
    special_frequency: Mapping[int, int]
    policy: WeightPolicy = WeightPolicy()


def build_context(
    frequency: FrequencyAnalyzer,
    cooccurrence: CooccurrenceIndexer,
    date_bias: FrozenSet[int],
    policy: WeightPolicy = WeightPolicy(),
) -> SamplingContext:
    return SamplingContext(
        hot_set=frozenset(frequency.hot_main),
        cold_set=frozenset(frequency.cold_main),
        date_bias=frozenset(date_bias),
        pair_index=dict(cooccurrence.pair_index),
        triplet_index=dict(cooccurrence.triplet_index),
        special_frequency=dict(frequency.special_frequency),
        policy=policy,
    )


def main_weight(candidate: int, combo: Sequence[int], context: SamplingContext) -> float:
    p = context.policy
    w = p.base
    if candidate in context.hot_set:
        w += p.hot_bonus
    if candidate in context.cold_set:
        w += p.cold_bonus
    if candidate in context.date_bias:
        w += p.date_bias_bonus

    partners = context.pair_index.get(candidate, ())
    for c in combo:
        if c in partners:
            w += p.pair_bonus

    if len(combo) >= 2:
        completions = context.triplet_index.get(candidate)
        if completions and any(
            (min(a, b), max(a, b)) in completions for a, b in combinations(combo, 2)
        ):
            w += p.triplet_bonus
    return w


def special_weight(candidate: int, context: SamplingContext) -> float:
    p = context.policy
    w = p.special_base
    freq = context.special_frequency.get(candidate, 0)
    if freq >= p.special_hot_threshold:
        w += p.special_hot_bonus
    elif freq <= p.special_cold_threshold:
        w -= p.special_cold_penalty
    return w


def clamp_weights(weights: Sequence[float], epsilon: float) -> list:
    """Negative weights count as zero; an all-zero pool falls back to a uniform epsilon."""
    clamped = [w if w > 0 else 0.0 for w in weights]
    if sum(clamped) <= 0:
        return [epsilon] * len(clamped)
    return clamped


def weighted_pick(pool: Sequence[int], weights: Sequence[float], rng, epsilon: float = WeightPolicy().epsilon) -> int:
    """Pick one pool entry with probability proportional to its weight.

    `rng` is anything with a numpy-style ``random()`` returning a float in
    [0, 1).
    """
    if not pool:
        raise ValueError("cannot sample from an empty pool")
    if len(weights) != len(pool):
        raise ValueError(f"{len(weights)} weights for a pool of {len(pool)}")

    weights = clamp_weights(weights, epsilon)
    total = sum(weights)
    r = rng.random() * total

    cumulative = 0.0
    for n, w in zip(pool, weights):
        cumulative += w
        if w > 0 and cumulative >= r:
            return n
    # float rounding can leave r a hair above the final cumulative sum
    return next(n for n, w in zip(reversed(pool), reversed(weights)) if w > 0)


def sample(
    pool: Sequence[int],
    weight_fn: Callable[[int], float],
    rng,
    epsilon: float = WeightPolicy().epsilon,
) -> int:
    return weighted_pick(pool, [weight_fn(n) for n in pool], rng, epsilon)


def sample_main(pool: Sequence[int], combo: Sequence[int], context: SamplingContext, rng) -> int:
    return sample(pool, lambda n: main_weight(n, combo, context), rng, context.policy.epsilon)


def sample_special(pool: Sequence[int], context: SamplingContext, rng) -> int:
    return sample(pool, lambda n: special_weight(n, context), rng, context.policy.epsilon)
