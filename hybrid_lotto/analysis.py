"""
Frequency and co-occurrence analysis over a window of draws.
"""

from collections import Counter, defaultdict
from itertools import combinations
from typing import Dict, FrozenSet, Hashable, Iterable, List, Sequence, Tuple

from hybrid_lotto.config import LotteryConfig
from hybrid_lotto.draws import Draw

Pair = Tuple[int, int]
Triplet = Tuple[int, int, int]


def rank_counts(counter: Counter) -> List[Tuple[Hashable, int]]:
    """Entries by count descending, ties by key ascending."""
    return sorted(counter.items(), key=lambda item: (-item[1], item[0]))


class FrequencyAnalyzer:
    def __init__(self, draws: Sequence[Draw], hot_cold_size: int = LotteryConfig.HOT_COLD_SIZE):
        self.total_draws = len(draws)
        self.main_frequency = Counter(n for d in draws for n in d.main_numbers)
        self.special_frequency = Counter(d.special for d in draws)

        ranked_main = [n for n, _ in rank_counts(self.main_frequency)]
        ranked_special = [n for n, _ in rank_counts(self.special_frequency)]

        self.hot_main = ranked_main[:hot_cold_size]
        self.cold_main = ranked_main[-hot_cold_size:] if hot_cold_size > 0 else []

        self.hot_special = ranked_special[0] if ranked_special else LotteryConfig.HOT_SPECIAL_FALLBACK
        self.cold_special = ranked_special[-1] if ranked_special else LotteryConfig.COLD_SPECIAL_FALLBACK

    @property
    def main_pool(self) -> List[int]:
        return sorted(self.main_frequency)

    @property
    def special_pool(self) -> List[int]:
        return sorted(self.special_frequency)


class CooccurrenceIndexer:
    """Top pairs/triplets of main numbers and lookups keyed by one number.

    pair_index[n] holds every value that completes a top pair with n;
    triplet_index[n] holds every (a, b) pair that completes a top triplet
    with n.
    """

    def __init__(
        self,
        draws: Iterable[Draw],
        top_pairs: int = LotteryConfig.TOP_PAIRS,
        top_triplets: int = LotteryConfig.TOP_TRIPLETS,
    ):
        self.pair_freq = Counter()
        self.triple_freq = Counter()

        for draw in draws:
            nums = sorted(draw.main_numbers)
            self.pair_freq.update(combinations(nums, 2))
            self.triple_freq.update(combinations(nums, 3))

        self.top_pairs: List[Tuple[Pair, int]] = rank_counts(self.pair_freq)[:top_pairs]
        self.top_triplets: List[Tuple[Triplet, int]] = rank_counts(self.triple_freq)[:top_triplets]

        self.pair_index = self._index_pairs(p for p, _ in self.top_pairs)
        self.triplet_index = self._index_triplets(t for t, _ in self.top_triplets)

    @staticmethod
    def _index_pairs(pairs: Iterable[Pair]) -> Dict[int, FrozenSet[int]]:
        idx = defaultdict(set)
        for x, y in pairs:
            idx[x].add(y)
            idx[y].add(x)
        return {n: frozenset(others) for n, others in idx.items()}

    @staticmethod
    def _index_triplets(triplets: Iterable[Triplet]) -> Dict[int, FrozenSet[Pair]]:
        idx = defaultdict(set)
        for triplet in triplets:
            x, y, z = sorted(triplet)
            idx[x].add((y, z))
            idx[y].add((x, z))
            idx[z].add((x, y))
        return {n: frozenset(rest) for n, rest in idx.items()}
