"""
Engine configuration.

`LotteryConfig` holds the static game ranges and request bounds,
`WeightPolicy` the tunable sampling weights and `SimulationConfig`
the per-request engine settings.
"""

import os
from typing import FrozenSet, Iterable, NamedTuple, Optional

from hybrid_lotto.errors import InvalidConfigError


class LotteryConfig:
    MAIN_MIN = 1
    MAIN_MAX = 50
    SPECIAL_MIN = 1
    SPECIAL_MAX = 20
    MAIN_COUNT = 5

    HOT_COLD_SIZE = 10
    TOP_PAIRS = 20
    TOP_TRIPLETS = 20
    TOP_COMBINATIONS = 5
    HOT_SPECIAL_FALLBACK = 1
    COLD_SPECIAL_FALLBACK = 20

    DEFAULT_DATE_BIAS = (28, 10, 29, 25, 31)
    DATE_BIAS_MIN = 1
    DATE_BIAS_MAX = 50

    DEFAULT_LIMIT = 200
    MAX_LIMIT = 500
    DEFAULT_SIMS = 10000
    MIN_SIMS = 100
    MAX_SIMS = 200_000
    DEFAULT_BATCH = 50_000
    MIN_BATCH = 1000
    MAX_BATCH = 50_000
    MAX_RANGE_YEARS = 3

    GAMES = ("powerball", "powerball-plus")
    DEFAULT_GAME = "powerball"


class WeightPolicy(NamedTuple):
    # main-number weights
    base: float = 2.0
    hot_bonus: float = 3.0
    cold_bonus: float = 1.0
    date_bias_bonus: float = 1.5
    pair_bonus: float = 2.0
    triplet_bonus: float = 3.0

    # special-number weights
    special_base: float = 2.0
    special_hot_threshold: int = 8
    special_hot_bonus: float = 2.0
    special_cold_threshold: int = 2
    special_cold_penalty: float = 0.5

    # floor used when no weight in a pool is positive
    epsilon: float = 1e-6


def parse_date_bias(text: Optional[str]) -> FrozenSet[int]:
    """Parse a comma separated date-bias string such as "28,10,29,25,31".

    Empty input gives the default set. Every token must be an integer in
    the 1-50 range, otherwise InvalidConfigError is raised.
    """
    if text is None or not str(text).strip():
        return frozenset(LotteryConfig.DEFAULT_DATE_BIAS)

    numbers = set()
    for token in str(text).split(","):
        token = token.strip()
        if not token:
            continue
        try:
            value = int(token, 10)
        except ValueError:
            raise InvalidConfigError(f"dateBias value {token!r} is not an integer")
        if not LotteryConfig.DATE_BIAS_MIN <= value <= LotteryConfig.DATE_BIAS_MAX:
            raise InvalidConfigError(
                f"dateBias value {value} outside "
                f"{LotteryConfig.DATE_BIAS_MIN}-{LotteryConfig.DATE_BIAS_MAX}"
            )
        numbers.add(value)

    if not numbers:
        raise InvalidConfigError(f"dateBias {text!r} contains no numbers")
    return frozenset(numbers)


class SimulationConfig(NamedTuple):
    num_simulations: int = LotteryConfig.DEFAULT_SIMS
    batch_size: int = LotteryConfig.DEFAULT_BATCH
    date_bias: FrozenSet[int] = frozenset(LotteryConfig.DEFAULT_DATE_BIAS)
    seed: Optional[int] = None
    workers: int = 1
    policy: WeightPolicy = WeightPolicy()

    @classmethod
    def create(
        cls,
        num_simulations: int = LotteryConfig.DEFAULT_SIMS,
        batch_size: int = LotteryConfig.DEFAULT_BATCH,
        date_bias: Optional[Iterable[int]] = None,
        seed: Optional[int] = None,
        workers: int = 1,
        policy: Optional[WeightPolicy] = None,
    ) -> "SimulationConfig":
        bias = frozenset(LotteryConfig.DEFAULT_DATE_BIAS if date_bias is None else date_bias)
        config = cls(num_simulations, batch_size, bias, seed, workers, policy or WeightPolicy())
        config.validate()
        return config

    def validate(self):
        """Engine-level checks. Lower request bounds are enforced by the service layer."""
        for name in ('num_simulations', 'batch_size', 'workers'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.num_simulations > LotteryConfig.MAX_SIMS:
            raise InvalidConfigError(
                f"num_simulations must be at most {LotteryConfig.MAX_SIMS:,}, got {self.num_simulations:,}"
            )
        if self.batch_size > LotteryConfig.MAX_BATCH:
            raise InvalidConfigError(
                f"batch_size must be at most {LotteryConfig.MAX_BATCH:,}, got {self.batch_size:,}"
            )
        for n in self.date_bias:
            if isinstance(n, bool) or not isinstance(n, int) or not (
                LotteryConfig.DATE_BIAS_MIN <= n <= LotteryConfig.DATE_BIAS_MAX
            ):
                raise InvalidConfigError(
                    f"dateBias value {n!r} must be an integer between "
                    f"{LotteryConfig.DATE_BIAS_MIN}-{LotteryConfig.DATE_BIAS_MAX}"
                )
        if self.workers > (os.cpu_count() or 1) * 4:
            raise InvalidConfigError(f"workers={self.workers} exceeds the available CPUs")
        if self.seed is not None and (isinstance(self.seed, bool) or not isinstance(self.seed, int)):
            raise InvalidConfigError(f"seed must be an integer, got {self.seed!r}")
        if self.policy.epsilon <= 0:
            raise InvalidConfigError("weight epsilon must be positive")

    @property
    def total_batches(self) -> int:
        return -(-self.num_simulations // self.batch_size)

    def batch_sizes(self):
        """Trial count of every batch; the last one may be partial."""
        sizes = []
        remaining = self.num_simulations
        while remaining > 0:
            size = min(self.batch_size, remaining)
            sizes.append(size)
            remaining -= size
        return sizes
