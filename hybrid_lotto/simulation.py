"""
Monte Carlo combination engine.

Runs `num_simulations` weighted trials in batches, each batch on its own
random stream, and ranks the combinations that came up most often.
"""

import logging
from collections import Counter
from concurrent.futures import FIRST_COMPLETED, ProcessPoolExecutor, wait
from enum import Enum
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from hybrid_lotto.analysis import CooccurrenceIndexer, FrequencyAnalyzer
from hybrid_lotto.config import LotteryConfig, SimulationConfig
from hybrid_lotto.draws import Draw
from hybrid_lotto.errors import InsufficientPoolError, SimulationCancelledError
from hybrid_lotto.sampler import SamplingContext, build_context, sample_main, sample_special

logger = logging.getLogger(__name__)


class EngineStage(Enum):
    IDLE = 'idle'
    NORMALIZING = 'normalizing'
    ANALYZING = 'analyzing'
    SIMULATING = 'simulating'
    AGGREGATING = 'aggregating'
    DONE = 'done'


class Combination(NamedTuple):
    main_numbers: Tuple[int, ...]
    special: int


class RankedCombination(NamedTuple):
    main_numbers: Tuple[int, ...]
    special: int
    count: int


class AnalysisResult(NamedTuple):
    top_combinations: List[RankedCombination]
    hot_main: List[int]
    cold_main: List[int]
    hot_special: int
    cold_special: int
    top_pairs: List[Tuple[Tuple[int, int], int]]
    top_triplets: List[Tuple[Tuple[int, int, int], int]]
    total_trials: int
    draws_analyzed: int


def log_stage(stage: EngineStage):
    logger.info(f"Engine stage: {stage.value}")


def run_trial(main_pool: Sequence[int], special_pool: Sequence[int], context: SamplingContext, rng) -> Combination:
    """One weighted trial: 5 distinct main numbers plus one special number."""
    combo = []
    while len(combo) < LotteryConfig.MAIN_COUNT:
        # chosen numbers are left out of the candidates, which gives the
        # same distribution as drawing from the full pool and rejecting repeats
        candidates = [n for n in main_pool if n not in combo]
        combo.append(sample_main(candidates, combo, context, rng))
    special = sample_special(special_pool, context, rng)
    return Combination(tuple(sorted(combo)), special)


def run_batch(
    size: int,
    main_pool: Sequence[int],
    special_pool: Sequence[int],
    context: SamplingContext,
    rng,
) -> Counter:
    """Run `size` trials into a private counter."""
    combo_freq = Counter()
    for _ in range(size):
        combo_freq[run_trial(main_pool, special_pool, context, rng)] += 1
    return combo_freq


def rank_combinations(combo_freq: Counter, top_n: int = LotteryConfig.TOP_COMBINATIONS) -> List[RankedCombination]:
    ranked = sorted(combo_freq.items(), key=lambda item: (-item[1], item[0]))
    return [RankedCombination(c.main_numbers, c.special, count) for c, count in ranked[:top_n]]


def _check_cancelled(cancel_event, completed: int, total: int, pending=()):
    if cancel_event is not None and cancel_event.is_set():
        for future in pending:
            future.cancel()
        logger.warning(f"Simulation cancelled after {completed}/{total} batches")
        raise SimulationCancelledError(f"cancelled after {completed} of {total} batches")


class SimulationEngine:
    def __init__(self, config: SimulationConfig, rng: Optional[np.random.Generator] = None):
        config.validate()
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)

    def _batch_rng(self) -> np.random.Generator:
        return self.rng.spawn(1)[0]

    def simulate(
        self,
        main_pool: Sequence[int],
        special_pool: Sequence[int],
        context: SamplingContext,
        cancel_event=None,
    ) -> Counter:
        sizes = self.config.batch_sizes()
        workers = min(self.config.workers, len(sizes))
        logger.info(
            f"Running {self.config.num_simulations:,} simulations in {len(sizes)} batches "
            f"on {workers} worker(s)"
        )
        if workers > 1:
            return self._simulate_parallel(sizes, workers, main_pool, special_pool, context, cancel_event)

        combo_freq = Counter()
        for b, size in enumerate(sizes):
            _check_cancelled(cancel_event, b, len(sizes))
            combo_freq.update(run_batch(size, main_pool, special_pool, context, self._batch_rng()))
            logger.debug(f"Batch {b + 1}/{len(sizes)} completed ({size} trials)")
        return combo_freq

    def _simulate_parallel(self, sizes, workers, main_pool, special_pool, context, cancel_event) -> Counter:
        combo_freq = Counter()
        # streams are assigned in batch order so results do not depend on scheduling
        batches = [(size, self._batch_rng()) for size in sizes]
        pending = set()
        submitted = completed = 0

        with ProcessPoolExecutor(max_workers=workers) as ex:
            while submitted < len(batches) or pending:
                _check_cancelled(cancel_event, completed, len(batches), pending)
                while submitted < len(batches) and len(pending) < workers:
                    size, batch_rng = batches[submitted]
                    pending.add(ex.submit(run_batch, size, main_pool, special_pool, context, batch_rng))
                    submitted += 1

                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    combo_freq.update(future.result())
                    completed += 1
                    logger.debug(f"Batch {completed}/{len(batches)} completed")
        return combo_freq

    def run(self, draws: Sequence[Draw], cancel_event=None) -> AnalysisResult:
        main_pool = sorted({n for d in draws for n in d.main_numbers})
        if len(main_pool) < LotteryConfig.MAIN_COUNT:
            raise InsufficientPoolError(
                f"Only {len(main_pool)} distinct main numbers in {len(draws)} draws, "
                f"need at least {LotteryConfig.MAIN_COUNT}"
            )

        log_stage(EngineStage.ANALYZING)
        frequency = FrequencyAnalyzer(draws)
        cooccurrence = CooccurrenceIndexer(draws)
        context = build_context(frequency, cooccurrence, self.config.date_bias, self.config.policy)

        log_stage(EngineStage.SIMULATING)
        combo_freq = self.simulate(main_pool, frequency.special_pool, context, cancel_event)

        log_stage(EngineStage.AGGREGATING)
        top = rank_combinations(combo_freq)

        log_stage(EngineStage.DONE)
        return AnalysisResult(
            top_combinations=top,
            hot_main=frequency.hot_main,
            cold_main=frequency.cold_main,
            hot_special=frequency.hot_special,
            cold_special=frequency.cold_special,
            top_pairs=cooccurrence.top_pairs,
            top_triplets=cooccurrence.top_triplets,
            total_trials=sum(combo_freq.values()),
            draws_analyzed=len(draws),
        )


def generate_combinations(
    draws: Sequence[Draw],
    config: SimulationConfig,
    rng: Optional[np.random.Generator] = None,
    cancel_event=None,
) -> AnalysisResult:
    """Analyse `draws` and return the most frequent simulated combinations.

    Pass `rng` (or set `config.seed`) for reproducible output. `cancel_event`
    is any object with ``is_set()``; it is checked between batches.
    """
    return SimulationEngine(config, rng).run(draws, cancel_event)
