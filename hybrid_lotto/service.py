"""
Request boundary for the generator.

Validates request parameters once, pulls history from a source, runs the
engine and shapes the result for presenters.
"""

import logging
import threading
from datetime import date
from typing import Any, Dict, FrozenSet, Mapping, NamedTuple, Optional

from hybrid_lotto.config import LotteryConfig, SimulationConfig, parse_date_bias
from hybrid_lotto.draws import normalize_draws
from hybrid_lotto.errors import HistoryUnavailableError, InvalidConfigError
from hybrid_lotto.history import HistorySource, ensure_date_range, parse_date_strict
from hybrid_lotto.simulation import AnalysisResult, EngineStage, generate_combinations, log_stage

logger = logging.getLogger(__name__)


class GenerateRequest(NamedTuple):
    game: str
    limit: int
    start_date: date
    end_date: date
    config: SimulationConfig

    @property
    def date_bias(self) -> FrozenSet[int]:
        return self.config.date_bias


def _int_param(params: Mapping[str, Any], name: str, default: Optional[int], lo: int, hi: int) -> Optional[int]:
    raw = params.get(name)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    if isinstance(raw, bool):
        raise InvalidConfigError(f"{name} must be an integer")
    try:
        value = int(str(raw).strip(), 10) if isinstance(raw, str) else int(raw)
    except (TypeError, ValueError):
        raise InvalidConfigError(f"{name} must be an integer, got {raw!r}")
    if isinstance(raw, float) and raw != value:
        raise InvalidConfigError(f"{name} must be an integer, got {raw!r}")
    if not lo <= value <= hi:
        raise InvalidConfigError(f"{name} must be between {lo:,} and {hi:,}, got {value:,}")
    return value


def parse_generate_params(params: Mapping[str, Any], today: Optional[date] = None) -> GenerateRequest:
    """Validate raw request parameters (query-string style values)."""
    game = str(params.get('gameName') or LotteryConfig.DEFAULT_GAME).strip().lower()
    if game not in LotteryConfig.GAMES:
        raise InvalidConfigError(f"gameName must be one of {', '.join(LotteryConfig.GAMES)}")

    limit = _int_param(params, 'limit', LotteryConfig.DEFAULT_LIMIT, 1, LotteryConfig.MAX_LIMIT)
    sims = _int_param(
        params, 'numOfSimulation', LotteryConfig.DEFAULT_SIMS, LotteryConfig.MIN_SIMS, LotteryConfig.MAX_SIMS
    )
    batch = _int_param(
        params, 'batchSize', LotteryConfig.DEFAULT_BATCH, LotteryConfig.MIN_BATCH, LotteryConfig.MAX_BATCH
    )
    seed = _int_param(params, 'seed', None, 0, 2 ** 63 - 1)
    workers = _int_param(params, 'workers', 1, 1, 64)

    start, end = ensure_date_range(
        parse_date_strict(params.get('startDate')),
        parse_date_strict(params.get('endDate')),
        today=today,
    )

    config = SimulationConfig.create(
        num_simulations=sims,
        batch_size=batch,
        date_bias=parse_date_bias(params.get('dateBias')),
        seed=seed,
        workers=workers,
    )
    return GenerateRequest(game, limit, start, end, config)


def run_analysis(
    source: HistorySource,
    params: Mapping[str, Any],
    cancel_event=None,
    timeout: Optional[float] = None,
    today: Optional[date] = None,
):
    """Validate, fetch, normalise and simulate. Returns (request, result).

    With `timeout` set, a timer raises the cancellation signal after that
    many seconds; the engine notices it before its next batch.
    """
    request = parse_generate_params(params, today=today)

    records = source(request.game, request.start_date, request.end_date)
    if not records:
        raise HistoryUnavailableError(
            f"No {request.game} history between {request.start_date} and {request.end_date}"
        )
    logger.info(f"Fetched {len(records)} {request.game} records, analysing up to {request.limit}")

    log_stage(EngineStage.NORMALIZING)
    draws = normalize_draws(records, request.limit)

    timer = None
    if timeout is not None:
        cancel_event = cancel_event or threading.Event()
        timer = threading.Timer(timeout, cancel_event.set)
        timer.daemon = True
        timer.start()
    try:
        result = generate_combinations(draws, request.config, cancel_event=cancel_event)
    finally:
        if timer is not None:
            timer.cancel()
    return request, result


def result_to_dict(request: GenerateRequest, result: AnalysisResult) -> Dict[str, Any]:
    """Payload for presenters: the status/msg/params/results/analysis shape."""
    config = request.config
    return {
        'status': 1,
        'msg': (
            f"Hybrid {request.game} numbers generated successfully from "
            f"{config.num_simulations:,} simulations between "
            f"{request.start_date.isoformat()} and {request.end_date.isoformat()}"
        ),
        'params': {
            'gameName': request.game,
            'startDate': request.start_date.isoformat(),
            'endDate': request.end_date.isoformat(),
            'limit': request.limit,
            'numOfSimulation': config.num_simulations,
            'batchSize': config.batch_size,
            'dateBias': sorted(config.date_bias),
        },
        'results': [
            {'balls': list(c.main_numbers), 'powerball': c.special, 'count': c.count}
            for c in result.top_combinations
        ],
        'analysis': {
            'hotBalls': list(result.hot_main),
            'coldBalls': list(result.cold_main),
            'hotPower': result.hot_special,
            'coldPower': result.cold_special,
            'topPairs': [list(p) for p, _ in result.top_pairs],
            'topTriplets': [list(t) for t, _ in result.top_triplets],
            'drawsAnalyzed': result.draws_analyzed,
        },
    }


def error_to_dict(error: Exception) -> Dict[str, Any]:
    return {'status': 0, 'msg': str(error) or 'Bad request'}
