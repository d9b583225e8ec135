"""
Hybrid lottery combination generator.

Frequency analysis, co-occurrence indexing and a weighted Monte Carlo
loop over a window of historical draws.
"""

from hybrid_lotto.config import LotteryConfig, SimulationConfig, WeightPolicy
from hybrid_lotto.draws import Draw, normalize_draws
from hybrid_lotto.errors import (
    HybridLottoError,
    HistoryUnavailableError,
    InsufficientPoolError,
    InvalidConfigError,
    MalformedRecordError,
    SimulationCancelledError,
)
from hybrid_lotto.simulation import AnalysisResult, Combination, generate_combinations

__version__ = "1.0.0"

__all__ = [
    'AnalysisResult',
    'Combination',
    'Draw',
    'HistoryUnavailableError',
    'HybridLottoError',
    'InsufficientPoolError',
    'InvalidConfigError',
    'LotteryConfig',
    'MalformedRecordError',
    'SimulationCancelledError',
    'SimulationConfig',
    'WeightPolicy',
    'generate_combinations',
    'normalize_draws',
]
