class HybridLottoError(Exception):
    """Base class for every error raised by the engine."""


class MalformedRecordError(HybridLottoError):
    """A single history record cannot be turned into a Draw."""

    def __init__(self, message: str, index: int = None):
        super().__init__(message if index is None else f"record {index}: {message}")
        self.index = index


class InsufficientPoolError(HybridLottoError):
    """Fewer distinct main numbers than a combination needs."""


class InvalidConfigError(HybridLottoError):
    """Request or engine configuration out of range or malformed."""


class HistoryUnavailableError(HybridLottoError):
    """The history source could not supply any records."""


class SimulationCancelledError(HybridLottoError):
    """The caller signalled cancellation while batches were still pending."""
