"""
Draw normalisation.

Turns raw history records (dicts as returned by a history source) into
immutable `Draw` tuples, validating every numeric field explicitly.
"""

import logging
import math
import numbers
from itertools import islice
from datetime import date, datetime
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from hybrid_lotto.config import LotteryConfig
from hybrid_lotto.errors import InvalidConfigError, MalformedRecordError
from hybrid_lotto.history import parse_date_strict

logger = logging.getLogger(__name__)

MAIN_FIELDS = ('ball1', 'ball2', 'ball3', 'ball4', 'ball5')
SPECIAL_FIELD = 'powerball'
DATE_FIELD = 'drawDate'
INDEX_FIELD = 'drawNumber'


class Draw(NamedTuple):
    main_numbers: Tuple[int, ...]
    special: int
    draw_date: Optional[date] = None
    draw_index: Optional[int] = None


def parse_number(value: Any, field: str, index: int = None) -> int:
    """Coerce one record field to an int ("05" -> 5); reject anything else."""
    if isinstance(value, bool) or value is None:
        raise MalformedRecordError(f"{field} is {value!r}", index)

    if isinstance(value, numbers.Integral):
        return int(value)

    if isinstance(value, numbers.Real):
        if not math.isfinite(value) or int(value) != value:  # NaN, infinite or fractional
            raise MalformedRecordError(f"{field}={value!r} is not a whole number", index)
        return int(value)

    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            return int(text, 10)

    raise MalformedRecordError(f"{field}={value!r} is not numeric", index)


def _parse_draw_date(value: Any, index: int) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date_strict(str(value))
    except InvalidConfigError as e:
        raise MalformedRecordError(f"{DATE_FIELD}={value!r}: {e}", index)
    return parsed.date() if parsed else None


def normalize_record(
    record: Dict[str, Any],
    index: int = None,
    main_range: Tuple[int, int] = (LotteryConfig.MAIN_MIN, LotteryConfig.MAIN_MAX),
    special_range: Tuple[int, int] = (LotteryConfig.SPECIAL_MIN, LotteryConfig.SPECIAL_MAX),
) -> Draw:
    """Build a Draw from one raw record or raise MalformedRecordError."""
    if not isinstance(record, dict):
        raise MalformedRecordError(f"expected a mapping, got {type(record).__name__}", index)

    missing = [f for f in MAIN_FIELDS + (SPECIAL_FIELD,) if f not in record]
    if missing:
        raise MalformedRecordError(f"missing fields {', '.join(missing)}", index)

    main = [parse_number(record[f], f, index) for f in MAIN_FIELDS]
    special = parse_number(record[SPECIAL_FIELD], SPECIAL_FIELD, index)

    if len(set(main)) != LotteryConfig.MAIN_COUNT:
        raise MalformedRecordError(f"main numbers {main} are not {LotteryConfig.MAIN_COUNT} distinct values", index)

    lo, hi = main_range
    out_of_range = [n for n in main if not lo <= n <= hi]
    if out_of_range:
        raise MalformedRecordError(f"main numbers {out_of_range} outside {lo}-{hi}", index)

    lo, hi = special_range
    if not lo <= special <= hi:
        raise MalformedRecordError(f"{SPECIAL_FIELD}={special} outside {lo}-{hi}", index)

    draw_index = record.get(INDEX_FIELD)
    if draw_index is not None and draw_index != '':
        draw_index = parse_number(draw_index, INDEX_FIELD, index)
    else:
        draw_index = index

    return Draw(
        main_numbers=tuple(sorted(main)),
        special=special,
        draw_date=_parse_draw_date(record.get(DATE_FIELD), index),
        draw_index=draw_index,
    )


def normalize_draws(
    records: Optional[Sequence[Dict[str, Any]]],
    limit: int = LotteryConfig.DEFAULT_LIMIT,
    **ranges,
) -> List[Draw]:
    """Normalise up to `limit` records (capped at MAX_LIMIT).

    Malformed records are logged and skipped so the analysis runs over the
    valid subset; the engine decides whether what is left is enough.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InvalidConfigError(f"limit must be a positive integer, got {limit!r}")
    limit = min(limit, LotteryConfig.MAX_LIMIT)

    draws = []
    skipped = 0
    for index, record in enumerate(islice(records or [], limit)):
        try:
            draws.append(normalize_record(record, index, **ranges))
        except MalformedRecordError as e:
            skipped += 1
            logger.warning(f"Skipping malformed history record: {e}")

    if skipped:
        logger.info(f"Normalized {len(draws)} draws, skipped {skipped}")
    return draws
