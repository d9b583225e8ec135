"""
History source collaborators.

The engine only needs "a function returning draws"; this module supplies
the strict date handling the request layer uses and a file-backed source
for local CSV/Excel exports of the draw history.
"""

import logging
import os
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from hybrid_lotto.config import LotteryConfig
from hybrid_lotto.errors import HistoryUnavailableError, InvalidConfigError

logger = logging.getLogger(__name__)

# (game, start, end) -> raw records, newest first
HistorySource = Callable[[str, date, date], List[Dict[str, Any]]]

STRICT_DATE_FORMATS = ('%d/%m/%Y', '%Y/%m/%d')

COLUMN_ALIASES = {
    'draw_date': 'drawDate',
    'date': 'drawDate',
    'draw_number': 'drawNumber',
    'draw_id': 'drawNumber',
}


def parse_date_strict(text: Optional[str]) -> Optional[datetime]:
    """Accept ISO-8601, DD/MM/YYYY or YYYY/MM/DD; anything else is an error."""
    if text is None or not str(text).strip():
        return None
    text = str(text).strip()

    try:
        parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
        return parsed.replace(tzinfo=None)
    except ValueError:
        pass

    for fmt in STRICT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    raise InvalidConfigError(f"Invalid date {text!r}. Use ISO, DD/MM/YYYY, or YYYY/MM/DD")


def _add_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:  # 29 February
        return day.replace(year=day.year + years, day=28)


def ensure_date_range(
    start: Optional[datetime],
    end: Optional[datetime],
    max_years: int = LotteryConfig.MAX_RANGE_YEARS,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """Fill in defaults (last year up to today) and bound the span."""
    today = today or date.today()
    s = start.date() if isinstance(start, datetime) else (start or _add_years(today, -1))
    e = end.date() if isinstance(end, datetime) else (end or today)

    if e < s:
        raise InvalidConfigError("endDate must be after startDate")
    if _add_years(s, max_years) < e:
        raise InvalidConfigError(f"Date range too large (max {max_years} years)")
    return s, e


def _coerce_date(value):
    try:
        return parse_date_strict(value)
    except InvalidConfigError:
        return None


class FileHistorySource:
    """History source backed by a local CSV or Excel file.

    Expected columns: ball1..ball5, powerball and optionally drawDate,
    drawNumber and game. Rows are returned newest first.
    """

    def __init__(self, path):
        # a filesystem path or an uploaded file object with a .name
        self.path = path
        self.name = getattr(path, "name", path)
        self._frame = None

    def _load(self) -> pd.DataFrame:
        if self._frame is not None:
            return self._frame

        if isinstance(self.path, (str, os.PathLike)) and not os.path.exists(self.path):
            raise HistoryUnavailableError(f"History file {self.path} not found")

        try:
            if str(self.name).lower().endswith('.csv'):
                df = pd.read_csv(self.path, dtype=str)
            else:
                df = pd.read_excel(self.path, dtype=str)
        except Exception as e:
            logger.error(f"Error loading history file {self.name}: {e}")
            raise HistoryUnavailableError(f"Cannot read {self.name}: {e}") from e

        df.dropna(how='all', inplace=True)
        df = df.rename(columns={c: COLUMN_ALIASES.get(c.strip(), c.strip()) for c in df.columns})

        if 'drawDate' in df.columns:
            df['_date'] = pd.to_datetime(df['drawDate'].map(_coerce_date))
            undated = int(df['_date'].isna().sum())
            if undated:
                logger.warning(f"{undated} history rows have no usable drawDate and are dropped by the date filter")
            df = df.sort_values('_date', ascending=False, na_position='last')

        self._frame = df
        logger.info(f"Loaded {len(df)} history rows from {self.name}")
        return df

    def fetch(self, game: str, start: date, end: date) -> List[Dict[str, Any]]:
        df = self._load()

        if 'game' in df.columns:
            df = df[df['game'].str.strip().str.lower() == game.lower()]

        if '_date' in df.columns:
            days = df['_date'].dt.date
            df = df[(days >= start) & (days <= end)]
            df = df.drop(columns=['_date'])

        df = df.astype(object).where(df.notna(), None)
        return df.to_dict('records')

    __call__ = fetch
