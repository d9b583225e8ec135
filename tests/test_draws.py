import logging
from datetime import date

import pytest

from hybrid_lotto.config import LotteryConfig
from hybrid_lotto.draws import Draw, normalize_draws, normalize_record, parse_number
from hybrid_lotto.errors import InvalidConfigError, MalformedRecordError
from tests.conftest import make_record


class TestParseNumber:
    def test_zero_padded_string(self):
        assert parse_number("05", 'ball1') == 5

    def test_whitespace_is_stripped(self):
        assert parse_number(" 12 ", 'ball1') == 12

    def test_whole_float(self):
        assert parse_number(7.0, 'ball1') == 7

    @pytest.mark.parametrize('value', ["abc", "5.5", 5.5, None, True, "", float('nan'), "-3", "\u00b2", float('inf')])
    def test_rejects_non_integers(self, value):
        with pytest.raises(MalformedRecordError):
            parse_number(value, 'ball1')


class TestNormalizeRecord:
    def test_builds_sorted_draw(self):
        draw = normalize_record(make_record(["20", "05", 13, 1, 44], "07", "2024/03/05", "1501"), 0)

        assert draw == Draw((1, 5, 13, 20, 44), 7, date(2024, 3, 5), 1501)

    def test_draw_index_defaults_to_position(self):
        draw = normalize_record(make_record([1, 2, 3, 4, 5], 6), 9)
        assert draw.draw_index == 9
        assert draw.draw_date is None

    def test_duplicate_main_numbers(self):
        with pytest.raises(MalformedRecordError, match="distinct"):
            normalize_record(make_record([1, 1, 3, 4, 5], 6), 0)

    def test_missing_field(self):
        record = make_record([1, 2, 3, 4, 5], 6)
        del record['ball3']
        with pytest.raises(MalformedRecordError, match="ball3"):
            normalize_record(record, 0)

    def test_non_numeric_special(self):
        with pytest.raises(MalformedRecordError):
            normalize_record(make_record([1, 2, 3, 4, 5], "PB"), 0)

    def test_main_number_out_of_range(self):
        with pytest.raises(MalformedRecordError, match="outside"):
            normalize_record(make_record([1, 2, 3, 4, 51], 6), 0)

    def test_special_out_of_range(self):
        with pytest.raises(MalformedRecordError, match="outside"):
            normalize_record(make_record([1, 2, 3, 4, 5], 21), 0)

    def test_bad_date(self):
        with pytest.raises(MalformedRecordError, match="drawDate"):
            normalize_record(make_record([1, 2, 3, 4, 5], 6, "yesterday"), 0)

    def test_error_carries_index(self):
        with pytest.raises(MalformedRecordError) as info:
            normalize_record(make_record([1, 2, 3, 4, "x"], 6), 4)
        assert info.value.index == 4


class TestNormalizeDraws:
    def test_skips_malformed_records(self, caplog):
        records = [
            make_record([1, 2, 3, 4, 5], 6),
            make_record([1, 2, 3, 4, "x"], 6),
            make_record([6, 7, 8, 9, 10], 11),
        ]
        with caplog.at_level(logging.WARNING):
            draws = normalize_draws(records, limit=10)

        assert [d.main_numbers for d in draws] == [(1, 2, 3, 4, 5), (6, 7, 8, 9, 10)]
        assert "record 1" in caplog.text

    @pytest.mark.parametrize('bad', ["\u00b2", float('inf')])
    def test_skips_unconvertible_numbers(self, bad):
        records = [
            make_record([1, 2, 3, 4, 5], 6),
            make_record([bad, 12, 13, 14, 15], 6),
        ]

        draws = normalize_draws(records, limit=10)

        assert [d.main_numbers for d in draws] == [(1, 2, 3, 4, 5)]

    def test_limit_bounds_records_examined(self):
        records = [make_record([1, 2, 3, 4, 5], i % 20 + 1) for i in range(10)]
        assert len(normalize_draws(records, limit=4)) == 4

    def test_limit_is_capped(self):
        records = [make_record([1, 2, 3, 4, 5], 6)] * (LotteryConfig.MAX_LIMIT + 100)
        assert len(normalize_draws(records, limit=10_000)) == LotteryConfig.MAX_LIMIT

    def test_empty_input(self):
        assert normalize_draws([], limit=5) == []
        assert normalize_draws(None, limit=5) == []

    @pytest.mark.parametrize('limit', [0, -1, "10", True])
    def test_invalid_limit(self, limit):
        with pytest.raises(InvalidConfigError):
            normalize_draws([make_record([1, 2, 3, 4, 5], 6)], limit=limit)
