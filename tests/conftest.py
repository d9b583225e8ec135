import pytest

from hybrid_lotto.draws import Draw


def make_record(balls, powerball, draw_date=None, draw_number=None):
    record = {f'ball{i}': n for i, n in enumerate(balls, 1)}
    record['powerball'] = powerball
    if draw_date is not None:
        record['drawDate'] = draw_date
    if draw_number is not None:
        record['drawNumber'] = draw_number
    return record


def make_draw(balls, special):
    return Draw(tuple(sorted(balls)), special)


class FixedRandom:
    """Random source whose random() returns queued values."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def random(self):
        self.calls += 1
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


@pytest.fixture
def sample_draws():
    return [
        make_draw([1, 2, 7, 10, 20], 3),
        make_draw([1, 2, 7, 11, 21], 3),
        make_draw([3, 7, 12, 22, 30], 5),
        make_draw([4, 7, 13, 23, 31], 8),
        make_draw([5, 7, 14, 24, 32], 3),
        make_draw([1, 2, 7, 15, 25], 1),
    ]
