import random

import pytest

from musical_statues.services.games.intervals import IntervalGenerator


def test_draw_stays_within_inclusive_bounds():
    generator = IntervalGenerator(random.Random(7))
    draws = [generator.draw(3, 8) for _ in range(500)]
    assert all(3_000 <= d <= 8_000 for d in draws)
    assert all(d % 1000 == 0 for d in draws)
    # Both ends of the range are reachable
    assert set(draws) == {s * 1000 for s in range(3, 9)}


def test_equal_bounds_give_fixed_interval():
    generator = IntervalGenerator(random.Random(1))
    assert {generator.draw(12, 12) for _ in range(20)} == {12_000}
    assert generator.draw(0, 0) == 0


@pytest.mark.parametrize('bounds', [(5, 4), (-1, 3)])
def test_invalid_bounds_raise(bounds):
    with pytest.raises(ValueError):
        IntervalGenerator(random.Random(1)).draw(*bounds)


def test_seeded_generators_repeat():
    a = IntervalGenerator(random.Random(42))
    b = IntervalGenerator(random.Random(42))
    assert [a.draw(10, 40) for _ in range(10)] == [b.draw(10, 40) for _ in range(10)]
