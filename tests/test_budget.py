import random

import pytest

from dicebot.budget import RollBudget
from dicebot.errors import InvalidDiceError, ResourceExhaustedError


def test_draws_in_range():
    budget = RollBudget(max_rolls=500)
    values = [budget.draw(6) for _ in range(500)]

    assert all(1 <= value <= 6 for value in values)
    assert budget.rolls == 500
    assert budget.remaining == 0


def test_exhausted():
    budget = RollBudget(max_rolls=3)
    for _ in range(3):
        budget.draw(4)

    with pytest.raises(ResourceExhaustedError):
        budget.draw(4)


@pytest.mark.parametrize("sides", [0, -1])
def test_no_faces(sides):
    with pytest.raises(InvalidDiceError):
        RollBudget().draw(sides)


def test_seeded():
    first = RollBudget(rng=random.Random(7))
    second = RollBudget(rng=random.Random(7))

    assert [first.draw(20) for _ in range(10)] == [second.draw(20) for _ in range(10)]
