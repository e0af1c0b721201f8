"""Tests for rolling expressions once."""

import random

import pytest

import dicebot
from dicebot import parse
from dicebot.budget import RollBudget
from dicebot.errors import (
    DivisionByZeroError,
    InvalidDiceError,
    ParseError,
    ResourceExhaustedError,
)
from dicebot.roll import RolledDice, Roller


@pytest.fixture
def rng():
    return random.Random(1234)


class TestArithmetic:
    def test_roll_bounds(self):
        for _ in range(1000):
            total = dicebot.roll("1d20 + 5").total()
            assert 6 <= total <= 25

    def test_basic_math(self):
        assert dicebot.roll("3 * 5 + 6 * (-3) / 4").total() == 10

    @pytest.mark.parametrize(
        "expression,total",
        [
            ("-7 / 2", -4),
            ("7 / 2", 3),
            ("7 % 3", 1),
            ("-7 % 3", 2),
            ("+4 - -2", 6),
            ("1.5 * 2", 3.0),
            ("2 * (3 + 4)", 14),
        ],
    )
    def test_totals(self, expression, total):
        assert dicebot.roll(expression).total() == total

    @pytest.mark.parametrize("expression", ["1d6 / 0", "1d6 % 0", "5 / (1d1 - 1)"])
    def test_division_by_zero(self, expression):
        with pytest.raises(DivisionByZeroError):
            dicebot.roll(expression)

    def test_parse_error(self):
        with pytest.raises(ParseError):
            dicebot.roll("1d6 +")


class TestDice:
    def test_zero_sides(self):
        with pytest.raises(InvalidDiceError):
            dicebot.roll("1d0")

    def test_zero_dice(self):
        result = dicebot.roll("0d0")

        assert result.total() == 0
        assert str(result) == "[]"

    def test_pool_in_roll_order(self, rng):
        result = dicebot.roll("10d6", rng=rng)

        assert len(result.dice) == 10
        assert result.total() == sum(die.value for die in result.dice)

    def test_each_roll_has_its_own_budget(self):
        for _ in range(3):
            assert dicebot.roll("1000d1").total() == 1000

    def test_seeded_rolls_repeat(self):
        first = dicebot.roll("6d20kh3 + 1d4", rng=random.Random(99))
        second = dicebot.roll("6d20kh3 + 1d4", rng=random.Random(99))

        assert str(first) == str(second)
        assert first.total() == second.total()


class TestKeepDrop:
    def test_keep_highest(self, rng):
        for _ in range(100):
            result = dicebot.roll("4d6kh3", rng=rng)
            values = [die.value for die in result.dice]
            kept = [die.value for die in result.kept_dice()]

            assert len(kept) == 3
            assert sorted(kept) == sorted(values)[1:]

    def test_drop_lowest(self):
        assert len(dicebot.roll("4d6pl3").kept_dice()) == 1

    def test_keep_then_drop(self):
        result = dicebot.roll("6d6kh5pl3")

        assert len(result.kept_dice()) == 2
        assert len(result.dropped_dice()) == 4

    def test_drop_matching(self, rng):
        for _ in range(50):
            result = dicebot.roll("8d6p<4", rng=rng)
            assert all(die.value >= 4 for die in result.kept_dice())
            assert all(die.value < 4 for die in result.dropped_dice())

    def test_keep_drops_everything_else(self):
        result = dicebot.roll("5d1k2")

        assert result.kept_dice() == []
        assert result.total() == 0

    def test_dropped_dice_stay_in_pool(self):
        result = dicebot.roll("3d1pl1")

        assert str(result) == "[1, 1]"
        assert result.trace() == "[~~1~~, 1, 1]"
        assert result.total() == 2


class TestClamp:
    def test_minimum(self, rng):
        result = dicebot.roll("20d6mi3", rng=rng)
        assert all(die.value >= 3 for die in result.dice)

    def test_maximum(self, rng):
        result = dicebot.roll("20d6ma2", rng=rng)
        assert all(die.value <= 2 for die in result.dice)

    def test_clamps_dropped_dice(self):
        result = dicebot.roll("2d1pl1mi4")

        assert [die.value for die in result.dice] == [4, 4]
        assert result.total() == 4


class TestReroll:
    def test_reroll_until_no_match(self, rng):
        result = dicebot.roll("20d6rr<3", rng=rng)
        assert all(die.value >= 3 for die in result.dice)

    def test_reroll_forever(self):
        with pytest.raises(ResourceExhaustedError):
            dicebot.roll("1d1rr1")

    def test_reroll_once(self):
        budget = RollBudget()
        result = Roller(budget).roll(parse("4d1ro1"))

        assert budget.rolls == 8
        assert all(die.rerolled for die in result.dice)
        assert result.total() == 4

    def test_reroll_once_lowest(self):
        budget = RollBudget()
        result = Roller(budget).roll(parse("4d1rol1"))

        assert budget.rolls == 5
        assert [die.rerolled for die in result.dice] == [True, False, False, False]


class TestExplode:
    def test_explode_once(self):
        assert len(dicebot.roll("3d1ra1").kept_dice()) == 4

    def test_explode_once_without_match(self):
        assert len(dicebot.roll("3d1ra2").dice) == 3

    def test_explode_forever(self):
        with pytest.raises(ResourceExhaustedError):
            dicebot.roll("4d1e1")

    def test_explode_highest(self):
        result = dicebot.roll("1d1eh5")

        assert len(result.kept_dice()) == 6
        assert [die.exploded for die in result.dice] == [False] + [True] * 5

    def test_explode_adds_dice(self, rng):
        for _ in range(50):
            result = dicebot.roll("4d6e6", rng=rng)
            sixes = sum(1 for die in result.dice if die.value == 6)
            assert len(result.dice) == 4 + sixes

    def test_explode_never_matching(self):
        assert len(dicebot.roll("2d6e>6").dice) == 2


class TestOperationOrder:
    def test_keep_before_explode(self):
        assert dicebot.roll("2d1kh1ra1").total() == 2

    def test_explode_before_keep(self):
        assert dicebot.roll("2d1ra1kh1").total() == 1


class TestRendering:
    def test_str_mirrors_expression(self):
        result = dicebot.roll("2d1 + (3 - 1d1) * -1")

        assert str(result) == "[1, 1] + (3 - [1]) * -1"
        assert result.total() == 0

    def test_expression_is_canonical(self):
        result = dicebot.roll(" d20kh1+  4 ")
        assert result.expression() == "1d20kh1 + 4"

    def test_dice_node(self):
        result = dicebot.roll("3d4")

        assert isinstance(result, RolledDice)
        assert str(result) == "[%s]" % ", ".join(str(die.value) for die in result.dice)
