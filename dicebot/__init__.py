import logging
import random
import typing

from dicebot.budget import DEFAULT_MAX_ROLLS, RollBudget
from dicebot.distribution import (
    DEFAULT_MAX_DICE_SIZE,
    DEFAULT_MAX_OUTCOMES,
    Distribution,
    DistributionCalculator,
)
from dicebot.errors import (
    DiceRollError,
    DistributionError,
    DivisionByZeroError,
    InvalidDiceError,
    ModifierError,
    ParseError,
    ResourceExhaustedError,
    SizeExceededError,
    UnsupportedOperationError,
)
from dicebot.roll import RolledDice, RolledNode, Roller
from dicebot.roll_parser import parse

logger = logging.getLogger(__name__)


def roll(
    expression: str,
    max_rolls: int = DEFAULT_MAX_ROLLS,
    rng: typing.Optional[random.Random] = None,
) -> RolledNode:
    result = Roller(RollBudget(max_rolls, rng)).roll(parse(expression))
    logger.debug("rolled '%s': %s = %s", expression, result, result.total())
    return result


def distribution(
    expression: str,
    max_dice_size: int = DEFAULT_MAX_DICE_SIZE,
    max_outcomes: int = DEFAULT_MAX_OUTCOMES,
) -> Distribution:
    result = DistributionCalculator(max_dice_size, max_outcomes).calculate(
        parse(expression)
    )
    logger.debug("distribution of '%s' has %s outcomes", expression, len(result))
    return result
