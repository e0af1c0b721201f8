import logging
import random
import typing

from dicebot.errors import InvalidDiceError, ResourceExhaustedError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROLLS = 1000


class RollBudget:
    """Draws dice for one evaluation and caps how many may be drawn.

    Rerolling and exploding can loop forever on degenerate dice (``1d1rr1``,
    ``4d1e1``); once more than ``max_rolls`` dice have been drawn the
    evaluation fails instead.
    """

    def __init__(
        self,
        max_rolls: int = DEFAULT_MAX_ROLLS,
        rng: typing.Optional[random.Random] = None,
    ) -> None:
        self.max_rolls = max_rolls
        self.rng = random if rng is None else rng
        self.rolls = 0

    @property
    def remaining(self) -> int:
        return max(self.max_rolls - self.rolls, 0)

    def draw(self, sides: int) -> int:
        if sides < 1:
            raise InvalidDiceError("attempted to roll a die with %s faces" % sides)
        self.rolls += 1
        if self.rolls > self.max_rolls:
            logger.warning("roll budget of %s dice exhausted", self.max_rolls)
            raise ResourceExhaustedError(
                "Rolled more than %s dice; the expression never settles"
                % self.max_rolls
            )
        return self.rng.randint(1, sides)
