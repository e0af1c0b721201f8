import collections
import itertools
import logging
import math
import typing

import numpy

import dicebot.nodes as nodes
from dicebot.errors import (
    DiceRollError,
    DistributionError,
    DivisionByZeroError,
    InvalidDiceError,
    SizeExceededError,
    UnsupportedOperationError,
)
from dicebot.operations import Operation, OperationKind

logger = logging.getLogger(__name__)

EPSILON = 1e-6
DEFAULT_MAX_DICE_SIZE = 101 * 101
DEFAULT_MAX_OUTCOMES = 8192


class Distribution:
    """An exact probability mass function over the totals of an expression.

    Instances are never mutated; every combinator returns a new one. With
    ``validate`` set (the default) a table whose masses do not sum to 1 is
    rejected with a DistributionError.
    """

    def __init__(self, table: typing.Mapping[typing.Any, float], validate: bool = True):
        self._table: typing.Dict[typing.Any, float] = dict(table)
        if validate:
            total = math.fsum(self._table.values())
            if abs(1.0 - total) >= EPSILON:
                raise DistributionError(
                    "Distribution odds total %s instead of 1.0" % total
                )

    @classmethod
    def point(cls, value) -> "Distribution":
        return cls({value: 1.0})

    @classmethod
    def uniform(cls, sides: int) -> "Distribution":
        if sides < 1:
            raise InvalidDiceError("attempted to roll a die with %s faces" % sides)
        return cls({i: 1 / sides for i in range(1, sides + 1)})

    def get(self, key) -> float:
        return self._table.get(key, 0.0)

    def has(self, key) -> bool:
        return key in self._table

    __contains__ = has

    def __len__(self) -> int:
        return len(self._table)

    def keys(self) -> typing.List:
        return sorted(self._table)

    def items(self) -> typing.List[typing.Tuple[typing.Any, float]]:
        return sorted(self._table.items())

    def min(self):
        return min(self._table)

    def max(self):
        return max(self._table)

    def mean(self, transform: typing.Optional[typing.Callable] = None) -> float:
        if transform is None:
            transform = lambda x: x
        return math.fsum(transform(key) * value for key, value in self.items())

    def stddev(self) -> float:
        # var(X) = E[X^2] - E[X]^2
        variance = self.mean(lambda x: x * x) - self.mean() ** 2
        return math.sqrt(max(variance, 0.0))

    def probability(self, predicate: typing.Callable[[typing.Any], bool]) -> float:
        return math.fsum(value for key, value in self.items() if predicate(key))

    def transform_keys(self, transform: typing.Callable) -> "Distribution":
        result: typing.Dict[typing.Any, float] = {}
        for key, value in self.items():
            new_key = transform(key)
            result.setdefault(new_key, 0.0)
            result[new_key] += value
        return Distribution(result)

    def combine(
        self, other: "Distribution", op: typing.Callable[[typing.Any, typing.Any], typing.Any]
    ) -> "Distribution":
        result: typing.Dict[typing.Any, float] = {}
        for key1, value1 in self.items():
            for key2, value2 in other.items():
                new_key = op(key1, key2)
                result.setdefault(new_key, 0.0)
                result[new_key] += value1 * value2
        return Distribution(result)

    def apply(self, op: str, other: "Distribution") -> "Distribution":
        if op in ("/", "%") and other.has(0):
            raise DivisionByZeroError(
                "Distribution contains a %s by zero"
                % ("division" if op == "/" else "modulo")
            )
        return self.combine(other, nodes.BINARY_OPERATORS[op])

    def add(self, other: "Distribution") -> "Distribution":
        return self.apply("+", other)

    def sub(self, other: "Distribution") -> "Distribution":
        return self.apply("-", other)

    def mul(self, other: "Distribution") -> "Distribution":
        return self.apply("*", other)

    def div(self, other: "Distribution") -> "Distribution":
        return self.apply("/", other)

    def mod(self, other: "Distribution") -> "Distribution":
        return self.apply("%", other)

    def neg(self) -> "Distribution":
        return self.transform_keys(lambda x: -x)

    def advantage(self) -> "Distribution":
        return self.combine(self, max)

    def disadvantage(self) -> "Distribution":
        return self.combine(self, min)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Distribution):
            return NotImplemented
        return self._table == other._table

    def __repr__(self) -> str:
        return "Distribution(%s)" % ", ".join(
            "%s: %.4f" % (key, value) for key, value in self.items()
        )


def _clamp(values: tuple, operation: Operation) -> tuple:
    return tuple(operation.clamp(value) for value in values)


def _keep(values: tuple, operation: Operation) -> tuple:
    return tuple(values[i] for i in operation.selector.select(values))


def _drop(values: tuple, operation: Operation) -> tuple:
    chosen = set(operation.selector.select(values))
    return tuple(value for i, value in enumerate(values) if i not in chosen)


# every operation here only looks at values, so pools can be kept sorted
_EXACT_OPERATIONS: typing.Dict[
    OperationKind, typing.Callable[[tuple, Operation], tuple]
] = {
    OperationKind.MIN: _clamp,
    OperationKind.MAX: _clamp,
    OperationKind.KEEP: _keep,
    OperationKind.DROP: _drop,
}


class DistributionCalculator:
    """Computes the exact distribution of an expression tree.

    Plain dice are convolved; dice with operations are enumerated outcome by
    outcome. Both paths are bounded: ``max_dice_size`` caps ``sides * count``
    for plain dice and ``max_outcomes`` caps ``sides ** count`` for dice with
    operations.
    """

    def __init__(
        self,
        max_dice_size: int = DEFAULT_MAX_DICE_SIZE,
        max_outcomes: int = DEFAULT_MAX_OUTCOMES,
    ) -> None:
        self.max_dice_size = max_dice_size
        self.max_outcomes = max_outcomes

    def calculate(self, node: nodes.Node) -> Distribution:
        handler = self._HANDLERS.get(type(node))
        if handler is None:
            raise DiceRollError("Distribution of '%s' cannot be computed" % node)
        return handler(self, node)

    def _literal(self, node: nodes.Literal) -> Distribution:
        return Distribution.point(node.value)

    def _unary(self, node: nodes.UnaryOp) -> Distribution:
        operand = self.calculate(node.operand)
        if node.op == "+":
            return operand
        elif node.op == "-":
            return operand.neg()
        raise DiceRollError("Unsupported unary operator '%s'" % node.op)

    def _binary(self, node: nodes.BinaryOp) -> Distribution:
        if node.op not in nodes.BINARY_OPERATORS:
            raise DiceRollError("Unsupported binary operator '%s'" % node.op)
        left = self.calculate(node.left)
        right = self.calculate(node.right)
        return left.apply(node.op, right)

    def _parenthetical(self, node: nodes.Parenthetical) -> Distribution:
        return self.calculate(node.inner)

    def _dice(self, node: nodes.Dice) -> Distribution:
        for operation in node.operations:
            if not operation.exact:
                raise UnsupportedOperationError(
                    "Operation '%s' is not supported for distributions" % operation
                )
        if node.count == 0:
            return Distribution.point(0)
        if node.sides < 1:
            raise InvalidDiceError(
                "attempted to roll a die with %s faces" % node.sides
            )
        if node.operated:
            return self._operated_dice(node)

        if node.sides * node.count > self.max_dice_size:
            logger.warning("refusing to convolve '%s'", node)
            raise SizeExceededError(
                "'%s' has too many dice to compute (at most %s sides times count)"
                % (node, self.max_dice_size)
            )

        die = numpy.full(node.sides, 1 / node.sides)
        masses = die
        for _ in range(node.count - 1):
            masses = numpy.convolve(masses, die)
        logger.debug("convolved '%s' into %s outcomes", node, len(masses))
        return Distribution(
            {node.count + i: float(mass) for i, mass in enumerate(masses)}
        )

    def _operated_dice(self, node: nodes.Dice) -> Distribution:
        # sides ** count can have thousands of digits; stop at the ceiling
        outcomes = 1
        for _ in range(node.count):
            outcomes *= node.sides
            if outcomes > self.max_outcomes:
                logger.warning("refusing to enumerate '%s'", node)
                raise SizeExceededError(
                    "'%s' has more than %s possible outcomes"
                    % (node, self.max_outcomes)
                )

        pools: typing.Counter[tuple] = collections.Counter(
            tuple(sorted(values))
            for values in itertools.product(range(1, node.sides + 1), repeat=node.count)
        )
        logger.debug(
            "enumerated %s outcomes of '%s' into %s pools", outcomes, node, len(pools)
        )

        result: typing.Dict[int, float] = {}
        for pool, ways in pools.items():
            for operation in node.operations:
                pool = _EXACT_OPERATIONS[operation.kind](pool, operation)
            total = sum(pool)
            result.setdefault(total, 0.0)
            result[total] += ways / outcomes
        return Distribution(result)

    _HANDLERS: typing.Dict[
        type, typing.Callable[["DistributionCalculator", typing.Any], Distribution]
    ] = {
        nodes.Literal: _literal,
        nodes.Dice: _dice,
        nodes.UnaryOp: _unary,
        nodes.BinaryOp: _binary,
        nodes.Parenthetical: _parenthetical,
    }
