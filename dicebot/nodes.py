import dataclasses
import operator
import typing

from dicebot.errors import DiceRollError, DivisionByZeroError
from dicebot.operations import Operation

UNARY_OPERATORS: typing.Dict[str, typing.Callable] = {
    "+": operator.pos,
    "-": operator.neg,
}
BINARY_OPERATORS: typing.Dict[str, typing.Callable] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.floordiv,
    "%": operator.mod,
}


def apply_unary(op: str, value):
    if op not in UNARY_OPERATORS:
        raise DiceRollError("Unsupported unary operator '%s'" % op)
    return UNARY_OPERATORS[op](value)


def apply_binary(op: str, lhs, rhs):
    if op not in BINARY_OPERATORS:
        raise DiceRollError("Unsupported binary operator '%s'" % op)
    if op in ("/", "%") and rhs == 0:
        raise DivisionByZeroError("'%s %s %s' divides by zero" % (lhs, op, rhs))
    return BINARY_OPERATORS[op](lhs, rhs)


class Node:
    """An immutable expression tree node produced by the parser."""


@dataclasses.dataclass(frozen=True)
class Literal(Node):
    value: typing.Union[int, float]

    def __str__(self):
        return str(self.value)


@dataclasses.dataclass(frozen=True)
class Dice(Node):
    count: int
    sides: int
    operations: typing.Tuple[Operation, ...] = ()

    @property
    def operated(self) -> bool:
        return len(self.operations) > 0

    def __str__(self):
        return "%sd%s%s" % (
            self.count,
            self.sides,
            "".join(str(op) for op in self.operations),
        )


@dataclasses.dataclass(frozen=True)
class UnaryOp(Node):
    op: str
    operand: Node

    def __str__(self):
        return "%s%s" % (self.op, self.operand)


@dataclasses.dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node

    def __str__(self):
        return "%s %s %s" % (self.left, self.op, self.right)


@dataclasses.dataclass(frozen=True)
class Parenthetical(Node):
    inner: Node

    def __str__(self):
        return "(%s)" % self.inner
