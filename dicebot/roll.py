import typing

import dicebot.nodes as nodes
from dicebot.budget import RollBudget
from dicebot.errors import DiceRollError
from dicebot.operations import Operation, OperationKind


class RolledNode:
    def total(self):
        raise NotImplementedError

    def expression(self) -> str:
        raise NotImplementedError

    def render(self, trace: bool) -> str:
        raise NotImplementedError

    def trace(self) -> str:
        """Like ``str()``, but also shows dropped dice struck through."""
        return self.render(True)

    def __str__(self):
        return self.render(False)


class RolledLiteral(RolledNode):
    def __init__(self, node: nodes.Literal) -> None:
        self.node = node

    def total(self):
        return self.node.value

    def expression(self) -> str:
        return str(self.node)

    def render(self, trace: bool) -> str:
        return str(self.node.value)


class RolledDie:
    def __init__(self, sides: int, value: int, exploded: bool = False) -> None:
        self.sides = sides
        self.value = value
        self.kept = True
        self.rerolled = False
        self.exploded = exploded

    def reroll(self, budget: RollBudget):
        self.value = budget.draw(self.sides)
        self.rerolled = True

    def __repr__(self) -> str:
        result = str(self.value)
        if not self.kept:
            result = "~~%s~~" % result
        return result


class RolledDice(RolledNode):
    """A pool of dice, in the order they were rolled.

    Operations never remove dice from the pool; dropping a die only clears
    its ``kept`` flag so it stays visible in traces.
    """

    def __init__(self, node: nodes.Dice, budget: RollBudget) -> None:
        self.node = node
        self.budget = budget
        self.dice: typing.List[RolledDie] = []
        for _ in range(node.count):
            self.dice.append(RolledDie(node.sides, budget.draw(node.sides)))
        for operation in node.operations:
            self.apply(operation)

    def kept_dice(self) -> typing.List[RolledDie]:
        return [die for die in self.dice if die.kept]

    def dropped_dice(self) -> typing.List[RolledDie]:
        return [die for die in self.dice if not die.kept]

    def apply(self, operation: Operation):
        _OPERATIONS[operation.kind](self, operation)

    def _select(self, operation: Operation) -> typing.List[int]:
        kept = [i for i, die in enumerate(self.dice) if die.kept]
        chosen = operation.selector.select([self.dice[i].value for i in kept])
        return [kept[i] for i in chosen]

    def _add_die(self):
        die = RolledDie(self.node.sides, self.budget.draw(self.node.sides), True)
        self.dice.append(die)

    def _clamp(self, operation: Operation):
        for die in self.dice:
            die.value = operation.clamp(die.value)

    def _reroll(self, operation: Operation):
        for i in self._select(operation):
            die = self.dice[i]
            while operation.selector.matches(die.value):
                die.reroll(self.budget)

    def _reroll_once(self, operation: Operation):
        for i in self._select(operation):
            self.dice[i].reroll(self.budget)

    def _explode_once(self, operation: Operation):
        if self._select(operation)[:1]:
            self._add_die()

    def _explode(self, operation: Operation):
        exploded: typing.Set[int] = set()
        to_explode = self._select(operation)
        while to_explode:
            for _ in to_explode:
                self._add_die()
            exploded.update(to_explode)
            to_explode = [i for i in self._select(operation) if i not in exploded]

    def _keep(self, operation: Operation):
        chosen = set(self._select(operation))
        for i, die in enumerate(self.dice):
            die.kept = i in chosen

    def _drop(self, operation: Operation):
        for i in self._select(operation):
            self.dice[i].kept = False

    def total(self):
        return sum(die.value for die in self.kept_dice())

    def expression(self) -> str:
        return str(self.node)

    def render(self, trace: bool) -> str:
        dice = self.dice if trace else self.kept_dice()
        return "[%s]" % ", ".join(repr(die) for die in dice)


_OPERATIONS: typing.Dict[
    OperationKind, typing.Callable[[RolledDice, Operation], None]
] = {
    OperationKind.MIN: RolledDice._clamp,
    OperationKind.MAX: RolledDice._clamp,
    OperationKind.REROLL: RolledDice._reroll,
    OperationKind.REROLL_ONCE: RolledDice._reroll_once,
    OperationKind.EXPLODE_ONCE: RolledDice._explode_once,
    OperationKind.EXPLODE: RolledDice._explode,
    OperationKind.KEEP: RolledDice._keep,
    OperationKind.DROP: RolledDice._drop,
}


class RolledUnaryOp(RolledNode):
    def __init__(self, node: nodes.UnaryOp, operand: RolledNode) -> None:
        self.node = node
        self.operand = operand
        self._total = nodes.apply_unary(node.op, operand.total())

    def total(self):
        return self._total

    def expression(self) -> str:
        return "%s%s" % (self.node.op, self.operand.expression())

    def render(self, trace: bool) -> str:
        return "%s%s" % (self.node.op, self.operand.render(trace))


class RolledBinaryOp(RolledNode):
    def __init__(
        self, node: nodes.BinaryOp, left: RolledNode, right: RolledNode
    ) -> None:
        self.node = node
        self.left = left
        self.right = right
        self._total = nodes.apply_binary(node.op, left.total(), right.total())

    def total(self):
        return self._total

    def expression(self) -> str:
        return "%s %s %s" % (
            self.left.expression(),
            self.node.op,
            self.right.expression(),
        )

    def render(self, trace: bool) -> str:
        return "%s %s %s" % (
            self.left.render(trace),
            self.node.op,
            self.right.render(trace),
        )


class RolledParenthetical(RolledNode):
    def __init__(self, node: nodes.Parenthetical, inner: RolledNode) -> None:
        self.node = node
        self.inner = inner

    def total(self):
        return self.inner.total()

    def expression(self) -> str:
        return "(%s)" % self.inner.expression()

    def render(self, trace: bool) -> str:
        return "(%s)" % self.inner.render(trace)


class Roller:
    """Rolls an expression tree once, drawing every die from one budget."""

    def __init__(self, budget: typing.Optional[RollBudget] = None) -> None:
        self.budget = RollBudget() if budget is None else budget

    def roll(self, node: nodes.Node) -> RolledNode:
        handler = self._HANDLERS.get(type(node))
        if handler is None:
            raise DiceRollError("Cannot roll '%s'" % node)
        return handler(self, node)

    def _roll_literal(self, node: nodes.Literal) -> RolledNode:
        return RolledLiteral(node)

    def _roll_dice(self, node: nodes.Dice) -> RolledNode:
        return RolledDice(node, self.budget)

    def _roll_unary(self, node: nodes.UnaryOp) -> RolledNode:
        return RolledUnaryOp(node, self.roll(node.operand))

    def _roll_binary(self, node: nodes.BinaryOp) -> RolledNode:
        return RolledBinaryOp(node, self.roll(node.left), self.roll(node.right))

    def _roll_parenthetical(self, node: nodes.Parenthetical) -> RolledNode:
        return RolledParenthetical(node, self.roll(node.inner))

    _HANDLERS: typing.Dict[type, typing.Callable[["Roller", typing.Any], RolledNode]] = {
        nodes.Literal: _roll_literal,
        nodes.Dice: _roll_dice,
        nodes.UnaryOp: _roll_unary,
        nodes.BinaryOp: _roll_binary,
        nodes.Parenthetical: _roll_parenthetical,
    }
