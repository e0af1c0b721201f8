import os
import re
import typing

import lark

import dicebot.nodes as nodes
from dicebot.errors import ParseError
from dicebot.operations import Operation

_DICE = re.compile(r"(\d*)d(\d+)(.*)", re.IGNORECASE)
_OPERATION = re.compile(r"(mi|ma|ro|rr|ra|e|k|p)([hl<>]?)(\d+)", re.IGNORECASE)


def _parse_operations(text: str) -> typing.Tuple[Operation, ...]:
    return tuple(
        Operation.from_codes(kind, mode, int(value))
        for kind, mode, value in _OPERATION.findall(text)
    )


@lark.v_args(inline=True)
class _RollParser(lark.Transformer):
    def number(self, token: lark.Token) -> nodes.Literal:
        if "." in token:
            return nodes.Literal(float(token))
        return nodes.Literal(int(token))

    def dice(self, token: lark.Token) -> nodes.Dice:
        count, sides, operations = _DICE.fullmatch(str(token)).groups()
        return nodes.Dice(
            int(count) if count else 1,
            int(sides),
            _parse_operations(operations),
        )

    def pos(self, operand: nodes.Node) -> nodes.UnaryOp:
        return nodes.UnaryOp("+", operand)

    def neg(self, operand: nodes.Node) -> nodes.UnaryOp:
        return nodes.UnaryOp("-", operand)

    def add(self, left: nodes.Node, right: nodes.Node) -> nodes.BinaryOp:
        return nodes.BinaryOp("+", left, right)

    def sub(self, left: nodes.Node, right: nodes.Node) -> nodes.BinaryOp:
        return nodes.BinaryOp("-", left, right)

    def mul(self, left: nodes.Node, right: nodes.Node) -> nodes.BinaryOp:
        return nodes.BinaryOp("*", left, right)

    def div(self, left: nodes.Node, right: nodes.Node) -> nodes.BinaryOp:
        return nodes.BinaryOp("/", left, right)

    def mod(self, left: nodes.Node, right: nodes.Node) -> nodes.BinaryOp:
        return nodes.BinaryOp("%", left, right)

    def parenthetical(self, inner: nodes.Node) -> nodes.Parenthetical:
        return nodes.Parenthetical(inner)


_grammar_file = os.path.join(os.path.dirname(__file__), "roll.lark")
with open(_grammar_file) as f:
    _grammar = lark.Lark(f, parser="lalr")


def parse(text: str) -> nodes.Node:
    try:
        return _RollParser().transform(_grammar.parse(text))
    except lark.exceptions.VisitError as e:
        raise e.orig_exc
    except lark.exceptions.UnexpectedInput as e:
        raise ParseError(
            "could not parse '%s':\n%s" % (text, e.get_context(text).rstrip())
        )
