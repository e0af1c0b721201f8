import dataclasses
import enum
import typing

from dicebot.errors import ModifierError


class OperationKind(enum.Enum):
    MIN = "mi"
    MAX = "ma"
    REROLL_ONCE = "ro"
    REROLL = "rr"
    EXPLODE_ONCE = "ra"
    EXPLODE = "e"
    KEEP = "k"
    DROP = "p"


class SelectorMode(enum.Enum):
    EXACT = ""
    HIGHEST = "h"
    LOWEST = "l"
    LESS_THAN = "<"
    GREATER_THAN = ">"

    @property
    def ranked(self) -> bool:
        return self in (SelectorMode.HIGHEST, SelectorMode.LOWEST)


@dataclasses.dataclass(frozen=True)
class Selector:
    """Picks dice out of a pool.

    Ranked selectors (highest/lowest) take a count of dice; the others compare
    each die against a threshold.
    """

    mode: SelectorMode
    value: int

    def __post_init__(self):
        if self.value < 0:
            raise ModifierError("Selector '%s' needs a non-negative value" % self)

    def matches(self, value) -> bool:
        if self.mode == SelectorMode.EXACT:
            return value == self.value
        elif self.mode == SelectorMode.LESS_THAN:
            return value < self.value
        elif self.mode == SelectorMode.GREATER_THAN:
            return value > self.value
        raise ModifierError(
            "Selector '%s' ranks dice and cannot match a single value" % self
        )

    def select(self, values: typing.Sequence) -> typing.List[int]:
        """Returns the indices of the selected values, in pool order.

        Ties between ranked values go to the earlier die.
        """
        if not self.mode.ranked:
            return [i for i, value in enumerate(values) if self.matches(value)]

        ranking = sorted(
            range(len(values)),
            key=lambda i: values[i],
            reverse=self.mode == SelectorMode.HIGHEST,
        )
        return sorted(ranking[: self.value])

    def __str__(self):
        return "%s%s" % (self.mode.value, self.value)


# operations whose selectors must compare against a value
_NO_RANKING = {OperationKind.REROLL}
# operations that only take a plain threshold
_THRESHOLD_ONLY = {OperationKind.MIN, OperationKind.MAX}

EXACT_OPERATIONS = frozenset(
    {OperationKind.MIN, OperationKind.MAX, OperationKind.KEEP, OperationKind.DROP}
)


@dataclasses.dataclass(frozen=True)
class Operation:
    kind: OperationKind
    selector: Selector

    def __post_init__(self):
        if self.kind in _NO_RANKING and self.selector.mode.ranked:
            raise ModifierError(
                "Operation '%s' cannot use a highest/lowest selector" % self
            )
        if self.kind in _THRESHOLD_ONLY and self.selector.mode != SelectorMode.EXACT:
            raise ModifierError(
                "Operation '%s' only accepts a plain threshold value" % self
            )

    @classmethod
    def from_codes(cls, kind: str, mode: str, value: int) -> "Operation":
        try:
            operation_kind = OperationKind(kind.lower())
            selector_mode = SelectorMode(mode.lower())
        except ValueError:
            raise ModifierError("Unknown modifier '%s%s%s'" % (kind, mode, value))
        return cls(operation_kind, Selector(selector_mode, value))

    @property
    def exact(self) -> bool:
        return self.kind in EXACT_OPERATIONS

    def clamp(self, value):
        if self.kind == OperationKind.MIN:
            return max(value, self.selector.value)
        elif self.kind == OperationKind.MAX:
            return min(value, self.selector.value)
        raise ModifierError("Operation '%s' does not clamp values" % self)

    def __str__(self):
        return "%s%s" % (self.kind.value, self.selector)
