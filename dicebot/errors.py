class DiceRollError(ValueError):
    pass


class ParseError(DiceRollError):
    pass


class ModifierError(DiceRollError):
    pass


class UnsupportedOperationError(ModifierError):
    pass


class InvalidDiceError(DiceRollError):
    pass


class DivisionByZeroError(DiceRollError, ZeroDivisionError):
    pass


class ResourceExhaustedError(DiceRollError):
    pass


class SizeExceededError(DiceRollError):
    pass


class DistributionError(DiceRollError):
    pass
