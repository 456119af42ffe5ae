"""Runtime values of the Imp language. Values are small and immutable: evaluation never changes a value in place, it
only rebinds names to new values.
"""

from dataclasses import dataclass

from impinterp.lang.error import IntegerOverflow


INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1


class Value:
    """Superclass of Integer, Boolean and Unit."""
    type_tag = None


@dataclass(frozen=True)
class Integer(Value):
    """32-bit signed integer."""
    value: int
    type_tag = "int"

    def __post_init__(self):
        assert isinstance(self.value, int) and not isinstance(self.value, bool), "Integer expects an int"
        if not INT_MIN <= self.value <= INT_MAX:
            raise IntegerOverflow(self.value)

    def __str__(self):
        return str(self.value)


@dataclass(frozen=True)
class Boolean(Value):
    value: bool
    type_tag = "bool"

    def __post_init__(self):
        assert isinstance(self.value, bool), "Boolean expects a bool"

    def __str__(self):
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Unit(Value):
    type_tag = "unit"

    def __str__(self):
        return "()"


TRUE = Boolean(True)
FALSE = Boolean(False)
UNIT = Unit()
