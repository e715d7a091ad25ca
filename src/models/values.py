"""
Typed constant values

Registry entries, expression literals and evaluation results all share the
closed three-variant union defined here: Integer, Float and Boolean.
"""

import math
from dataclasses import dataclass
from typing import Union


INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def int64_wrap(value: int) -> int:
    """
    Wrap an arbitrary Python int into signed 64-bit two's complement range.

    Example:
        >>> int64_wrap(1 << 63)
        -9223372036854775808
    """
    value &= (1 << 64) - 1
    if value > INT64_MAX:
        value -= 1 << 64
    return value


@dataclass(frozen=True)
class Integer:
    """Signed 64-bit integer value"""
    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Integer expects an int, got {type(self.value).__name__}")
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise ValueError(f"Integer value {self.value} does not fit in 64 bits")

    def literal_render(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Float:
    """64-bit floating point value"""
    value: float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise TypeError(f"Float expects a float, got {type(self.value).__name__}")
        object.__setattr__(self, "value", float(self.value))

    def literal_render(self) -> str:
        """
        Render as a decimal-point literal with round-trip precision.

        Returns:
            Shortest repr that parses back to the same float, always with
            a fractional part (e.g. 5.0 -> "5.0", 1e20 -> "1.0e+20")

        Raises:
            ValueError: For inf and nan, which have no literal form
        """
        if not math.isfinite(self.value):
            raise ValueError(f"{self.value!r} has no shader literal form")

        text = repr(self.value)
        if "e" in text:
            mantissa, exponent = text.split("e")
            if "." not in mantissa:
                mantissa += ".0"
            return f"{mantissa}e{exponent}"
        return text


@dataclass(frozen=True)
class Boolean:
    """Boolean value"""
    value: bool

    def __post_init__(self) -> None:
        if not isinstance(self.value, bool):
            raise TypeError(f"Boolean expects a bool, got {type(self.value).__name__}")

    def literal_render(self) -> str:
        return "true" if self.value else "false"


GlobalValue = Union[Integer, Float, Boolean]


def numeric_is(value: GlobalValue) -> bool:
    """Integer and Float are both numeric; Boolean is not"""
    return isinstance(value, (Integer, Float))


def typeName_get(value: GlobalValue) -> str:
    """Human readable type name used in error messages"""
    if isinstance(value, Integer):
        return "integer"
    if isinstance(value, Float):
        return "float"
    return "boolean"


def value_coerce(raw: object) -> GlobalValue:
    """
    Convert a plain Python scalar into a GlobalValue.

    bool is checked before int since bool is an int subclass.

    Args:
        raw: A bool, int or float (or an existing GlobalValue)

    Returns:
        The matching GlobalValue variant

    Raises:
        TypeError: For any other type (strings, lists, None, ...)

    Example:
        >>> value_coerce(64)
        Integer(value=64)
        >>> value_coerce(True)
        Boolean(value=True)
    """
    if isinstance(raw, (Integer, Float, Boolean)):
        return raw
    if isinstance(raw, bool):
        return Boolean(raw)
    if isinstance(raw, int):
        return Integer(raw)
    if isinstance(raw, float):
        return Float(raw)
    raise TypeError(
        f"Unsupported constant type {type(raw).__name__}: expected int, float or bool"
    )
