"""Operator semantics for script values.

There is a function here for each operator family the interpreter
evaluates. Conversions that may run a user ``toString`` take the model.
"""

__all__ = [
    "truthy",
    "type_of",
    "to_number",
    "to_integer",
    "to_primitive",
    "to_text",
    "math_binary",
    "compare",
    "loose_equals",
    "strict_equals",
]

import math

from ._fmt import to_string
from ._object import JsFunction, JsObject
from ._value import UNDEFINED, is_nullish


def truthy(value) -> bool:
    if is_nullish(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def type_of(value) -> str:
    """Result of the ``typeof`` operator."""
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, JsFunction):
        return "function"
    return "object"


def to_number(value):
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return 0
    if value is UNDEFINED:
        return math.nan
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            number = float(text)
        except ValueError:
            return math.nan
        return int(number) if number.is_integer() and "." not in text else number
    return math.nan


def to_integer(value):
    """Integer conversion used for indexes and counts.

    NaN becomes 0 and infinities stay floats for the caller to clamp.
    Other numbers are truncated toward zero.
    """
    number = to_number(value)
    if isinstance(number, int):
        return number
    if math.isnan(number):
        return 0
    if math.isinf(number):
        return number
    return int(number)


def to_primitive(model, value):
    """Reduce an object to a primitive through its ``toString`` method."""
    if isinstance(value, JsObject) and not isinstance(value, JsFunction):
        result = model.invoke(value, "toString")
        if isinstance(result, JsObject):
            return to_string(result)
        return result
    return value


def to_text(model, value) -> str:
    """String conversion that honours a custom ``toString`` on objects."""
    return to_string(to_primitive(model, value))


def math_binary(model, op, left, right):
    """Arithmetic operation.

    Args:
        model: (ObjectModel) Used to convert object operands
        op: (str) Operator like "+" "-" "*" "/" "%"
        left: Left value
        right: Right value

    Returns:
        Result of the operation; ``+`` concatenates when either side
        converts to a string
    """
    if op == "+":
        left = to_primitive(model, left)
        right = to_primitive(model, right)
        if isinstance(left, str) or isinstance(right, str):
            return to_string(left) + to_string(right)
    lval = to_number(left)
    rval = to_number(right)
    if op == "+":
        result = lval + rval
    elif op == "-":
        result = lval - rval
    elif op == "*":
        result = lval * rval
    elif op == "/":
        if rval == 0:
            if lval == 0 or math.isnan(lval):
                return math.nan
            return math.copysign(math.inf, lval) * math.copysign(1, rval)
        result = lval / rval
    elif op == "%":
        if rval == 0 or math.isinf(lval):
            return math.nan
        result = math.fmod(lval, rval)
    else:
        raise ValueError(f"Unknown arithmetic operator {op!r}")
    if isinstance(result, float) and result.is_integer() and abs(result) < 2 ** 53:
        return int(result)
    return result


def compare(model, op, left, right) -> bool:
    """Relational comparison: ``<`` ``>`` ``<=`` ``>=``."""
    left = to_primitive(model, left)
    right = to_primitive(model, right)
    if not (isinstance(left, str) and isinstance(right, str)):
        left = to_number(left)
        right = to_number(right)
        if math.isnan(left) or math.isnan(right):
            return False
    if op == "<":
        return left < right
    if op == ">":
        return left > right
    if op == "<=":
        return left <= right
    if op == ">=":
        return left >= right
    raise ValueError(f"Unknown comparison operator {op!r}")


def strict_equals(left, right) -> bool:
    """The ``===`` comparison."""
    if isinstance(left, JsObject) or isinstance(right, JsObject):
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def loose_equals(model, left, right) -> bool:
    """The ``==`` comparison with its type coercions."""
    if is_nullish(left) or is_nullish(right):
        return is_nullish(left) and is_nullish(right)
    if isinstance(left, JsObject) and isinstance(right, JsObject):
        return left is right
    if isinstance(left, JsObject):
        left = to_primitive(model, left)
    if isinstance(right, JsObject):
        right = to_primitive(model, right)
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return to_number(left) == to_number(right)
