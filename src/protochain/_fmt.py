"""Rendering of values as text.

Three levels of detail are provided:

to_string(value)      → str   string conversion of a primitive
describe(value)       → str   short label used in error messages
inspect(value, model) → str   console rendering, in the style of node's
                              ``console.log``
"""

__all__ = ["to_string", "describe", "inspect", "format_number"]

import math
import re

from ._object import Constructor, JsArray, JsFunction, JsObject
from ._value import NOT_FOUND, UNDEFINED


_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_MAX_DEPTH = 2


def format_number(number) -> str:
    if isinstance(number, bool):
        return "true" if number else "false"
    if isinstance(number, int):
        return str(number)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    return repr(number)


def to_string(value) -> str:
    """String conversion for primitive values.

    Objects need the model to find their ``toString``; callers convert
    those to primitives first.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, (bool, int, float)):
        return format_number(value)
    if isinstance(value, JsFunction):
        return f"function {value.name}() {{ [native code] }}"
    return "[object Object]"


def describe(value) -> str:
    """Short label for a value, for error messages."""
    if isinstance(value, str):
        return f"string '{value}'"
    if isinstance(value, Constructor):
        return f"constructor {value.name or '(anonymous)'}"
    if isinstance(value, JsFunction):
        return f"function {value.name or '(anonymous)'}"
    if isinstance(value, JsArray):
        return "array"
    if isinstance(value, JsObject):
        return "object"
    if value is NOT_FOUND:
        return "NOT_FOUND"
    return to_string(value)


def inspect(value, model, top=True) -> str:
    """Render a value the way the console shows it.

    Strings are shown bare at the top level and quoted when nested.
    """
    if top and isinstance(value, str):
        return value
    return _inspect(value, model, 0, set())


def _quote(text):
    if "'" in text and '"' not in text:
        return f'"{text}"'
    return "'" + text.replace("'", "\\'") + "'"


def _key(name):
    return name if _IDENTIFIER_RE.match(name) else _quote(name)


def _inspect(value, model, depth, active):
    if isinstance(value, str):
        return _quote(value)
    if isinstance(value, JsFunction):
        if value.name:
            return f"[Function: {value.name}]"
        return "[Function (anonymous)]"
    if not isinstance(value, JsObject):
        return to_string(value)

    if id(value) in active:
        return "[Circular]"
    if isinstance(value, JsArray):
        if depth > _MAX_DEPTH:
            return "[Array]"
        active.add(id(value))
        parts = [_inspect(item, model, depth + 1, active) for item in value.items]
        parts.extend(f"{_key(k)}: {_inspect(v, model, depth + 1, active)}"
                     for k, v in value.props.items())
        active.discard(id(value))
        return f"[ {', '.join(parts)} ]" if parts else "[]"

    prefix = _class_prefix(value, model)
    if depth > _MAX_DEPTH:
        return f"[{prefix.strip() or 'Object'}]"
    active.add(id(value))
    parts = [f"{_key(k)}: {_inspect(v, model, depth + 1, active)}"
             for k, v in value.props.items()]
    active.discard(id(value))
    body = f"{{ {', '.join(parts)} }}" if parts else "{}"
    return prefix + body


def _class_prefix(obj, model):
    """Constructor name shown before an object's braces."""
    if obj.proto is None:
        return "[Object: null prototype] "
    ctor = model.get_property(obj, "constructor")
    if isinstance(ctor, Constructor) and ctor.name and ctor.name != "Object":
        return f"{ctor.name} "
    return ""
