"""Object types stored in and produced by the object model."""

__all__ = [
    "JsObject",
    "JsArray",
    "JsFunction",
    "NativeFunction",
    "Constructor",
    "property_key",
]

import math

from ._error import ObjectTypeError
from ._value import NOT_FOUND, UNDEFINED


def property_key(value) -> str:
    """Convert a script value into the string used as a property name."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    return str(value)


def _index(name: str):
    """Array index for a property name, or None when it is not one."""
    if name.isdigit() and (name == "0" or not name.startswith("0")):
        return int(name)
    return None


def _array_length(value) -> int:
    """Validate a value assigned to an array's ``length``."""
    if (isinstance(value, bool) or not isinstance(value, (int, float))
            or value < 0 or (isinstance(value, float) and not value.is_integer())):
        raise ObjectTypeError("Invalid array length")
    return int(value)


class JsObject:
    """An object with own properties and a single prototype link.

    Both instances and prototypes are JsObjects; a prototype is simply an
    object that other objects point at through ``proto``. The root of every
    chain has ``proto`` set to None.

    The methods here touch only the object's own mapping. Chain walking,
    shadowing and write protection live in ``ObjectModel``.
    """

    def __init__(self, proto=None, props=None):
        self.proto = proto
        self.props = dict(props) if props else {}
        self.extensible = True
        self.sealed = False
        self.frozen = False

    def get_own(self, name):
        return self.props.get(name, NOT_FOUND)

    def has_own(self, name) -> bool:
        return name in self.props

    def set_own(self, name, value):
        self.props[name] = value

    def delete_own(self, name) -> bool:
        return self.props.pop(name, NOT_FOUND) is not NOT_FOUND

    def own_keys(self) -> list:
        return list(self.props)

    def __repr__(self):
        return f"JsObject({', '.join(self.props)})"


class JsArray(JsObject):
    """Array object whose elements are own properties backed by a list.

    Indexed elements and ``length`` behave as own properties; any other
    names fall back to the ordinary property mapping.
    """

    def __init__(self, proto=None, items=None):
        super().__init__(proto)
        self.items = list(items) if items else []

    def get_own(self, name):
        if name == "length":
            return len(self.items)
        index = _index(name)
        if index is not None:
            if index < len(self.items):
                return self.items[index]
            return NOT_FOUND
        return super().get_own(name)

    def has_own(self, name) -> bool:
        if name == "length":
            return True
        index = _index(name)
        if index is not None:
            return index < len(self.items)
        return super().has_own(name)

    def set_own(self, name, value):
        if name == "length":
            size = _array_length(value)
            del self.items[size:]
            self.items.extend([UNDEFINED] * (size - len(self.items)))
            return
        index = _index(name)
        if index is not None:
            if index >= len(self.items):
                self.items.extend([UNDEFINED] * (index + 1 - len(self.items)))
            self.items[index] = value
            return
        super().set_own(name, value)

    def delete_own(self, name) -> bool:
        index = _index(name)
        if index is not None and index < len(self.items):
            self.items[index] = UNDEFINED
            return True
        return super().delete_own(name)

    def own_keys(self) -> list:
        return [str(i) for i in range(len(self.items))] + list(self.props)

    def __repr__(self):
        return f"JsArray({self.items!r})"


class JsFunction(JsObject):
    """Base for callable objects.

    Functions are objects too, so they carry their own property mapping
    (used for static members such as ``Object.getPrototypeOf``).
    """

    def __init__(self, name="", proto=None):
        super().__init__(proto)
        self.name = name

    def invoke(self, this, args):
        """Run the function with ``this`` bound and return its result."""
        raise NotImplementedError

    def get_own(self, name):
        if name == "name":
            return self.name
        return super().get_own(name)

    def has_own(self, name) -> bool:
        return name == "name" or super().has_own(name)

    def __repr__(self):
        return f"<{type(self).__name__} {self.name or '(anonymous)'}>"


class NativeFunction(JsFunction):
    """Function implemented in Python.

    The wrapped callable receives ``this`` followed by the call arguments;
    its return value is passed through unchanged, so None reads as null.
    Native functions cannot be used with ``new``.
    """

    def __init__(self, name, fn, proto=None):
        super().__init__(name, proto)
        self.fn = fn

    def invoke(self, this, args):
        return self.fn(this, *args)


class Constructor(JsFunction):
    """Named factory binding an init routine to exactly one prototype.

    The prototype's ``constructor`` property is pointed back at the
    constructor when both are created together. Replacing the prototype
    later does not repair that link.

    Attributes:
        name: (str) Constructor name
        init: (callable | None) Called as ``init(this, *args)``
        prototype: (JsObject) Prototype given to new instances
        factory: (callable) Builds the bare instance from a prototype
    """

    def __init__(self, name, init=None, prototype=None, factory=JsObject, proto=None):
        super().__init__(name, proto)
        self.init = init
        self.factory = factory
        if prototype is None:
            prototype = JsObject()
        self.prototype = prototype
        if not prototype.has_own("constructor"):
            prototype.set_own("constructor", self)

    def invoke(self, this, args):
        if self.init is None:
            return UNDEFINED
        result = self.init(this, *args)
        return UNDEFINED if result is None else result

    def get_own(self, name):
        if name == "prototype":
            return self.prototype
        return super().get_own(name)

    def has_own(self, name) -> bool:
        return name == "prototype" or super().has_own(name)

    def own_keys(self) -> list:
        return ["prototype"] + super().own_keys()
