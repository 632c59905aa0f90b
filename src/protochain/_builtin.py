"""Built-in constructors and their prototype methods.

Installs ``Object``, ``Array``, ``String``, ``Number`` and ``Boolean`` into
a model. Their prototypes are ordinary objects, so scripts can extend them
the same way as any user-defined prototype.
"""

__all__ = ["install"]

import math

from ._error import ObjectTypeError
from ._fmt import describe, format_number, to_string
from ._object import JsArray, JsFunction, JsObject, NativeFunction
from ._ops import strict_equals, to_integer, to_number, to_text, truthy
from ._value import UNDEFINED


def install(model):
    """Define the built-in constructors on a freshly created model."""
    root = model.object_prototype

    def method(target, name, fn):
        target.set_own(name, NativeFunction(name, fn, proto=root))

    def require(this, kind, label):
        if not isinstance(this, kind):
            raise ObjectTypeError(f"{label} called on {describe(this)}")
        return this

    # Object ----------------------------------------------------------
    obj_ctor = model.define("Object", prototype=root)

    def object_to_string(this):
        if isinstance(this, JsFunction):
            return "[object Function]"
        if this is None:
            return "[object Null]"
        if this is UNDEFINED:
            return "[object Undefined]"
        return "[object Object]"

    method(root, "toString", object_to_string)
    method(root, "valueOf", lambda this: this)
    method(root, "hasOwnProperty", lambda this, name=UNDEFINED: model.has_own(this, name))
    method(root, "isPrototypeOf", lambda this, value=UNDEFINED: model.is_prototype_of(this, value))

    def set_prototype_of(obj, proto=UNDEFINED):
        model.set_prototype_of(obj, proto)
        return obj

    def create(proto=UNDEFINED):
        if proto is not None and not isinstance(proto, JsObject):
            raise ObjectTypeError(
                f"Object prototype may only be an object or null: {describe(proto)}")
        return model.new_object(proto=proto)

    statics = {
        "getPrototypeOf": lambda value=UNDEFINED: model.get_prototype_of(value),
        "setPrototypeOf": set_prototype_of,
        "create": create,
        "keys": lambda value=UNDEFINED: model.new_array(model.own_keys(value)),
        "freeze": lambda obj=UNDEFINED: model.freeze(obj),
        "seal": lambda obj=UNDEFINED: model.seal(obj),
        "preventExtensions": lambda obj=UNDEFINED: model.prevent_extensions(obj),
        "isFrozen": lambda obj=UNDEFINED: model.is_frozen(obj),
        "isSealed": lambda obj=UNDEFINED: model.is_sealed(obj),
        "isExtensible": lambda obj=UNDEFINED: isinstance(obj, JsObject) and obj.extensible,
    }
    for name, fn in statics.items():
        method(obj_ctor, name, _static(fn))

    # Array -----------------------------------------------------------
    def array_init(this, *args):
        if not isinstance(this, JsArray):
            return model.new_array(args)
        if len(args) == 1 and isinstance(args[0], (int, float)) and not isinstance(args[0], bool):
            this.set_own("length", args[0])
        else:
            this.items.extend(args)
        return None

    array = model.define("Array", array_init, factory=JsArray)
    proto = array.prototype

    def push(this, *values):
        items = require(this, JsArray, "Array.prototype.push").items
        items.extend(values)
        return len(items)

    def pop(this):
        items = require(this, JsArray, "Array.prototype.pop").items
        return items.pop() if items else UNDEFINED

    def reduce(this, callback=UNDEFINED, *initial):
        items = require(this, JsArray, "Array.prototype.reduce").items
        if not isinstance(callback, JsFunction):
            raise ObjectTypeError(f"{describe(callback)} is not a function")
        if initial:
            acc, start = initial[0], 0
        elif items:
            acc, start = items[0], 1
        else:
            raise ObjectTypeError("Reduce of empty array with no initial value")
        for index in range(start, len(items)):
            acc = model.call(callback, UNDEFINED, acc, items[index], index, this)
        return acc

    def for_each(this, callback=UNDEFINED):
        items = require(this, JsArray, "Array.prototype.forEach").items
        for index, item in enumerate(list(items)):
            model.call(callback, UNDEFINED, item, index, this)
        return UNDEFINED

    def map_(this, callback=UNDEFINED):
        items = require(this, JsArray, "Array.prototype.map").items
        return model.new_array(
            [model.call(callback, UNDEFINED, item, index, this)
             for index, item in enumerate(list(items))])

    def join(this, separator=","):
        items = require(this, JsArray, "Array.prototype.join").items
        return to_string(separator).join(
            "" if item is None or item is UNDEFINED else to_text(model, item)
            for item in items)

    def index_of(this, search=UNDEFINED):
        items = require(this, JsArray, "Array.prototype.indexOf").items
        for index, item in enumerate(items):
            if strict_equals(item, search):
                return index
        return -1

    def slice_(this, start=0, end=UNDEFINED):
        items = require(this, JsArray, "Array.prototype.slice").items
        begin = _relative_index(start, len(items))
        stop = len(items) if end is UNDEFINED else _relative_index(end, len(items))
        return model.new_array(items[begin:stop])

    method(proto, "push", push)
    method(proto, "pop", pop)
    method(proto, "reduce", reduce)
    method(proto, "forEach", for_each)
    method(proto, "map", map_)
    method(proto, "join", join)
    method(proto, "indexOf", index_of)
    method(proto, "slice", slice_)
    method(proto, "toString", lambda this: join(this))

    # String ----------------------------------------------------------
    def string_init(this, value=""):
        return to_text(model, value)

    string = model.define("String", string_init)
    proto = string.prototype

    def text(this, label):
        return require(this, str, f"String.prototype.{label}")

    def substring(this, start=0, end=UNDEFINED):
        value = text(this, "substring")
        size = len(value)
        begin = min(max(to_integer(start), 0), size)
        stop = size if end is UNDEFINED else min(max(to_integer(end), 0), size)
        if begin > stop:
            begin, stop = stop, begin
        return value[begin:stop]

    def char_at(this, index=0):
        value = text(this, "charAt")
        index = to_integer(index)
        return value[index] if 0 <= index < len(value) else ""

    method(proto, "charAt", char_at)
    method(proto, "substring", substring)
    method(proto, "toUpperCase", lambda this: text(this, "toUpperCase").upper())
    method(proto, "toLowerCase", lambda this: text(this, "toLowerCase").lower())
    method(proto, "trim", lambda this: text(this, "trim").strip())
    method(proto, "indexOf", lambda this, search="": text(this, "indexOf").find(to_string(search)))
    method(proto, "toString", lambda this: text(this, "toString"))
    method(proto, "valueOf", lambda this: text(this, "valueOf"))

    # Number and Boolean ----------------------------------------------
    number = model.define("Number", lambda this, value=0: to_number(value))

    def to_fixed(this, digits=0):
        if not isinstance(this, (int, float)) or isinstance(this, bool):
            raise ObjectTypeError(f"Number.prototype.toFixed called on {describe(this)}")
        digits = to_integer(digits)
        if not 0 <= digits <= 100:
            raise ObjectTypeError("toFixed() digits argument must be between 0 and 100")
        if math.isnan(this) or math.isinf(this):
            return format_number(this)
        return f"{this:.{digits}f}"

    method(number.prototype, "toFixed", to_fixed)
    method(number.prototype, "toString", lambda this: format_number(this))

    boolean = model.define("Boolean", lambda this, value=False: truthy(value))
    method(boolean.prototype, "toString", lambda this: format_number(bool(this)))

    for ctor in (obj_ctor, array, string, number, boolean):
        model.intrinsics[ctor.name] = ctor


def _relative_index(value, size):
    """Clamp a possibly negative index argument into ``0..size``."""
    index = to_integer(value)
    if index < 0:
        return max(size + index, 0)
    return min(index, size)


def _static(fn):
    """Adapt a plain function to the ``(this, *args)`` calling convention."""
    return lambda this, *args: fn(*args)

