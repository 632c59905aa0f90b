"""The object model: constructors, prototypes and chain lookup.

An ``ObjectModel`` owns the constructor registry and the built-in root
prototypes. Objects themselves are plain ``JsObject`` nodes linked through
their ``proto`` attribute; every operation that follows those links does so
here with an explicit loop, so that a cycle is reported instead of spinning.

Basic usage:
    >>> model = ObjectModel()
    >>> Person = model.define("Person", lambda this, name: this.set_own("name", name))
    >>> p1 = model.create("Person", "A")
    >>> model.get_property(p1, "name")
    'A'
    >>> model.is_instance_of(p1, Person)
    True
    >>> model.has_inherited(p1, "toString")
    True
"""

__all__ = ["ObjectModel"]

import itertools
import weakref

from loguru import logger

from . import _builtin
from ._error import CyclicPrototypeChain, ObjectTypeError, UnknownConstructor
from ._fmt import describe
from ._object import Constructor, JsArray, JsFunction, JsObject, property_key
from ._value import NOT_FOUND, is_nullish


_ROOT = object()  # marker for "link to Object.prototype"


class ObjectModel:
    """In-memory constructor/prototype object model.

    Args:
        strict: (bool) Raise ObjectTypeError for rejected writes (frozen or
            non-extensible targets, primitives). When False those writes
            are silently ignored.

    Attributes:
        object_prototype: (JsObject) Root of every ordinary chain
        intrinsics: (dict) Built-in constructors by name, unaffected by
            later redefinitions of the same name
    """

    def __init__(self, strict=True):
        self.strict = strict
        self.object_prototype = JsObject()
        self.intrinsics = {}
        self._registered = weakref.WeakSet()
        self._names = {}
        _builtin.install(self)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    def define(self, name, init=None, prototype=None, factory=JsObject):
        """Register a new constructor.

        Args:
            name: (str) Constructor name, later usable as its id
            init: (callable | None) Called as ``init(this, *args)``
            prototype: (JsObject | None) Prototype object; a fresh object
                linked to ``Object.prototype`` when omitted
            factory: (callable) Builds bare instances from the prototype
        Returns:
            (Constructor) The registered constructor
        """
        if prototype is None:
            prototype = self.new_object()
        ctor = Constructor(name, init, prototype, factory, proto=self.object_prototype)
        self._registered.add(ctor)
        if name:
            self._names[name] = ctor
        logger.debug("defined constructor {}", name or "(anonymous)")
        return ctor

    def constructor(self, constructor_id):
        """Resolve a constructor id (name or Constructor) to a Constructor."""
        if isinstance(constructor_id, Constructor):
            if constructor_id in self._registered:
                return constructor_id
            raise UnknownConstructor(
                f"Constructor {constructor_id.name!r} is not registered")
        if isinstance(constructor_id, str) and constructor_id in self._names:
            return self._names[constructor_id]
        raise UnknownConstructor(f"Unknown constructor {constructor_id!r}")

    def create(self, constructor_id, *args):
        """Instantiate a constructor, the equivalent of ``new C(...args)``.

        The new object's prototype link is the constructor's *current*
        prototype. The init routine runs with ``this`` bound to the new
        object.
        """
        ctor = self.constructor(constructor_id)
        instance = ctor.factory(ctor.prototype)
        ctor.invoke(instance, list(args))
        return instance

    def set_prototype(self, constructor_id, new_prototype):
        """Replace the prototype used for future instantiations.

        Existing instances keep the prototype they were created with. The
        ``constructor`` back-link on ``new_prototype`` is left to the caller.
        """
        ctor = self.constructor(constructor_id)
        if not isinstance(new_prototype, JsObject):
            raise ObjectTypeError(
                f"Prototype of {ctor.name} must be an object, not {describe(new_prototype)}")
        # a cyclic chain raises here, before the constructor changes
        linked = self.get_property(new_prototype, "constructor") is ctor
        ctor.prototype = new_prototype
        if linked:
            logger.debug("{}.prototype replaced", ctor.name)
        else:
            logger.warning(
                "{}.prototype replaced without a constructor back-link", ctor.name)

    def extend_prototype(self, constructor_id, name, value):
        """Add or overwrite one property on a constructor's live prototype.

        Visible at once to every instance that does not shadow ``name``.
        Containers are stored by reference and so shared by all of them.
        """
        ctor = self.constructor(constructor_id)
        self.set_property(ctor.prototype, name, value)
        logger.debug("{}.prototype.{} extended", ctor.name, name)

    # ------------------------------------------------------------------
    # Object creation
    # ------------------------------------------------------------------

    def new_object(self, props=None, proto=_ROOT):
        """Create a plain object, by default linked to ``Object.prototype``.

        Pass ``proto=None`` for an object with no prototype at all.
        """
        if proto is _ROOT:
            proto = self.object_prototype
        elif proto is not None and not isinstance(proto, JsObject):
            raise ObjectTypeError(
                f"Object prototype may only be an object or null: {describe(proto)}")
        return JsObject(proto, props)

    def object_literal(self, mapping):
        """Create an ordinary object from a Python mapping."""
        return self.new_object({property_key(k): v for k, v in mapping.items()})

    def new_array(self, items=()):
        return JsArray(self.intrinsics["Array"].prototype, items)

    # ------------------------------------------------------------------
    # Chains
    # ------------------------------------------------------------------

    def chain(self, value):
        """Yield the objects consulted when looking up a property on value.

        Objects start with themselves; primitives start with their wrapper
        prototype. Raises CyclicPrototypeChain on revisiting an object.
        """
        if isinstance(value, JsObject):
            obj = value
        else:
            obj = self.get_prototype_of(value)
        seen = set()
        while obj is not None:
            if id(obj) in seen:
                raise CyclicPrototypeChain(
                    f"Prototype chain revisits {describe(obj)}")
            seen.add(id(obj))
            yield obj
            obj = obj.proto

    def get_prototype_of(self, value):
        """The ``[[Prototype]]`` of a value, or None at the root."""
        if isinstance(value, JsObject):
            return value.proto
        if is_nullish(value):
            raise ObjectTypeError(f"Cannot convert {describe(value)} to object")
        if isinstance(value, str):
            return self.intrinsics["String"].prototype
        if isinstance(value, bool):
            return self.intrinsics["Boolean"].prototype
        if isinstance(value, (int, float)):
            return self.intrinsics["Number"].prototype
        return self.object_prototype

    def set_prototype_of(self, obj, proto):
        """Swap an object's prototype link explicitly.

        Links that would close a cycle are refused immediately.
        """
        if not isinstance(obj, JsObject):
            raise ObjectTypeError(f"Cannot set prototype of {describe(obj)}")
        if proto is not None and not isinstance(proto, JsObject):
            raise ObjectTypeError(
                f"Object prototype may only be an object or null: {describe(proto)}")
        if proto is not None and any(o is obj for o in self.chain(proto)):
            raise CyclicPrototypeChain(f"Cyclic prototype value for {describe(obj)}")
        if proto is obj.proto:
            return
        if not obj.extensible:
            self._reject(f"{describe(obj)} is not extensible")
            return
        obj.proto = proto

    def is_prototype_of(self, proto, value) -> bool:
        """True when proto appears in value's chain above value itself."""
        if not isinstance(value, JsObject):
            return False
        return any(obj is proto for obj in itertools.islice(self.chain(value), 1, None))

    def is_instance_of(self, value, constructor_id) -> bool:
        """True when the constructor's prototype is anywhere in value's chain."""
        ctor = self.constructor(constructor_id)
        return self.is_prototype_of(ctor.prototype, value)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def get_property(self, value, name):
        """Look up a property through the prototype chain.

        Returns:
            The first value found, or NOT_FOUND when no object in the chain
            has the property. A stored undefined or null is returned as is.
        """
        name = property_key(name)
        if is_nullish(value):
            raise ObjectTypeError(
                f"Cannot read properties of {describe(value)} (reading '{name}')")
        if isinstance(value, str):
            found = _string_own(value, name)
            if found is not NOT_FOUND:
                return found
        for obj in self.chain(value):
            found = obj.get_own(name)
            if found is not NOT_FOUND:
                return found
        return NOT_FOUND

    def set_property(self, obj, name, value):
        """Assign an own property, shadowing anything inherited."""
        name = property_key(name)
        if is_nullish(obj):
            raise ObjectTypeError(
                f"Cannot set properties of {describe(obj)} (setting '{name}')")
        if not isinstance(obj, JsObject):
            self._reject(f"Cannot create property '{name}' on {describe(obj)}")
            return
        if isinstance(obj, Constructor) and name == "prototype":
            self.set_prototype(obj, value)
            return
        if obj.frozen:
            self._reject(
                f"Cannot assign to read only property '{name}' of {describe(obj)}")
            return
        if not obj.extensible and not obj.has_own(name):
            self._reject(
                f"Cannot add property {name}, {describe(obj)} is not extensible")
            return
        obj.set_own(name, value)

    def delete_property(self, obj, name) -> bool:
        """Remove an own property, uncovering any inherited one."""
        name = property_key(name)
        if is_nullish(obj):
            raise ObjectTypeError(
                f"Cannot convert {describe(obj)} to object")
        if not isinstance(obj, JsObject) or not obj.has_own(name):
            return True
        if obj.sealed or (isinstance(obj, Constructor) and name == "prototype"):
            self._reject(f"Cannot delete property '{name}' of {describe(obj)}")
            return False
        return obj.delete_own(name)

    def has_own(self, value, name) -> bool:
        name = property_key(name)
        if is_nullish(value):
            raise ObjectTypeError(f"Cannot convert {describe(value)} to object")
        if isinstance(value, str):
            return _string_own(value, name) is not NOT_FOUND
        return isinstance(value, JsObject) and value.has_own(name)

    def has_property(self, obj, name) -> bool:
        """The ``in`` operator: own or inherited, objects only."""
        name = property_key(name)
        if not isinstance(obj, JsObject):
            raise ObjectTypeError(
                f"Cannot use 'in' operator to search for '{name}' in {describe(obj)}")
        return any(o.has_own(name) for o in self.chain(obj))

    def has_inherited(self, value, name) -> bool:
        """True when name resolves only through the prototype chain."""
        if self.get_property(value, name) is NOT_FOUND:
            return False
        return not self.has_own(value, name)

    def own_keys(self, value) -> list:
        if isinstance(value, JsObject):
            return value.own_keys()
        if isinstance(value, str):
            return [str(i) for i in range(len(value))]
        if is_nullish(value):
            raise ObjectTypeError(f"Cannot convert {describe(value)} to object")
        return []

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    def call(self, function, this, *args):
        """Call a function with an explicit ``this``."""
        if not isinstance(function, JsFunction):
            raise ObjectTypeError(f"{describe(function)} is not a function")
        return function.invoke(this, list(args))

    def invoke(self, value, name, *args):
        """Look up a method on value and call it with value as ``this``."""
        method = self.get_property(value, name)
        if not isinstance(method, JsFunction):
            raise ObjectTypeError(f"{describe(value)}.{name} is not a function")
        return method.invoke(value, list(args))

    # ------------------------------------------------------------------
    # Integrity levels
    # ------------------------------------------------------------------

    def prevent_extensions(self, obj):
        if isinstance(obj, JsObject):
            obj.extensible = False
        return obj

    def seal(self, obj):
        if isinstance(obj, JsObject):
            obj.extensible = False
            obj.sealed = True
        return obj

    def freeze(self, obj):
        """Freeze own properties; the prototype is left untouched."""
        if isinstance(obj, JsObject):
            obj.extensible = False
            obj.sealed = True
            obj.frozen = True
            logger.debug("froze {}", describe(obj))
        return obj

    def is_sealed(self, obj) -> bool:
        return not isinstance(obj, JsObject) or obj.sealed

    def is_frozen(self, obj) -> bool:
        return not isinstance(obj, JsObject) or obj.frozen

    def _reject(self, message):
        if self.strict:
            raise ObjectTypeError(message)
        logger.debug("ignored write: {}", message)


def _string_own(text, name):
    """Own properties of a primitive string: its length and characters."""
    if name == "length":
        return len(text)
    if name.isdigit() and (name == "0" or not name.startswith("0")):
        index = int(name)
        if index < len(text):
            return text[index]
    return NOT_FOUND
