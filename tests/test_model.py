"""Tests for the ObjectModel: creation, lookup, shadowing and prototypes."""

import gc
import io
import math
import weakref

import pytest
from loguru import logger

import protochain
from protochain import NOT_FOUND, UNDEFINED


def define_person(model):
    """Person constructor whose init routine sets an own name."""
    def init(this, name):
        model.set_property(this, "name", name)
    return model.define("Person", init)


@pytest.fixture
def model():
    return protochain.ObjectModel()


@pytest.fixture
def warnings():
    messages = []
    logger.enable("protochain")
    handler = logger.add(messages.append, level="WARNING", format="{message}")
    yield messages
    logger.remove(handler)
    logger.disable("protochain")


def test_person_scenario(model):
    """Two instances of Person, own names, inherited toString."""
    Person = define_person(model)
    Other = model.define("Other")
    p1 = model.create("Person", "A")
    p2 = model.create(Person, "B")

    assert model.get_property(p1, "name") == "A"
    assert model.get_property(p2, "name") == "B"
    assert model.has_own(p1, "name")
    assert model.has_inherited(p1, "toString")
    assert not model.has_inherited(p1, "name")
    assert model.is_instance_of(p1, Person)
    assert model.is_instance_of(p1, "Person")
    assert not model.is_instance_of(p1, Other)


def test_instance_of_after_creation(model):
    Person = define_person(model)
    for name in ("a", "b", "c"):
        assert model.is_instance_of(model.create(Person, name), Person)


def test_instance_of_root_object(model):
    """Every ordinary instance is also an instance of Object."""
    define_person(model)
    p1 = model.create("Person", "A")
    assert model.is_instance_of(p1, "Object")


def test_instance_of_primitive(model):
    assert not model.is_instance_of("text", "String")
    assert not model.is_instance_of(None, "Object")


def test_constructor_back_link(model):
    Person = define_person(model)
    assert Person.prototype.get_own("constructor") is Person
    p1 = model.create(Person, "A")
    assert model.get_property(p1, "constructor") is Person
    assert not model.has_own(p1, "constructor")


def test_unknown_constructor(model):
    with pytest.raises(protochain.UnknownConstructor):
        model.create("Nobody")
    with pytest.raises(KeyError):
        model.is_instance_of(model.new_object(), "Nobody")


def test_constructor_from_other_model(model):
    """Constructors are only known to the model that defined them."""
    stranger = define_person(protochain.ObjectModel())
    with pytest.raises(protochain.UnknownConstructor):
        model.create(stranger, "A")


def test_redefined_name_resolves_to_latest(model):
    first = define_person(model)
    second = define_person(model)
    assert model.constructor("Person") is second
    # The earlier definition is still registered and usable directly
    assert model.is_instance_of(model.create(first, "A"), first)


def test_shadowing(model):
    Person = define_person(model)
    model.extend_prototype(Person, "x", 1)
    p1 = model.create(Person, "A")
    p2 = model.create(Person, "B")

    model.set_property(p1, "x", 2)

    assert model.get_property(p1, "x") == 2
    assert model.get_property(p2, "x") == 1
    assert Person.prototype.get_own("x") == 1
    assert model.has_own(p1, "x")
    assert model.has_inherited(p2, "x")


def test_delete_uncovers_inherited(model):
    Person = define_person(model)
    model.extend_prototype(Person, "x", 1)
    p1 = model.create(Person, "A")
    model.set_property(p1, "x", 2)

    assert model.delete_property(p1, "x")
    assert model.get_property(p1, "x") == 1


def test_extend_prototype_reaches_existing_and_future(model):
    Person = define_person(model)
    before = model.create(Person, "A")
    shadowed = model.create(Person, "B")
    model.set_property(shadowed, "greet", "own")

    model.extend_prototype(Person, "greet", "hi")
    after = model.create(Person, "C")

    assert model.get_property(before, "greet") == "hi"
    assert model.get_property(after, "greet") == "hi"
    assert model.get_property(shadowed, "greet") == "own"


def test_set_prototype_affects_future_only(model):
    Person = define_person(model)
    model.extend_prototype(Person, "kind", "old")
    before = model.create(Person, "A")

    replacement = model.object_literal({"constructor": Person, "kind": "new"})
    model.set_prototype(Person, replacement)
    after = model.create(Person, "B")

    assert model.get_property(before, "kind") == "old"
    assert model.get_property(after, "kind") == "new"
    assert model.is_instance_of(after, Person)
    assert not model.is_instance_of(before, Person)


def test_set_prototype_does_not_repair_back_link(model, warnings):
    Person = define_person(model)
    model.set_prototype(Person, model.object_literal({"kind": "new"}))
    p1 = model.create(Person, "A")

    assert model.get_property(p1, "constructor") is model.constructor("Object")
    assert len(warnings) == 1
    assert "back-link" in warnings[0]


def test_set_prototype_with_back_link_is_quiet(model, warnings):
    Person = define_person(model)
    model.set_prototype(Person, model.object_literal({"constructor": Person}))
    assert warnings == []


def test_set_prototype_requires_object(model):
    Person = define_person(model)
    with pytest.raises(protochain.ObjectTypeError):
        model.set_prototype(Person, "not an object")


def test_shared_container_on_prototype(model):
    """Containers on the prototype are shared through every instance."""
    Person = define_person(model)
    model.extend_prototype(Person, "favorites", model.new_array())
    p1 = model.create(Person, "A")
    p2 = model.create(Person, "B")

    model.invoke(model.get_property(p1, "favorites"), "push", "Pizza")
    model.invoke(model.get_property(p2, "favorites"), "push", "Burgers")

    favorites = model.get_property(p2, "favorites")
    assert favorites.items == ["Pizza", "Burgers"]
    assert favorites is model.get_property(p1, "favorites")


def test_shared_python_list(model):
    Person = define_person(model)
    model.extend_prototype(Person, "tags", [])
    p1 = model.create(Person, "A")
    p2 = model.create(Person, "B")

    model.get_property(p1, "tags").append("x")
    assert model.get_property(p2, "tags") == ["x"]


def test_not_found_is_distinct_from_stored_absence(model):
    obj = model.new_object()
    model.set_property(obj, "u", UNDEFINED)
    model.set_property(obj, "n", None)

    assert model.get_property(obj, "missing") is NOT_FOUND
    assert model.get_property(obj, "u") is UNDEFINED
    assert model.get_property(obj, "n") is None
    assert model.has_own(obj, "u")
    assert not model.has_inherited(obj, "missing")


def test_multi_level_chain(model):
    Person = define_person(model)

    def employee_init(this, name, title):
        Person.invoke(this, [name])
        model.set_property(this, "title", title)

    Employee = model.define(
        "Employee", employee_init, prototype=model.new_object(proto=Person.prototype))
    model.extend_prototype(Person, "species", "human")
    worker = model.create(Employee, "A", "engineer")

    assert model.get_property(worker, "name") == "A"
    assert model.get_property(worker, "species") == "human"
    assert model.is_instance_of(worker, Employee)
    assert model.is_instance_of(worker, Person)
    assert model.is_instance_of(worker, "Object")
    assert [o for o in model.chain(worker)][1:] == [
        Employee.prototype, Person.prototype, model.object_prototype]


def test_cyclic_chain_detected(model):
    first = model.new_object()
    second = model.new_object(proto=first)
    first.proto = second

    with pytest.raises(protochain.CyclicPrototypeChain):
        model.get_property(first, "missing")
    with pytest.raises(protochain.CyclicPrototypeChain):
        model.has_inherited(second, "missing")


def test_cyclic_chain_found_before_lookup_succeeds(model):
    """A cycle is only reported when the walk actually revisits an object."""
    first = model.new_object({"here": 1})
    second = model.new_object(proto=first)
    first.proto = second
    assert model.get_property(first, "here") == 1


def test_set_prototype_of_refuses_cycle(model):
    first = model.new_object()
    second = model.new_object(proto=first)

    with pytest.raises(protochain.CyclicPrototypeChain):
        model.set_prototype_of(first, second)
    assert first.proto is model.object_prototype


def test_set_prototype_of_swaps_link(model):
    base = model.object_literal({"greet": "hi"})
    obj = model.new_object()
    model.set_prototype_of(obj, base)

    assert model.get_prototype_of(obj) is base
    assert model.get_property(obj, "greet") == "hi"
    assert model.is_prototype_of(base, obj)
    assert not model.is_prototype_of(obj, base)


def test_null_prototype_object(model):
    bare = model.new_object(proto=None)
    assert model.get_prototype_of(bare) is None
    assert model.get_property(bare, "toString") is NOT_FOUND


def test_primitive_string_lookup(model):
    assert model.get_property("abc", "length") == 3
    assert model.get_property("abc", "1") == "b"
    assert model.has_own("abc", "length")
    assert model.has_inherited("abc", "charAt")
    assert model.invoke("abc", "toUpperCase") == "ABC"


def test_nullish_lookup_raises(model):
    with pytest.raises(protochain.ObjectTypeError, match="reading 'name'"):
        model.get_property(None, "name")
    with pytest.raises(protochain.ObjectTypeError, match="setting 'name'"):
        model.set_property(UNDEFINED, "name", "A")


def test_in_operator_requires_object(model):
    obj = model.object_literal({"a": 1})
    assert model.has_property(obj, "a")
    assert model.has_property(obj, "hasOwnProperty")
    with pytest.raises(protochain.ObjectTypeError):
        model.has_property("text", "length")


def test_invoke_binds_this(model):
    Person = define_person(model)
    greet = protochain.NativeFunction(
        "greet", lambda this: "Hi, " + model.get_property(this, "name"))
    model.extend_prototype(Person, "greet", greet)
    assert model.invoke(model.create(Person, "A"), "greet") == "Hi, A"


def test_invoke_non_function(model):
    obj = model.object_literal({"value": 1})
    with pytest.raises(protochain.ObjectTypeError, match="not a function"):
        model.invoke(obj, "value")
    with pytest.raises(protochain.ObjectTypeError):
        model.call("nope", obj)


def test_freeze_rejects_writes_in_strict_mode(model):
    Person = define_person(model)
    p1 = model.freeze(model.create(Person, "A"))

    with pytest.raises(protochain.ObjectTypeError, match="read only"):
        model.set_property(p1, "name", "B")
    assert model.is_frozen(p1)

    # The prototype is untouched by freezing an instance
    model.extend_prototype(Person, "later", True)
    assert model.get_property(p1, "later") is True


def test_freeze_ignores_writes_in_sloppy_mode():
    model = protochain.ObjectModel(strict=False)
    obj = model.freeze(model.object_literal({"a": 1}))
    model.set_property(obj, "a", 2)
    model.set_property(obj, "b", 3)
    assert model.get_property(obj, "a") == 1
    assert model.get_property(obj, "b") is NOT_FOUND


def test_seal_allows_changes_but_not_additions(model):
    obj = model.seal(model.object_literal({"a": 1}))
    model.set_property(obj, "a", 2)
    assert model.get_property(obj, "a") == 2
    with pytest.raises(protochain.ObjectTypeError, match="not extensible"):
        model.set_property(obj, "b", 3)
    with pytest.raises(protochain.ObjectTypeError):
        model.delete_property(obj, "a")
    assert model.is_sealed(obj)
    assert not model.is_frozen(obj)


def test_frozen_prototype_cannot_be_extended(model):
    Person = define_person(model)
    model.freeze(Person.prototype)
    with pytest.raises(protochain.ObjectTypeError):
        model.extend_prototype(Person, "x", 1)


def test_assigning_prototype_property_replaces_prototype(model):
    """Setting "prototype" on a constructor is the same as set_prototype."""
    Person = define_person(model)
    replacement = model.object_literal({"constructor": Person})
    model.set_property(Person, "prototype", replacement)
    assert Person.prototype is replacement


def test_own_keys(model):
    obj = model.object_literal({"b": 1, "a": 2})
    assert model.own_keys(obj) == ["b", "a"]
    assert model.own_keys(model.new_array(["x", "y"])) == ["0", "1"]
    assert model.own_keys("hi") == ["0", "1"]


def test_set_prototype_with_cyclic_chain_leaves_constructor(model):
    Person = define_person(model)
    original = Person.prototype
    first = model.new_object()
    second = model.new_object(proto=first)
    first.proto = second

    with pytest.raises(protochain.CyclicPrototypeChain):
        model.set_prototype(Person, first)
    assert Person.prototype is original


def test_unreachable_constructors_are_collected(model):
    """The registry does not keep anonymous constructors alive."""
    ref = weakref.ref(model.define(""))
    gc.collect()
    assert ref() is None


def test_callbacks_do_not_accumulate():
    interp = protochain.Interpreter(output=io.StringIO())
    interp.run("""
        Array.prototype.sum = function() {
            return this.reduce(function(previous, current) { return previous + current; });
        };
    """)
    interp.evaluate("[ 1, 2, 3 ].sum()")
    gc.collect()
    before = len(interp.model._registered)
    for _ in range(50):
        assert interp.evaluate("[ 1, 2, 3 ].sum()") == 6
    gc.collect()
    assert len(interp.model._registered) == before


def test_property_key_numbers():
    assert protochain.property_key(2.0) == "2"
    assert protochain.property_key(0.5) == "0.5"
    assert protochain.property_key(math.inf) == "Infinity"
    assert protochain.property_key(-math.inf) == "-Infinity"
    assert protochain.property_key(math.nan) == "NaN"


def test_non_finite_keys_match_script_names(model):
    obj = model.object_literal({"Infinity": 1, "NaN": 2})
    assert model.get_property(obj, math.inf) == 1
    assert model.get_property(obj, math.nan) == 2
