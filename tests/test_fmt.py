"""Test how values are rendered for the console and error messages."""

import math

import protochain
from protochain import inspect
from scripttest import evaluate, run


def test_format_number():
    assert protochain.format_number(3) == "3"
    assert protochain.format_number(2.0) == "2"
    assert protochain.format_number(0.5) == "0.5"
    assert protochain.format_number(math.nan) == "NaN"
    assert protochain.format_number(-math.inf) == "-Infinity"


def test_to_string_primitives():
    assert protochain.to_string(None) == "null"
    assert protochain.to_string(protochain.UNDEFINED) == "undefined"
    assert protochain.to_string(True) == "true"
    assert protochain.to_string("x") == "x"


def test_describe():
    model = protochain.ObjectModel()
    assert protochain.describe(None) == "null"
    assert protochain.describe("a") == "string 'a'"
    assert protochain.describe(model.constructor("Array")) == "constructor Array"
    assert protochain.describe(model.new_array()) == "array"
    assert protochain.describe(model.new_object()) == "object"


def test_inspect_strings():
    model = protochain.ObjectModel()
    assert inspect("plain", model) == "plain"
    assert inspect("plain", model, top=False) == "'plain'"
    assert inspect("it's", model, top=False) == '"it\'s"'


def test_inspect_arrays():
    model = protochain.ObjectModel()
    assert inspect(model.new_array(), model) == "[]"
    assert inspect(model.new_array(["Pizza", 2]), model) == "[ 'Pizza', 2 ]"


def test_inspect_objects():
    lines = run("""
        var Person = function(name) { this.name = name; };
        console.log({});
        console.log({ a: 1, "b c": [ 1 ] });
        console.log(new Person("A"));
        console.log(Object.create(null));
        console.log(Person);
    """)
    assert lines == [
        "{}",
        "{ a: 1, 'b c': [ 1 ] }",
        "Person { name: 'A' }",
        "[Object: null prototype] {}",
        "[Function: Person]",
    ]


def test_inspect_circular():
    lines = run("var o = {}; o.self = o; console.log(o);")
    assert lines == ["{ self: [Circular] }"]


def test_inspect_depth_limit():
    lines = run("console.log({ a: { b: { c: { d: 1 } } } });")
    assert lines == ["{ a: { b: { c: [Object] } } }"]


def test_number_rendering_in_scripts():
    assert evaluate("1 / 0") == math.inf
    assert run("console.log(1 / 0, 0 / 0, 4 / 2);") == ["Infinity NaN 2"]
