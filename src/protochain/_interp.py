"""Interpreter for snippet programs.

An ``Interpreter`` pairs an ``ObjectModel`` with a global scope and a
console. Every function expression becomes a ``Constructor`` registered
with the model, so any function can be used with ``new`` and has its own
prototype, as in JavaScript.

    >>> interp = Interpreter()
    >>> interp.run('var Person = function(name) { this.name = name; };')
    >>> interp.evaluate('new Person("A").name')
    'A'
"""

__all__ = ["Interpreter", "Scope", "Frame"]

import sys

from loguru import logger

from ._ast import ExprStmt, Return
from ._error import ParseError, UndefinedName
from ._fmt import inspect
from ._model import ObjectModel
from ._object import NativeFunction
from ._parse import parse
from ._value import NOT_FOUND, UNDEFINED


class Scope:
    """Variable bindings with a link to the enclosing scope."""

    def __init__(self, parent=None):
        self.names = {}
        self.parent = parent

    def find(self, name):
        """The nearest scope binding name, or None."""
        scope = self
        while scope is not None:
            if name in scope.names:
                return scope
            scope = scope.parent
        return None

    def declare(self, name, value):
        self.names[name] = value


class Frame:
    """Evaluation context handed to AST nodes.

    Attributes:
        interp: (Interpreter) Owning interpreter
        model: (ObjectModel) Object model of the interpreter
        scope: (Scope) Innermost scope
        this: Value of ``this``
    """

    def __init__(self, interp, scope, this):
        self.interp = interp
        self.model = interp.model
        self.scope = scope
        self.this = this

    @property
    def default_this(self):
        """``this`` for plain function calls: undefined, or the global object."""
        if self.model.strict:
            return UNDEFINED
        return self.interp.global_object

    def is_defined(self, name) -> bool:
        if self.scope.find(name) is not None:
            return True
        return self.model.has_property(self.interp.global_object, name)

    def lookup(self, name):
        scope = self.scope.find(name)
        if scope is not None:
            return scope.names[name]
        value = self.model.get_property(self.interp.global_object, name)
        if value is NOT_FOUND:
            raise UndefinedName(f"{name} is not defined")
        return value

    def assign(self, name, value):
        scope = self.scope.find(name)
        if scope is not None:
            scope.names[name] = value
        elif self.interp.global_object.has_own(name) or not self.model.strict:
            # sloppy mode creates globals on assignment
            self.model.set_property(self.interp.global_object, name, value)
        else:
            raise UndefinedName(f"{name} is not defined")


class ScriptFunction:
    """Init routine of a constructor defined by a function expression."""

    def __init__(self, interp, node, closure):
        self.interp = interp
        self.node = node
        self.closure = closure

    def __call__(self, this, *args):
        scope = Scope(self.closure)
        for index, param in enumerate(self.node.params):
            scope.declare(param, args[index] if index < len(args) else UNDEFINED)
        frame = Frame(self.interp, scope, this)
        try:
            self.node.body.execute(frame)
        except Return as result:
            return result.value
        return UNDEFINED


class Interpreter:
    """Run snippet programs against an object model.

    Args:
        model: (ObjectModel | None) Model to use; a new one when omitted
        output: (file | None) Console destination, stdout when omitted
        strict: (bool | None) Force strict or sloppy mode. None follows the
            "use strict" directive of each program.
    """

    def __init__(self, model=None, output=None, strict=None):
        self.model = model if model is not None else ObjectModel(strict=bool(strict))
        self.output = output
        self.strict = strict
        self.globals = Scope()
        self.global_object = self.model.new_object()
        for name, ctor in self.model.intrinsics.items():
            self.global_object.set_own(name, ctor)
        self.global_object.set_own("console", self._make_console())

    def _make_console(self):
        console = self.model.new_object()
        console.set_own("log", NativeFunction("log", self._log, proto=self.model.object_prototype))
        return console

    def _log(self, this, *values):
        self.print(*values)
        return UNDEFINED

    def print(self, *values):
        """Write values to the console output the way ``console.log`` does."""
        text = " ".join(inspect(value, self.model) for value in values)
        stream = self.output if self.output is not None else sys.stdout
        stream.write(text + "\n")

    def make_function(self, node, closure, name):
        """Create the constructor object for a function expression."""
        return self.model.define(name, ScriptFunction(self, node, closure))

    def run(self, source):
        """Parse and execute a program in the global scope."""
        program = parse(source)
        self.model.strict = program.strict if self.strict is None else self.strict
        logger.debug("running program ({} statements, strict={})",
                     len(program.statements), self.model.strict)
        program.execute(Frame(self, self.globals, self._top_this()))

    def evaluate(self, source):
        """Run source and return the value of its last expression statement.

        A missing final semicolon is tolerated.
        """
        text = source.strip()
        if not text.endswith(";"):
            text += ";"
        program = parse(text)
        self.model.strict = program.strict if self.strict is None else self.strict
        frame = Frame(self, self.globals, self._top_this())
        result = UNDEFINED
        try:
            for statement in program.statements:
                if isinstance(statement, ExprStmt):
                    result = statement.expr.evaluate(frame)
                else:
                    statement.execute(frame)
        except Return:
            raise ParseError("Illegal return statement") from None
        return result

    def _top_this(self):
        return UNDEFINED if self.model.strict else self.global_object
