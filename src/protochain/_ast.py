"""AST nodes for the snippet language.

Statements implement ``execute(frame)`` and expressions implement
``evaluate(frame)``. The frame (see ``_interp.Frame``) gives access to the
interpreter, its object model, the current scope and ``this``.

Design principles:
- One node class per construct, no shared "operator" mega-node
- Property access always goes through the object model
- Nodes hold plain Python data so trees compare equal when parsed alike
"""

__all__ = [
    "ASTNode",
    "Program",
    "VarDecl",
    "ReturnStmt",
    "IfStmt",
    "ExprStmt",
    "Block",
    "Return",
    "Literal",
    "ArrayLiteral",
    "ObjectLiteral",
    "Name",
    "This",
    "Member",
    "Index",
    "Call",
    "New",
    "FunctionExpr",
    "Assign",
    "Logical",
    "Equality",
    "Compare",
    "Arith",
    "InstanceOf",
    "In",
    "Not",
    "Sign",
    "TypeOf",
    "Delete",
]

from . import _ops
from ._error import ObjectTypeError, ParseError
from ._object import Constructor, JsFunction, property_key
from ._value import NOT_FOUND, UNDEFINED


class Return(Exception):
    """Unwinds a function body when a return statement runs."""

    def __init__(self, value):
        super().__init__()
        self.value = value


class ASTNode:
    """Base class for all AST nodes.

    Just stores attributes and provides standard __repr__ and __eq__.
    """

    def __repr__(self):
        attrs = ", ".join(f"{key}={value!r}" for key, value in self.__dict__.items())
        return f"{self.__class__.__name__}({attrs})"

    def __eq__(self, other):
        return isinstance(other, self.__class__) and self.__dict__ == other.__dict__


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

class Program(ASTNode):
    """A parsed snippet: a list of statements."""

    def __init__(self, statements):
        self.statements = list(statements)

    @property
    def strict(self) -> bool:
        """True when the program opens with a "use strict" directive."""
        if not self.statements:
            return False
        first = self.statements[0]
        return (isinstance(first, ExprStmt) and isinstance(first.expr, Literal)
                and first.expr.value == "use strict")

    def execute(self, frame):
        try:
            for statement in self.statements:
                statement.execute(frame)
        except Return:
            raise ParseError("Illegal return statement") from None


class Block(ASTNode):
    def __init__(self, statements):
        self.statements = list(statements)

    def execute(self, frame):
        for statement in self.statements:
            statement.execute(frame)


class VarDecl(ASTNode):
    def __init__(self, name, value=None):
        self.name = name
        self.value = value

    def execute(self, frame):
        if self.value is None:
            value = UNDEFINED
        elif isinstance(self.value, FunctionExpr):
            value = self.value.evaluate(frame, self.name)
        else:
            value = self.value.evaluate(frame)
        frame.scope.declare(self.name, value)


class ReturnStmt(ASTNode):
    def __init__(self, value=None):
        self.value = value

    def execute(self, frame):
        value = UNDEFINED if self.value is None else self.value.evaluate(frame)
        raise Return(value)


class IfStmt(ASTNode):
    def __init__(self, test, body, orelse=None):
        self.test = test
        self.body = body
        self.orelse = orelse

    def execute(self, frame):
        if _ops.truthy(self.test.evaluate(frame)):
            self.body.execute(frame)
        elif self.orelse is not None:
            self.orelse.execute(frame)


class ExprStmt(ASTNode):
    def __init__(self, expr):
        self.expr = expr

    def execute(self, frame):
        self.expr.evaluate(frame)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

class Expression(ASTNode):
    def evaluate(self, frame):
        raise NotImplementedError

    def label(self) -> str:
        """Short source-like text used in error messages."""
        return "expression"


class Literal(Expression):
    """Number, string, boolean, null or undefined literal."""

    def __init__(self, value):
        self.value = value

    def evaluate(self, frame):
        return self.value

    def label(self):
        return repr(self.value) if isinstance(self.value, str) else str(self.value)


class ArrayLiteral(Expression):
    def __init__(self, items):
        self.items = list(items)

    def evaluate(self, frame):
        return frame.model.new_array([item.evaluate(frame) for item in self.items])


class ObjectLiteral(Expression):
    """Object literal; pairs are (key, expression) tuples in source order."""

    def __init__(self, pairs):
        self.pairs = list(pairs)

    def evaluate(self, frame):
        obj = frame.model.new_object()
        for key, expr in self.pairs:
            if isinstance(expr, FunctionExpr):
                value = expr.evaluate(frame, key)
            else:
                value = expr.evaluate(frame)
            obj.set_own(key, value)
        return obj


class Name(Expression):
    def __init__(self, name):
        self.name = name

    def evaluate(self, frame):
        return frame.lookup(self.name)

    def label(self):
        return self.name


class This(Expression):
    def evaluate(self, frame):
        return frame.this

    def label(self):
        return "this"


class _Access(Expression):
    """Shared behaviour of ``a.b`` and ``a[b]``."""

    def key(self, frame) -> str:
        raise NotImplementedError

    def evaluate(self, frame):
        obj = self.target.evaluate(frame)
        return self.read(frame, obj, self.key(frame))

    @staticmethod
    def read(frame, obj, key):
        if key == "__proto__":
            return frame.model.get_prototype_of(obj)
        value = frame.model.get_property(obj, key)
        return UNDEFINED if value is NOT_FOUND else value


class Member(_Access):
    def __init__(self, target, name):
        self.target = target
        self.name = name

    def key(self, frame):
        return self.name

    def label(self):
        return f"{self.target.label()}.{self.name}"


class Index(_Access):
    def __init__(self, target, index):
        self.target = target
        self.index = index

    def key(self, frame):
        return property_key(self.index.evaluate(frame))

    def label(self):
        return f"{self.target.label()}[{self.index.label()}]"


class Call(Expression):
    def __init__(self, callee, args):
        self.callee = callee
        self.args = list(args)

    def evaluate(self, frame):
        if isinstance(self.callee, _Access):
            this = self.callee.target.evaluate(frame)
            function = self.callee.read(frame, this, self.callee.key(frame))
        else:
            this = frame.default_this
            function = self.callee.evaluate(frame)
        args = [arg.evaluate(frame) for arg in self.args]
        if not isinstance(function, JsFunction):
            raise ObjectTypeError(f"{self.callee.label()} is not a function")
        return frame.model.call(function, this, *args)

    def label(self):
        return f"{self.callee.label()}(...)"


class New(Expression):
    def __init__(self, callee, args):
        self.callee = callee
        self.args = list(args)

    def evaluate(self, frame):
        ctor = self.callee.evaluate(frame)
        args = [arg.evaluate(frame) for arg in self.args]
        if not isinstance(ctor, Constructor):
            raise ObjectTypeError(f"{self.callee.label()} is not a constructor")
        return frame.model.create(ctor, *args)


class FunctionExpr(Expression):
    """Function expression; anonymous ones take the name they are bound to."""

    def __init__(self, name, params, body):
        self.name = name
        self.params = list(params)
        self.body = body

    def evaluate(self, frame, name=None):
        return frame.interp.make_function(self, frame.scope, self.name or name or "")

    def label(self):
        return f"function {self.name}" if self.name else "function"


class Assign(Expression):
    def __init__(self, target, value):
        if not isinstance(target, (Name, _Access)):
            raise ParseError("Invalid left-hand side in assignment")
        self.target = target
        self.value = value

    def _value(self, frame, name):
        if isinstance(self.value, FunctionExpr):
            return self.value.evaluate(frame, name)
        return self.value.evaluate(frame)

    def evaluate(self, frame):
        if isinstance(self.target, Name):
            value = self._value(frame, self.target.name)
            frame.assign(self.target.name, value)
            return value
        obj = self.target.target.evaluate(frame)
        key = self.target.key(frame)
        value = self._value(frame, key)
        if key == "__proto__":
            frame.model.set_prototype_of(obj, value)
        else:
            frame.model.set_property(obj, key, value)
        return value


class Logical(Expression):
    """``&&`` and ``||``, returning whichever operand decided the result."""

    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right

    def evaluate(self, frame):
        left = self.left.evaluate(frame)
        if _ops.truthy(left) == (self.op == "||"):
            return left
        return self.right.evaluate(frame)


class Equality(Expression):
    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right

    def evaluate(self, frame):
        left = self.left.evaluate(frame)
        right = self.right.evaluate(frame)
        if self.op in ("===", "!=="):
            result = _ops.strict_equals(left, right)
        else:
            result = _ops.loose_equals(frame.model, left, right)
        return result if self.op in ("===", "==") else not result


class Compare(Expression):
    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right

    def evaluate(self, frame):
        left = self.left.evaluate(frame)
        right = self.right.evaluate(frame)
        return _ops.compare(frame.model, self.op, left, right)


class Arith(Expression):
    def __init__(self, op, left, right):
        self.op = op
        self.left = left
        self.right = right

    def evaluate(self, frame):
        left = self.left.evaluate(frame)
        right = self.right.evaluate(frame)
        return _ops.math_binary(frame.model, self.op, left, right)


class InstanceOf(Expression):
    def __init__(self, left, right):
        self.left = left
        self.right = right

    def evaluate(self, frame):
        value = self.left.evaluate(frame)
        ctor = self.right.evaluate(frame)
        if not isinstance(ctor, Constructor):
            raise ObjectTypeError("Right-hand side of 'instanceof' is not callable")
        return frame.model.is_instance_of(value, ctor)


class In(Expression):
    def __init__(self, left, right):
        self.left = left
        self.right = right

    def evaluate(self, frame):
        key = property_key(self.left.evaluate(frame))
        return frame.model.has_property(self.right.evaluate(frame), key)


class Not(Expression):
    def __init__(self, operand):
        self.operand = operand

    def evaluate(self, frame):
        return not _ops.truthy(self.operand.evaluate(frame))


class Sign(Expression):
    def __init__(self, op, operand):
        self.op = op
        self.operand = operand

    def evaluate(self, frame):
        number = _ops.to_number(_ops.to_primitive(frame.model, self.operand.evaluate(frame)))
        return -number if self.op == "-" else number


class TypeOf(Expression):
    def __init__(self, operand):
        self.operand = operand

    def evaluate(self, frame):
        # typeof tolerates names that were never declared
        if isinstance(self.operand, Name) and not frame.is_defined(self.operand.name):
            return "undefined"
        return _ops.type_of(self.operand.evaluate(frame))


class Delete(Expression):
    def __init__(self, target):
        self.target = target

    def evaluate(self, frame):
        if not isinstance(self.target, _Access):
            return True
        obj = self.target.target.evaluate(frame)
        return frame.model.delete_property(obj, self.target.key(frame))
