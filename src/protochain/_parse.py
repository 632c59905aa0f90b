"""Parse snippet source into AST nodes.

The lark tree is an intermediate step and is not part of the api, apart
from ``parse_tree`` which exists for the command line's ``--lark`` output.
Parse errors are reported as ``ParseError`` with a (line, column) position.
"""

__all__ = ["parse", "parse_tree"]

import re
from pathlib import Path

from lark import Lark, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from . import _ast
from ._error import ParseError
from ._value import UNDEFINED


_lark_parser: Lark | None = None

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.DOTALL)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


def _get_parser() -> Lark:
    """Get the singleton Lark parser instance."""
    global _lark_parser
    if _lark_parser is None:
        grammar_path = Path(__file__).parent / "lark" / "snippet.lark"
        _lark_parser = Lark(
            grammar_path.read_text(encoding="utf-8"),
            parser="lalr",
        )
    return _lark_parser


def parse_tree(text: str):
    """Parse snippet source into the raw lark tree."""
    try:
        return _get_parser().parse(text)
    except UnexpectedCharacters as e:
        raise ParseError(f"Unexpected character {e.char!r}", (e.line, e.column)) from e
    except UnexpectedToken as e:
        if e.token.type == "$END":
            raise ParseError("Unexpected end of input") from e
        raise ParseError(f"Unexpected token {str(e.token)!r}", (e.line, e.column)) from e
    except UnexpectedInput as e:
        raise ParseError("Invalid syntax") from e


def parse(text: str) -> _ast.Program:
    """Parse snippet source and return a Program node."""
    tree = parse_tree(text)
    try:
        return SnippetTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, ParseError):
            raise e.orig_exc from None
        raise


def _unescape(raw: str) -> str:
    """Strip the quotes from a string token and resolve its escapes."""

    def replace(match):
        code = match.group(1)
        if code[0] in "ux" and len(code) > 1:
            return chr(int(code[1:], 16))
        return _ESCAPES.get(code, code)

    return _ESCAPE_RE.sub(replace, raw[1:-1])


class SnippetTransformer(Transformer):
    """Turns the lark tree into AST nodes, bottom up."""

    def start(self, children):
        return _ast.Program(children)

    # Statements
    def var_decl(self, children):
        name = str(children[0])
        value = children[1] if len(children) > 1 else None
        return _ast.VarDecl(name, value)

    def return_stmt(self, children):
        return _ast.ReturnStmt(children[0] if children else None)

    def if_stmt(self, children):
        orelse = children[2] if len(children) > 2 else None
        return _ast.IfStmt(children[0], children[1], orelse)

    def empty_stmt(self, children):
        return _ast.Block([])

    def expr_stmt(self, children):
        return _ast.ExprStmt(children[0])

    def block(self, children):
        return _ast.Block(children)

    # Operators
    def assignment(self, children):
        return _ast.Assign(children[0], children[1])

    def or_op(self, children):
        return _ast.Logical("||", children[0], children[1])

    def and_op(self, children):
        return _ast.Logical("&&", children[0], children[1])

    def eq_op(self, children):
        left, op, right = children
        return _ast.Equality(str(op), left, right)

    def compare(self, children):
        left, op, right = children
        return _ast.Compare(str(op), left, right)

    def arith(self, children):
        left, op, right = children
        return _ast.Arith(str(op), left, right)

    def instanceof(self, children):
        return _ast.InstanceOf(children[0], children[1])

    def in_op(self, children):
        return _ast.In(children[0], children[1])

    def not_op(self, children):
        return _ast.Not(children[0])

    def sign(self, children):
        return _ast.Sign(str(children[0]), children[1])

    def typeof_op(self, children):
        return _ast.TypeOf(children[0])

    def delete_op(self, children):
        return _ast.Delete(children[0])

    # Access and calls
    def member(self, children):
        return _ast.Member(children[0], str(children[1]))

    def index(self, children):
        return _ast.Index(children[0], children[1])

    def arguments(self, children):
        return list(children)

    def call(self, children):
        args = children[1] if len(children) > 1 else []
        return _ast.Call(children[0], args)

    def new(self, children):
        args = children[1] if len(children) > 1 else []
        return _ast.New(children[0], args)

    def parameters(self, children):
        return [str(token) for token in children]

    def function(self, children):
        name = ""
        params = []
        for child in children[:-1]:
            if isinstance(child, list):
                params = child
            else:
                name = str(child)
        return _ast.FunctionExpr(name, params, children[-1])

    # Literals
    def number(self, children):
        raw = str(children[0])
        if "." in raw or "e" in raw or "E" in raw:
            return _ast.Literal(float(raw))
        return _ast.Literal(int(raw))

    def string(self, children):
        return _ast.Literal(_unescape(str(children[0])))

    def true(self, children):
        return _ast.Literal(True)

    def false(self, children):
        return _ast.Literal(False)

    def null(self, children):
        return _ast.Literal(None)

    def undefined(self, children):
        return _ast.Literal(UNDEFINED)

    def this(self, children):
        return _ast.This()

    def name(self, children):
        return _ast.Name(str(children[0]))

    def array(self, children):
        return _ast.ArrayLiteral(children)

    def pair(self, children):
        key, value = children
        if key.type == "STRING":
            return _unescape(str(key)), value
        return str(key), value

    def object(self, children):
        return _ast.ObjectLiteral(children)
