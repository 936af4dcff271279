"""Syntax tree for generated ArkTS sources and a printer that turns it into text."""

from __future__ import annotations

import enum
import json
import math
from dataclasses import dataclass, field
from typing import Optional, Sequence, Union

INDENT = "    "


class MethodKind(enum.Enum):
    """Kind of a class method."""

    METHOD = "method"
    GETTER = "get"
    SETTER = "set"


# ---------------------------------------------------------------- expressions


@dataclass
class Ident:
    """A bare identifier; ``optional`` appends a question mark."""

    name: str
    optional: bool = False


@dataclass
class Str:
    """A string literal."""

    value: str


@dataclass
class Num:
    """A numeric literal."""

    value: float


@dataclass
class Bool:
    """A boolean literal."""

    value: bool


@dataclass
class BigIntLit:
    """A bigint literal such as ``10n``."""

    value: int


@dataclass
class Member:
    """Property access ``obj.prop``."""

    obj: object
    prop: str


@dataclass
class Index:
    """Computed access ``obj[index]``."""

    obj: object
    index: object


@dataclass
class Call:
    """A call expression."""

    callee: object
    args: list = field(default_factory=list)


@dataclass
class New:
    """A ``new`` expression."""

    callee: object
    args: list = field(default_factory=list)


@dataclass
class Unary:
    """A prefix operator applied to an expression (``!`` by default)."""

    arg: object
    op: str = "!"


@dataclass
class Binary:
    """An infix operator between two expressions."""

    left: object
    op: str
    right: object


@dataclass
class Paren:
    """An expression in parentheses."""

    expr: object


@dataclass
class Cond:
    """A conditional ``test ? cons : alt`` expression."""

    test: object
    cons: object
    alt: object


@dataclass
class Assign:
    """An assignment expression."""

    left: object
    right: object
    op: str = "="


@dataclass
class Arrow:
    """An arrow function; ``body`` is an expression or a list of statements."""

    params: list
    body: object


@dataclass
class ArrayLit:
    """An array literal."""

    elems: list = field(default_factory=list)


@dataclass
class ObjectLit:
    """An empty object literal."""


@dataclass
class NonNull:
    """A non-null assertion ``expr!``."""

    expr: object


# ---------------------------------------------------------------------- types


@dataclass
class TypeRef:
    """A named type with optional type arguments."""

    name: str
    params: list = field(default_factory=list)


@dataclass
class ArrayType:
    """An array type ``T[]``."""

    elem: object


@dataclass
class KeywordType:
    """A keyword type such as ``string`` or ``undefined``."""

    keyword: str


@dataclass
class UnionType:
    """A union of types."""

    types: list


@dataclass
class Param:
    """A function parameter or binding with an optional type annotation."""

    name: str
    type_ann: Optional[object] = None
    optional: bool = False


# ----------------------------------------------------------------- statements


@dataclass
class ExprStmt:
    expr: object


@dataclass
class Return:
    arg: Optional[object] = None


@dataclass
class Throw:
    arg: object


@dataclass
class If:
    test: object
    cons: object
    alt: Optional[object] = None


@dataclass
class Block:
    stmts: list = field(default_factory=list)


@dataclass
class Break:
    pass


@dataclass
class While:
    test: object
    body: object


@dataclass
class SwitchCase:
    """One case of a switch; ``test`` of None is the default case."""

    test: Optional[object]
    body: list = field(default_factory=list)


@dataclass
class Switch:
    discriminant: object
    cases: list = field(default_factory=list)


@dataclass
class ForOf:
    """``for (<kind> <binding> of <iterable>) { ... }``."""

    binding: str
    iterable: object
    body: list = field(default_factory=list)
    kind: str = "const"


@dataclass
class VarDecl:
    name: str
    init: Optional[object] = None
    type_ann: Optional[object] = None
    kind: str = "const"


# -------------------------------------------------------------- declarations


@dataclass
class ClassProp:
    key: str
    value: Optional[object] = None
    type_ann: Optional[object] = None
    is_static: bool = False
    optional: bool = False


@dataclass
class PrivateProp:
    key: str
    value: Optional[object] = None
    type_ann: Optional[object] = None


@dataclass
class ClassMethod:
    key: str
    params: list = field(default_factory=list)
    body: list = field(default_factory=list)
    kind: MethodKind = MethodKind.METHOD
    is_static: bool = False
    return_type: Optional[object] = None


@dataclass
class ClassDecl:
    name: str
    members: list = field(default_factory=list)
    decorators: list = field(default_factory=list)


@dataclass
class EnumMember:
    name: str
    init: Optional[object] = None


@dataclass
class EnumDecl:
    name: str
    members: list = field(default_factory=list)
    is_const: bool = False


@dataclass
class NamespaceDecl:
    name: str
    body: list = field(default_factory=list)


@dataclass
class ImportDecl:
    """``import { names } from "source"``."""

    names: list
    source: str


@dataclass
class ExportDecl:
    decl: object


Expr = Union[
    Ident, Str, Num, Bool, BigIntLit, Member, Index, Call, New, Unary, Binary,
    Paren, Cond, Assign, Arrow, ArrayLit, ObjectLit, NonNull,
]


# -------------------------------------------------------------------- helpers


def _chain(op: str, exprs: Sequence[object]) -> object:
    if not exprs:
        raise ValueError("at least one expression is required")
    result = exprs[0]
    for expr in exprs[1:]:
        result = Binary(result, op, expr)
    return result


def chain_and(*args: object) -> object:
    """Join expressions with ``&&``, nesting to the left."""
    return _chain("&&", args)


def chain_or(*args: object) -> object:
    """Join expressions with ``||``, nesting to the left."""
    return _chain("||", args)


def typeof_is(expr: object, type_name: str) -> Binary:
    """Build ``typeof expr === "type_name"``."""
    return Binary(Unary(expr, "typeof"), "===", Str(type_name))


def wrap(name: str, body: list) -> ExportDecl:
    """Wrap module items into an exported namespace."""
    return ExportDecl(NamespaceDecl(name, body))


# -------------------------------------------------------------------- printer


def _number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


def _args(args: Sequence[object], ind: str) -> str:
    return ", ".join(_expr(arg, ind) for arg in args)


def _expr(node: object, ind: str) -> str:
    match node:
        case Ident():
            return node.name + ("?" if node.optional else "")
        case Str():
            return json.dumps(node.value, ensure_ascii=False)
        case Bool():
            return "true" if node.value else "false"
        case Num():
            return _number(node.value)
        case BigIntLit():
            return f"{node.value}n"
        case Member():
            return f"{_expr(node.obj, ind)}.{node.prop}"
        case Index():
            return f"{_expr(node.obj, ind)}[{_expr(node.index, ind)}]"
        case Call():
            return f"{_expr(node.callee, ind)}({_args(node.args, ind)})"
        case New():
            return f"new {_expr(node.callee, ind)}({_args(node.args, ind)})"
        case Unary():
            sep = " " if node.op.isalpha() else ""
            return f"{node.op}{sep}{_expr(node.arg, ind)}"
        case Binary():
            return f"{_expr(node.left, ind)} {node.op} {_expr(node.right, ind)}"
        case Paren():
            return f"({_expr(node.expr, ind)})"
        case Cond():
            return (
                f"{_expr(node.test, ind)} ? {_expr(node.cons, ind)}"
                f" : {_expr(node.alt, ind)}"
            )
        case Assign():
            return f"{_expr(node.left, ind)} {node.op} {_expr(node.right, ind)}"
        case Arrow():
            params = ", ".join(_param(p) for p in node.params)
            if isinstance(node.body, list):
                body = _block(node.body, ind)
            else:
                body = _expr(node.body, ind)
            return f"({params}) => {body}"
        case ArrayLit():
            return f"[{_args(node.elems, ind)}]"
        case ObjectLit():
            return "{}"
        case NonNull():
            return f"{_expr(node.expr, ind)}!"
    raise TypeError(f"not an expression: {node!r}")


def _type(node: object) -> str:
    match node:
        case KeywordType():
            return node.keyword
        case TypeRef():
            if node.params:
                return f"{node.name}<{', '.join(_type(p) for p in node.params)}>"
            return node.name
        case ArrayType():
            inner = _type(node.elem)
            if isinstance(node.elem, UnionType):
                inner = f"({inner})"
            return f"{inner}[]"
        case UnionType():
            return " | ".join(_type(t) for t in node.types)
    raise TypeError(f"not a type: {node!r}")


def _annotation(type_ann: Optional[object]) -> str:
    return "" if type_ann is None else f": {_type(type_ann)}"


def _param(param: Param) -> str:
    mark = "?" if param.optional else ""
    return f"{param.name}{mark}{_annotation(param.type_ann)}"


def _block(stmts: Sequence[object], ind: str) -> str:
    if not stmts:
        return "{}"
    inner = ind + INDENT
    lines = "".join(f"{inner}{_stmt(s, inner)}\n" for s in stmts)
    return "{\n" + lines + ind + "}"


def _member(node: object, ind: str) -> str:
    match node:
        case ClassProp():
            static = "static " if node.is_static else ""
            mark = "?" if node.optional else ""
            value = "" if node.value is None else f" = {_expr(node.value, ind)}"
            return f"{static}{node.key}{mark}{_annotation(node.type_ann)}{value};"
        case PrivateProp():
            value = "" if node.value is None else f" = {_expr(node.value, ind)}"
            return f"#{node.key}{_annotation(node.type_ann)}{value};"
        case ClassMethod():
            static = "static " if node.is_static else ""
            kind = "" if node.kind is MethodKind.METHOD else f"{node.kind.value} "
            params = ", ".join(_param(p) for p in node.params)
            return (
                f"{static}{kind}{node.key}({params}){_annotation(node.return_type)}"
                f" {_block(node.body, ind)}"
            )
    raise TypeError(f"not a class member: {node!r}")


def _class(node: ClassDecl, ind: str, with_decorators: bool = True) -> str:
    prefix = ""
    if with_decorators:
        prefix = "".join(f"@{d}\n{ind}" for d in node.decorators)
    if node.members:
        inner = ind + INDENT
        lines = "".join(f"{inner}{_member(m, inner)}\n" for m in node.members)
        body = "{\n" + lines + ind + "}"
    else:
        body = "{}"
    return f"{prefix}class {node.name} {body}"


def _enum(node: EnumDecl, ind: str) -> str:
    head = "const enum" if node.is_const else "enum"
    inner = ind + INDENT
    members = ",\n".join(
        inner + m.name + ("" if m.init is None else f" = {_expr(m.init, inner)}")
        for m in node.members
    )
    if not members:
        return f"{head} {node.name} {{}}"
    return f"{head} {node.name} {{\n{members}\n{ind}}}"


def _switch(node: Switch, ind: str) -> str:
    inner = ind + INDENT
    body_ind = inner + INDENT
    lines = [f"switch ({_expr(node.discriminant, ind)}) {{"]
    for case in node.cases:
        head = "default:" if case.test is None else f"case {_expr(case.test, inner)}:"
        lines.append(inner + head)
        lines.extend(body_ind + _stmt(s, body_ind) for s in case.body)
    lines.append(ind + "}")
    return "\n".join(lines)


def _stmt(node: object, ind: str) -> str:
    match node:
        case ExprStmt():
            return f"{_expr(node.expr, ind)};"
        case Return():
            if node.arg is None:
                return "return;"
            return f"return {_expr(node.arg, ind)};"
        case Throw():
            return f"throw {_expr(node.arg, ind)};"
        case Break():
            return "break;"
        case Block():
            return _block(node.stmts, ind)
        case If():
            text = f"if ({_expr(node.test, ind)}) {_stmt(node.cons, ind)}"
            if node.alt is not None:
                text += f" else {_stmt(node.alt, ind)}"
            return text
        case While():
            return f"while ({_expr(node.test, ind)}) {_stmt(node.body, ind)}"
        case Switch():
            return _switch(node, ind)
        case ForOf():
            return (
                f"for ({node.kind} {node.binding} of {_expr(node.iterable, ind)})"
                f" {_block(node.body, ind)}"
            )
        case VarDecl():
            init = "" if node.init is None else f" = {_expr(node.init, ind)}"
            return f"{node.kind} {node.name}{_annotation(node.type_ann)}{init};"
        case ClassDecl():
            return _class(node, ind)
        case EnumDecl():
            return _enum(node, ind)
        case NamespaceDecl():
            return f"namespace {node.name} {_block(node.body, ind)}"
        case ImportDecl():
            names = ", ".join(node.names)
            return f"import {{ {names} }} from {json.dumps(node.source, ensure_ascii=False)};"
        case ExportDecl():
            decl = node.decl
            if isinstance(decl, ClassDecl) and decl.decorators:
                prefix = "".join(f"@{d}\n{ind}" for d in decl.decorators)
                return f"{prefix}export {_class(decl, ind, with_decorators=False)}"
            return f"export {_stmt(decl, ind)}"
    raise TypeError(f"not a statement: {node!r}")


def emit(body: Sequence[object]) -> str:
    """Print module items as source text, one item per line group."""
    return "".join(f"{_stmt(item, '')}\n" for item in body)