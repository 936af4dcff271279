"""Class properties, defaults, types and oneof accessors for fields."""

from __future__ import annotations

from typing import Callable, Optional

from .ast import (
    ArrayLit,
    ArrayType,
    Arrow,
    Assign,
    Binary,
    Bool,
    Call,
    ClassMethod,
    ClassProp,
    ExprStmt,
    Ident,
    KeywordType,
    Member,
    MethodKind,
    New,
    Num,
    Param,
    Return,
    Str,
    TypeRef,
    UnionType,
    chain_and,
)
from .context import Context, Syntax
from .descriptors import (
    is_bigint,
    is_boolean,
    is_bytes,
    is_enum,
    is_map,
    is_message,
    is_number,
    is_optional,
    is_packed,
    is_repeated,
    is_string,
    keyword_type_kind,
    type_ref,
)

FieldAccessor = Callable[[object], object]


def map_to_string_normalizer(expr):
    """``expr.map((v) => v.toString())``."""
    return Call(
        Member(expr, "map"),
        [Arrow([Param("v")], Call(Member(Ident("v"), "toString")))],
    )


def to_string_normalizer(expr):
    """``expr.toString()``."""
    return Call(Member(expr, "toString"))


def this_field_member(field):
    return Member(Ident("this"), field.name)


def bare_field_member(field):
    return Ident(field.name)


def static_field_member(field):
    return Ident("r")


def into_accessor(field, ctx: Context) -> FieldAccessor:
    """How serialization code refers to the value of a field."""
    if is_repeated(field) and (is_map(field, ctx) or not is_packed(field, ctx)):
        return bare_field_member
    return this_field_member


def prop_name(field) -> str:
    """Property name; oneof members are stored in private-looking slots."""
    if field.HasField("oneof_index"):
        return f"#_{field.name}"
    return field.name


def _big_int_zero():
    return Call(Ident("BigInt"), [Num(0)])


def default_value_bin_expr(field, ctx: Context, accessor: FieldAccessor):
    """Condition that is true when a field holds a non-default value."""
    neq_undefined = Binary(accessor(field), "!==", Ident("undefined"))

    # oneof members are serialized even when they hold the default value
    if field.HasField("oneof_index"):
        return neq_undefined

    if is_map(field, ctx):
        presence = Binary(
            neq_undefined, "&&", Binary(Member(accessor(field), "size"), "!==", Num(0))
        )
    elif (is_bytes(field) and ctx.syntax is Syntax.PROTO3) or is_repeated(field):
        presence = Binary(
            neq_undefined, "&&", Binary(Member(accessor(field), "length"), "!==", Num(0))
        )
    else:
        presence = neq_undefined

    if ctx.syntax is Syntax.PROTO3:
        default = proto3_default(field, ctx)
        if default is not None:
            return chain_and(presence, Binary(accessor(field), "!==", default))
    return presence


def proto3_default(field, ctx: Context):
    """The implicit proto3 default of a singular scalar field, or None."""
    if is_repeated(field) or field.HasField("oneof_index"):
        return None
    if is_string(field):
        return Str("")
    if is_bigint(field):
        return _big_int_zero()
    if is_number(field):
        return Num(0)
    if is_boolean(field):
        return Bool(False)
    if is_enum(field):
        return Num(ctx.get_leading_enum_member(field.type_name))
    return None


def _parse_number(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"can not parse the default {text!r}") from None


def _parse_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise ValueError(f"can not parse the default {text!r}")


def default_value_expr(field, ctx: Context, include_message: bool):
    """Initial value of a field's property."""
    if field.HasField("oneof_index"):
        return Ident("undefined")

    sendable = ctx.options.with_sendable
    if sendable:
        ctx.add_sendable_import(ctx.options.sendable_package)

    def collection(name: str):
        if sendable:
            return New(Member(Ident("collections"), name))
        return New(Ident(name))

    if is_map(field, ctx):
        return collection("Map")
    if is_repeated(field):
        return collection("Array") if sendable else ArrayLit()
    if is_enum(field):
        return Num(ctx.get_leading_enum_member(field.type_name))
    if is_message(field) and include_message:
        return New(ctx.lazy_type_ref(field.type_name))
    if is_bytes(field):
        return collection("Uint8Array")
    if is_string(field):
        return Str(field.default_value)
    if is_bigint(field):
        return _big_int_zero()
    if is_number(field):
        text = field.default_value if field.HasField("default_value") else "0"
        return Num(_parse_number(text))
    if is_boolean(field):
        text = field.default_value if field.HasField("default_value") else "false"
        return Bool(_parse_bool(text))
    if is_optional(field) or field.proto3_optional:
        return Ident("undefined")
    return New(ctx.lazy_type_ref(field.type_name))


def ts_type(field, ctx: Context):
    """The declared type of a field's property, or None."""
    result = type_ref(field, ctx)

    kind = keyword_type_kind(field)
    if kind is not None:
        result = KeywordType(kind)

    sendable = ctx.options.with_sendable
    if is_bytes(field) and sendable:
        result = TypeRef("collections.Uint8Array")

    if is_repeated(field) and is_map(field, ctx):
        entry = ctx.get_map_type(field.type_name)
        params = []
        for entry_field in entry.field:
            param = ts_type(entry_field, ctx)
            if param is None:
                raise ValueError("expect map fields to have corresponding type")
            params.append(param)
        name = "collections.Map" if sendable else "Map"
        result = TypeRef(name, params)
    elif result is not None and is_repeated(field):
        if sendable:
            result = TypeRef("collections.Array", [result])
        else:
            result = ArrayType(result)

    return result


def type_annotation(field, ctx: Context):
    return ts_type(field, ctx)


def nullish_type_annotation(field, ctx: Context) -> Optional[UnionType]:
    declared = ts_type(field, ctx)
    if declared is None:
        return None
    return UnionType([declared, KeywordType("undefined")])


def print_prop(field, ctx: Context) -> ClassProp:
    """The class property that stores a field."""
    value = None
    if (
        ctx.syntax is Syntax.PROTO3
        or is_repeated(field)
        or is_map(field, ctx)
        or not is_optional(field)
    ):
        value = default_value_expr(field, ctx, False)
    return ClassProp(
        key=prop_name(field),
        value=value,
        type_ann=type_annotation(field, ctx),
        optional=is_optional(field),
    )


def print_oneof_getter(field, ctx: Context) -> ClassMethod:
    return ClassMethod(
        key=field.name,
        kind=MethodKind.GETTER,
        body=[Return(Member(Ident("this"), prop_name(field)))],
        return_type=nullish_type_annotation(field, ctx),
    )


def print_oneof_setter(field, ctx: Context, others) -> ClassMethod:
    """Setter that clears the other members of the oneof before assigning."""
    body = [
        ExprStmt(Assign(Member(Ident("this"), prop_name(other)), Ident("undefined")))
        for other in others
    ]
    body.append(ExprStmt(Assign(Member(Ident("this"), prop_name(field)), Ident("value"))))
    return ClassMethod(
        key=field.name,
        kind=MethodKind.SETTER,
        params=[Param("value", nullish_type_annotation(field, ctx))],
        body=body,
    )