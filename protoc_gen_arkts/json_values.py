"""Value conversions between message fields and their JSON form."""

from __future__ import annotations

from .ast import (
    Binary,
    Call,
    Cond,
    Ident,
    Index,
    Member,
    Num,
    Str,
    chain_and,
    typeof_is,
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
    is_repeated,
    is_string,
)
from .field import FieldAccessor, bare_field_member, proto3_default, to_string_normalizer
from .json_checks import json_repr_for_well_known_type


def default_value_bin_expr_for_json(field, ctx: Context, accessor: FieldAccessor):
    """Condition that a JSON value is present and differs from the default."""
    neq_undefined = Binary(accessor(field), "!==", Ident("undefined"))
    neq_null = Binary(accessor(field), "!==", Ident("null"))

    if json_repr_for_well_known_type(field) == "unknown":
        present = neq_undefined
    else:
        present = chain_and(neq_null, neq_undefined)

    has_oneof = field.HasField("oneof_index")
    if has_oneof or is_map(field, ctx):
        # oneof members are read unconditionally, even when they hold the default
        presence = present
    elif (is_bytes(field) and ctx.syntax is Syntax.PROTO3) or is_repeated(field):
        presence = Binary(
            present, "&&", Binary(Member(accessor(field), "length"), "!==", Num(0))
        )
    else:
        presence = present

    default = proto3_default(field, ctx)
    if default is not None and ctx.syntax is Syntax.PROTO3 and not has_oneof:
        return Binary(presence, "&&", Binary(accessor(field), "!==", default))
    return presence


def to_stringified_map_expr(field, ctx: Context):
    """JSON form of a map entry's key or value."""
    if is_string(field):
        return Ident(field.name)
    if field.name == "key":
        return to_string_normalizer(Ident(field.name))
    return to_json_expr(field, ctx, bare_field_member)


def to_json_expr(field, ctx: Context, accessor: FieldAccessor):
    """Expression that converts a field value into its JSON form."""
    value = accessor(field)
    if is_enum(field):
        return Call(Member(accessor(field), "valueOf"))
    if is_bytes(field):
        ctx.add_base64_import(ctx.options.base64_package)
        params = [value]
        if ctx.options.with_sendable:
            params = [Call(Member(Ident("Uint8Array"), "from"), params)]
        return Call(Ident("fromUint8Array"), params)
    if is_bigint(field):
        return value
    if is_number(field):
        return Cond(
            Call(Member(Ident("Number"), "isFinite"), [accessor(field)]),
            accessor(field),
            to_string_normalizer(accessor(field)),
        )
    if is_message(field) and not is_map(field, ctx):
        return Call(Member(value, "toJson"))
    return value


def from_json_expr_for_map_key(field, ctx: Context, accessor: FieldAccessor):
    """Like ``from_json_expr``, but boolean keys arrive as strings."""
    if is_boolean(field):
        return Binary(accessor(field), "===", Str("true"))
    return from_json_expr(field, ctx, accessor)


def from_json_expr(field, ctx: Context, accessor: FieldAccessor):
    """Expression that converts a JSON value into a field value."""
    value = accessor(field)
    if is_enum(field):
        return Cond(
            typeof_is(accessor(field), "number"),
            accessor(field),
            Index(ctx.lazy_type_ref(field.type_name), value),
        )
    if is_bytes(field):
        method = Ident("toUint8Array")
        params = [value]
        if ctx.options.with_sendable:
            method = Member(Ident("collections.Uint8Array"), "from")
            params = [Call(Ident("toUint8Array"), params)]
        return Call(method, params)
    if is_bigint(field):
        return Call(Ident("BigInt"), [value])
    if is_number(field):
        return Call(Ident("Number"), [value])
    if is_message(field) and not is_map(field, ctx):
        return Call(Member(ctx.lazy_type_ref(field.type_name), "fromJson"), [value])
    return value