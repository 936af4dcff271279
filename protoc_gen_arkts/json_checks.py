"""Field naming and validity checks used by the JSON conversion code."""

from __future__ import annotations

import sys
from decimal import Decimal
from typing import Union

from google.protobuf import descriptor_pb2

from .ast import (
    BigIntLit,
    Binary,
    Call,
    Ident,
    If,
    Member,
    New,
    Num,
    Paren,
    Str,
    Throw,
    Unary,
    chain_and,
    chain_or,
    typeof_is,
)
from .context import Context
from .descriptors import (
    is_boolean,
    is_bytes,
    is_enum,
    is_integer,
    is_message,
    is_number,
    is_string,
    is_well_known_message,
)
from .field import FieldAccessor

_Field = descriptor_pb2.FieldDescriptorProto

Number = Union[int, float, Decimal]

# Shortest decimal forms of the single-precision limits.
F32_MIN = Decimal("-3.4028235e38")
F32_MAX = Decimal("3.4028235e38")

_WELL_KNOWN_JSON = {
    "google.protobuf.BoolValue": "boolean",
    "google.protobuf.BytesValue": "string",
    "google.protobuf.DoubleValue": "number",
    "google.protobuf.Duration": "string",
    "google.protobuf.FieldMask": "string",
    "google.protobuf.FloatValue": "number",
    "google.protobuf.Int32Value": "number",
    "google.protobuf.Int64Value": "number|string",
    "google.protobuf.ListValue": "array",
    "google.protobuf.StringValue": "string",
    "google.protobuf.Timestamp": "string",
    "google.protobuf.UInt32Value": "number",
    "google.protobuf.UInt64Value": "number|string",
    "google.protobuf.Value": "unknown",
    "google.protobuf.NullValue": "null",
}


def json_key_name(field) -> str:
    """Key under which a field appears in JSON."""
    return field.name


def json_key_name_field_member(field) -> Member:
    return Member(Ident("json"), json_key_name(field))


def name_field_member(field) -> Member:
    return Member(Ident("json"), field.name)


def json_repr_for_well_known_type(field) -> str:
    """JSON representation of a well-known type; ``object`` for anything else."""
    return _WELL_KNOWN_JSON.get(field.type_name.lstrip("."), "object")


def typeof_expr_for_type(field, accessor: FieldAccessor, typ: str):
    """Expression that checks the runtime type of a JSON value."""
    if typ == "unknown":
        return Paren(
            chain_or(
                typeof_is(accessor(field), "number"),
                typeof_is(accessor(field), "string"),
                typeof_is(accessor(field), "boolean"),
                typeof_is(accessor(field), "object"),
                Binary(accessor(field), "===", Ident("null")),
            )
        )
    if typ == "number|string":
        return Paren(
            chain_or(
                typeof_is(accessor(field), "number"),
                typeof_is(accessor(field), "string"),
            )
        )
    if typ == "array":
        return Call(Member(Ident("Array"), "isArray"), [accessor(field)])
    if typ == "null":
        return Binary(accessor(field), "===", Ident("null"))
    return typeof_is(accessor(field), typ)


def typeof_expr_for_well_known_type(field, accessor: FieldAccessor):
    return typeof_expr_for_type(field, accessor, json_repr_for_well_known_type(field))


def infinity_and_nan_check(field, accessor: FieldAccessor):
    """True when the value is one of the special float strings."""
    return chain_or(
        *(Binary(accessor(field), "===", Str(text)) for text in ("NaN", "Infinity", "-Infinity"))
    )


def _signed_exponent(value: Number) -> str:
    """Format a number as ``+d.ddde<exp>`` with the shortest mantissa."""
    if isinstance(value, float):
        value = Decimal(repr(value))
    decimal = Decimal(value)
    sign = "-" if decimal.is_signed() and decimal != 0 else "+"
    if decimal == 0:
        return f"{sign}0e0"
    _, digits, exponent = decimal.normalize().as_tuple()
    text = "".join(map(str, digits))
    power = len(text) - 1 + exponent
    mantissa = text[0] if len(text) == 1 else f"{text[0]}.{text[1:]}"
    return f"{sign}{mantissa}e{power}"


def min_max_check(field, accessor: FieldAccessor, minimum: Number, maximum: Number):
    """``(value >= min && value <= max)`` with limits written in exponent form."""
    return Paren(
        chain_and(
            Binary(accessor(field), ">=", Ident(_signed_exponent(minimum))),
            Binary(accessor(field), "<=", Ident(_signed_exponent(maximum))),
        )
    )


def min_max_check_bigint(field, accessor: FieldAccessor, minimum: int, maximum: int):
    """``(value >= minn && value <= maxn)`` with bigint literals."""
    return Paren(
        chain_and(
            Binary(accessor(field), ">=", BigIntLit(int(minimum))),
            Binary(accessor(field), "<=", BigIntLit(int(maximum))),
        )
    )


def _range_check(field, accessor: FieldAccessor):
    t = field.type
    if t == _Field.TYPE_FLOAT:
        return min_max_check(field, accessor, F32_MIN, F32_MAX)
    if t == _Field.TYPE_DOUBLE:
        return min_max_check(field, accessor, -sys.float_info.max, sys.float_info.max)
    if t in (_Field.TYPE_UINT32, _Field.TYPE_FIXED32):
        return min_max_check(field, accessor, 0, 2**32 - 1)
    if t in (_Field.TYPE_UINT64, _Field.TYPE_FIXED64):
        return min_max_check_bigint(field, accessor, 0, 2**64 - 1)
    if t in (_Field.TYPE_INT32, _Field.TYPE_SFIXED32, _Field.TYPE_SINT32):
        return min_max_check(field, accessor, -(2**31), 2**31 - 1)
    if t in (_Field.TYPE_INT64, _Field.TYPE_SFIXED64, _Field.TYPE_SINT64):
        return min_max_check_bigint(field, accessor, -(2**63), 2**63 - 1)
    return None


def _typeof_check(field, ctx: Context, accessor: FieldAccessor):
    if is_well_known_message(field):
        return typeof_expr_for_well_known_type(field, accessor)
    if is_string(field) or is_bytes(field):
        return typeof_expr_for_type(field, accessor, "string")
    if is_boolean(field):
        return typeof_expr_for_type(field, accessor, "boolean")
    if is_message(field):
        return typeof_expr_for_type(field, accessor, "object")
    if is_integer(field):
        no_spaces = Binary(
            Call(Member(accessor(field), "indexOf"), [Str(" ")]), "===", Num(-1)
        )
        return chain_and(
            Paren(
                chain_or(
                    typeof_expr_for_type(field, accessor, "number"),
                    chain_and(typeof_expr_for_type(field, accessor, "string"), no_spaces),
                )
            ),
            Call(Member(Ident("Number"), "isInteger"), [Unary(accessor(field), "+")]),
        )
    if is_number(field):
        return typeof_expr_for_type(field, accessor, "number|string")
    if is_enum(field):
        return chain_or(
            typeof_expr_for_type(field, accessor, "number"),
            chain_and(
                typeof_expr_for_type(field, accessor, "string"),
                Binary(accessor(field), "in", ctx.lazy_type_ref(field.type_name)),
            ),
        )
    return typeof_expr_for_type(field, accessor, "never!")


def value_check_stmt(field, ctx: Context, accessor: FieldAccessor) -> If:
    """Statement that throws when a JSON value is not valid for the field."""
    check = _typeof_check(field, ctx, accessor)
    range_check = _range_check(field, accessor)
    if range_check is not None:
        num_check = chain_or(infinity_and_nan_check(field, accessor), range_check)
        check = chain_and(check, Paren(num_check))
    return If(
        Unary(Paren(check)),
        Throw(New(Ident("Error"), [Str(f"illegal value for {json_key_name(field)}")])),
    )