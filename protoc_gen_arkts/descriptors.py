"""Classification of field and message descriptors."""

from __future__ import annotations

from typing import Optional

from google.protobuf import descriptor_pb2

from .ast import TypeRef
from .context import Context, Syntax

_Field = descriptor_pb2.FieldDescriptorProto

_BIGINT_TYPES = frozenset(
    {
        _Field.TYPE_INT64,
        _Field.TYPE_UINT64,
        _Field.TYPE_SINT64,
        _Field.TYPE_FIXED64,
        _Field.TYPE_SFIXED64,
    }
)
_FLOAT_TYPES = frozenset({_Field.TYPE_DOUBLE, _Field.TYPE_FLOAT})
_NUMBER_TYPES = _BIGINT_TYPES | _FLOAT_TYPES | frozenset(
    {
        _Field.TYPE_INT32,
        _Field.TYPE_UINT32,
        _Field.TYPE_SINT32,
        _Field.TYPE_FIXED32,
        _Field.TYPE_SFIXED32,
    }
)


def keyword_type_kind(field) -> Optional[str]:
    """The keyword type of a scalar field, or None."""
    if is_string(field):
        return "string"
    if is_bigint(field):
        return "bigint"
    if is_number(field):
        return "number"
    if is_boolean(field):
        return "boolean"
    return None


def type_ref(field, ctx: Context) -> Optional[TypeRef]:
    """A named type for bytes and for fields that refer to another type."""
    if is_bytes(field):
        return TypeRef("Uint8Array")
    if field.HasField("type_name"):
        return TypeRef(ctx.lazy_type_ref(field.type_name).name)
    return None


def is_packable(field) -> bool:
    return (
        not is_string(field)
        and not is_group(field)
        and not is_message(field)
        and not is_bytes(field)
        and is_repeated(field)
    )


def is_packed(field, ctx: Context) -> bool:
    if not is_packable(field):
        return False
    options = field.options
    if ctx.syntax is Syntax.PROTO2:
        return options.HasField("packed") and options.packed
    return not options.HasField("packed") or options.packed


def is_bytes(field) -> bool:
    return field.type == _Field.TYPE_BYTES


def is_group(field) -> bool:
    return field.type == _Field.TYPE_GROUP


def is_message(field) -> bool:
    return field.type == _Field.TYPE_MESSAGE


def is_enum(field) -> bool:
    return field.type == _Field.TYPE_ENUM


def is_string(field) -> bool:
    return field.type == _Field.TYPE_STRING


def is_boolean(field) -> bool:
    return field.type == _Field.TYPE_BOOL


def is_number(field) -> bool:
    return field.type in _NUMBER_TYPES


def is_integer(field) -> bool:
    return is_number(field) and not is_bigint(field) and field.type not in _FLOAT_TYPES


def is_bigint(field) -> bool:
    return field.type in _BIGINT_TYPES


def is_map(field, ctx: Context) -> bool:
    return is_repeated(field) and ctx.get_map_type(field.type_name) is not None


def is_repeated(field) -> bool:
    return field.label == _Field.LABEL_REPEATED


def is_optional(field) -> bool:
    return field.label == _Field.LABEL_OPTIONAL or field.proto3_optional


def is_jstype_string(field) -> bool:
    return field.options.jstype == descriptor_pb2.FieldOptions.JS_STRING


def is_well_known_message(field) -> bool:
    return is_message(field) and "google.protobuf" in field.type_name


def oneof_fields(message, current) -> list:
    """The other fields that share a oneof with ``current``."""
    return [
        candidate
        for candidate in message.field
        if candidate.HasField("oneof_index")
        and candidate.oneof_index == current.oneof_index
        and candidate.number != current.number
    ]


def is_well_known(message, ctx: Context) -> bool:
    return ctx.calculate_type_name(message.name).startswith(".google.protobuf.")