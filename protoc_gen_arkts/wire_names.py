"""Names of the binary reader and writer functions used for each field type."""

from __future__ import annotations

from google.protobuf import descriptor_pb2

from .context import Context
from .descriptors import is_packed

_Field = descriptor_pb2.FieldDescriptorProto

_PLACEHOLDER = "_placeholder_"

_RW_SUFFIXES = {
    _Field.TYPE_STRING: "_placeholder_String",
    _Field.TYPE_BOOL: "_placeholder_Int64",
    _Field.TYPE_FLOAT: "_placeholder_Float",
    _Field.TYPE_DOUBLE: "_placeholder_Double",
    _Field.TYPE_ENUM: "_placeholder_Int32",
    _Field.TYPE_BYTES: "_placeholder_Bytes",
    _Field.TYPE_INT32: "_placeholder_Int32",
    _Field.TYPE_INT64: "_placeholder_Int64String",
    _Field.TYPE_UINT32: "_placeholder_Uint32",
    _Field.TYPE_UINT64: "_placeholder_Uint64String",
    _Field.TYPE_SINT32: "_placeholder_Sint32",
    _Field.TYPE_SINT64: "_placeholder_Sint64String",
    _Field.TYPE_FIXED32: "_placeholder_Fixed32",
    _Field.TYPE_FIXED64: "_placeholder_Fixed64String",
    _Field.TYPE_SFIXED32: "_placeholder_Sfixed32",
    _Field.TYPE_SFIXED64: "_placeholder_Sfixed64String",
    _Field.TYPE_GROUP: "skipField",
    _Field.TYPE_MESSAGE: "skipField",
}

_DECODERS = {
    _Field.TYPE_BOOL: "readSignedVarint64",
    _Field.TYPE_FLOAT: "readFloat",
    _Field.TYPE_DOUBLE: "readDouble",
    _Field.TYPE_ENUM: "readSignedVarint32",
    _Field.TYPE_INT32: "readSignedVarint32",
    _Field.TYPE_INT64: "readSignedVarint64String",
    _Field.TYPE_UINT32: "readUnsignedVarint32",
    _Field.TYPE_UINT64: "readUnsignedVarint64String",
    _Field.TYPE_SINT32: "readZigzagVarint32",
    _Field.TYPE_SINT64: "readZigzagVarint64String",
    _Field.TYPE_FIXED32: "readUint32",
    _Field.TYPE_FIXED64: "readUint64String",
    _Field.TYPE_SFIXED32: "readInt32",
    _Field.TYPE_SFIXED64: "readInt64String",
}


def rw_function_name(rw: str, ctx: Context, field) -> str:
    """Reader or writer method for a field, e.g. ``writePackedInt32``."""
    prefix = f"{rw}Packed" if is_packed(field, ctx) else rw
    try:
        template = _RW_SUFFIXES[field.type]
    except KeyError:
        raise ValueError(f"unsupported field type {field.type}") from None
    return template.replace(_PLACEHOLDER, prefix)


def decoder_fn_name(field) -> str:
    """Low-level decoder method used to read one element of a packed field."""
    try:
        return _DECODERS[field.type]
    except KeyError:
        raise ValueError(f"no decoder function for field type {field.type}") from None