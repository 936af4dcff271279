"""Statements that write a message to a binary writer."""

from __future__ import annotations

from typing import Callable, Optional

from google.protobuf import descriptor_pb2

from .ast import (
    Arrow,
    Block,
    Call,
    ExprStmt,
    ForOf,
    Ident,
    If,
    Member,
    New,
    NonNull,
    Num,
    Param,
    TypeRef,
    VarDecl,
)
from .context import Context, TypeResolutionError
from .descriptors import is_bigint, is_bytes, is_map, is_message, is_packed, is_repeated
from .field import (
    FieldAccessor,
    bare_field_member,
    default_value_bin_expr,
    into_accessor,
    map_to_string_normalizer,
    this_field_member,
    to_string_normalizer,
)
from .wire_names import rw_function_name

_Field = descriptor_pb2.FieldDescriptorProto

Normalizer = Callable[[object], object]


def _bw(method: str) -> Member:
    return Member(Ident("bw"), method)


def serialize_sfixed64_workaround(field, accessor: FieldAccessor) -> ExprStmt:
    """Write packed sfixed64 values split into two 32-bit halves."""
    return ExprStmt(
        Call(
            _bw("writePackedSplitFixed64"),
            [
                Num(field.number),
                accessor(field),
                Ident("(i) => Number(i & 4294967295n)"),
                Ident("(i) => Number((i >> 32n) & 4294967295n)"),
            ],
        )
    )


def serialize_primitive_field(
    ctx: Context, field, accessor: FieldAccessor, normalizer: Optional[Normalizer]
) -> ExprStmt:
    """Write a scalar (or packed scalar) field."""
    value = accessor(field)
    if normalizer is not None:
        value = normalizer(value)
    if ctx.options.with_sendable and is_bytes(field):
        value = Call(Member(Ident("Uint8Array"), "from"), [value])
    return ExprStmt(
        Call(_bw(rw_function_name("write", ctx, field)), [Num(field.number), value])
    )


def serialize_message_field(field, accessor: FieldAccessor) -> ExprStmt:
    """Write a nested message as length-delimited bytes."""
    return ExprStmt(
        Call(
            _bw("writeBytes"),
            [
                Num(field.number),
                Call(Member(NonNull(accessor(field)), "toBinary")),
            ],
        )
    )


def serialize_map_field(ctx: Context, field) -> ForOf:
    """Write every map entry as a sub-message."""
    entry = ctx.get_map_type(field.type_name)
    if entry is None:
        raise TypeResolutionError(f"can not find the map type {field.type_name}")

    body: list = [
        ExprStmt(Call(_bw("beginSubMessage"), [Num(field.number)])),
        ExprStmt(Ident("let key = entry[0]")),
        ExprStmt(Ident("let value = entry[1]")),
    ]
    body.extend(serialize_fields(ctx, entry, bare_field_member, False, False))
    body.append(ExprStmt(Call(_bw("endSubMessage"))))

    return ForOf(
        binding="entry",
        iterable=Member(Member(Ident("this"), field.name), "entries()"),
        body=body,
        kind="let",
    )


def _normalizer_for(field, ctx: Context) -> Optional[Normalizer]:
    if is_bigint(field):
        return map_to_string_normalizer if is_packed(field, ctx) else to_string_normalizer
    return None


def serialize_fields(
    ctx: Context,
    descriptor,
    accessor: FieldAccessor,
    create_writer: bool,
    prevent_defaults: bool,
) -> list:
    """Statements that write every field of ``descriptor``."""
    stmts: list = []

    if create_writer:
        ctx.add_protobuf_import(ctx.options.runtime_package)
        stmts.append(
            VarDecl("bw", New(Ident("BinaryWriter")), type_ann=TypeRef("BinaryWriter"))
        )

    for field in descriptor.field:
        field_accessor = accessor if descriptor.options.map_entry else into_accessor(field, ctx)

        if is_message(field):
            field_stmt = serialize_message_field(field, field_accessor)
        elif field.type == _Field.TYPE_SFIXED64 and is_packed(field, ctx):
            field_stmt = serialize_sfixed64_workaround(field, field_accessor)
        else:
            field_stmt = serialize_primitive_field(
                ctx, field, field_accessor, _normalizer_for(field, ctx)
            )

        if is_map(field, ctx):
            field_stmt = serialize_map_field(ctx, field)
        elif is_repeated(field) and not is_packed(field, ctx):
            if ctx.options.with_sendable:
                field_stmt = ExprStmt(
                    Call(
                        Member(this_field_member(field), "forEach"),
                        [Arrow([Param(field.name)], [field_stmt])],
                    )
                )
            else:
                field_stmt = ForOf(field.name, accessor(field), [field_stmt])

        if prevent_defaults:
            stmts.append(If(default_value_bin_expr(field, ctx, accessor), Block([field_stmt])))
        else:
            stmts.append(field_stmt)

    return stmts