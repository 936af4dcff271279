"""Statements that read a message from a binary reader."""

from __future__ import annotations

from google.protobuf import descriptor_pb2

from .ast import (
    Arrow,
    Assign,
    Binary,
    Block,
    Break,
    Call,
    ExprStmt,
    Ident,
    If,
    Member,
    New,
    NonNull,
    Num,
    Param,
    Str,
    Switch,
    SwitchCase,
    Throw,
    TypeRef,
    Unary,
    VarDecl,
    While,
)
from .context import Context, TypeResolutionError
from .descriptors import (
    is_bigint,
    is_boolean,
    is_bytes,
    is_map,
    is_message,
    is_packable,
    is_packed,
    is_repeated,
)
from .field import (
    FieldAccessor,
    bare_field_member,
    default_value_expr,
    this_field_member,
    type_annotation,
)
from .wire_names import decoder_fn_name, rw_function_name

_Field = descriptor_pb2.FieldDescriptorProto


def _br(method: str) -> Member:
    return Member(Ident("br"), method)


def _optional_this(field, method: str) -> Member:
    return Member(Member(Ident("this"), f"{field.name}?"), method)


def deserialize_setup(ctx: Context, descriptor, create_reader: bool) -> list:
    """Statements that create a reader (optionally) and read every field."""
    stmts: list = []
    if create_reader:
        ctx.add_protobuf_import(ctx.options.runtime_package)
        stmts.append(
            VarDecl(
                "br",
                New(Ident("BinaryReader"), [Ident("bytes")]),
                type_ann=TypeRef("BinaryReader"),
            )
        )
    stmts.append(deserialize_stmt(ctx, descriptor, this_field_member, True))
    return stmts


def _message_preread(ctx: Context, field, accessor: FieldAccessor) -> Assign:
    return Assign(accessor(field), New(ctx.lazy_type_ref(field.type_name)), "??=")


def _message_field_expr(ctx: Context, field, accessor: FieldAccessor) -> Call:
    if is_repeated(field):
        callee = Member(ctx.lazy_type_ref(field.type_name), "fromBinary")
    else:
        callee = Member(accessor(field), "mergeFrom")
    return Call(callee, [Call(_br("readBytes"))])


def _primitive_field_expr(ctx: Context, field, force_unpacked: bool):
    read_name = rw_function_name("read", ctx, field)
    if (is_packed(field, ctx) or is_packable(field)) and not force_unpacked:
        # every packable type has a decoder; an unknown one is an error
        decoder_fn_name(field)
        call = Call(_br(read_name), [])
        if field.type == _Field.TYPE_BOOL:
            call = Call(
                Member(call, "map"),
                [Arrow([Param("r", TypeRef("number"))], Binary(Ident("r"), "!==", Num(0)))],
            )
        return call

    call = Call(_br(read_name))
    if is_bigint(field):
        return Call(Ident("BigInt"), [call])
    if field.type == _Field.TYPE_UINT32:
        return Binary(call, ">>>", Num(0))
    if is_boolean(field):
        return Binary(call, "!==", Num(0))
    return call


def _map_field_expr(ctx: Context, field) -> Call:
    entry = ctx.get_map_type(field.type_name)
    if entry is None:
        raise TypeResolutionError(f"can not find the map type {field.type_name}")
    key_field, value_field = entry.field[0], entry.field[1]

    key_type = type_annotation(key_field, ctx)
    key_init = default_value_expr(key_field, ctx, True)
    value_type = type_annotation(value_field, ctx)
    value_init = default_value_expr(value_field, ctx, True)

    body = [
        VarDecl("key", key_init, type_ann=key_type, kind="let"),
        VarDecl("value", value_init, type_ann=value_type, kind="let"),
        deserialize_stmt(ctx, entry, bare_field_member, False),
        ExprStmt(
            Call(
                _optional_this(field, "set"),
                [NonNull(Ident("key")), NonNull(Ident("value"))],
            )
        ),
    ]
    return Call(_br("readMessage"), [Ident("undefined"), Arrow([], body)])


def _field_expr(ctx: Context, field, accessor: FieldAccessor, force_unpacked: bool):
    if is_map(field, ctx):
        return _map_field_expr(ctx, field)
    if is_message(field):
        return _message_field_expr(ctx, field, accessor)
    return _primitive_field_expr(ctx, field, force_unpacked)


def _read_stmt(ctx: Context, field, accessor: FieldAccessor):
    sendable = ctx.options.with_sendable
    read_expr = _field_expr(ctx, field, accessor, False)
    if is_bytes(field) and sendable:
        read_expr = Call(
            Member(Member(Ident("collections"), "Uint8Array"), "from"), [read_expr]
        )

    if is_map(field, ctx) or (is_message(field) and not is_repeated(field)):
        return ExprStmt(read_expr)
    if is_packable(field):
        packed_expr = _field_expr(ctx, field, accessor, False)
        if is_repeated(field) and sendable:
            packed_expr = Call(
                Member(Member(Ident("collections"), "Array"), "from"), [packed_expr]
            )
        return If(
            Call(_br("isDelimited")),
            ExprStmt(Assign(accessor(field), packed_expr)),
            ExprStmt(
                Call(
                    _optional_this(field, "push"),
                    [_field_expr(ctx, field, accessor, True)],
                )
            ),
        )
    if is_repeated(field) and not is_packed(field, ctx):
        return ExprStmt(Call(_optional_this(field, "push"), [read_expr]))
    return ExprStmt(Assign(accessor(field), read_expr))


def deserialize_stmt(ctx: Context, descriptor, accessor: FieldAccessor, add_unknown_fields: bool) -> While:
    """A loop that dispatches on field numbers and reads each field."""
    cases: list = []
    for field in descriptor.field:
        body = [_read_stmt(ctx, field, accessor), Break()]
        if is_message(field) and not is_repeated(field):
            body.insert(0, ExprStmt(_message_preread(ctx, field, accessor)))
        cases.append(SwitchCase(Num(field.number), body))

    cases.append(
        SwitchCase(Num(0), [Throw(New(Ident("Error"), [Str("illegal zero tag.")]))])
    )
    # unknown fields are skipped
    cases.append(SwitchCase(None, [ExprStmt(Call(_br("skipField")))]))

    switch = Switch(Call(_br("getFieldNumber")), cases)
    test = Binary(Call(_br("nextField")), "&&", Unary(Call(_br("isEndGroup"))))
    return While(test, Block([switch]))