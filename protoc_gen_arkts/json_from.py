"""Generation of the static ``fromJson`` methods of message classes."""

from __future__ import annotations

from .ast import (
    Arrow,
    Assign,
    Block,
    Call,
    ClassMethod,
    Cond,
    ExprStmt,
    Ident,
    If,
    Index,
    Member,
    New,
    NonNull,
    Num,
    Param,
    Return,
    Str,
    Throw,
    TypeRef,
    VarDecl,
)
from .context import Context, TypeResolutionError
from .descriptors import (
    is_bigint,
    is_boolean,
    is_bytes,
    is_enum,
    is_map,
    is_number,
    is_repeated,
    is_string,
)
from .field import bare_field_member, static_field_member
from .json_checks import json_key_name
from .json_to import _chunks
from .json_values import default_value_bin_expr_for_json, from_json_expr


def field_descriptor_str(ctx: Context, field) -> str:
    """Type annotation (with leading colon) of a JSON value read for a field."""
    if is_string(field):
        base = ": string"
    elif is_bigint(field):
        base = ": bigint"
    elif is_number(field) or is_enum(field):
        base = ": number"
    elif is_boolean(field):
        base = ": boolean"
    elif is_bytes(field):
        base = ": string"
    else:
        base = ": object"

    if is_repeated(field) and not is_map(field, ctx):
        return f"{base}[]"
    return base


def _map_key(entry) -> Ident:
    key_field = entry.field[0]
    if is_bigint(key_field):
        return Ident("BigInt(key)")
    if is_number(key_field):
        return Ident("Number(key)")
    return Ident("key")


def _value_expr(ctx: Context, field):
    repeated_list = is_repeated(field) and not is_map(field, ctx)
    accessor = static_field_member if repeated_list else bare_field_member
    value_expr = from_json_expr(field, ctx, accessor)
    if is_enum(field):
        value_expr = Ident("r") if is_repeated(field) else Ident(field.name)

    if is_map(field, ctx):
        entry = ctx.get_map_type(field.type_name)
        if entry is None:
            raise TypeResolutionError(f"can not find the map type {field.type_name}")
        setter = Call(
            Member(Member(Ident("jsonMessage"), f"{field.name}?"), "set"),
            [
                NonNull(_map_key(entry)),
                NonNull(Index(Ident(field.name), Ident("key"))),
            ],
        )
        keys = Call(Member(Ident("Object"), "keys"), [Ident(field.name)])
        return Call(Member(keys, "forEach"), [Arrow([Param("key")], [ExprStmt(setter)])])

    if is_repeated(field):
        value_expr = Call(
            Member(bare_field_member(field), "map"),
            [Arrow([Param("r")], [Return(value_expr)])],
        )
        if ctx.options.with_sendable:
            value_expr = Call(Member(Ident("collections.Array"), "from"), [value_expr])
    return value_expr


def _from_json_field(ctx: Context, field) -> list:
    value_expr = _value_expr(ctx, field)

    stmts: list = []
    if field.HasField("oneof_index"):
        stmts.append(
            If(
                Call(Member(Ident("oneof"), "has"), [Num(field.oneof_index)]),
                Throw(
                    New(
                        Ident("Error"),
                        [Str(f"duplicate oneof field {json_key_name(field)}")],
                    )
                ),
            )
        )
        stmts.append(ExprStmt(Call(Member(Ident("oneof"), "add"), [Num(field.oneof_index)])))

    if is_map(field, ctx):
        stmts.append(ExprStmt(value_expr))
    else:
        stmts.append(ExprStmt(Assign(Member(Ident("jsonMessage"), field.name), value_expr)))

    key = json_key_name(field)
    read = VarDecl(
        f"{field.name}{field_descriptor_str(ctx, field)}",
        Cond(
            Ident(f'json["{key}"] !== undefined'),
            Ident(f'json["{key}"]'),
            Ident(f'json["{field.name}"]'),
        ),
    )
    check = If(default_value_bin_expr_for_json(field, ctx, bare_field_member), Block(stmts))
    return [read, check]


def _from_json_inner(message, ctx: Context, index: int, fields: list) -> ClassMethod:
    body: list = []
    for field in fields:
        body.extend(_from_json_field(ctx, field))
    return ClassMethod(
        key=f"fromJson_{index}",
        params=[
            Param("json", TypeRef("object")),
            Param("jsonMessage", TypeRef(ctx.normalize_name(message.name))),
        ],
        body=body,
        is_static=True,
    )


def print_from_json(message, ctx: Context) -> list:
    """Static helpers reading at most 30 fields each, then ``fromJson`` itself."""
    class_name = ctx.normalize_name(message.name)
    statements: list = [VarDecl("jsonMessage", New(Ident(class_name)))]

    if any(field.HasField("oneof_index") for field in message.field):
        statements.append(VarDecl("oneof", New(Ident("Set"))))

    members: list = []
    for index, chunk in enumerate(_chunks(message.field)):
        members.append(_from_json_inner(message, ctx, index, chunk))
        statements.append(
            ExprStmt(Ident(f"{class_name}.fromJson_{index}(json, jsonMessage)"))
        )

    statements.append(Return(Ident("jsonMessage")))
    members.append(
        ClassMethod(
            key="fromJson",
            params=[Param("json", TypeRef("object"))],
            body=statements,
            is_static=True,
            return_type=TypeRef(class_name),
        )
    )
    return members