"""Generation of the ``toJson`` methods of message classes."""

from __future__ import annotations

from itertools import islice
from typing import Iterable, Iterator

from .ast import (
    Arrow,
    Assign,
    Block,
    Call,
    ClassMethod,
    ExprStmt,
    Ident,
    If,
    Index,
    Member,
    New,
    Param,
    Return,
    TypeRef,
    VarDecl,
)
from .context import Context
from .descriptors import (
    is_bigint,
    is_boolean,
    is_bytes,
    is_map,
    is_number,
    is_repeated,
    is_string,
)
from .field import default_value_bin_expr, static_field_member, this_field_member
from .json_checks import json_key_name
from .json_values import to_json_expr

FIELDS_PER_METHOD = 30


def _chunks(fields: Iterable, size: int = FIELDS_PER_METHOD) -> Iterator[list]:
    iterator = iter(fields)
    while chunk := list(islice(iterator, size)):
        yield chunk


def _json_slot(key: str) -> Index:
    return Index(Ident("json"), Ident(f'"{key}"'))


def map_field_descriptor_str(field) -> str:
    """Type name of a map key or value as it appears in JSON code."""
    if is_string(field):
        return "string"
    if is_bigint(field):
        return "bigint"
    if is_number(field):
        return "number"
    if is_boolean(field):
        return "boolean"
    if is_bytes(field):
        return "Uint8Array"
    return "object"


def _to_json_field(ctx: Context, field):
    repeated_list = is_repeated(field) and not is_map(field, ctx)
    accessor = static_field_member if repeated_list else this_field_member
    value_expr = to_json_expr(field, ctx, accessor)
    this_member = Member(Ident("this"), field.name)

    if is_map(field, ctx):
        stmts = [
            ExprStmt(Assign(_json_slot(json_key_name(field)), New(Ident("Object"), []))),
            ExprStmt(
                Call(
                    Member(this_member, "forEach"),
                    [
                        Arrow(
                            [Param("value"), Param("key")],
                            [
                                ExprStmt(
                                    Assign(
                                        Index(_json_slot(field.name), Ident("key")),
                                        Ident("value"),
                                    )
                                )
                            ],
                        )
                    ],
                )
            ),
        ]
        return If(default_value_bin_expr(field, ctx, this_field_member), Block(stmts))

    if is_repeated(field):
        source = this_member
        if ctx.options.with_sendable:
            source = Call(Member(Ident("Array"), "from"), [source])
        value_expr = Call(Member(source, "map"), [Arrow([Param("r")], value_expr)])

    return If(
        default_value_bin_expr(field, ctx, this_field_member),
        ExprStmt(Assign(_json_slot(json_key_name(field)), value_expr)),
    )


def _to_json_inner(ctx: Context, index: int, fields: list) -> ClassMethod:
    return ClassMethod(
        key=f"toJson_{index}",
        params=[Param("json", TypeRef("object"))],
        body=[_to_json_field(ctx, field) for field in fields],
    )


def print_to_json(message, ctx: Context) -> list:
    """Helper methods writing at most 30 fields each, then ``toJson`` itself."""
    statements: list = [VarDecl("json", New(Ident("Object")), type_ann=TypeRef("object"))]
    members: list = []

    for index, chunk in enumerate(_chunks(message.field)):
        members.append(_to_json_inner(ctx, index, chunk))
        statements.append(
            ExprStmt(Call(Member(Ident("this"), f"toJson_{index}"), [Ident("json")]))
        )

    statements.append(Return(Ident("json")))
    members.append(
        ClassMethod(key="toJson", body=statements, return_type=TypeRef("Object"))
    )
    return members