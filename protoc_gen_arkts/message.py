"""Message classes with properties, binary and JSON conversion methods."""

from __future__ import annotations

from .ast import (
    Call,
    ClassDecl,
    ClassMethod,
    ClassProp,
    ExportDecl,
    ExprStmt,
    Ident,
    KeywordType,
    Member,
    New,
    Param,
    Return,
    Str,
    TypeRef,
    VarDecl,
)
from .context import Context
from .declarations import print_enum
from .descriptors import oneof_fields
from .field import print_oneof_getter, print_oneof_setter, print_prop
from .json_from import print_from_json
from .json_to import print_to_json


def _message_type(descriptor, ctx: Context) -> ClassProp:
    type_name = ctx.calculate_type_name(descriptor.name)
    return ClassProp(
        key="type",
        value=Str(type_name.lstrip(".")),
        type_ann=KeywordType("string"),
        optional=False,
        is_static=True,
    )


def _bytes_param() -> Param:
    return Param("bytes", TypeRef("Uint8Array"))


def _merge_from(descriptor, ctx: Context, runtime) -> ClassMethod:
    body = list(runtime.from_binary(ctx, descriptor))
    body.append(Return(Ident("this")))
    return ClassMethod(key="mergeFrom", params=[_bytes_param()], body=body)


def _from_binary(descriptor, ctx: Context) -> ClassMethod:
    body = [
        VarDecl("message", New(Ident(ctx.normalize_name(descriptor.name)))),
        ExprStmt(Call(Member(Ident("message"), "mergeFrom"), [Ident("bytes")])),
        Return(Ident("message")),
    ]
    return ClassMethod(key="fromBinary", params=[_bytes_param()], body=body, is_static=True)


def _to_binary(descriptor, ctx: Context, runtime) -> ClassMethod:
    body = list(runtime.to_binary(ctx, descriptor))
    body.append(Return(Call(Member(Ident("bw"), "getResultBuffer"))))
    return ClassMethod(key="toBinary", body=body, return_type=TypeRef("Uint8Array"))


def print_message(descriptor, ctx: Context, runtime) -> list:
    """The exported class of a message followed by its nested declarations.

    Map entry messages produce nothing: maps are stored as ``Map`` values.
    """
    if descriptor.options.map_entry:
        return []

    members: list = [_message_type(descriptor, ctx)]
    for field in descriptor.field:
        members.append(print_prop(field, ctx))
        if field.HasField("oneof_index"):
            others = oneof_fields(descriptor, field)
            members.append(print_oneof_getter(field, ctx))
            members.append(print_oneof_setter(field, ctx, others))

    members.append(_merge_from(descriptor, ctx, runtime))
    members.append(_from_binary(descriptor, ctx))
    members.append(_to_binary(descriptor, ctx, runtime))
    members.extend(print_to_json(descriptor, ctx))
    members.extend(print_from_json(descriptor, ctx))

    name = ctx.normalize_name(descriptor.name)
    if ctx.options.with_sendable:
        class_decl = ClassDecl(name, members, decorators=["Sendable"])
    else:
        class_decl = ClassDecl(name, members)
    modules: list = [ExportDecl(class_decl)]

    if descriptor.nested_type or descriptor.enum_type:
        inner = ctx.descend(descriptor.name)
        nested: list = []
        for nested_message in descriptor.nested_type:
            nested.extend(print_message(nested_message, inner, runtime))
        for enum_descriptor in descriptor.enum_type:
            nested.extend(print_enum(enum_descriptor, inner))
        modules.extend(inner.wrap_if_needed(nested))

    return modules