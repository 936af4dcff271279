"""Enum declarations and service classes."""

from __future__ import annotations

from .ast import ClassDecl, EnumDecl, EnumMember, ExportDecl, Num
from .context import Context


class GrpcWebRuntime:
    """Service runtime whose generated classes carry no members."""

    def print_setup(self, ctx: Context) -> list:
        return []

    def print_method(self, ctx: Context, method, service) -> list:
        return []


def print_enum(descriptor, ctx: Context) -> list:
    """An exported enum with one member per value."""
    members = [EnumMember(value.name, Num(value.number)) for value in descriptor.value]
    decl = EnumDecl(
        name=ctx.normalize_name(descriptor.name),
        members=members,
        is_const=ctx.options.with_sendable,
    )
    return [ExportDecl(decl)]


def print_service(descriptor, ctx: Context, runtime) -> list:
    """An exported class holding the runtime's setup and method members."""
    members = list(runtime.print_setup(ctx))
    for method in descriptor.method:
        members.extend(runtime.print_method(ctx, method, descriptor))
    return [ExportDecl(ClassDecl(ctx.normalize_name(descriptor.name), members))]