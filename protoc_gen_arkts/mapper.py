"""Walks descriptors and records which proto file provides each type."""

from __future__ import annotations

from .context import Context, Syntax


def map_request(request, ctx: Context) -> None:
    """Register the types of every proto file in a generator request."""
    for proto_file in request.proto_file:
        map_file(proto_file, ctx.fork(proto_file.name, Syntax.UNSPECIFIED))


def map_file(file, ctx: Context) -> None:
    """Register the enums and messages declared in one file."""
    if file.HasField("package"):
        ctx = ctx.descend(file.package)
    for enum_descriptor in file.enum_type:
        map_enum(enum_descriptor, ctx)
    for message in file.message_type:
        map_message(message, ctx)


def map_enum(descriptor, ctx: Context) -> None:
    """Register an enum and its leading member."""
    ctx.register_type_name(descriptor.name)
    ctx.register_leading_enum_member(descriptor)


def map_message(descriptor, ctx: Context) -> None:
    """Register a message, its map entries and everything nested in it."""
    ctx.register_type_name(descriptor.name)

    if descriptor.options.map_entry:
        ctx.register_map_type(descriptor)

    if not descriptor.nested_type and not descriptor.enum_type:
        return

    inner = ctx.descend(descriptor.name)
    for nested in descriptor.nested_type:
        inner.register_type_name(nested.name)
        map_message(nested, inner)
    for enum_descriptor in descriptor.enum_type:
        map_enum(enum_descriptor, inner)