"""Entry point of the code generator plugin: request in, response out."""

from __future__ import annotations

import sys

from google.protobuf.compiler import plugin_pb2

from .ast import emit
from .context import Context, Syntax
from .declarations import GrpcWebRuntime, print_enum, print_service
from .google_runtime import GooglePBRuntime
from .mapper import map_request
from .message import print_message
from .options import Options


def print_file(descriptor, ctx: Context, runtime, grpc_runtime) -> list:
    """All declarations of one proto file, preceded by the imports they need."""
    if descriptor.HasField("package"):
        ctx = ctx.descend(descriptor.package)

    modules: list = []
    for enum_descriptor in descriptor.enum_type:
        modules.extend(print_enum(enum_descriptor, ctx))
    for message in descriptor.message_type:
        modules.extend(print_message(message, ctx, runtime))
    for service in descriptor.service:
        modules.extend(print_service(service, ctx, grpc_runtime))

    modules = ctx.wrap_if_needed(modules)
    return ctx.drain_imports() + modules


def compile_request(data: bytes) -> bytes:
    """Turn a serialized generator request into a serialized response."""
    request = plugin_pb2.CodeGeneratorRequest.FromString(data)

    options = Options.parse(request.parameter)
    ctx = Context(options, Syntax.UNSPECIFIED)
    # every file is mapped so that types can be resolved across files
    map_request(request, ctx)

    runtime = GooglePBRuntime()
    grpc_runtime = GrpcWebRuntime()
    response = plugin_pb2.CodeGeneratorResponse()
    wanted = set(request.file_to_generate)

    for descriptor in request.proto_file:
        if descriptor.name not in wanted or "descriptor.proto" in descriptor.name:
            continue
        file_ctx = ctx.fork(descriptor.name, Syntax.parse(descriptor.syntax))
        body = print_file(descriptor, file_ctx, runtime, grpc_runtime)
        body = file_ctx.drain_imports() + body
        response.file.add(
            name=descriptor.name.replace(".proto", ".ets"),
            content=emit(body),
        )

    return response.SerializeToString()


def main(argv=None) -> int:
    """Read a request from standard input and write the response to standard output."""
    data = sys.stdin.buffer.read()
    sys.stdout.buffer.write(compile_request(data))
    sys.stdout.buffer.flush()
    return 0