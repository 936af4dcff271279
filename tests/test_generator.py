import io
import types

import pytest
from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from protoc_gen_arkts.ast import emit
from protoc_gen_arkts.context import Context, Syntax
from protoc_gen_arkts.declarations import GrpcWebRuntime
from protoc_gen_arkts.generator import compile_request, main, print_file
from protoc_gen_arkts.google_runtime import GooglePBRuntime
from protoc_gen_arkts.mapper import map_file
from protoc_gen_arkts.options import Options

F = descriptor_pb2.FieldDescriptorProto


def _person_file(name="foo/bar.proto"):
    file = descriptor_pb2.FileDescriptorProto(name=name, package="pkg", syntax="proto3")
    message = file.message_type.add(name="Person")
    message.field.add(name="name", number=1, type=F.TYPE_STRING, label=F.LABEL_OPTIONAL)
    message.field.add(name="age", number=2, type=F.TYPE_INT32, label=F.LABEL_OPTIONAL)
    file.enum_type.add(name="Color").value.add(name="RED", number=0)
    return file


def _request(files, generate, parameter=None):
    request = plugin_pb2.CodeGeneratorRequest()
    request.proto_file.extend(files)
    request.file_to_generate.extend(generate)
    if parameter is not None:
        request.parameter = parameter
    return request.SerializeToString()


def _response(data):
    return plugin_pb2.CodeGeneratorResponse.FromString(data)


def test_compile_generates_ets_file():
    out = _response(compile_request(_request([_person_file()], ["foo/bar.proto"])))
    assert [f.name for f in out.file] == ["foo/bar.ets"]
    content = out.file[0].content
    assert "pkg_Person" in content
    assert "pkg_Color" in content
    assert "google-protobuf" in content


def test_compile_without_namespace_option():
    data = _request([_person_file()], ["foo/bar.proto"], "with_namespace=false")
    content = _response(compile_request(data)).file[0].content
    assert "Person" in content
    assert "pkg_Person" not in content


def test_only_requested_files_are_generated():
    other = _person_file("foo/other.proto")
    other.package = "other"
    data = _request([_person_file(), other], ["foo/other.proto"])
    out = _response(compile_request(data))
    assert [f.name for f in out.file] == ["foo/other.ets"]


def test_descriptor_proto_is_skipped():
    descriptor = descriptor_pb2.FileDescriptorProto(
        name="google/protobuf/descriptor.proto", package="google.protobuf", syntax="proto2"
    )
    descriptor.message_type.add(name="Empty")
    data = _request([descriptor], ["google/protobuf/descriptor.proto"])
    assert len(_response(compile_request(data)).file) == 0


def test_cross_file_reference_becomes_import():
    user = descriptor_pb2.FileDescriptorProto(name="foo/baz.proto", package="pkg", syntax="proto3")
    holder = user.message_type.add(name="Holder")
    holder.field.add(name="person", number=1, type=F.TYPE_MESSAGE,
                     label=F.LABEL_OPTIONAL, type_name=".pkg.Person")
    data = _request([_person_file(), user], ["foo/baz.proto"])
    content = _response(compile_request(data)).file[0].content
    assert "./bar" in content
    assert "pkg_Person" in content


def test_empty_request_gives_empty_response():
    assert compile_request(b"") == b""


def test_invalid_request_raises():
    with pytest.raises(DecodeError):
        compile_request(b"\xff\xff\xff")


def test_unknown_syntax_raises():
    file = _person_file()
    file.syntax = "proto9"
    with pytest.raises(ValueError):
        compile_request(_request([file], ["foo/bar.proto"]))


def test_print_file_prepends_imports():
    file = _person_file()
    root = Context(Options())
    map_file(file, root.fork(file.name, Syntax.UNSPECIFIED))
    ctx = root.fork(file.name, Syntax.PROTO3)
    modules = print_file(file, ctx, GooglePBRuntime(), GrpcWebRuntime())
    assert len(modules) == 3
    assert "google-protobuf" in emit(modules[:1])
    assert "pkg_Color" in emit([modules[1]])
    assert ctx.drain_imports() == []


def test_main_reads_stdin_and_writes_stdout(monkeypatch):
    data = _request([_person_file()], ["foo/bar.proto"])
    stdout = types.SimpleNamespace(buffer=io.BytesIO())
    monkeypatch.setattr("sys.stdin", types.SimpleNamespace(buffer=io.BytesIO(data)))
    monkeypatch.setattr("sys.stdout", stdout)
    assert main() == 0
    out = _response(stdout.buffer.getvalue())
    assert out.file[0].name == "foo/bar.ets"