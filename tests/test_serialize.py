import pytest
from google.protobuf import descriptor_pb2

from protoc_gen_arkts.ast import (
    Arrow,
    Block,
    Call,
    ExprStmt,
    ForOf,
    Ident,
    If,
    ImportDecl,
    Member,
    NonNull,
    Num,
    VarDecl,
    emit,
)
from protoc_gen_arkts.context import Context, Syntax, TypeResolutionError
from protoc_gen_arkts.field import (
    bare_field_member,
    default_value_bin_expr,
    this_field_member,
    to_string_normalizer,
)
from protoc_gen_arkts.options import Options
from protoc_gen_arkts.serialize import (
    serialize_fields,
    serialize_map_field,
    serialize_message_field,
    serialize_primitive_field,
    serialize_sfixed64_workaround,
)

F = descriptor_pb2.FieldDescriptorProto


def make_field(name, number, type_, label=F.LABEL_OPTIONAL, type_name=None):
    field = F(name=name, number=number, type=type_, label=label)
    if type_name is not None:
        field.type_name = type_name
    return field


def make_ctx(options=None, syntax=Syntax.PROTO3):
    return Context(options or Options()).fork("a.proto", syntax)


def make_message(*fields, map_entry=False, name="Msg"):
    message = descriptor_pb2.DescriptorProto(name=name)
    message.field.extend(fields)
    if map_entry:
        message.options.map_entry = True
    return message


def test_message_field_writes_bytes_of_to_binary():
    field = make_field("child", 3, F.TYPE_MESSAGE, type_name=".Child")
    stmt = serialize_message_field(field, this_field_member)
    call = stmt.expr
    assert call.callee == Member(Ident("bw"), "writeBytes")
    assert call.args[0] == Num(3)
    assert call.args[1] == Call(Member(NonNull(Member(Ident("this"), "child")), "toBinary"))


def test_sfixed64_workaround_arguments():
    field = make_field("vals", 7, F.TYPE_SFIXED64, F.LABEL_REPEATED)
    stmt = serialize_sfixed64_workaround(field, this_field_member)
    assert stmt.expr.callee == Member(Ident("bw"), "writePackedSplitFixed64")
    assert stmt.expr.args[0] == Num(7)
    text = emit([stmt])
    assert "(i) => Number(i & 4294967295n)" in text
    assert "(i) => Number((i >> 32n) & 4294967295n)" in text


def test_primitive_field_uses_normalizer():
    field = make_field("big", 2, F.TYPE_INT64)
    stmt = serialize_primitive_field(make_ctx(), field, this_field_member, to_string_normalizer)
    assert stmt.expr.args == [Num(2), Call(Member(Member(Ident("this"), "big"), "toString"))]


def test_primitive_bytes_with_sendable_wraps_in_uint8array_from():
    ctx = make_ctx(Options(with_sendable=True))
    field = make_field("data", 4, F.TYPE_BYTES)
    stmt = serialize_primitive_field(ctx, field, this_field_member, None)
    assert stmt.expr.args[1] == Call(
        Member(Ident("Uint8Array"), "from"), [Member(Ident("this"), "data")]
    )


def test_serialize_fields_creates_writer_and_import():
    ctx = make_ctx()
    message = make_message(make_field("name", 1, F.TYPE_STRING))
    stmts = serialize_fields(ctx, message, this_field_member, True, False)
    assert isinstance(stmts[0], VarDecl)
    assert stmts[0].name == "bw"
    assert len(stmts) == 2
    assert ctx.drain_imports() == [
        ImportDecl(["BinaryReader", "BinaryWriter"], "google-protobuf")
    ]


def test_serialize_fields_without_writer_adds_no_import():
    ctx = make_ctx()
    message = make_message(make_field("name", 1, F.TYPE_STRING))
    stmts = serialize_fields(ctx, message, this_field_member, False, False)
    assert len(stmts) == 1
    assert ctx.drain_imports() == []


def test_prevent_defaults_wraps_in_presence_check():
    ctx = make_ctx()
    field = make_field("name", 1, F.TYPE_STRING)
    stmts = serialize_fields(ctx, make_message(field), this_field_member, False, True)
    assert isinstance(stmts[0], If)
    assert stmts[0].test == default_value_bin_expr(field, ctx, this_field_member)
    assert isinstance(stmts[0].cons, Block)
    assert len(stmts[0].cons.stmts) == 1


def test_repeated_string_loops_over_field():
    ctx = make_ctx()
    field = make_field("tags", 5, F.TYPE_STRING, F.LABEL_REPEATED)
    (stmt,) = serialize_fields(ctx, make_message(field), this_field_member, False, False)
    assert isinstance(stmt, ForOf)
    assert stmt.binding == "tags"
    assert stmt.iterable == Member(Ident("this"), "tags")
    assert stmt.body[0].expr.args == [Num(5), Ident("tags")]


def test_repeated_string_with_sendable_uses_for_each():
    ctx = make_ctx(Options(with_sendable=True))
    field = make_field("tags", 5, F.TYPE_STRING, F.LABEL_REPEATED)
    (stmt,) = serialize_fields(ctx, make_message(field), this_field_member, False, False)
    assert isinstance(stmt, ExprStmt)
    assert stmt.expr.callee == Member(Member(Ident("this"), "tags"), "forEach")
    assert isinstance(stmt.expr.args[0], Arrow)


def test_packed_int32_is_written_directly():
    ctx = make_ctx()
    field = make_field("nums", 6, F.TYPE_INT32, F.LABEL_REPEATED)
    (stmt,) = serialize_fields(ctx, make_message(field), this_field_member, False, False)
    assert isinstance(stmt, ExprStmt)
    assert stmt.expr.args == [Num(6), Member(Ident("this"), "nums")]


def test_packed_sfixed64_uses_workaround():
    ctx = make_ctx()
    field = make_field("vals", 8, F.TYPE_SFIXED64, F.LABEL_REPEATED)
    (stmt,) = serialize_fields(ctx, make_message(field), this_field_member, False, False)
    assert stmt == serialize_sfixed64_workaround(field, this_field_member)


def _map_setup():
    ctx = make_ctx()
    entry = make_message(
        make_field("key", 1, F.TYPE_STRING),
        make_field("value", 2, F.TYPE_INT32),
        map_entry=True,
        name="TagsEntry",
    )
    ctx.register_map_type(entry)
    field = make_field("tags", 9, F.TYPE_MESSAGE, F.LABEL_REPEATED, ".TagsEntry")
    return ctx, field


def test_map_field_loop():
    ctx, field = _map_setup()
    loop = serialize_map_field(ctx, field)
    assert loop.binding == "entry"
    assert loop.kind == "let"
    assert loop.iterable == Member(Member(Ident("this"), "tags"), "entries()")
    assert loop.body[0] == ExprStmt(
        Call(Member(Ident("bw"), "beginSubMessage"), [Num(9)])
    )
    assert loop.body[3].expr.args == [Num(1), Ident("key")]
    assert loop.body[4].expr.args == [Num(2), Ident("value")]
    assert loop.body[-1] == ExprStmt(Call(Member(Ident("bw"), "endSubMessage")))


def test_serialize_fields_dispatches_maps():
    ctx, field = _map_setup()
    (stmt,) = serialize_fields(ctx, make_message(field), this_field_member, False, False)
    assert stmt == serialize_map_field(ctx, field)


def test_map_entry_fields_use_given_accessor():
    ctx, _ = _map_setup()
    entry = ctx.get_map_type(".TagsEntry")
    stmts = serialize_fields(ctx, entry, bare_field_member, False, False)
    assert [s.expr.args[1] for s in stmts] == [Ident("key"), Ident("value")]


def test_unknown_map_type_raises():
    ctx = make_ctx()
    field = make_field("tags", 9, F.TYPE_MESSAGE, F.LABEL_REPEATED, ".Missing")
    with pytest.raises(TypeResolutionError):
        serialize_map_field(ctx, field)