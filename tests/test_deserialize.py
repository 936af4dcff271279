import pytest
from google.protobuf import descriptor_pb2

from protoc_gen_arkts.ast import (
    Arrow,
    Assign,
    Binary,
    Break,
    Call,
    ExprStmt,
    Ident,
    If,
    ImportDecl,
    Member,
    New,
    Num,
    Str,
    Switch,
    Throw,
    VarDecl,
    While,
    emit,
)
from protoc_gen_arkts.context import Context, Syntax, TypeResolutionError
from protoc_gen_arkts.deserialize import deserialize_setup, deserialize_stmt
from protoc_gen_arkts.field import this_field_member
from protoc_gen_arkts.options import Options

F = descriptor_pb2.FieldDescriptorProto


def make_ctx(syntax=Syntax.PROTO3, **opts):
    return Context(Options(**opts)).fork("test.proto", syntax)


def make_message(name, *fields):
    message = descriptor_pb2.DescriptorProto(name=name)
    for number, (fname, ftype, label, type_name) in enumerate(fields, start=1):
        f = message.field.add(name=fname, number=number, type=ftype, label=label)
        if type_name:
            f.type_name = type_name
    return message


def cases_of(stmt):
    assert isinstance(stmt, While)
    switch = stmt.body.stmts[0]
    assert isinstance(switch, Switch)
    return switch.cases


def test_setup_creates_reader_and_import():
    ctx = make_ctx()
    msg = make_message("M", ("a", F.TYPE_INT32, F.LABEL_OPTIONAL, None))
    stmts = deserialize_setup(ctx, msg, True)
    assert stmts[0] == VarDecl(
        "br", New(Ident("BinaryReader"), [Ident("bytes")]), type_ann=stmts[0].type_ann
    )
    assert stmts[0].type_ann.name == "BinaryReader"
    assert isinstance(stmts[1], While)
    assert ctx.drain_imports() == [
        ImportDecl(["BinaryReader", "BinaryWriter"], "google-protobuf")
    ]


def test_setup_without_reader():
    ctx = make_ctx()
    msg = make_message("M", ("a", F.TYPE_STRING, F.LABEL_OPTIONAL, None))
    stmts = deserialize_setup(ctx, msg, False)
    assert len(stmts) == 1
    assert ctx.drain_imports() == []


def test_trailing_cases_are_zero_tag_and_skip():
    ctx = make_ctx()
    msg = make_message("M", ("a", F.TYPE_STRING, F.LABEL_OPTIONAL, None))
    cases = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))
    assert len(cases) == 3
    assert cases[0].test == Num(1)
    zero = cases[-2]
    assert zero.test == Num(0)
    assert zero.body == [Throw(New(Ident("Error"), [Str("illegal zero tag.")]))]
    default = cases[-1]
    assert default.test is None
    assert default.body == [ExprStmt(Call(Member(Ident("br"), "skipField")))]


def test_loop_test_and_discriminant():
    ctx = make_ctx()
    msg = make_message("M")
    loop = deserialize_stmt(ctx, msg, this_field_member, True)
    assert loop.test.left == Call(Member(Ident("br"), "nextField"))
    assert loop.body.stmts[0].discriminant == Call(Member(Ident("br"), "getFieldNumber"))
    text = emit([loop])
    assert "while (br.nextField() && !br.isEndGroup())" in text


def test_singular_message_prereads_and_merges():
    ctx = make_ctx()
    ctx.register_type_name("Inner")
    msg = make_message("M", ("inner", F.TYPE_MESSAGE, F.LABEL_OPTIONAL, ".Inner"))
    body = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))[0].body
    assert len(body) == 3
    pre = body[0].expr
    assert isinstance(pre, Assign) and pre.op == "??="
    assert pre.right == New(Ident("Inner"))
    merge = body[1].expr
    assert merge.callee == Member(Member(Ident("this"), "inner"), "mergeFrom")
    assert merge.args == [Call(Member(Ident("br"), "readBytes"))]
    assert body[2] == Break()


def test_repeated_message_pushes_from_binary():
    ctx = make_ctx()
    ctx.register_type_name("Inner")
    msg = make_message("M", ("items", F.TYPE_MESSAGE, F.LABEL_REPEATED, ".Inner"))
    body = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))[0].body
    push = body[0].expr
    assert push.callee.prop == "push"
    assert push.args[0].callee == Member(Ident("Inner"), "fromBinary")


def test_unknown_message_type_raises():
    ctx = make_ctx()
    msg = make_message("M", ("inner", F.TYPE_MESSAGE, F.LABEL_OPTIONAL, ".Missing"))
    with pytest.raises(TypeResolutionError):
        deserialize_stmt(ctx, msg, this_field_member, True)


def test_packable_field_checks_delimited():
    ctx = make_ctx()
    msg = make_message("M", ("nums", F.TYPE_INT32, F.LABEL_REPEATED, None))
    stmt = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))[0].body[0]
    assert isinstance(stmt, If)
    assert stmt.test == Call(Member(Ident("br"), "isDelimited"))
    assert stmt.cons.expr.left == Member(Ident("this"), "nums")
    assert stmt.alt.expr.callee.prop == "push"


def test_packable_bool_maps_to_boolean():
    ctx = make_ctx()
    msg = make_message("M", ("flags", F.TYPE_BOOL, F.LABEL_REPEATED, None))
    stmt = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))[0].body[0]
    mapped = stmt.cons.expr.right
    assert mapped.callee.prop == "map"
    assert isinstance(mapped.args[0], Arrow)
    assert mapped.args[0].body.op == "!=="


def test_sendable_packable_wrapped_in_collections_array():
    ctx = make_ctx(with_sendable=True)
    msg = make_message("M", ("nums", F.TYPE_INT32, F.LABEL_REPEATED, None))
    stmt = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))[0].body[0]
    assert stmt.cons.expr.right.callee == Member(
        Member(Ident("collections"), "Array"), "from"
    )


def test_singular_scalars_are_converted():
    ctx = make_ctx(Syntax.PROTO2)
    msg = make_message(
        "M",
        ("flag", F.TYPE_BOOL, F.LABEL_OPTIONAL, None),
        ("count", F.TYPE_UINT32, F.LABEL_OPTIONAL, None),
        ("big", F.TYPE_INT64, F.LABEL_OPTIONAL, None),
    )
    cases = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))
    flag, count, big = (c.body[0].expr.right for c in cases[:3])
    assert isinstance(flag, Binary) and flag.op == "!=="
    assert isinstance(count, Binary) and count.op == ">>>"
    assert big.callee == Ident("BigInt")


def test_sendable_bytes_wrapped():
    ctx = make_ctx(with_sendable=True)
    msg = make_message("M", ("data", F.TYPE_BYTES, F.LABEL_OPTIONAL, None))
    stmt = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))[0].body[0]
    assert stmt.expr.right.callee == Member(
        Member(Ident("collections"), "Uint8Array"), "from"
    )


def test_map_field_reads_entries():
    ctx = make_ctx()
    entry = make_message(
        "ValuesEntry",
        ("key", F.TYPE_STRING, F.LABEL_OPTIONAL, None),
        ("value", F.TYPE_INT32, F.LABEL_OPTIONAL, None),
    )
    entry.options.map_entry = True
    ctx.register_map_type(entry)
    msg = make_message("M", ("values", F.TYPE_MESSAGE, F.LABEL_REPEATED, ".ValuesEntry"))
    body = cases_of(deserialize_stmt(ctx, msg, this_field_member, True))[0].body
    read = body[0].expr
    assert read.callee == Member(Ident("br"), "readMessage")
    arrow = read.args[1]
    key_decl, value_decl = arrow.body[0], arrow.body[1]
    assert (key_decl.name, key_decl.kind, key_decl.init) == ("key", "let", Str(""))
    assert (value_decl.name, value_decl.init) == ("value", Num(0))
    assert isinstance(arrow.body[2], While)
    assert arrow.body[3].expr.callee.prop == "set"