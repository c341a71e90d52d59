"""Pytest configuration and fixtures for the TypeScript JSON-RPC generator tests.

Schemas are built directly as descriptor protos, so the tests do not need protoc.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from google.protobuf.descriptor_pb2 import (
    DescriptorProto,
    EnumDescriptorProto,
    EnumValueDescriptorProto,
    FieldDescriptorProto,
    FileDescriptorProto,
    FileDescriptorSet,
    MethodDescriptorProto,
    OneofDescriptorProto,
    ServiceDescriptorProto,
)

from ts_jsonrpc_generator.export_map import ExportMap

F = FieldDescriptorProto


def make_field(
    name: str,
    number: int,
    field_type: int,
    type_name: str = "",
    label: int = FieldDescriptorProto.LABEL_OPTIONAL,
    oneof_index: int | None = None,
    jstype: int | None = None,
) -> FieldDescriptorProto:
    field = FieldDescriptorProto(name=name, number=number, type=field_type, label=label)
    if type_name:
        field.type_name = type_name
    if oneof_index is not None:
        field.oneof_index = oneof_index
    if jstype is not None:
        field.options.jstype = jstype
    return field


def make_map_entry(name: str, key_type: int, value_type: int, value_type_name: str = "") -> DescriptorProto:
    entry = DescriptorProto(
        name=name,
        field=[
            make_field("key", 1, key_type),
            make_field("value", 2, value_type, type_name=value_type_name),
        ],
    )
    entry.options.map_entry = True
    return entry


def make_enum(name: str, *values: str) -> EnumDescriptorProto:
    return EnumDescriptorProto(
        name=name,
        value=[EnumValueDescriptorProto(name=value, number=number) for number, value in enumerate(values)],
    )


def make_method(
    name: str, input_type: str, output_type: str, client_streaming: bool = False, server_streaming: bool = False
) -> MethodDescriptorProto:
    return MethodDescriptorProto(
        name=name,
        input_type=input_type,
        output_type=output_type,
        client_streaming=client_streaming,
        server_streaming=server_streaming,
    )


def money_file() -> FileDescriptorProto:
    return FileDescriptorProto(
        name="common/money.proto",
        package="common",
        syntax="proto3",
        message_type=[
            DescriptorProto(
                name="Money",
                field=[
                    make_field("currency", 1, F.TYPE_ENUM, ".common.Currency"),
                    make_field("units", 2, F.TYPE_INT64),
                ],
            )
        ],
        enum_type=[make_enum("Currency", "EUR", "USD")],
    )


def unused_file() -> FileDescriptorProto:
    return FileDescriptorProto(
        name="common/unused.proto",
        package="common.unused",
        syntax="proto3",
        message_type=[DescriptorProto(name="Unused")],
    )


def empty_file() -> FileDescriptorProto:
    return FileDescriptorProto(
        name="google/protobuf/empty.proto",
        package="google.protobuf",
        syntax="proto3",
        message_type=[DescriptorProto(name="Empty")],
    )


def user_message() -> DescriptorProto:
    return DescriptorProto(
        name="User",
        field=[
            make_field("name", 1, F.TYPE_STRING),
            make_field("balance", 2, F.TYPE_MESSAGE, ".common.Money"),
            make_field("attributes", 3, F.TYPE_MESSAGE, ".users.User.AttributesEntry", label=F.LABEL_REPEATED),
            make_field("avatars", 4, F.TYPE_BYTES, label=F.LABEL_REPEATED),
            make_field("status", 5, F.TYPE_ENUM, ".users.User.Status"),
            make_field("email", 6, F.TYPE_STRING, oneof_index=0),
            make_field("phone", 7, F.TYPE_STRING, oneof_index=0),
        ],
        nested_type=[make_map_entry("AttributesEntry", F.TYPE_STRING, F.TYPE_BYTES)],
        enum_type=[make_enum("Status", "UNKNOWN", "ACTIVE")],
        oneof_decl=[OneofDescriptorProto(name="contact")],
    )


def user_file(methods: list[MethodDescriptorProto] | None = None) -> FileDescriptorProto:
    if methods is None:
        methods = [
            make_method("GetUser", ".users.GetUserRequest", ".users.GetUserResponse"),
            make_method("WatchUser", ".users.GetUserRequest", ".users.GetUserResponse", server_streaming=True),
            make_method("UploadUsers", ".users.User", ".google.protobuf.Empty", client_streaming=True),
            make_method("Ping", ".google.protobuf.Empty", ".google.protobuf.Empty"),
        ]

    return FileDescriptorProto(
        name="users/user.proto",
        package="users",
        syntax="proto3",
        dependency=["common/money.proto", "common/unused.proto", "google/protobuf/empty.proto"],
        message_type=[
            user_message(),
            DescriptorProto(name="GetUserRequest", field=[make_field("user_id", 1, F.TYPE_STRING)]),
            DescriptorProto(
                name="GetUserResponse", field=[make_field("user", 1, F.TYPE_MESSAGE, ".users.User")]
            ),
        ],
        service=[ServiceDescriptorProto(name="UserService", method=methods)],
    )


def schema_set(*extra: FileDescriptorProto) -> list[FileDescriptorProto]:
    return [money_file(), unused_file(), empty_file(), *extra]


@pytest.fixture
def users_proto() -> FileDescriptorProto:
    return user_file()


@pytest.fixture
def users_schema(users_proto) -> list[FileDescriptorProto]:
    return schema_set(users_proto)


@pytest.fixture
def export_map(users_schema) -> ExportMap:
    return ExportMap.from_files(users_schema)


@pytest.fixture
def descriptor_set_path(tmp_path, users_schema) -> Path:
    """A serialized FileDescriptorSet on disk, like `protoc --include_imports --descriptor_set_out` writes."""
    path = tmp_path / "schema.binpb"
    path.write_bytes(FileDescriptorSet(file=users_schema).SerializeToString())
    return path
