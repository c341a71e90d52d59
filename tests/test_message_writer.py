"""Tests for rendering messages as TypeScript classes."""

from __future__ import annotations

import pytest
from conftest import F, make_enum, make_field, money_file, schema_set
from google.protobuf.descriptor_pb2 import DescriptorProto, FileDescriptorProto, OneofDescriptorProto

from ts_jsonrpc_generator.errors import MalformedDescriptorError
from ts_jsonrpc_generator.export_map import ExportMap
from ts_jsonrpc_generator.message_writer import print_enum, print_file_messages, print_message, print_oneof_decl
from ts_jsonrpc_generator.proto_types import well_known_types_map

USER_CLASS = """export class User {
    name: string;
    balance?: common_money_pb.Money;
    attributes: Map<string, Uint8Array | string>;
    avatars: Array<Uint8Array | string>;
    status: User.Status;
    email: string;
    phone: string;

    export enum Status {
        UNKNOWN = 0,
        ACTIVE = 1,
    }

    export enum ContactCase {
        CONTACT_NOT_SET = 0,
        EMAIL = 6,
        PHONE = 7,
    }
}
"""

MONEY_FILE = """// package: common
// file: common/money.proto


export enum Currency {
    EUR = 0,
    USD = 1,
}

export class Money {
    currency: Currency;
    units: number;
}
"""


class TestPrintMessage:
    """Tests for print_message."""

    def test_user_message(self, users_proto, export_map):
        assert print_message(users_proto.message_type[0], users_proto, export_map) == USER_CLASS

    def test_map_entry_is_not_rendered(self, users_proto, export_map):
        entry = users_proto.message_type[0].nested_type[0]
        assert entry.options.map_entry
        assert print_message(entry, users_proto, export_map) == ""
        assert "AttributesEntry" not in print_message(users_proto.message_type[0], users_proto, export_map)

    def test_empty_message(self):
        file_descriptor = FileDescriptorProto(
            name="empty.proto", syntax="proto3", message_type=[DescriptorProto(name="Empty")]
        )
        export_map = ExportMap.from_files([file_descriptor])
        assert print_message(file_descriptor.message_type[0], file_descriptor, export_map) == (
            "export class Empty {\n}\n"
        )

    def test_nested_message_is_indented(self):
        outer = DescriptorProto(
            name="Outer",
            field=[make_field("inner", 1, F.TYPE_MESSAGE, ".Outer.Inner")],
            nested_type=[DescriptorProto(name="Inner", field=[make_field("value", 1, F.TYPE_STRING)])],
        )
        file_descriptor = FileDescriptorProto(name="outer.proto", syntax="proto3", message_type=[outer])
        export_map = ExportMap.from_files([file_descriptor])

        assert print_message(outer, file_descriptor, export_map) == (
            "export class Outer {\n"
            "    inner?: Outer.Inner;\n"
            "    export class Inner {\n"
            "        value: string;\n"
            "    }\n"
            "}\n"
        )

    def test_rendering_is_deterministic(self, users_proto, users_schema):
        first = print_message(users_proto.message_type[0], users_proto, ExportMap.from_files(users_schema))
        second = print_message(users_proto.message_type[0], users_proto, ExportMap.from_files(users_schema))
        assert first == second


class TestSubRenderers:
    """Tests for the enum and oneof renderers."""

    def test_enum(self):
        assert print_enum(make_enum("Color", "RED", "GREEN"), 0) == (
            "\nexport enum Color {\n    RED = 0,\n    GREEN = 1,\n}\n"
        )

    def test_oneof_keeps_field_order(self):
        fields = [make_field("card_token", 3, F.TYPE_STRING), make_field("iban", 2, F.TYPE_STRING)]
        rendered = print_oneof_decl(OneofDescriptorProto(name="payment_method"), fields, 1)
        assert rendered == (
            "\n"
            "    export enum PaymentMethodCase {\n"
            "        PAYMENT_METHOD_NOT_SET = 0,\n"
            "        CARD_TOKEN = 3,\n"
            "        IBAN = 2,\n"
            "    }\n"
        )

    def test_message_extension(self):
        base = DescriptorProto(name="Base")
        holder = DescriptorProto(
            name="Holder",
            extension=[make_field("display_name", 100, F.TYPE_STRING, label=F.LABEL_OPTIONAL)],
        )
        holder.extension[0].extendee = ".ext.Base"
        file_descriptor = FileDescriptorProto(
            name="ext.proto", package="ext", syntax="proto2", message_type=[base, holder]
        )
        export_map = ExportMap.from_files([file_descriptor])

        rendered = print_message(holder, file_descriptor, export_map)

        assert "\n    export const displayName: string;\n" in rendered


class TestPrintFileMessages:
    """Tests for rendering the message module of a file."""

    def test_money_file(self):
        file_descriptor = money_file()
        assert print_file_messages(file_descriptor, ExportMap.from_files([file_descriptor])) == MONEY_FILE

    def test_imports_every_dependency(self, users_proto, export_map):
        rendered = print_file_messages(users_proto, export_map)
        assert rendered.startswith(
            "// package: users\n"
            "// file: users/user.proto\n"
            "\n"
            'import * as common_money_pb from "../common/money_pb";\n'
            'import * as common_unused_pb from "../common/unused_pb";\n'
            'import * as google_protobuf_empty_pb from "google-protobuf/google/protobuf/empty_pb";\n'
        )
        assert USER_CLASS in rendered
        assert "export class GetUserRequest {\n    user_id: string;\n}\n" in rendered

    def test_well_known_package_override(self, users_proto, export_map):
        rendered = print_file_messages(users_proto, export_map, well_known_types_map("@acme/wkt"))
        assert 'from "@acme/wkt/google/protobuf/empty_pb";' in rendered

    def test_all_schema_files_render(self):
        files = schema_set()
        export_map = ExportMap.from_files(files)
        for file_descriptor in files:
            rendered = print_file_messages(file_descriptor, export_map)
            assert rendered.startswith(f"// package: {file_descriptor.package}\n")


class TestOptionalAndOneofs:
    """Tests for proto3 `optional` fields and malformed oneof references."""

    @staticmethod
    def _profile(*fields, oneofs=("_nickname",)) -> tuple[DescriptorProto, FileDescriptorProto, ExportMap]:
        profile = DescriptorProto(
            name="Profile",
            field=list(fields),
            oneof_decl=[OneofDescriptorProto(name=name) for name in oneofs],
        )
        file_descriptor = FileDescriptorProto(name="profile.proto", syntax="proto3", message_type=[profile])
        return profile, file_descriptor, ExportMap.from_files([file_descriptor])

    def test_proto3_optional_has_no_case_enum(self):
        nickname = make_field("nickname", 1, F.TYPE_STRING, oneof_index=0)
        nickname.proto3_optional = True
        profile, file_descriptor, export_map = self._profile(nickname)

        assert print_message(profile, file_descriptor, export_map) == (
            "export class Profile {\n    nickname?: string;\n}\n"
        )

    def test_real_oneof_next_to_proto3_optional(self):
        nickname = make_field("nickname", 1, F.TYPE_STRING, oneof_index=0)
        nickname.proto3_optional = True
        email = make_field("email", 2, F.TYPE_STRING, oneof_index=1)
        profile, file_descriptor, export_map = self._profile(nickname, email, oneofs=("_nickname", "contact"))

        rendered = print_message(profile, file_descriptor, export_map)

        assert "NicknameCase" not in rendered
        assert "    export enum ContactCase {\n        CONTACT_NOT_SET = 0,\n        EMAIL = 2,\n    }\n" in rendered

    def test_undeclared_oneof_index_fails(self):
        field = make_field("nickname", 1, F.TYPE_STRING, oneof_index=3)
        profile, file_descriptor, export_map = self._profile(field)

        with pytest.raises(MalformedDescriptorError, match="undeclared oneof index 3"):
            print_message(profile, file_descriptor, export_map)
