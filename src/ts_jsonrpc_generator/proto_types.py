"""Type definitions that are common in protobuf schemas."""

from __future__ import annotations

from enum import IntEnum
from types import MappingProxyType

from google.protobuf.descriptor_pb2 import FieldDescriptorProto, FieldOptions

PROTO_SUFFIX = ".proto"
GENERATED_SUFFIX = "_pb"

BYTES_TYPE_NAME = "Uint8Array | string"

MESSAGE_TYPE = FieldDescriptorProto.TYPE_MESSAGE
GROUP_TYPE = FieldDescriptorProto.TYPE_GROUP
BYTES_TYPE = FieldDescriptorProto.TYPE_BYTES
ENUM_TYPE = FieldDescriptorProto.TYPE_ENUM

LABEL_OPTIONAL = FieldDescriptorProto.LABEL_OPTIONAL
LABEL_REQUIRED = FieldDescriptorProto.LABEL_REQUIRED
LABEL_REPEATED = FieldDescriptorProto.LABEL_REPEATED

PROTO_TYPE_TO_TYPESCRIPT = {
    FieldDescriptorProto.TYPE_DOUBLE: "number",
    FieldDescriptorProto.TYPE_FLOAT: "number",
    FieldDescriptorProto.TYPE_INT64: "number",
    FieldDescriptorProto.TYPE_UINT64: "number",
    FieldDescriptorProto.TYPE_INT32: "number",
    FieldDescriptorProto.TYPE_FIXED64: "number",
    FieldDescriptorProto.TYPE_FIXED32: "number",
    FieldDescriptorProto.TYPE_BOOL: "boolean",
    FieldDescriptorProto.TYPE_STRING: "string",
    FieldDescriptorProto.TYPE_BYTES: BYTES_TYPE_NAME,
    FieldDescriptorProto.TYPE_UINT32: "number",
    FieldDescriptorProto.TYPE_SFIXED32: "number",
    FieldDescriptorProto.TYPE_SFIXED64: "number",
    FieldDescriptorProto.TYPE_SINT32: "number",
    FieldDescriptorProto.TYPE_SINT64: "number",
}

# Wire types that accept a `jstype` representation override.
INT64_TYPES = frozenset(
    {
        FieldDescriptorProto.TYPE_INT64,
        FieldDescriptorProto.TYPE_UINT64,
        FieldDescriptorProto.TYPE_FIXED64,
        FieldDescriptorProto.TYPE_SFIXED64,
        FieldDescriptorProto.TYPE_SINT64,
    }
)


class JsType(IntEnum):
    """Representation override for integer-like fields, mirrors `FieldOptions.JSType`."""

    NORMAL = FieldOptions.JS_NORMAL
    STRING = FieldOptions.JS_STRING
    NUMBER = FieldOptions.JS_NUMBER


JSTYPE_TO_TYPESCRIPT = {
    JsType.STRING: "string",
    JsType.NUMBER: "number",
}

WKT_PACKAGE = "google-protobuf"

_WELL_KNOWN_FILES = (
    "google/protobuf/compiler/plugin.proto",
    "google/protobuf/any.proto",
    "google/protobuf/api.proto",
    "google/protobuf/descriptor.proto",
    "google/protobuf/duration.proto",
    "google/protobuf/empty.proto",
    "google/protobuf/field_mask.proto",
    "google/protobuf/source_context.proto",
    "google/protobuf/struct.proto",
    "google/protobuf/timestamp.proto",
    "google/protobuf/type.proto",
    "google/protobuf/wrappers.proto",
)


def well_known_types_map(package: str = WKT_PACKAGE) -> MappingProxyType[str, str]:
    """Build the table of pre-packaged import paths for the well-known schema files.

    Args:
        package (str): The runtime package that ships the generated well-known types.

    Returns:
        MappingProxyType[str, str]: Schema file name -> import path, e.g.
            `google/protobuf/empty.proto` -> `google-protobuf/google/protobuf/empty_pb`.
    """
    return MappingProxyType(
        {file_name: f"{package}/{file_name[: -len(PROTO_SUFFIX)]}{GENERATED_SUFFIX}" for file_name in _WELL_KNOWN_FILES}
    )


WELL_KNOWN_TYPES_MAP = well_known_types_map()
