"""Map protobuf field types to TypeScript type expressions."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from google.protobuf.descriptor_pb2 import FieldDescriptorProto, FileDescriptorProto

from ts_jsonrpc_generator import helper
from ts_jsonrpc_generator.errors import UnsupportedFieldTypeError, UnsupportedOptionError
from ts_jsonrpc_generator.export_map import ExportMap, strip_leading_dot
from ts_jsonrpc_generator.proto_types import (
    ENUM_TYPE,
    GROUP_TYPE,
    INT64_TYPES,
    JSTYPE_TO_TYPESCRIPT,
    LABEL_OPTIONAL,
    LABEL_REPEATED,
    MESSAGE_TYPE,
    PROTO_TYPE_TO_TYPESCRIPT,
    JsType,
)

logger = logging.getLogger(__name__)

MESSAGE_LIKE_TYPES = (MESSAGE_TYPE, GROUP_TYPE)


def get_type_name(field_type: int) -> str:
    """The TypeScript type of a scalar wire type.

    Raises:
        UnsupportedFieldTypeError: If the wire type is not a scalar with a known mapping.
    """
    try:
        return PROTO_TYPE_TO_TYPESCRIPT[field_type]
    except KeyError:
        raise UnsupportedFieldTypeError(f"No TypeScript type for field type {field_type}") from None


def _qualified_reference(full_type_name: str, package: str, defining_file: str, current_file_name: str) -> str:
    name = helper.within_namespace(full_type_name, package)
    if defining_file == current_file_name:
        return name
    return f"{helper.file_path_to_pseudo_namespace(defining_file)}.{name}"


def get_field_type(field_type: int, full_type_name: str, current_file_name: str, export_map: ExportMap) -> str:
    """Resolve a field's element type to a TypeScript type expression.

    References into the current file use the local dotted path; references
    into other files are prefixed with the defining file's pseudo-namespace.
    A reference to a map entry message resolves to `Map<Key, Value>`.

    Args:
        field_type (int): The wire type (`FieldDescriptorProto.Type`).
        full_type_name (str): Fully qualified referenced type, without leading dot. Ignored for scalars.
        current_file_name (str): The file the reference is rendered into.
        export_map (ExportMap): The schema graph.

    Returns:
        str: The TypeScript type expression.
    """
    if field_type in MESSAGE_LIKE_TYPES:
        message = export_map.get_message(full_type_name)
        if message.map_entry:
            return get_map_type(full_type_name, current_file_name, export_map)
        return _qualified_reference(full_type_name, message.package, message.file_name, current_file_name)

    if field_type == ENUM_TYPE:
        enum = export_map.get_enum(full_type_name)
        return _qualified_reference(full_type_name, enum.package, enum.file_name, current_file_name)

    return get_type_name(field_type)


def get_map_type(full_type_name: str, current_file_name: str, export_map: ExportMap) -> str:
    """Render a map entry message as `Map<Key, Value>`."""
    map_types = export_map.get_message(full_type_name).require_map_field_types(full_type_name)
    key_type = get_field_type(map_types.key.type, map_types.key.type_name, current_file_name, export_map)
    value_type = get_field_type(map_types.value.type, map_types.value.type_name, current_file_name, export_map)
    logger.debug("Resolved %s as map of %s to %s.", full_type_name, key_type, value_type)
    return f"Map<{key_type}, {value_type}>"


def _js_type_override(field: FieldDescriptorProto) -> str | None:
    if not field.options.HasField("jstype"):
        return None

    try:
        js_type = JsType(field.options.jstype)
    except ValueError:
        raise UnsupportedOptionError(f"Unknown jstype {field.options.jstype} on '{field.name}'") from None
    if js_type == JsType.NORMAL:
        return None

    if field.type not in INT64_TYPES:
        raise UnsupportedOptionError(f"jstype is only allowed on 64-bit integer fields, found it on '{field.name}'")
    return JSTYPE_TO_TYPESCRIPT[js_type]


@dataclass(frozen=True)
class ResolvedField:
    """A field ready to be declared as a class member."""

    name: str
    type: str
    optional: bool = False

    @property
    def declaration(self) -> str:
        return f"{self.name}{'?' if self.optional else ''}: {self.type};"


def can_be_undefined(field: FieldDescriptorProto, file_descriptor: FileDescriptorProto) -> bool:
    """Whether a singular field is declared optional.

    Fields declared with proto3 `optional` are always optional. Message fields
    are optional unless the file is proto2 and the field is required. Other
    fields are optional only in proto2 files.
    """
    if field.proto3_optional:
        return True
    if field.type in MESSAGE_LIKE_TYPES:
        return not helper.is_proto2(file_descriptor) or field.label == LABEL_OPTIONAL
    return helper.is_proto2(file_descriptor)


def resolve_field(
    field: FieldDescriptorProto, file_descriptor: FileDescriptorProto, export_map: ExportMap
) -> ResolvedField:
    """Resolve the member declaration of a message field.

    Args:
        field (FieldDescriptorProto): The field to resolve.
        file_descriptor (FileDescriptorProto): The file that declares the field's message.
        export_map (ExportMap): The schema graph.

    Returns:
        ResolvedField: Member name, TypeScript type and optionality.
    """
    name = helper.normalise_field_object_name(field.name)
    full_type_name = strip_leading_dot(field.type_name)

    js_type_override = _js_type_override(field)

    if field.type in MESSAGE_LIKE_TYPES and export_map.get_message(full_type_name).map_entry:
        # Map fields are labelled repeated but never wrapped in an Array.
        return ResolvedField(name, get_map_type(full_type_name, file_descriptor.name, export_map))

    element_type = js_type_override or get_field_type(
        field.type, full_type_name, file_descriptor.name, export_map
    )

    if field.label == LABEL_REPEATED:
        return ResolvedField(name, f"Array<{element_type}>")

    return ResolvedField(name, element_type, optional=can_be_undefined(field, file_descriptor))
