"""Render protobuf messages as TypeScript class declarations.

Every function here returns a text fragment and has no other effect.
Fragments are composed by the caller, nested members are rendered one
indentation level deeper than their parent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from google.protobuf.descriptor_pb2 import (
    DescriptorProto,
    EnumDescriptorProto,
    FieldDescriptorProto,
    FileDescriptorProto,
    OneofDescriptorProto,
)

from ts_jsonrpc_generator import helper
from ts_jsonrpc_generator.errors import MalformedDescriptorError
from ts_jsonrpc_generator.export_map import ExportMap, strip_leading_dot
from ts_jsonrpc_generator.field_types import get_field_type, resolve_field
from ts_jsonrpc_generator.printer import Printer
from ts_jsonrpc_generator.proto_types import LABEL_REPEATED, WELL_KNOWN_TYPES_MAP

logger = logging.getLogger(__name__)


def print_enum(enum_descriptor: EnumDescriptorProto, indent_level: int) -> str:
    """Render an enum, preceded by a blank line.

    Args:
        enum_descriptor (EnumDescriptorProto): The enum to render.
        indent_level (int): Indentation level of the enum declaration.

    Returns:
        str: The rendered `export enum` block, values in declaration order.
    """
    printer = Printer(indent_level)
    printer.print_empty_ln()
    printer.print_ln(f"export enum {enum_descriptor.name} {{")
    for value in enum_descriptor.value:
        printer.print_indented_ln(f"{value.name} = {value.number},")
    printer.print_ln("}")
    return printer.output


def print_oneof_decl(
    oneof_descriptor: OneofDescriptorProto, oneof_fields: Sequence[FieldDescriptorProto], indent_level: int
) -> str:
    """Render a oneof group as an enum naming which member is set.

    Args:
        oneof_descriptor (OneofDescriptorProto): The group declaration.
        oneof_fields (Sequence[FieldDescriptorProto]): The member fields, in declaration order.
        indent_level (int): Indentation level of the rendered enum.

    Returns:
        str: The rendered `<Name>Case` enum.
    """
    printer = Printer(indent_level)
    printer.print_empty_ln()
    printer.print_ln(f"export enum {helper.oneof_name(oneof_descriptor.name)}Case {{")
    printer.print_indented_ln(f"{oneof_descriptor.name.upper()}_NOT_SET = 0,")
    for field in oneof_fields:
        printer.print_indented_ln(f"{field.name.upper()} = {field.number},")
    printer.print_ln("}")
    return printer.output


def print_extension(
    file_descriptor: FileDescriptorProto, export_map: ExportMap, extension: FieldDescriptorProto, indent_level: int
) -> str:
    """Render an extension field as an exported constant declaration.

    Args:
        file_descriptor (FileDescriptorProto): The file declaring the extension.
        export_map (ExportMap): The schema graph used to resolve the extension type.
        extension (FieldDescriptorProto): The extension field.
        indent_level (int): Indentation level of the declaration.

    Returns:
        str: A blank line and the `export const <camelName>: <type>;` line.
    """
    printer = Printer(indent_level)
    printer.print_empty_ln()
    field_type = get_field_type(
        extension.type, strip_leading_dot(extension.type_name), file_descriptor.name, export_map
    )
    if extension.label == LABEL_REPEATED:
        field_type = f"Array<{field_type}>"
    printer.print_ln(f"export const {helper.snake_to_camel(extension.name)}: {field_type};")
    return printer.output


def _group_oneof_fields(
    message_descriptor: DescriptorProto,
) -> list[tuple[OneofDescriptorProto, list[FieldDescriptorProto]]]:
    """Pair every declared oneof group with its member fields.

    Synthetic groups that protoc creates for proto3 `optional` fields are left out.

    Raises:
        MalformedDescriptorError: If a field names a oneof index the message does not declare.
    """
    groups: list[list[FieldDescriptorProto]] = [[] for _ in message_descriptor.oneof_decl]
    synthetic: set[int] = set()
    for field in message_descriptor.field:
        if not field.HasField("oneof_index"):
            continue
        if not 0 <= field.oneof_index < len(groups):
            raise MalformedDescriptorError(
                f"Field '{message_descriptor.name}.{field.name}' refers to undeclared oneof index {field.oneof_index}"
            )
        if field.proto3_optional:
            synthetic.add(field.oneof_index)
        groups[field.oneof_index].append(field)

    return [
        (oneof_descriptor, fields)
        for index, (oneof_descriptor, fields) in enumerate(zip(message_descriptor.oneof_decl, groups))
        if index not in synthetic
    ]


def print_message(
    message_descriptor: DescriptorProto,
    file_descriptor: FileDescriptorProto,
    export_map: ExportMap,
    indent_level: int = 0,
) -> str:
    """Render a message and everything nested in it.

    Members are written in declaration order: fields first, then nested
    messages, enums, oneof groups and extensions. Map entry messages are
    never rendered on their own; an empty string is returned for them.

    Args:
        message_descriptor (DescriptorProto): The message to render.
        file_descriptor (FileDescriptorProto): The file declaring the message.
        export_map (ExportMap): The schema graph used to resolve field types.
        indent_level (int): Indentation level of the class declaration.

    Returns:
        str: The rendered class, or "" for map entries.
    """
    if message_descriptor.options.map_entry:
        return ""

    printer = Printer(indent_level)
    printer.print_ln(f"export class {message_descriptor.name} {{")

    for field in message_descriptor.field:
        printer.print_indented_ln(resolve_field(field, file_descriptor, export_map).declaration)

    for nested in message_descriptor.nested_type:
        printer.print(print_message(nested, file_descriptor, export_map, indent_level + 1))

    for enum_type in message_descriptor.enum_type:
        printer.print(print_enum(enum_type, indent_level + 1))

    for oneof_descriptor, oneof_fields in _group_oneof_fields(message_descriptor):
        printer.print(print_oneof_decl(oneof_descriptor, oneof_fields, indent_level + 1))

    for extension in message_descriptor.extension:
        printer.print(print_extension(file_descriptor, export_map, extension, indent_level + 1))

    printer.print_ln("}")
    return printer.output


def print_file_messages(
    file_descriptor: FileDescriptorProto,
    export_map: ExportMap,
    well_known_types: Mapping[str, str] = WELL_KNOWN_TYPES_MAP,
) -> str:
    """Render every top-level enum and message of a file, with header and imports."""
    printer = Printer(0)
    printer.print_ln(f"// package: {file_descriptor.package}")
    printer.print_ln(f"// file: {file_descriptor.name}")
    printer.print_empty_ln()

    for dependency in file_descriptor.dependency:
        path = helper.get_import_path(dependency, file_descriptor.name, well_known_types)
        printer.print_ln(f'import * as {helper.file_path_to_pseudo_namespace(dependency)} from "{path}";')
    if file_descriptor.dependency:
        printer.print_empty_ln()

    for enum_type in file_descriptor.enum_type:
        printer.print(print_enum(enum_type, 0))

    for message_type in file_descriptor.message_type:
        if message_type.options.map_entry:
            continue
        printer.print_empty_ln()
        printer.print(print_message(message_type, file_descriptor, export_map))

    for extension in file_descriptor.extension:
        printer.print(print_extension(file_descriptor, export_map, extension, 0))

    logger.debug("Rendered %d message(s) of %s.", len(file_descriptor.message_type), file_descriptor.name)
    return printer.output
