"""Index of every message and enum in a schema set, keyed by fully qualified name."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from google.protobuf.descriptor_pb2 import DescriptorProto, FileDescriptorProto

from ts_jsonrpc_generator.errors import MalformedMapEntryError, MissingExportError

logger = logging.getLogger(__name__)

MAP_KEY_FIELD_NUMBER = 1
MAP_VALUE_FIELD_NUMBER = 2


def strip_leading_dot(type_name: str) -> str:
    """Type references in descriptors are absolute (`.pkg.Msg`); the export map uses `pkg.Msg`."""
    return type_name[1:] if type_name.startswith(".") else type_name


@dataclass(frozen=True)
class TypeRef:
    """A (wire type, referenced type name) pair, as recorded for map keys and values."""

    type: int
    type_name: str


@dataclass(frozen=True)
class MapFieldTypes:
    """Key and value types of a synthetic map entry message."""

    key: TypeRef
    value: TypeRef


@dataclass(frozen=True)
class MessageExport:
    """Where a message is defined.

    Attributes:
        package: Package of the defining file.
        file_name: Name of the defining file.
        map_entry: Whether the message is a synthetic map entry.
        map_field_types: Key/value types for map entries, None if the entry is malformed.
    """

    package: str
    file_name: str
    map_entry: bool = False
    map_field_types: MapFieldTypes | None = None

    def require_map_field_types(self, full_type_name: str) -> MapFieldTypes:
        if self.map_field_types is None:
            raise MalformedMapEntryError(full_type_name)
        return self.map_field_types


@dataclass(frozen=True)
class EnumExport:
    """Where an enum is defined."""

    package: str
    file_name: str


def _map_field_types(message: DescriptorProto) -> MapFieldTypes | None:
    fields = {field.number: field for field in message.field}
    key = fields.get(MAP_KEY_FIELD_NUMBER)
    value = fields.get(MAP_VALUE_FIELD_NUMBER)
    if key is None or value is None:
        return None

    return MapFieldTypes(
        key=TypeRef(key.type, strip_leading_dot(key.type_name)),
        value=TypeRef(value.type, strip_leading_dot(value.type_name)),
    )


class ExportMap:
    """Read-only lookup from fully qualified type names to their definition sites.

    Built once per generation run with `from_files` and shared by every writer.
    """

    def __init__(self, messages: Mapping[str, MessageExport], enums: Mapping[str, EnumExport]):
        self._messages = MappingProxyType(dict(messages))
        self._enums = MappingProxyType(dict(enums))

    @classmethod
    def from_files(cls, files: Iterable[FileDescriptorProto]) -> ExportMap:
        """Index all messages and enums of the given files.

        Args:
            files (Iterable[FileDescriptorProto]): Every file of the schema set, dependencies included.

        Returns:
            ExportMap: The populated, read-only export map.
        """
        messages: dict[str, MessageExport] = {}
        enums: dict[str, EnumExport] = {}

        def export_nested(scope: str, file_descriptor: FileDescriptorProto, message: DescriptorProto) -> None:
            entry_name = f"{scope}.{message.name}" if scope else message.name
            map_entry = message.options.map_entry
            messages[entry_name] = MessageExport(
                package=file_descriptor.package,
                file_name=file_descriptor.name,
                map_entry=map_entry,
                map_field_types=_map_field_types(message) if map_entry else None,
            )

            for nested in message.nested_type:
                export_nested(entry_name, file_descriptor, nested)

            for enum_type in message.enum_type:
                enums[f"{entry_name}.{enum_type.name}"] = EnumExport(file_descriptor.package, file_descriptor.name)

        for file_descriptor in files:
            scope = file_descriptor.package
            for message_type in file_descriptor.message_type:
                export_nested(scope, file_descriptor, message_type)

            for enum_type in file_descriptor.enum_type:
                name = f"{scope}.{enum_type.name}" if scope else enum_type.name
                enums[name] = EnumExport(file_descriptor.package, file_descriptor.name)

        logger.debug("Indexed %d message(s) and %d enum(s).", len(messages), len(enums))
        return cls(messages, enums)

    @property
    def messages(self) -> Mapping[str, MessageExport]:
        return self._messages

    @property
    def enums(self) -> Mapping[str, EnumExport]:
        return self._enums

    def get_message(self, full_type_name: str) -> MessageExport:
        """Look up a message by name.

        Raises:
            MissingExportError: If the message is not part of the schema set.
        """
        try:
            return self._messages[full_type_name]
        except KeyError:
            raise MissingExportError("message", full_type_name) from None

    def get_enum(self, full_type_name: str) -> EnumExport:
        """Look up an enum by name.

        Raises:
            MissingExportError: If the enum is not part of the schema set.
        """
        try:
            return self._enums[full_type_name]
        except KeyError:
            raise MissingExportError("enum", full_type_name) from None
