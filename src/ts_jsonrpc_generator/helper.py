"""Helper functionality that is used in other modules of this package."""

from __future__ import annotations

import re
from collections.abc import Mapping

from google.protobuf.descriptor_pb2 import FileDescriptorProto

from ts_jsonrpc_generator.proto_types import GENERATED_SUFFIX, PROTO_SUFFIX

# Identifiers that cannot be used as plain member names in generated code.
RESERVED_NAMES = frozenset(
    {
        "abstract",
        "boolean",
        "break",
        "byte",
        "case",
        "catch",
        "char",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "double",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "final",
        "finally",
        "float",
        "for",
        "function",
        "goto",
        "if",
        "implements",
        "import",
        "in",
        "instanceof",
        "int",
        "interface",
        "long",
        "native",
        "new",
        "null",
        "package",
        "private",
        "protected",
        "public",
        "return",
        "short",
        "static",
        "super",
        "switch",
        "synchronized",
        "this",
        "throw",
        "throws",
        "transient",
        "try",
        "typeof",
        "var",
        "void",
        "volatile",
        "while",
        "with",
    }
)

_NAMESPACE_SEPARATORS = re.compile(r"[/.\-]")
_SNAKE_SEGMENT = re.compile(r"_(\w)")


def file_path_to_pseudo_namespace(file_path: str) -> str:
    """Derive the pseudo-namespace token of a schema file.

    The token is used both as the import alias and as the prefix of cross-file
    type references, e.g. `api/v1/user-service.proto` becomes `api_v1_user_service_pb`.

    Args:
        file_path (str): The schema file path, relative to the include root.

    Returns:
        str: The pseudo-namespace token.
    """
    return _NAMESPACE_SEPARATORS.sub("_", file_path.replace(PROTO_SUFFIX, "", 1)) + GENERATED_SUFFIX


def replace_proto_suffix(file_path: str) -> str:
    """Rewrite the `.proto` suffix of a schema path to the generated-file suffix.

    Paths without a `.proto` suffix are returned unchanged.
    """
    if file_path.endswith(PROTO_SUFFIX):
        return file_path[: -len(PROTO_SUFFIX)] + GENERATED_SUFFIX
    return file_path


def get_path_to_root(file_name: str) -> str:
    """Relative path from a generated file back to the output root.

    Args:
        file_name (str): The schema file path, e.g. `a/b/c.proto`.

    Returns:
        str: `./` for files at the root, otherwise one `../` per directory level.
    """
    depth = file_name.count("/")
    if depth == 0:
        return "./"
    return "../" * depth


def within_namespace(full_type_name: str, package: str) -> str:
    """Strip the package from a fully qualified type name.

    E.g. `shop.Order.Item` in package `shop` becomes `Order.Item`.
    """
    if package:
        return full_type_name[len(package) + 1 :]
    return full_type_name


def is_proto2(file_descriptor: FileDescriptorProto) -> bool:
    """Whether a file uses the legacy required-field dialect. An empty syntax means proto2."""
    return file_descriptor.syntax in ("", "proto2")


def normalise_field_object_name(name: str) -> str:
    """Prefix reserved words so they can be used as member names."""
    if name in RESERVED_NAMES:
        return f"pb_{name}"
    return name


def lowercase_first(name: str) -> str:
    """Lowercase the first character, e.g. `GetUser` becomes `getUser`."""
    return name[:1].lower() + name[1:]


def uppercase_first(name: str) -> str:
    """Uppercase the first character, e.g. `paymentMethod` becomes `PaymentMethod`."""
    return name[:1].upper() + name[1:]


def snake_to_camel(name: str) -> str:
    """Convert `snake_case` to `camelCase`, e.g. `user_id` becomes `userId`."""
    return _SNAKE_SEGMENT.sub(lambda match: match.group(1).upper(), name)


def oneof_name(name: str) -> str:
    """The type name used for a oneof group, e.g. `payment_method` becomes `PaymentMethod`."""
    return uppercase_first(snake_to_camel(name.lower()))


def method_function_name(method_name: str) -> str:
    """Call-site identifier for an RPC method, e.g. `GetUser` becomes `getUser`."""
    return normalise_field_object_name(lowercase_first(method_name))


def get_import_path(dependency: str, host_file_name: str, well_known_types: Mapping[str, str]) -> str:
    """Import path of a dependency's generated module, as seen from the host file's generated module.

    Well-known schema files resolve to their pre-packaged runtime paths.

    Args:
        dependency (str): The imported schema file, e.g. `common/money.proto`.
        host_file_name (str): The schema file whose generated code contains the import.
        well_known_types (Mapping[str, str]): Schema file -> fixed import path.

    Returns:
        str: The import path, e.g. `../common/money_pb`.
    """
    if dependency in well_known_types:
        return well_known_types[dependency]
    return f"{get_path_to_root(host_file_name)}{replace_proto_suffix(dependency)}"
