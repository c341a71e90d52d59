"""Rendering-ready views over service and method descriptors.

The views hold no state of their own: every property is recomputed from the
underlying descriptor on access.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from google.protobuf.descriptor_pb2 import FileDescriptorProto, MethodDescriptorProto, ServiceDescriptorProto

from ts_jsonrpc_generator import helper
from ts_jsonrpc_generator.export_map import ExportMap, strip_leading_dot
from ts_jsonrpc_generator.field_types import get_field_type
from ts_jsonrpc_generator.proto_types import MESSAGE_TYPE, WELL_KNOWN_TYPES_MAP

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallingTypes:
    """Request and response type expressions of a method, always namespace-qualified."""

    request_type: str
    response_type: str


def get_calling_types(method: MethodDescriptorProto, export_map: ExportMap) -> CallingTypes:
    # An empty current file name forces the pseudo-namespace prefix, the
    # service module imports its own messages like any other dependency.
    return CallingTypes(
        request_type=get_field_type(MESSAGE_TYPE, strip_leading_dot(method.input_type), "", export_map),
        response_type=get_field_type(MESSAGE_TYPE, strip_leading_dot(method.output_type), "", export_map),
    )


def is_used(file_descriptor: FileDescriptorProto, pseudo_namespace: str, export_map: ExportMap) -> bool:
    """Whether any method of any service in the file takes or returns a type from `pseudo_namespace`."""
    namespace_prefix = f"{pseudo_namespace}."
    for service in file_descriptor.service:
        for method in service.method:
            calling_types = get_calling_types(method, export_map)
            if calling_types.request_type.startswith(namespace_prefix) or calling_types.response_type.startswith(
                namespace_prefix
            ):
                return True
    return False


@dataclass(frozen=True)
class ImportDescriptor:
    namespace: str
    path: str


@dataclass(frozen=True)
class RPCMethodDescriptor:
    """A method as the service writer needs it.

    Attributes:
        name_as_pascal_case: The declared method name, e.g. `GetUser`.
        name_as_camel_case: The declared name with a lowercase first letter, e.g. `getUser`.
        function_name: The client stub identifier, a reserved-word safe `name_as_camel_case`.
        service_name: Name of the owning service.
        request_stream: Whether the client streams requests.
        response_stream: Whether the server streams responses.
        request_type: Qualified request type expression.
        response_type: Qualified response type expression.
    """

    name_as_pascal_case: str
    name_as_camel_case: str
    function_name: str
    service_name: str
    request_stream: bool
    response_stream: bool
    request_type: str
    response_type: str

    @property
    def is_unary(self) -> bool:
        return not self.request_stream and not self.response_stream


class RPCDescriptor:
    """View over a single service."""

    def __init__(self, service: ServiceDescriptorProto, export_map: ExportMap):
        self._service = service
        self._export_map = export_map

    @property
    def name(self) -> str:
        return self._service.name

    @property
    def methods(self) -> list[RPCMethodDescriptor]:
        methods = []
        for method in self._service.method:
            calling_types = get_calling_types(method, self._export_map)
            methods.append(
                RPCMethodDescriptor(
                    name_as_pascal_case=method.name,
                    name_as_camel_case=helper.lowercase_first(method.name),
                    function_name=helper.method_function_name(method.name),
                    service_name=self.name,
                    request_stream=method.client_streaming,
                    response_stream=method.server_streaming,
                    request_type=calling_types.request_type,
                    response_type=calling_types.response_type,
                )
            )
        return methods


class RPCServiceDescriptor:
    """View over all services of a file, with the imports their stubs need."""

    def __init__(
        self,
        file_descriptor: FileDescriptorProto,
        export_map: ExportMap,
        well_known_types: Mapping[str, str] = WELL_KNOWN_TYPES_MAP,
    ):
        self._file_descriptor = file_descriptor
        self._export_map = export_map
        self._well_known_types = well_known_types

    @property
    def filename(self) -> str:
        return self._file_descriptor.name

    @property
    def package_name(self) -> str:
        return self._file_descriptor.package

    @property
    def imports(self) -> list[ImportDescriptor]:
        """The host file's own module first, then every used dependency in declaration order."""
        imports = [
            ImportDescriptor(
                namespace=helper.file_path_to_pseudo_namespace(self.filename),
                path=f"{helper.get_path_to_root(self.filename)}{helper.replace_proto_suffix(self.filename)}",
            )
        ]

        for dependency in self._file_descriptor.dependency:
            namespace = helper.file_path_to_pseudo_namespace(dependency)
            if not is_used(self._file_descriptor, namespace, self._export_map):
                logger.debug("Skipping unused import %s in %s.", dependency, self.filename)
                continue
            imports.append(
                ImportDescriptor(
                    namespace=namespace,
                    path=helper.get_import_path(dependency, self.filename, self._well_known_types),
                )
            )

        return imports

    @property
    def services(self) -> list[RPCDescriptor]:
        return [RPCDescriptor(service, self._export_map) for service in self._file_descriptor.service]
