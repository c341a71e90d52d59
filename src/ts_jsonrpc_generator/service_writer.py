"""Generate JSON-RPC client stubs for the services of a protobuf file.

The generated module posts JSON-RPC 2.0 envelopes through Angular's
`HttpClient` and exposes results as rxjs observables. The transport has no
streaming, so client- or server-streaming methods get no stub.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from google.protobuf.descriptor_pb2 import FileDescriptorProto

from ts_jsonrpc_generator.export_map import ExportMap
from ts_jsonrpc_generator.printer import CodePrinter, Printer
from ts_jsonrpc_generator.proto_types import WELL_KNOWN_TYPES_MAP
from ts_jsonrpc_generator.writer_dto import RPCDescriptor, RPCMethodDescriptor, RPCServiceDescriptor

logger = logging.getLogger(__name__)

SERVICE_FILE_SUFFIX = "_service.ts"

JSONRPC_VERSION = "2.0"
REQUEST_ID = "1"
RPC_ENDPOINT = "/rpc"

TRANSPORT_IMPORTS = (
    'import {HttpClient} from "@angular/common/http";',
    'import {Observable, throwError} from "rxjs";',
    'import {catchError, map} from "rxjs/operators";',
)

OPTIONS_PARAMETER = "options?: {[key: string]: string}"


@dataclass(frozen=True)
class GeneratedFile:
    """A generated output file, relative to the output root."""

    name: str
    content: str


def _rpc_request(service: RPCDescriptor, method: RPCMethodDescriptor, params: str) -> str:
    return (
        f'<JsonRPCRequest>{{"id": "{REQUEST_ID}", "method": "{service.name}.{method.name_as_pascal_case}", '
        f'"params": {params}, "jsonrpc": "{JSONRPC_VERSION}"}}'
    )


class ServiceWriter:
    """Writes the JSON-RPC service module of one file."""

    def __init__(
        self,
        file_descriptor: FileDescriptorProto,
        export_map: ExportMap,
        well_known_types: Mapping[str, str] = WELL_KNOWN_TYPES_MAP,
    ):
        self.descriptor = RPCServiceDescriptor(file_descriptor, export_map, well_known_types)
        self._reset()

    def _reset(self) -> None:
        """Start a fresh output buffer, every `dumps()` renders from scratch."""
        self._output = Printer(0)
        self.printer = CodePrinter(0, self._output)

    def dumps(self) -> str:
        """Render the whole module.

        Files without services only get the two header lines and a blank line.
        """
        self._reset()
        self._print_header()

        services = self.descriptor.services
        if not services:
            return self._output.output

        self._print_imports()

        with self.printer.block(f"export namespace {services[0].name} {{"):
            self._print_envelope_types()

            for service in services:
                self._print_service_types(service)

            for service in services:
                self._print_client_stub(service)
                self.printer.print_empty_ln()

        return self._output.output

    def _print_header(self) -> None:
        self.printer.print_ln(f"// package: {self.descriptor.package_name}")
        self.printer.print_ln(f"// file: {self.descriptor.filename}")
        self.printer.print_empty_ln()

    def _print_imports(self) -> None:
        for import_descriptor in self.descriptor.imports:
            self.printer.print_ln(f'import * as {import_descriptor.namespace} from "{import_descriptor.path}";')
        for import_line in TRANSPORT_IMPORTS:
            self.printer.print_ln(import_line)
        self.printer.print_empty_ln()

    def _print_envelope_types(self) -> None:
        with self.printer.block("class JsonRPCRequest {") as printer:
            printer.print_ln("public jsonrpc: string;")
            printer.print_ln("public id: string;")
            printer.print_ln("public method: string;")
            printer.print_ln("public params: any;")
        self.printer.print_empty_ln()

        with self.printer.block("type JsonRPCResponse = {") as printer:
            printer.print_ln("readonly result: any;")
            printer.print_ln("readonly id: string;")
            printer.print_ln("readonly jsonrpc: string;")
        self.printer.print_empty_ln()

    def _print_service_types(self, service: RPCDescriptor) -> None:
        methods = service.methods

        for method in methods:
            with self.printer.block(f"type {method.service_name}{method.name_as_pascal_case} = {{", "};") as printer:
                printer.print_ln("readonly methodName: string;")
                printer.print_ln(f"readonly service: typeof {method.service_name};")
                printer.print_ln(f"readonly requestType: typeof {method.request_type};")
                printer.print_ln(f"readonly responseType: typeof {method.response_type};")
            self.printer.print_empty_ln()

        with self.printer.block(f"class {service.name} {{") as printer:
            printer.print_ln("static readonly serviceName: string;")
            for method in methods:
                printer.print_ln(
                    f"static readonly {method.name_as_pascal_case}: {method.service_name}{method.name_as_pascal_case};"
                )
        self.printer.print_empty_ln()

    def _print_client_stub(self, service: RPCDescriptor) -> None:
        with self.printer.block("export class Client {") as printer:
            printer.print_ln("private serviceHost: string;")
            printer.print_empty_ln()

            with printer.block("constructor(serviceHost: string, private http: HttpClient) {"):
                printer.print_ln("this.serviceHost = serviceHost;")
            printer.print_empty_ln()

            with printer.block(f"call<T>(url: string, request: any, {OPTIONS_PARAMETER}): Observable<T> {{"):
                printer.print_ln(
                    "return this.http.post<JsonRPCResponse>(url, request, options)"
                    ".pipe(map(response => { return response.result; }), "
                    "catchError(error => { return throwError(error); }));"
                )
            printer.print_empty_ln()

            with printer.block(f"callBatch<T>(url: string, request: any, {OPTIONS_PARAMETER}): Observable<T> {{"):
                printer.print_ln("// @ts-ignore")
                printer.print_ln(
                    "return this.http.post<JsonRPCResponse[]>(url, request, options)"
                    ".pipe(map(response => { return response.map((r) => { return <T>r.result; }) }), "
                    "catchError(error => { return throwError(error); }));"
                )
            printer.print_empty_ln()

            for method in service.methods:
                if not method.is_unary:
                    logger.debug(
                        "Skipping streaming method %s.%s, JSON-RPC has no streaming.",
                        service.name,
                        method.name_as_pascal_case,
                    )
                    continue
                self._print_unary_stub(service, method)
                self._print_batch_stub(service, method)

    def _print_unary_stub(self, service: RPCDescriptor, method: RPCMethodDescriptor) -> None:
        printer = self.printer
        printer.print_ln(f"{method.function_name}(")
        with printer.indented():
            printer.print_ln(f"requestMessage: {method.request_type},")
            printer.print_ln(f"{OPTIONS_PARAMETER}): Observable<{method.response_type}> {{")
            printer.print_ln(f"let rpcRequest = {_rpc_request(service, method, 'requestMessage')};")
            printer.print_ln(
                f"return this.call<{method.response_type}>(`${{this.serviceHost}}{RPC_ENDPOINT}`, rpcRequest, options);"
            )
        printer.print_ln("}")
        printer.print_empty_ln()

    def _print_batch_stub(self, service: RPCDescriptor, method: RPCMethodDescriptor) -> None:
        printer = self.printer
        printer.print_ln(f"{method.function_name}Batch(")
        with printer.indented():
            printer.print_ln(f"requestMessages: {method.request_type}[],")
            printer.print_ln(f"{OPTIONS_PARAMETER}): Observable<{method.response_type}[]> {{")
            printer.print_ln(
                f"let rpcRequests = requestMessages.map((r) => {{return {_rpc_request(service, method, 'r')};}});"
            )
            printer.print_ln(
                f"return this.callBatch<{method.response_type}[]>"
                f"(`${{this.serviceHost}}{RPC_ENDPOINT}`, rpcRequests, options);"
            )
        printer.print_ln("}")
        printer.print_empty_ln()


def generate_jsonrpc_service(
    filename: str,
    file_descriptor: FileDescriptorProto,
    export_map: ExportMap,
    well_known_types: Mapping[str, str] = WELL_KNOWN_TYPES_MAP,
) -> list[GeneratedFile]:
    """Entry-point for generating the JSON-RPC service module of a file.

    Args:
        filename (str): Output base name, without the `_service.ts` suffix.
        file_descriptor (FileDescriptorProto): The file whose services are rendered.
        export_map (ExportMap): The schema graph.
        well_known_types (Mapping[str, str]): Import paths for well-known schema files.

    Returns:
        list[GeneratedFile]: The `<filename>_service.ts` record.
    """
    writer = ServiceWriter(file_descriptor, export_map, well_known_types)
    return [GeneratedFile(name=f"{filename}{SERVICE_FILE_SUFFIX}", content=writer.dumps())]
