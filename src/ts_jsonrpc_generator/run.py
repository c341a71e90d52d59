"""Top-level module for TypeScript generation."""

from __future__ import annotations

import argparse
import logging
import os.path
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from google.protobuf.compiler import plugin_pb2
from google.protobuf.descriptor_pb2 import FileDescriptorProto, FileDescriptorSet

from ts_jsonrpc_generator import helper
from ts_jsonrpc_generator.errors import ConfigurationError, GenerationError
from ts_jsonrpc_generator.export_map import ExportMap
from ts_jsonrpc_generator.message_writer import print_file_messages
from ts_jsonrpc_generator.proto_types import WELL_KNOWN_TYPES_MAP, well_known_types_map
from ts_jsonrpc_generator.service_writer import GeneratedFile, generate_jsonrpc_service

logger = logging.getLogger(__name__)

MESSAGES_FILE_SUFFIX = ".ts"

_TRUE_VALUES = ("", "1", "true", "yes")
_FALSE_VALUES = ("0", "false", "no")


def _parse_bool(key: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


@dataclass(frozen=True)
class GeneratorConfig:
    """Options of a generation run.

    Attributes:
        emit_messages: Whether to write the `<name>_pb.ts` message modules next to the service modules.
        well_known_types: Import paths for the well-known schema files.
    """

    emit_messages: bool = True
    well_known_types: Mapping[str, str] = field(default_factory=lambda: WELL_KNOWN_TYPES_MAP)

    def with_wkt_package(self, package: str) -> GeneratorConfig:
        return GeneratorConfig(emit_messages=self.emit_messages, well_known_types=well_known_types_map(package))

    @classmethod
    def from_parameter(cls, parameter: str) -> GeneratorConfig:
        """Parse the plugin parameter string, e.g. `messages=false,wkt_package=@acme/protobuf`.

        Raises:
            ConfigurationError: On unknown keys or invalid values.
        """
        config = cls()
        for part in parameter.split(","):
            if not part.strip():
                continue
            key, _, value = part.partition("=")
            key = key.strip()
            if key == "messages":
                config = cls(emit_messages=_parse_bool(key, value), well_known_types=config.well_known_types)
            elif key == "wkt_package":
                if not value.strip():
                    raise ConfigurationError("'wkt_package' needs a value")
                config = config.with_wkt_package(value.strip())
            else:
                raise ConfigurationError(f"Unknown parameter '{key}'")
        return config


def generate_files(
    files_to_generate: Sequence[str],
    proto_files: Iterable[FileDescriptorProto],
    config: GeneratorConfig | None = None,
) -> list[GeneratedFile]:
    """Generate the TypeScript modules of the requested files.

    Either every record is returned or an error is raised; there is no partial output.

    Args:
        files_to_generate (Sequence[str]): Names of the schema files to generate code for.
        proto_files (Iterable[FileDescriptorProto]): The full schema set, dependencies included.
        config (GeneratorConfig | None): Options of the run. Defaults to `GeneratorConfig()`.

    Returns:
        list[GeneratedFile]: Generated records, in the order of `files_to_generate`.

    Raises:
        GenerationError: If the schema set is inconsistent or unsupported.
    """
    config = config or GeneratorConfig()
    files_by_name = {file_descriptor.name: file_descriptor for file_descriptor in proto_files}
    export_map = ExportMap.from_files(files_by_name.values())

    generated: list[GeneratedFile] = []
    for file_name in files_to_generate:
        file_descriptor = files_by_name.get(file_name)
        if file_descriptor is None:
            raise GenerationError(f"File not found in request: {file_name}")

        output_base = helper.replace_proto_suffix(file_name)
        if config.emit_messages:
            content = print_file_messages(file_descriptor, export_map, config.well_known_types)
            generated.append(GeneratedFile(name=f"{output_base}{MESSAGES_FILE_SUFFIX}", content=content))

        generated.extend(generate_jsonrpc_service(output_base, file_descriptor, export_map, config.well_known_types))

    return generated


def process_request(
    request: plugin_pb2.CodeGeneratorRequest, config: GeneratorConfig | None = None
) -> plugin_pb2.CodeGeneratorResponse:
    """Turn a protoc code generation request into a response.

    Generation failures are reported through the response's `error` field and
    no files are returned with it.

    Args:
        request (plugin_pb2.CodeGeneratorRequest): The request read from protoc.
        config (GeneratorConfig | None): Options; parsed from `request.parameter` if omitted.

    Returns:
        plugin_pb2.CodeGeneratorResponse: The response to write back to protoc.
    """
    response = plugin_pb2.CodeGeneratorResponse()
    # Synthetic oneofs of proto3 `optional` fields are understood, see `message_writer`.
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL

    try:
        if config is None:
            config = GeneratorConfig.from_parameter(request.parameter)
        generated = generate_files(list(request.file_to_generate), request.proto_file, config)
    except GenerationError as e:
        logger.error("Generation failed: %s", e)
        response.error = str(e)
        return response

    for generated_file in generated:
        response.file.add(name=generated_file.name, content=generated_file.content)

    logger.info("Generated %d file(s).", len(generated))
    return response


def load_descriptor_set(path: str) -> FileDescriptorSet:
    """Read a serialized `FileDescriptorSet`, as written by `protoc --descriptor_set_out`."""
    descriptor_set = FileDescriptorSet()
    with open(path, "rb") as descriptor_file:
        descriptor_set.ParseFromString(descriptor_file.read())
    logger.debug("Loaded %d file descriptor(s) from %s.", len(descriptor_set.file), path)
    return descriptor_set


def write_generated_files(generated: Iterable[GeneratedFile], output_dir: str) -> list[str]:
    """Write generated records below `output_dir`, creating directories as needed.

    Returns:
        list[str]: Paths of the written files.
    """
    written = []
    for generated_file in generated:
        output_path = os.path.join(output_dir, generated_file.name)
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        with open(output_path, "w", encoding="utf8") as output_file:
            output_file.write(generated_file.content)
        logger.info("Wrote '%s'.", output_path)
        written.append(output_path)
    return written


def run(args: argparse.Namespace, root_directory: str) -> None:
    """Run the generator on a descriptor set.

    Uses `generate_files` on the selected files and writes the results.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the generator.
        root_directory (str): The directory, from which the generator is executed.

    Raises:
        GenerationError: If generation fails; nothing is written in that case.
    """
    descriptor_path: str = args.descriptor_set
    if not os.path.isabs(descriptor_path):
        descriptor_path = os.path.join(root_directory, descriptor_path)

    output_dir: str = args.output_dir or root_directory
    if not os.path.isabs(output_dir):
        output_dir = os.path.join(root_directory, output_dir)

    config = GeneratorConfig(emit_messages=not args.no_messages)
    if args.wkt_package:
        config = config.with_wkt_package(args.wkt_package)

    descriptor_set = load_descriptor_set(descriptor_path)

    files_to_generate: list[str] = list(args.files)
    if not files_to_generate:
        files_to_generate = [
            file_descriptor.name
            for file_descriptor in descriptor_set.file
            if file_descriptor.name not in config.well_known_types
        ]
    logger.info("Generating TypeScript for %d file(s).", len(files_to_generate))

    generated = generate_files(files_to_generate, descriptor_set.file, config)
    write_generated_files(generated, output_dir)
