"""Command-line interfaces for generating TypeScript JSON-RPC clients from protobuf schemas.

Notes:
    - `ts-jsonrpc-generator` works on a descriptor set written by
      `protoc --include_imports --descriptor_set_out=...`.
    - `protoc-gen-ts-jsonrpc` is a protoc plugin: `protoc --ts-jsonrpc_out=...`.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from typing import BinaryIO

from google.protobuf.compiler import plugin_pb2

from ts_jsonrpc_generator.errors import GenerationError
from ts_jsonrpc_generator.run import process_request, run

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(description="Generate TypeScript types and JSON-RPC clients for protobuf schemas.")

    parser.add_argument(
        "-d",
        "--descriptor-set",
        dest="descriptor_set",
        type=str,
        required=True,
        help="serialized FileDescriptorSet that contains the schemas and all their imports.",
    )

    parser.add_argument(
        "-f",
        "--files",
        type=str,
        nargs="+",
        default=[],
        help="schema files to generate code for; defaults to every file in the set except well-known types.",
    )

    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        default="",
        help="directory to write all generated outputs; defaults to the working directory.",
    )

    parser.add_argument(
        "--no-messages",
        dest="no_messages",
        default=False,
        action="store_true",
        help="only generate the *_service.ts modules.",
    )

    parser.add_argument(
        "--wkt-package",
        dest="wkt_package",
        type=str,
        default="",
        help="runtime package that provides the well-known types (default: google-protobuf).",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        default=False,
        action="store_true",
        help="enable debug logging.",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code.
    """
    parser = setup_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    root_directory = os.getcwd()
    logging.info("Working from root directory: %s", root_directory)

    try:
        run(args, root_directory)
    except GenerationError as e:
        logger.error("Generation failed, no files were written: %s", e)
        return 1

    return 0


def plugin_main(stdin: BinaryIO | None = None, stdout: BinaryIO | None = None) -> int:
    """Entry point of the protoc plugin.

    Reads a `CodeGeneratorRequest` from stdin and writes the `CodeGeneratorResponse` to stdout.
    Generation failures are reported to protoc through the response.
    """
    stdin = stdin or sys.stdin.buffer
    stdout = stdout or sys.stdout.buffer

    # protoc owns stdout, logs go to stderr.
    logging.basicConfig(level=logging.WARNING, stream=sys.stderr)

    request = plugin_pb2.CodeGeneratorRequest()
    request.ParseFromString(stdin.read())

    response = process_request(request)
    stdout.write(response.SerializeToString())
    stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
