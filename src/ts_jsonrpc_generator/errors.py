"""Errors raised while generating TypeScript from a schema set.

Generation is a pure function of its input, so every error here means the
schema set is inconsistent or uses something the generator cannot express.
None of them are retried; the host aborts the whole request.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for all failures that abort a generation run."""


class MissingExportError(GenerationError):
    """Raised when a referenced message or enum is not present in the export map."""

    def __init__(self, kind: str, type_name: str):
        self.kind = kind
        self.type_name = type_name
        super().__init__(f"No {kind} export for: {type_name}")


class MalformedMapEntryError(GenerationError):
    """Raised when a map entry message does not record both a key and a value type."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Map entry message {type_name} has no recorded key/value types")


class UnsupportedFieldTypeError(GenerationError):
    """Raised for wire types that have no TypeScript mapping."""


class UnsupportedOptionError(GenerationError):
    """Raised for field options that cannot be honoured for the field's type."""


class ConfigurationError(GenerationError):
    """Raised for invalid generator parameters."""


class MalformedDescriptorError(GenerationError):
    """Raised when a descriptor refers to something it does not declare, e.g. an unknown oneof index."""
