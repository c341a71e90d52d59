"""Append-only text buffers used by the writers."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

INDENT = "    "
CODE_INDENT = "  "


class Printer:
    """A text buffer with a fixed indentation level.

    Every line written through `print_ln` is prefixed with the indentation of
    the level the printer was created with (four spaces per level).
    """

    def __init__(self, indent_level: int = 0):
        self._indent = INDENT * indent_level
        self._chunks: list[str] = []

    def print_ln(self, line: str) -> None:
        """Append `line` at the printer's indentation level."""
        self._chunks.append(f"{self._indent}{line}\n")

    def print_indented_ln(self, line: str) -> None:
        """Append `line` one level deeper than the printer's indentation."""
        self._chunks.append(f"{self._indent}{INDENT}{line}\n")

    def print(self, text: str) -> None:
        """Append pre-rendered text verbatim, e.g. a nested fragment."""
        self._chunks.append(text)

    def print_empty_ln(self) -> None:
        self._chunks.append("\n")

    @property
    def output(self) -> str:
        return "".join(self._chunks)


class CodePrinter:
    """Writes code lines into a `Printer` with a mutable nesting depth.

    Depth is tracked in steps of two spaces. Use `indented()` to open a block;
    the depth is restored when the block exits, also on errors.
    """

    def __init__(self, depth: int, printer: Printer):
        self._depth = depth
        self._printer = printer

    @property
    def depth(self) -> int:
        return self._depth

    def print_ln(self, line: str) -> CodePrinter:
        """Append `line` at the current depth.

        Returns:
            CodePrinter: This printer, for chaining.
        """
        self._printer.print_ln(f"{CODE_INDENT * self._depth}{line}")
        return self

    def print_empty_ln(self) -> CodePrinter:
        self._printer.print_empty_ln()
        return self

    @contextmanager
    def indented(self) -> Iterator[CodePrinter]:
        """Increase the depth by one for the duration of the `with` block."""
        self._depth += 1
        try:
            yield self
        finally:
            self._depth -= 1

    @contextmanager
    def block(self, opening: str, closing: str = "}") -> Iterator[CodePrinter]:
        """Print `opening`, indent the body and print `closing` after it."""
        self.print_ln(opening)
        with self.indented():
            yield self
        self.print_ln(closing)
