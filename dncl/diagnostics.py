"""Human-readable messages for errors anchored to source offsets.

Columns are reported twice: ``column`` counts characters, while
``display_column`` counts terminal cells, with full-width (CJK) characters
taking two cells. The caret line is built from the display column so it
lines up under mixed ASCII/Japanese text in a monospaced font.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from .errors import DnclSyntaxError
from .objects import ErrorVal

CONTEXT_LINES = 5


@dataclass(frozen=True)
class Location:
    line: int            # zero-based
    column: int          # characters from the start of the line
    display_column: int  # terminal cells from the start of the line


def is_half_width(ch: str) -> bool:
    code = ord(ch)
    return 0x20 <= code <= 0x7E or 0xFF61 <= code <= 0xFF9F


def display_width(text: str) -> int:
    return sum(1 if is_half_width(ch) else 2 for ch in text)


def locate(source: str, offset: int) -> Location:
    """Find the line and columns of ``offset`` in ``source``.

    An offset sitting on a newline belongs to the line that newline ends.
    Offsets past the end of the text fall back to the origin.
    """
    index = 0
    for line_no, text in enumerate(source.split('\n')):
        if index + len(text) < offset:
            index += len(text) + 1
            continue
        column = offset - index
        return Location(line_no, column, display_width(text[:column]))
    return Location(0, 0, 0)


def error_span(error: Union[ErrorVal, DnclSyntaxError]) -> Tuple[int, int]:
    if isinstance(error, DnclSyntaxError):
        return error.span
    return error.ast_node.span


def explain(source: str, error: Union[ErrorVal, DnclSyntaxError]) -> str:
    """Render ``error`` with the lines leading up to it and a caret marker."""
    start, end = error_span(error)
    loc = locate(source, start)
    lines = source.split('\n')
    excerpt = lines[max(0, loc.line - CONTEXT_LINES):loc.line + 1]
    carets = '^' * max(1, end - start)
    return '\n'.join([
        f"line: {loc.line}, column: {loc.column}",
        error.message,
        *excerpt,
        ' ' * loc.display_column + carets,
    ])
