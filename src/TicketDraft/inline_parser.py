"""Inline scanner for bold, italic and code spans.

A single cursor walks the text. In ``PLAIN`` mode each position is checked
for an opening delimiter; a span only opens when its closing delimiter is
present further on, otherwise the delimiter is kept as literal text.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from .model import InlineRun, Mark


class _Mode(Enum):
    PLAIN = "plain"
    IN_CODE = "code"
    IN_BOLD = "bold"
    IN_ITALIC = "italic"


_MODE_MARKS = {
    _Mode.IN_CODE: Mark.CODE,
    _Mode.IN_BOLD: Mark.BOLD,
    _Mode.IN_ITALIC: Mark.ITALIC,
}


def scan(text: str) -> Tuple[InlineRun, ...]:
    """Split ``text`` into inline runs. Never raises, never returns an empty tuple."""
    runs: List[InlineRun] = []
    plain: List[str] = []
    span: List[str] = []
    mode = _Mode.PLAIN
    closer = ""
    i = 0
    while i < len(text):
        if mode is not _Mode.PLAIN:
            if text.startswith(closer, i):
                runs.append(InlineRun("".join(span), _MODE_MARKS[mode]))
                span = []
                mode = _Mode.PLAIN
                i += len(closer)
            else:
                span.append(text[i])
                i += 1
            continue

        opened, delimiter = _next_token(text, i)
        if opened is None:
            plain.append(delimiter)
        else:
            if plain:
                runs.append(InlineRun("".join(plain)))
                plain = []
            mode = opened
            closer = delimiter
        i += len(delimiter)

    if plain or not runs:
        runs.append(InlineRun("".join(plain)))
    return tuple(runs)


def _next_token(text: str, i: int) -> Tuple[Optional[_Mode], str]:
    """Classify the token at ``i``: (mode, delimiter) opens a span, (None, literal) does not."""
    char = text[i]
    following = text[i + 1] if i + 1 < len(text) else ""
    if char == "`" and following != "`":
        return _try_open(text, i, "`", _Mode.IN_CODE)
    if char == "*" and following == "*":
        return _try_open(text, i, "**", _Mode.IN_BOLD)
    if char in "*_":
        if following == char:
            # "__" is never a delimiter
            return None, char * 2
        return _try_open(text, i, char, _Mode.IN_ITALIC)
    return None, char


def _try_open(text: str, i: int, delimiter: str, mode: _Mode) -> Tuple[Optional[_Mode], str]:
    start = i + len(delimiter)
    end = text.find(delimiter, start)
    if end > start:
        return mode, delimiter
    return None, delimiter
