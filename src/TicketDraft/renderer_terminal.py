"""Light markdown-to-terminal renderer used for previews.

Handles headings, bullet and numbered lists, fenced code blocks and the
inline forms understood by :func:`TicketDraft.inline_parser.scan`.
"""

from __future__ import annotations

import re
from typing import List, Optional

from rich.console import Console
from rich.text import Text

from .inline_parser import scan
from .markdown_parser import FENCE
from .model import Mark

HEADING_STYLE = "bold cyan"
CODE_BLOCK_STYLE = "dim"
BULLET = "•"

INLINE_STYLES = {
    Mark.NONE: None,
    Mark.BOLD: "bold",
    Mark.ITALIC: "italic",
    Mark.CODE: "bold cyan",
}

_HEADING_RE = re.compile(r"^#{1,6}\s+(?P<text>.*)$")
_BULLET_RE = re.compile(r"^(?P<indent>\s*)[-*]\s+(?P<text>.*)$")
_ORDERED_RE = re.compile(r"^(?P<indent>\s*)(?P<number>\d+)\.\s+(?P<text>.*)$")


def render_markdown(text: str) -> Text:
    """Convert a markdown string into a styled ``rich`` Text."""
    lines: List[Text] = []
    code_lines: List[str] = []
    in_code = False
    for line in text.split("\n"):
        if line.strip().startswith(FENCE):
            if in_code:
                lines.extend(_render_code(code_lines))
                code_lines = []
            in_code = not in_code
            continue
        if in_code:
            code_lines.append(line)
            continue
        lines.append(_render_line(line))

    # Unclosed fence: show what was collected
    if in_code:
        lines.extend(_render_code(code_lines))
    return Text("\n").join(lines)


def print_markdown(text: str, console: Optional[Console] = None) -> None:
    (console or Console()).print(render_markdown(text))


def render_inline(text: str) -> Text:
    rendered = Text()
    for run in scan(text):
        rendered.append(run.text, style=INLINE_STYLES[run.mark])
    return rendered


def _render_line(line: str) -> Text:
    match = _HEADING_RE.match(line)
    if match:
        return Text(match.group("text"), style=HEADING_STYLE)

    match = _BULLET_RE.match(line)
    if match:
        rendered = Text(_indent(match.group("indent")) + f"{BULLET} ")
        rendered.append_text(render_inline(match.group("text")))
        return rendered

    match = _ORDERED_RE.match(line)
    if match:
        rendered = Text(_indent(match.group("indent")) + f"{match.group('number')}. ")
        rendered.append_text(render_inline(match.group("text")))
        return rendered

    if not line.strip():
        return Text("")
    return render_inline(line)


def _render_code(code_lines: List[str]) -> List[Text]:
    return [Text(f"  {code_line}", style=CODE_BLOCK_STYLE) for code_line in code_lines]


def _indent(whitespace: str) -> str:
    return " " * (len(whitespace) // 2)
