from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .inline_parser import scan
from .model import (
    Block,
    BulletList,
    CodeBlock,
    Document,
    Heading,
    ListItem,
    OrderedList,
    Paragraph,
    empty_paragraph,
)

FENCE = "```"
MAX_HEADING_LEVEL = 6
DEFAULT_CODE_LANGUAGE = "text"

_HEADING_RE = re.compile(r"^(?P<hashes>#+)\s*(?P<text>.*)$")
_BULLET_RE = re.compile(r"^[-*]\s+(?P<text>.*)$")
_ORDERED_RE = re.compile(r"^\d+\.\s+(?P<text>.*)$")


class LineKind(Enum):
    FENCE = "fence"
    CODE = "code"
    HEADING = "heading"
    BULLET = "bullet"
    ORDERED = "ordered"
    BLANK = "blank"
    TEXT = "text"


@dataclass(frozen=True)
class Line:
    kind: LineKind
    raw: str
    text: str = ""
    level: int = 0


def classify_line(raw: str, in_code: bool = False) -> Line:
    """Classify one input line. Rules are tried in order; the first match wins."""
    stripped = raw.strip()
    if stripped.startswith(FENCE):
        return Line(LineKind.FENCE, raw, text=stripped[len(FENCE) :].strip())
    if in_code:
        return Line(LineKind.CODE, raw)
    match = _HEADING_RE.match(stripped)
    if match:
        level = min(MAX_HEADING_LEVEL, len(match.group("hashes")))
        return Line(LineKind.HEADING, raw, text=match.group("text"), level=level)
    match = _BULLET_RE.match(stripped)
    if match:
        return Line(LineKind.BULLET, raw, text=match.group("text"))
    match = _ORDERED_RE.match(stripped)
    if match:
        return Line(LineKind.ORDERED, raw, text=match.group("text"))
    if not stripped:
        return Line(LineKind.BLANK, raw)
    return Line(LineKind.TEXT, raw)


@dataclass
class _ScanState:
    blocks: List[Block] = field(default_factory=list)
    paragraph: List[str] = field(default_factory=list)
    list_kind: Optional[LineKind] = None
    list_items: List[ListItem] = field(default_factory=list)
    in_code: bool = False
    code_lines: List[str] = field(default_factory=list)
    code_language: str = ""


def parse_markdown(text: str) -> Document:
    return assemble(segment(text))


def segment(text: str) -> Tuple[Block, ...]:
    """Group the lines of ``text`` into blocks in a single forward pass."""
    state = _ScanState()
    for raw in text.split("\n"):
        _consume(state, classify_line(raw, in_code=state.in_code))
    _flush_paragraph(state)
    _flush_list(state)
    if state.in_code:
        _flush_code(state)
    return tuple(state.blocks)


def assemble(blocks: Iterable[Block]) -> Document:
    collected = tuple(blocks)
    if not collected:
        collected = (empty_paragraph(),)
    return Document(blocks=collected)


def _consume(state: _ScanState, line: Line) -> None:
    if line.kind is LineKind.CODE:
        state.code_lines.append(line.raw)
        return
    if line.kind is not state.list_kind:
        _flush_list(state)

    if line.kind is LineKind.FENCE:
        if state.in_code:
            _flush_code(state)
        else:
            _flush_paragraph(state)
            state.in_code = True
            state.code_language = line.text
    elif line.kind is LineKind.HEADING:
        _flush_paragraph(state)
        state.blocks.append(Heading(level=line.level, runs=scan(line.text)))
    elif line.kind in (LineKind.BULLET, LineKind.ORDERED):
        _flush_paragraph(state)
        state.list_kind = line.kind
        state.list_items.append(ListItem(paragraph=Paragraph(runs=scan(line.text))))
    elif line.kind is LineKind.BLANK:
        _flush_paragraph(state)
    else:
        state.paragraph.append(line.raw)


def _flush_paragraph(state: _ScanState) -> None:
    text = "\n".join(state.paragraph).strip()
    state.paragraph = []
    if text:
        state.blocks.append(Paragraph(runs=scan(text)))


def _flush_list(state: _ScanState) -> None:
    if state.list_items:
        items = tuple(state.list_items)
        if state.list_kind is LineKind.ORDERED:
            state.blocks.append(OrderedList(items=items))
        else:
            state.blocks.append(BulletList(items=items))
    state.list_kind = None
    state.list_items = []


def _flush_code(state: _ScanState) -> None:
    state.blocks.append(
        CodeBlock(
            language=state.code_language or DEFAULT_CODE_LANGUAGE,
            code="\n".join(state.code_lines),
        )
    )
    state.in_code = False
    state.code_lines = []
    state.code_language = ""
