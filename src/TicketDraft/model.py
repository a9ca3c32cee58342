from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Tuple

SCHEMA_VERSION = 1


class Mark(str, Enum):
    NONE = "none"
    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"


@dataclass(frozen=True)
class InlineRun:
    text: str
    mark: Mark = Mark.NONE


@dataclass(frozen=True)
class Block:
    """Base class for block-level nodes."""


@dataclass(frozen=True)
class Paragraph(Block):
    runs: Tuple[InlineRun, ...]

    @property
    def text(self) -> str:
        return plain_text(self.runs)


@dataclass(frozen=True)
class Heading(Block):
    level: int
    runs: Tuple[InlineRun, ...]

    @property
    def text(self) -> str:
        return plain_text(self.runs)


@dataclass(frozen=True)
class CodeBlock(Block):
    language: str
    code: str


@dataclass(frozen=True)
class ListItem:
    paragraph: Paragraph

    @property
    def text(self) -> str:
        return self.paragraph.text


@dataclass(frozen=True)
class ListBlock(Block):
    items: Tuple[ListItem, ...]
    ordered: ClassVar[bool] = False


@dataclass(frozen=True)
class BulletList(ListBlock):
    ordered: ClassVar[bool] = False


@dataclass(frozen=True)
class OrderedList(ListBlock):
    ordered: ClassVar[bool] = True


@dataclass(frozen=True)
class Document:
    blocks: Tuple[Block, ...]
    version: int = field(default=SCHEMA_VERSION)


def empty_paragraph() -> Paragraph:
    return Paragraph(runs=(InlineRun(""),))


def plain_text(runs: Tuple[InlineRun, ...]) -> str:
    """Concatenate run texts, dropping marks."""
    return "".join(run.text for run in runs)
