"""Render the document model as Atlassian Document Format (ADF)."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .markdown_parser import parse_markdown
from .model import (
    Block,
    CodeBlock,
    Document,
    Heading,
    InlineRun,
    ListBlock,
    ListItem,
    Mark,
    Paragraph,
)

ADFNode = Dict[str, Any]

ADF_MARKS = {
    Mark.BOLD: "strong",
    Mark.ITALIC: "em",
    Mark.CODE: "code",
}


def text_to_adf(text: str) -> ADFNode:
    return render_document(parse_markdown(text))


def render_document(doc: Document) -> ADFNode:
    return {
        "type": "doc",
        "version": doc.version,
        "content": [_dispatch_block(block) for block in doc.blocks],
    }


def _dispatch_block(block: Block) -> ADFNode:
    if isinstance(block, Heading):
        return {
            "type": "heading",
            "attrs": {"level": block.level},
            "content": _render_runs(block.runs),
        }
    if isinstance(block, Paragraph):
        return _render_paragraph(block)
    if isinstance(block, ListBlock):
        return {
            "type": "orderedList" if block.ordered else "bulletList",
            "content": [_render_list_item(item) for item in block.items],
        }
    if isinstance(block, CodeBlock):
        return _render_code_block(block)
    raise TypeError(f"Unsupported block type: {type(block).__name__}")


def _render_paragraph(paragraph: Paragraph) -> ADFNode:
    return {"type": "paragraph", "content": _render_runs(paragraph.runs)}


def _render_list_item(item: ListItem) -> ADFNode:
    return {"type": "listItem", "content": [_render_paragraph(item.paragraph)]}


def _render_code_block(block: CodeBlock) -> ADFNode:
    content: List[ADFNode] = []
    if block.code:
        content.append({"type": "text", "text": block.code})
    return {
        "type": "codeBlock",
        "attrs": {"language": block.language},
        "content": content,
    }


def _render_runs(runs: Iterable[InlineRun]) -> List[ADFNode]:
    nodes: List[ADFNode] = []
    for run in runs:
        # ADF rejects empty text nodes
        if not run.text:
            continue
        node: ADFNode = {"type": "text", "text": run.text}
        if run.mark is not Mark.NONE:
            node["marks"] = [{"type": ADF_MARKS[run.mark]}]
        nodes.append(node)
    return nodes


def adf_to_text(node: Any) -> str:
    """Flatten an ADF node (or list of nodes) into plain text joined by spaces."""
    if not node:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return " ".join(adf_to_text(child) for child in node)
    if not isinstance(node, dict):
        return ""
    if node.get("type") == "text":
        return node.get("text") or ""
    if node.get("content"):
        return adf_to_text(node["content"])
    return ""
