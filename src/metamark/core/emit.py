"""Render a Document back into MetaMark source text"""

from typing import Optional

import yaml

from metamark.core.inline import PARAGRAPH_START_KINDS
from metamark.core.models import (
    Annotation,
    Bold,
    Code,
    CodeBlock,
    Comment,
    Component,
    Diagram,
    Document,
    Heading,
    InlineMath,
    Italic,
    Link,
    ListBlock,
    MathBlock,
    Paragraph,
    SecureBlock,
    Text,
)
from metamark.core.scanner import TokenKind, scan


# A leading $$..$$ followed by more content also parses as a paragraph
LINE_PARAGRAPH_KINDS = PARAGRAPH_START_KINDS | {TokenKind.block_math}


def emit_inline(node) -> str:
    if isinstance(node, Text):
        return node.value
    if isinstance(node, Bold):
        return f"**{emit_inline(node.inner)}**"
    if isinstance(node, Italic):
        return f"*{emit_inline(node.inner)}*"
    if isinstance(node, Code):
        return f"`{node.value}`"
    if isinstance(node, Link):
        return f"[{node.text}]({node.url})"
    if isinstance(node, InlineMath):
        # '$...$' cannot span lines
        return f"$${node.value}$$" if "\n" in node.value else f"${node.value}$"
    raise ValueError(f"Cannot emit inline node {type(node).__name__}")


def _with_annotations(text: str, annotations: tuple[Annotation, ...]) -> str:
    tail = " ".join(f"@[{a.kind}: {a.content}]" for a in annotations)
    return f"{text} {tail}" if text and tail else text or tail


def _emit_list(block: ListBlock) -> list[str]:
    lines: list[str] = []
    for number, item in enumerate(block.items, start=1):
        marker = f"{number}. " if block.ordered else "- "
        first, rest = "", item.content
        if rest and isinstance(rest[0], Paragraph):
            first, rest = emit_block(rest[0]), rest[1:]
        lines.append(f"{'  ' * item.level}{marker}{first}")
        for child in rest:
            lines.append(emit_block(child))
    return lines


def _opens_paragraph(text: str) -> bool:
    """True when text placed at the start of a line scans back as a paragraph."""
    token = next(scan(text), None)
    return token is not None and token.kind in LINE_PARAGRAPH_KINDS


def _emit_sequence(blocks, header: Optional[str] = None) -> list[str]:
    """Render sibling blocks, one chunk each.

    A paragraph whose text would rescan as another block at line start can only
    come from the tail of a component marker line, so it is appended to the
    preceding header or [[/component]] chunk.
    """
    chunks = [header] if header is not None else []
    after_marker = header is not None
    for block in blocks:
        text = emit_block(block)
        if isinstance(block, Paragraph) and not _opens_paragraph(text):
            if not after_marker:
                raise ValueError(f"Paragraph {text!r} cannot start a line")
            chunks[-1] = f"{chunks[-1]} {text}"
        else:
            chunks.append(text)
        after_marker = isinstance(block, Component)
    return chunks


def emit_block(block) -> str:
    """Render one block (and its children) without a trailing newline."""
    if isinstance(block, Heading):
        return _with_annotations(f"{'#' * block.level} {block.content}", block.annotations)
    if isinstance(block, Paragraph):
        text = "".join(emit_inline(node) for node in block.content)
        return _with_annotations(text, block.annotations)
    if isinstance(block, Component):
        attrs = "".join(f' {k}="{v}"' for k, v in block.attributes.items())
        lines = _emit_sequence(block.content, header=f"[[component: {block.name}{attrs}]]")
        lines.append("[[/component]]")
        return "\n".join(lines)
    if isinstance(block, (CodeBlock, Diagram)):
        language = block.kind.value if isinstance(block, Diagram) else (block.language or "")
        body = block.content if not block.content or block.content.endswith("\n") else block.content + "\n"
        return f"```{language}\n{body}```"
    if isinstance(block, ListBlock):
        return "\n".join(_emit_list(block))
    if isinstance(block, Comment):
        return f"%% {block.value}"
    if isinstance(block, MathBlock):
        return f"$${block.value}$$"
    if isinstance(block, SecureBlock):
        raise ValueError("SecureBlock has no MetaMark surface syntax")
    raise ValueError(f"Cannot emit block {type(block).__name__}")


def emit_metamark(doc: Document) -> str:
    """Return MetaMark text for doc: YAML frontmatter (if any) followed by blank-line separated blocks."""
    body = "\n\n".join(_emit_sequence(doc.blocks))
    if doc.metadata is None:
        return f"{body}\n" if body else ""
    header = yaml.safe_dump(dict(doc.metadata.data), default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n\n{body}\n" if body else f"---\n{header}---\n"
