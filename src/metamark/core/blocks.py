"""Recursive-descent block parser: token stream -> Document"""

from typing import Optional

from metamark.core.cursor import TokenCursor
from metamark.core.errors import ParserError
from metamark.core.inline import INLINE_KINDS, PARAGRAPH_START_KINDS, parse_annotation, parse_inline_run
from metamark.core.metadata import resolve_metadata
from metamark.core.models import (
    CodeBlock,
    Comment,
    Component,
    Diagram,
    DiagramKind,
    Document,
    Heading,
    InlineMath,
    ListBlock,
    ListItem,
    MathBlock,
    Metadata,
    Paragraph,
)
from metamark.core.scanner import Token, TokenKind


DEFAULT_MAX_DEPTH = 64

LIST_MARKERS = (TokenKind.unordered_list_marker, TokenKind.ordered_list_marker)
FENCES = (TokenKind.code_fence_start, TokenKind.code_fence_end)
SPACING = (TokenKind.newline, TokenKind.whitespace)


def _describe(kind: TokenKind) -> str:
    return kind.value.replace("_", " ")


def parse_component_header(marker: str) -> tuple[str, dict[str, str]]:
    """Split '[[component: name k="v" ...]]' into (name, attributes).

    The payload splits on its first space into name and attribute tail; the tail
    splits on whitespace, each piece on its first '=', with '"' stripped from the
    value. Pieces without '=' are ignored and quoted values cannot contain spaces.
    """
    payload = marker[marker.index(":") + 1:-2].strip()
    name, _, tail = payload.partition(" ")
    attributes: dict[str, str] = {}
    for attr in tail.split():
        key, sep, value = attr.partition("=")
        if sep:
            attributes[key.strip()] = value.strip('"')
    return name, attributes


def list_level(marker: Token) -> int:
    """Nesting level of a list marker: leading spaces // 2. Tabs are rejected."""
    text = marker.text
    indent = text[: len(text) - len(text.lstrip(" \t"))]
    if "\t" in indent:
        raise ParserError("Tab indentation before a list marker is not supported", marker.line, marker.column)
    return len(indent) // 2


class BlockParser:
    """Dispatches on the current token to one routine per block construct.

    Each routine consumes tokens through its own terminator and returns one block.
    Components and nested lists count towards max_depth.
    """

    def __init__(self, cursor: TokenCursor, max_depth: int = DEFAULT_MAX_DEPTH, strict_metadata: bool = False):
        self.cursor = cursor
        self.max_depth = max_depth
        self.strict_metadata = strict_metadata

    def parse(self) -> Document:
        metadata = None
        if self.cursor.at(TokenKind.frontmatter_delimiter):
            metadata = self._parse_frontmatter()
        blocks = self._parse_blocks(depth=0, container=None)
        return Document(metadata=metadata, blocks=tuple(blocks))

    # --- containers ---

    def _parse_blocks(self, depth: int, container: Optional[Token]) -> list:
        """Parse blocks until end of input, or until [[/component]] inside a component."""
        cursor = self.cursor
        blocks = []
        while not cursor.at_end():
            token = cursor.current
            if token.kind is TokenKind.component_end:
                if container is None:
                    raise ParserError("Unexpected [[/component]] outside a component", token.line, token.column)
                return blocks
            if token.kind in SPACING:
                cursor.advance()
                continue
            blocks.append(self._parse_block(depth))

        if container is not None:
            raise ParserError("Unterminated component: missing [[/component]]", container.line, container.column)
        return blocks

    def _parse_block(self, depth: int):
        token = self.cursor.current
        kind = token.kind
        if kind is TokenKind.heading:
            return self._parse_heading()
        if kind in LIST_MARKERS:
            return self._parse_list(depth)
        if kind is TokenKind.component_start:
            return self._parse_component(depth)
        if kind in FENCES:
            return self._parse_code_block()
        if kind is TokenKind.comment:
            return self._parse_comment()
        if kind is TokenKind.block_math:
            return self._parse_block_math()
        if kind in PARAGRAPH_START_KINDS:
            return self._parse_paragraph()
        raise ParserError(f"Unexpected {_describe(kind)} token", token.line, token.column)

    def _check_depth(self, depth: int, token: Token) -> None:
        if depth >= self.max_depth:
            raise ParserError(f"Nesting exceeds the maximum depth of {self.max_depth}", token.line, token.column)

    # --- constructs ---

    def _parse_frontmatter(self) -> Metadata:
        cursor = self.cursor
        opener = cursor.advance()
        parts: list[str] = []
        while True:
            token = cursor.current
            if token is None:
                raise ParserError("Unterminated frontmatter: missing closing '---'", opener.line, opener.column)
            if token.kind is TokenKind.frontmatter_delimiter:
                cursor.advance()
                break
            if token.kind not in (TokenKind.text, TokenKind.whitespace, TokenKind.newline):
                raise ParserError(f"Unexpected {_describe(token.kind)} token in frontmatter", token.line, token.column)
            parts.append(cursor.advance().text)
        return resolve_metadata("".join(parts), strict=self.strict_metadata)

    def _parse_heading(self) -> Heading:
        cursor = self.cursor
        marker = cursor.advance()
        parts: list[str] = []
        annotations = []
        while cursor.at(*INLINE_KINDS):
            token = cursor.advance()
            if token.kind is TokenKind.annotation:
                annotations.append(parse_annotation(token))
            else:
                parts.append(token.text)
        if cursor.at(TokenKind.newline):
            cursor.advance()
        return Heading(
            level=marker.text.count("#"),
            content="".join(parts).strip(),
            annotations=tuple(annotations),
        )

    def _parse_paragraph(self) -> Paragraph:
        content, annotations = parse_inline_run(self.cursor)
        return Paragraph(content=content, annotations=annotations)

    def _parse_block_math(self):
        """'$$...$$' alone on its line is a Math block; followed by more inline content it opens a paragraph."""
        token = self.cursor.advance()
        math = InlineMath(value=token.text[2:-2])
        content, annotations = parse_inline_run(self.cursor, lead=(math,))
        if len(content) == 1 and not annotations:
            return MathBlock(value=math.value)
        return Paragraph(content=content, annotations=annotations)

    def _parse_comment(self) -> Comment:
        token = self.cursor.advance()
        return Comment(value=token.text.strip()[2:].strip())

    def _parse_code_block(self):
        cursor = self.cursor
        opener = cursor.advance()
        language = opener.text[3:].strip() or None
        parts: list[str] = []
        while True:
            if cursor.at_end():
                raise ParserError("Unterminated code fence: missing closing ```", opener.line, opener.column)
            token = cursor.advance()
            if token.kind is TokenKind.code_fence_end:
                break
            parts.append(token.text)

        content = "".join(parts)
        diagram = DiagramKind.from_language(language)
        if diagram is not None:
            return Diagram(kind=diagram, content=content)
        return CodeBlock(language=language, content=content)

    def _parse_component(self, depth: int) -> Component:
        cursor = self.cursor
        opener = cursor.current
        self._check_depth(depth, opener)
        cursor.advance()
        name, attributes = parse_component_header(opener.text)
        content = self._parse_blocks(depth + 1, container=opener)
        cursor.advance()  # [[/component]]
        return Component(name=name, attributes=attributes, content=tuple(content))

    def _parse_list(self, depth: int) -> ListBlock:
        """Parse a contiguous run of same-kind markers at one indentation level.

        Deeper markers open a nested list appended to the previous item; a
        shallower marker, a different marker kind, or any non-list token ends it.
        Blank lines between items belong to the list.
        """
        cursor = self.cursor
        first = cursor.current
        self._check_depth(depth, first)
        kind = first.kind
        level = list_level(first)
        items: list[ListItem] = []

        while not cursor.at_end():
            if cursor.at(TokenKind.newline):
                cursor.advance()
                continue
            if not cursor.at(*LIST_MARKERS):
                break
            marker = cursor.current
            marker_level = list_level(marker)
            if marker_level < level:
                break
            if marker_level > level:
                nested = self._parse_list(depth + 1)
                last = items[-1]
                items[-1] = ListItem(content=last.content + (nested,), level=last.level)
                continue
            if marker.kind is not kind:
                break
            cursor.advance()
            content, annotations = parse_inline_run(cursor)
            blocks = (Paragraph(content=content, annotations=annotations),) if content or annotations else ()
            items.append(ListItem(content=blocks, level=level))

        return ListBlock(items=tuple(items), ordered=kind is TokenKind.ordered_list_marker)
