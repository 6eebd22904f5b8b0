"""Inline run parsing (text, emphasis, code, links, math) and trailing annotations"""

from metamark.core.cursor import TokenCursor
from metamark.core.errors import ParserError
from metamark.core.models import Annotation, Bold, Code, InlineMath, Italic, Link, Text
from metamark.core.scanner import Token, TokenKind


INLINE_KINDS = frozenset({
    TokenKind.text,
    TokenKind.whitespace,
    TokenKind.bold,
    TokenKind.italic,
    TokenKind.inline_code,
    TokenKind.link,
    TokenKind.inline_math,
    TokenKind.block_math,
    TokenKind.annotation,
})

# Kinds that may open a paragraph at block level (leading whitespace never does)
PARAGRAPH_START_KINDS = INLINE_KINDS - {TokenKind.whitespace, TokenKind.block_math}

ANNOTATION_SEPARATOR = ": "


def parse_annotation(token: Token) -> Annotation:
    """Split '@[kind: content]' on the first ': '; a missing separator is fatal."""
    body = token.text[2:-1]
    kind, sep, content = body.partition(ANNOTATION_SEPARATOR)
    if not sep:
        raise ParserError(
            f"Invalid annotation {token.text!r}: expected '@[kind: content]'",
            token.line, token.column,
        )
    return Annotation(kind=kind, content=content)


def parse_link(text: str) -> Link:
    """Split '[text](url)' once on the literal '](' sequence."""
    label, _, url = text.partition("](")
    return Link(text=label[1:], url=url[:-1])


def _span_node(token: Token):
    """Build the node for an already-delimited span token."""
    text = token.text
    if token.kind is TokenKind.bold:
        return Bold(inner=Text(value=text[2:-2]))
    if token.kind is TokenKind.italic:
        return Italic(inner=Text(value=text[1:-1]))
    if token.kind is TokenKind.inline_code:
        return Code(value=text[1:-1])
    if token.kind is TokenKind.link:
        return parse_link(text)
    if token.kind is TokenKind.block_math:
        return InlineMath(value=text[2:-2])
    if token.kind is TokenKind.inline_math:
        return InlineMath(value=text[1:-1])
    raise ParserError(f"Unexpected {token.kind.value} token in inline content", token.line, token.column)


def parse_inline_run(cursor: TokenCursor, lead: tuple = ()) -> tuple[tuple, tuple[Annotation, ...]]:
    """Consume inline tokens up to and including the next newline.

    Returns (inline nodes, annotations), with any lead nodes first. Adjacent text
    and whitespace coalesce into one Text node; whitespace before the first node
    or at the end of the line is dropped. Stops without consuming at end of input
    or at any token that is not inline content.
    """
    nodes: list = list(lead)
    annotations: list[Annotation] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            nodes.append(Text(value="".join(pending)))
            pending.clear()

    while cursor.at(*INLINE_KINDS):
        token = cursor.advance()
        if token.kind in (TokenKind.text, TokenKind.whitespace):
            if pending or nodes or token.kind is TokenKind.text:
                pending.append(token.text)
        elif token.kind is TokenKind.annotation:
            annotations.append(parse_annotation(token))
        else:
            flush()
            nodes.append(_span_node(token))

    if pending:
        value = "".join(pending).rstrip(" \t")
        pending.clear()
        if value:
            nodes.append(Text(value=value))

    if cursor.at(TokenKind.newline):
        cursor.advance()
    return tuple(nodes), tuple(annotations)
