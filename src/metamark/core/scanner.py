"""Positional tokenizer: an ordered rule table evaluated at each cursor position"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from metamark.core.errors import LexError


class TokenKind(str, Enum):
    """Lexical classes produced by the scanner."""
    heading               = "heading"
    frontmatter_delimiter = "frontmatter_delimiter"
    component_start       = "component_start"
    component_end         = "component_end"
    annotation            = "annotation"
    comment               = "comment"
    code_fence_start      = "code_fence_start"
    code_fence_end        = "code_fence_end"
    bold                  = "bold"
    italic                = "italic"
    inline_code           = "inline_code"
    link                  = "link"
    inline_math           = "inline_math"
    block_math            = "block_math"
    unordered_list_marker = "unordered_list_marker"
    ordered_list_marker   = "ordered_list_marker"
    text                  = "text"
    whitespace            = "whitespace"
    newline               = "newline"
    invalid               = "invalid"


class ScanMode(str, Enum):
    """block: document text; frontmatter: between the two leading '---' lines; code: inside a fence."""
    block       = "block"
    frontmatter = "frontmatter"
    code        = "code"


@dataclass(frozen=True)
class Token:
    """One lexeme and the 1-based line/column where it starts."""
    kind:   TokenKind
    text:   str
    line:   int
    column: int


@dataclass(frozen=True)
class Rule:
    """A lexical rule; line_start rules only apply at column 1."""
    kind:       TokenKind
    pattern:    re.Pattern
    priority:   int
    line_start: bool = False


_BREAK = r'(?:\r\n?|\n)'
_LINE_END = r'(?:\r\n?|\n|\Z)'
_CONTROL = r'\x00-\x08\x0b\x0c\x0e-\x1f\x7f'
_LINE_BREAK_RE = re.compile(r'\r\n?|\n')


def _rule(kind: TokenKind, pattern: str, priority: int, line_start: bool = False) -> Rule:
    return Rule(kind, re.compile(pattern), priority, line_start)


BLOCK_RULES: tuple[Rule, ...] = (
    _rule(TokenKind.code_fence_start,      r'```[A-Za-z0-9_+.-]+[ \t]*' + _LINE_END, 3, line_start=True),
    _rule(TokenKind.code_fence_end,        r'```[ \t]*' + _LINE_END, 3, line_start=True),
    _rule(TokenKind.frontmatter_delimiter, r'---[ \t]*' + _LINE_END, 2, line_start=True),
    _rule(TokenKind.component_start,       r'\[\[component:[^\]\r\n]+\]\]', 2),
    _rule(TokenKind.component_end,         r'\[\[/component\]\]', 2),
    _rule(TokenKind.annotation,            r'@\[[^\]\r\n]+\]', 2),
    _rule(TokenKind.comment,               r'[ \t]*%%(?:[ \t][^\r\n]*)?(?=[\r\n]|\Z)', 2, line_start=True),
    _rule(TokenKind.bold,                  r'\*\*[^*\r\n]+\*\*', 2),
    _rule(TokenKind.italic,                r'\*[^*\r\n]+\*', 2),
    _rule(TokenKind.inline_code,           r'`[^`\r\n]+`', 2),
    _rule(TokenKind.link,                  r'\[[^\]\r\n]+\]\([^)\r\n]+\)', 2),
    _rule(TokenKind.block_math,            r'\$\$[^$]+\$\$', 2),
    _rule(TokenKind.inline_math,           r'\$[^$\r\n]+\$', 2),
    _rule(TokenKind.unordered_list_marker, r'[ \t]*- ', 2, line_start=True),
    _rule(TokenKind.ordered_list_marker,   r'[ \t]*\d+\. ', 2, line_start=True),
    _rule(TokenKind.heading,               r'#{1,6} ', 2, line_start=True),
    _rule(TokenKind.whitespace,            r'[ \t]+', 2),
    _rule(TokenKind.newline,               _BREAK + r'(?:[ \t]*' + _BREAK + r')*', 2),
    _rule(TokenKind.text,                  r'[^ \t\r\n*`\[$@' + _CONTROL + r']+|[*`\[$@]', 1),
    _rule(TokenKind.invalid,               r'[' + _CONTROL + r']', 0),
)

FRONTMATTER_RULES: tuple[Rule, ...] = (
    _rule(TokenKind.frontmatter_delimiter, r'---[ \t]*' + _LINE_END, 2, line_start=True),
    _rule(TokenKind.whitespace,            r'[ \t]+', 2),
    _rule(TokenKind.newline,               _BREAK + r'(?:[ \t]*' + _BREAK + r')*', 2),
    _rule(TokenKind.text,                  r'[^ \t\r\n' + _CONTROL + r'][^\r\n' + _CONTROL + r']*', 1),
    _rule(TokenKind.invalid,               r'[' + _CONTROL + r']', 0),
)

# Fenced content is opaque: whole lines until a bare closing fence.
CODE_RULES: tuple[Rule, ...] = (
    _rule(TokenKind.code_fence_end,        r'```[ \t]*' + _LINE_END, 3, line_start=True),
    _rule(TokenKind.newline,               _BREAK, 2),
    _rule(TokenKind.text,                  r'[^\r\n]+', 1),
)

MODE_RULES: dict[ScanMode, tuple[Rule, ...]] = {
    ScanMode.block:       BLOCK_RULES,
    ScanMode.frontmatter: FRONTMATTER_RULES,
    ScanMode.code:        CODE_RULES,
}


def select_rule(rules: tuple[Rule, ...], text: str, pos: int) -> Optional[tuple[TokenKind, str]]:
    """Return (kind, lexeme) of the winning rule at pos, or None if nothing matches.

    Higher priority wins regardless of length; equal priority falls back to the
    longer match; a full tie keeps the earlier rule in the table.
    """
    at_line_start = pos == 0 or text[pos - 1] in "\r\n"
    best: Optional[tuple[tuple[int, int], TokenKind, str]] = None
    for rule in rules:
        if rule.line_start and not at_line_start:
            continue
        m = rule.pattern.match(text, pos)
        if m is None or m.end() == pos:
            continue
        key = (rule.priority, m.end() - pos)
        if best is None or key > best[0]:
            best = (key, rule.kind, m.group())
    return None if best is None else (best[1], best[2])


class Scanner:
    """Single-use, pull-based tokenizer over one input string.

    Each call to next_token() consumes exactly one lexeme and reports the position
    before it was consumed. Scanning never skips input: characters no rule accepts
    raise LexError.
    """

    def __init__(self, text: str):
        self._text = text
        self._pos = 0
        self._line = 1
        self._column = 1
        self._mode = ScanMode.block

    @property
    def mode(self) -> ScanMode:
        return self._mode

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    def next_token(self) -> Optional[Token]:
        """Return the next token, or None once the input is exhausted."""
        if self._pos >= len(self._text):
            return None

        selected = select_rule(MODE_RULES[self._mode], self._text, self._pos)
        if selected is None:
            raise LexError(f"Unrecognized input {self._text[self._pos]!r}", self._line, self._column)
        kind, lexeme = selected
        if kind is TokenKind.invalid:
            raise LexError(f"Invalid character U+{ord(lexeme):04X}", self._line, self._column)

        token = Token(kind, lexeme, self._line, self._column)
        self._advance(lexeme)
        self._switch_mode(token)
        return token

    def _advance(self, lexeme: str) -> None:
        self._pos += len(lexeme)
        breaks = _LINE_BREAK_RE.findall(lexeme)
        if breaks:
            self._line += len(breaks)
            self._column = len(_LINE_BREAK_RE.split(lexeme)[-1]) + 1
        else:
            self._column += len(lexeme)

    def _switch_mode(self, token: Token) -> None:
        if token.kind in (TokenKind.code_fence_start, TokenKind.code_fence_end):
            # At block level every fence opens a code block; inside one only a bare fence closes it.
            self._mode = ScanMode.block if self._mode is ScanMode.code else ScanMode.code
            return
        if token.kind is not TokenKind.frontmatter_delimiter:
            return
        if self._mode is ScanMode.frontmatter:
            self._mode = ScanMode.block
        elif token.line == 1 and token.column == 1:
            # Only a delimiter opening the document starts frontmatter.
            self._mode = ScanMode.frontmatter


def scan(text: str) -> Iterator[Token]:
    """Lazily yield every token of text in source order."""
    yield from Scanner(text)
