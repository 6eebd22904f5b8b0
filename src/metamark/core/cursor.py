"""Single-token look-ahead cursor over a token stream"""

from typing import Iterable, Iterator, Optional

from metamark.core.errors import ParserError
from metamark.core.scanner import Token, TokenKind


class TokenCursor:
    """Pulls tokens on demand and exposes exactly one token of look-ahead.

    Owned by one parse call; nothing is shared between cursors.
    """

    def __init__(self, tokens: Iterable[Token]):
        self._tokens: Iterator[Token] = iter(tokens)
        self._current: Optional[Token] = next(self._tokens, None)
        self._last: Optional[Token] = None

    @property
    def current(self) -> Optional[Token]:
        return self._current

    @property
    def last(self) -> Optional[Token]:
        """The most recently consumed token, if any."""
        return self._last

    def at_end(self) -> bool:
        return self._current is None

    def at(self, *kinds: TokenKind) -> bool:
        """True when the current token is one of kinds."""
        return self._current is not None and self._current.kind in kinds

    def advance(self) -> Token:
        """Consume and return the current token."""
        token = self._current
        if token is None:
            line, column = (self._last.line, self._last.column) if self._last else (1, 1)
            raise ParserError("Unexpected end of input", line, column)
        self._last = token
        self._current = next(self._tokens, None)
        return token
