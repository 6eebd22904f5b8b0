"""Error taxonomy for the text-to-tree pipeline: lex, parse, and metadata failures"""

from typing import Any, Optional


class MetaMarkError(ValueError):
    """Base class for every fatal error raised while parsing a document."""
    kind = "error"

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.line}:{self.column}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly diagnostic (kind, line, column, message)."""
        return {"kind": self.kind, "line": self.line, "column": self.column, "message": self.message}


class LexError(MetaMarkError):
    """The scanner met input that no lexical rule accepts."""
    kind = "lex"

    def __init__(self, message: str, line: int, column: int):
        super().__init__(message, line, column)


class ParserError(MetaMarkError):
    """The token stream violates the block or inline grammar."""
    kind = "parse"

    def __init__(self, message: str, line: int, column: int):
        super().__init__(message, line, column)


class MetadataError(MetaMarkError):
    """Frontmatter could not be read as YAML or TOML (or failed strict conversion)."""
    kind = "metadata"

    def __init__(self, message: str):
        super().__init__(message)
