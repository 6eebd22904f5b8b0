"""Library entry point: raw MetaMark text -> Document, plus file discovery"""

from pathlib import Path

from metamark.core.blocks import DEFAULT_MAX_DEPTH, BlockParser
from metamark.core.cursor import TokenCursor
from metamark.core.models import Document
from metamark.core.scanner import Scanner
from metamark.core.utils.logger import get_logger


logger = get_logger(__name__)

MMK_EXTENSIONS = {'.mmk', '.md'}


def parse_document(raw_text: str, max_depth: int = DEFAULT_MAX_DEPTH, strict_metadata: bool = False) -> Document:
    """Parse a whole MetaMark document in one pass.

    Raises LexError, ParserError or MetadataError (all MetaMarkError) on the first
    malformed construct; no partial tree is ever returned.
    """
    logger.debug("Parsing document (%d chars)", len(raw_text))
    parser = BlockParser(
        TokenCursor(Scanner(raw_text)),
        max_depth=max_depth,
        strict_metadata=strict_metadata,
    )
    doc = parser.parse()
    logger.debug("Parsed %d top-level block(s)", len(doc.blocks))
    return doc


def discover_files(path: Path) -> list[Path]:
    """Return sorted .mmk/.md files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MMK_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MMK_EXTENSIONS)


def parse_file(path: Path, max_depth: int = DEFAULT_MAX_DEPTH, strict_metadata: bool = False) -> Document:
    """Read a UTF-8 file and parse it with parse_document."""
    raw = path.read_text(encoding='utf-8')
    return parse_document(raw, max_depth=max_depth, strict_metadata=strict_metadata)
