"""Export pipeline: JSON tree encoding and output file writing"""

from pathlib import Path

from metamark.core.emit import emit_metamark
from metamark.core.models import Document


EXPORT_FORMATS = ('json', 'mmk')


def to_json(doc: Document, indent: int | None = 2) -> str:
    """Encode the full tree as JSON (bytes as base64); from_json reverses it exactly."""
    return doc.model_dump_json(indent=indent or None)


def from_json(text: str) -> Document:
    """Decode a tree previously written by to_json."""
    return Document.model_validate_json(text)


def render(doc: Document, fmt: str = 'json', indent: int | None = 2) -> str:
    """Return doc rendered as 'json' (tree) or 'mmk' (MetaMark source)."""
    if fmt == 'json':
        return to_json(doc, indent) + "\n"
    if fmt == 'mmk':
        return emit_metamark(doc)
    raise ValueError(f"Unsupported export format: {fmt!r} (expected one of {', '.join(EXPORT_FORMATS)})")


def write_doc(
    doc: Document,
    source: Path,
    output_dir: Path,
    fmt: str = 'json',
    indent: int | None = 2,
    ) -> Path:
    """Write a single document and return the output path.

    Output path mirrors the source directory structure:
      output_dir / source.parent / source.stem.{fmt}
    """
    dest_dir = output_dir / source.parent
    dest_dir.mkdir(parents=True, exist_ok=True)
    out_path = dest_dir / f"{source.stem}.{fmt}"
    out_path.write_text(render(doc, fmt, indent), encoding='utf-8')
    return out_path
