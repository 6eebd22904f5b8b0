"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer

from metamark.config import Settings, load_config
from metamark.core.errors import MetaMarkError
from metamark.core.export import render, write_doc
from metamark.core.models import CodeBlock, Comment, Component, Diagram, Document, Heading, ListBlock, MathBlock
from metamark.core.parse import discover_files, parse_file


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and apply the log level."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("metamark").setLevel(settings.log_level)
    return settings


def _diagnostic(path: Path, err: MetaMarkError) -> str:
    """Format an error as '<path>:<line>:<column>: <message>' (or '<path>: <message>')."""
    return f"{path}:{err}" if err.line is not None else f"{path}: {err}"


def _files(path: str) -> list[Path]:
    p = Path(path)
    if not p.exists():
        _fail(f"No such file or directory: {path}")
    files = discover_files(p)
    if not files:
        _fail(f"No .mmk/.md files found at {path}")
    return files


def _parse(path: Path, settings: Settings) -> Document:
    try:
        return parse_file(path, settings.max_depth, settings.strict_metadata)
    except MetaMarkError as e:
        _fail(_diagnostic(path, e))
    except OSError as e:
        _fail(f"Cannot read {path}", e)


def _outline(blocks, depth: int = 0) -> Iterator[str]:
    """Yield one indented line per structural block."""
    pad = "  " * depth
    for block in blocks:
        if isinstance(block, Heading):
            yield f"{pad}{'  ' * (block.level - 1)}h{block.level} {block.content}"
        elif isinstance(block, Component):
            yield f"{pad}component {block.name}"
            yield from _outline(block.content, depth + 1)
        elif isinstance(block, ListBlock):
            kind = "ordered" if block.ordered else "unordered"
            yield f"{pad}{kind} list ({len(block.items)} items)"
            for item in block.items:
                yield from _outline(item.content, depth + 1)
        elif isinstance(block, Diagram):
            yield f"{pad}diagram {block.kind.value}"
        elif isinstance(block, CodeBlock):
            yield f"{pad}code {block.language or '(none)'}"
        elif isinstance(block, MathBlock):
            yield f"{pad}math"
        elif isinstance(block, Comment):
            yield f"{pad}comment"


def parse_cmd(
    path: Annotated[str, typer.Argument(help="MetaMark file to parse")],
    indent: Annotated[Optional[int], typer.Option("--indent", help="JSON indent; 0 = compact")] = None,
    ):
    """Parse a document and print its tree as JSON."""
    settings = _settings(overrides={"json_indent": indent})
    doc = _parse(Path(path), settings)
    typer.echo(render(doc, "json", settings.json_indent), nl=False)


def check_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to validate")],
    strict: Annotated[Optional[bool], typer.Option("--strict-metadata/--lenient-metadata", help="Reject lossy frontmatter values")] = None,
    ):
    """Parse every document and report the first error in each."""
    settings = _settings(overrides={"strict_metadata": strict})
    failed = 0
    files = _files(path)
    for f in files:
        try:
            parse_file(f, settings.max_depth, settings.strict_metadata)
        except MetaMarkError as e:
            failed += 1
            typer.echo(_diagnostic(f, e), err=True)
            continue
        except OSError as e:
            failed += 1
            typer.echo(f"{f}: cannot read ({e})", err=True)
            continue
        typer.echo(f"ok: {f}")
    typer.echo(f"Checked {len(files)} document(s): {failed} failed")
    if failed:
        raise typer.Exit(1)


def export_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to export")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    fmt: Annotated[Optional[str], typer.Option("--format", help="json or mmk")] = None,
    ):
    """Write one json/mmk file per document, mirroring source sub-directories."""
    settings = _settings(overrides={"output_dir": out, "output_format": fmt})
    root = Path(path)
    base = root if root.is_dir() else root.parent
    output_dir = Path(settings.output_dir)

    results = []
    for f in _files(path):
        doc = _parse(f, settings)
        try:
            out_path = write_doc(doc, f.relative_to(base), output_dir, settings.output_format, settings.json_indent)
        except (OSError, ValueError) as e:
            _fail(f"Export failed for {f}", e)
        results.append((f, out_path))

    for src, out_path in results:
        typer.echo(f"  {src} -> {out_path}")
    typer.echo(f"Exported {len(results)} document(s) to {output_dir}/")


def info_cmd(
    path: Annotated[str, typer.Argument(help="MetaMark file to describe")],
    ):
    """Show frontmatter keys and a structural outline."""
    settings = _settings()
    doc = _parse(Path(path), settings)

    typer.echo("Metadata:")
    if doc.metadata is None or not len(doc.metadata):
        typer.echo("  (none)")
    else:
        for key in doc.metadata.keys():
            typer.echo(f"  {key}: {doc.metadata[key]}")

    typer.echo("Outline:")
    lines = list(_outline(doc.blocks))
    for line in lines or ["(empty)"]:
        typer.echo(f"  {line}")
