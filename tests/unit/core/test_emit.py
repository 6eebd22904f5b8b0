"""Unit tests for core/emit.py and core/export.py"""

import pytest

from metamark.core.emit import emit_block, emit_inline, emit_metamark
from metamark.core.export import render, write_doc
from metamark.core.models import (
    Annotation,
    Bold,
    CodeBlock,
    Component,
    Document,
    EncryptionInfo,
    Heading,
    InlineMath,
    Link,
    Metadata,
    Paragraph,
    SecureBlock,
    Text,
)
from metamark.core.parse import parse_document


def test_emit_heading_with_annotation():
    """Headings render with '#' marks and trailing annotations."""
    block = Heading(level=2, content="Title", annotations=(Annotation(kind="id", content="t"),))
    assert emit_block(block) == "## Title @[id: t]"


def test_emit_inline_nodes():
    """Inline nodes render back to their delimited source form."""
    para = Paragraph(content=(
        Text(value="a "),
        Bold(inner=Text(value="b")),
        Text(value=" "),
        Link(text="c", url="d"),
        Text(value=" "),
        InlineMath(value="e"),
    ))
    assert emit_block(para) == "a **b** [c](d) $e$"


def test_multiline_math_uses_double_dollars():
    """Inline math spanning lines needs the '$$' form."""
    assert emit_inline(InlineMath(value="a\nb")) == "$$a\nb$$"


def test_emit_component():
    """Components wrap their children between header and end marker."""
    block = Component(name="card", attributes={"theme": "dark"}, content=(Heading(level=1, content="H"),))
    assert emit_block(block) == '[[component: card theme="dark"]]\n# H\n[[/component]]'


def test_emit_code_block_adds_final_newline():
    """The closing fence always starts its own line."""
    assert emit_block(CodeBlock(language="py", content="x = 1")) == "```py\nx = 1\n```"
    assert emit_block(CodeBlock(content="")) == "```\n```"


def test_emit_secure_block_rejected():
    """Encrypted blocks have no source syntax to emit."""
    block = SecureBlock(content=b"x", encryption_info=EncryptionInfo(algorithm="a", key_id="k", nonce=b"n"))
    with pytest.raises(ValueError, match="SecureBlock"):
        emit_block(block)


def test_emit_metamark_frontmatter():
    """Metadata is written back as a YAML frontmatter block."""
    doc = Document(metadata=Metadata(data={"title": "T"}), blocks=(Heading(level=1, content="H"),))
    assert emit_metamark(doc) == "---\ntitle: T\n---\n\n# H\n"


def test_emit_empty_document():
    """An empty document emits nothing."""
    assert emit_metamark(Document()) == ""


def test_sample_reparses_to_same_tree(sample_text):
    """Emitting and re-parsing the sample yields an equal tree."""
    doc = parse_document(sample_text)
    assert parse_document(emit_metamark(doc)) == doc


def test_nested_list_reparses(nested_list_text):
    """Nested list indentation survives emit and re-parse."""
    doc = parse_document(nested_list_text)
    assert parse_document(emit_metamark(doc)) == doc


# --- export ---

def test_render_formats():
    """render supports json and mmk, and rejects anything else."""
    doc = parse_document("# T\n")
    assert render(doc, "json").endswith("}\n")
    assert render(doc, "mmk") == "# T\n"
    with pytest.raises(ValueError, match="Unsupported export format"):
        render(doc, "html")


def test_write_doc_mirrors_source_tree(tmp_path):
    """write_doc places output under output_dir/<source parent>/<stem>.<fmt>."""
    doc = parse_document("# T\n")
    out = write_doc(doc, tmp_path.joinpath("guide", "intro.mmk").relative_to(tmp_path), tmp_path / "dist", "mmk")
    assert out == tmp_path / "dist" / "guide" / "intro.mmk"
    assert out.read_text(encoding="utf-8") == "# T\n"


# --- paragraphs that only parse mid-line ---

@pytest.mark.parametrize("text", [
    "[[component: a]]\n[[/component]] # not a heading\n",
    "[[component: a]] - not a list\n[[/component]]\n",
    "[[component: a]]\n[[component: b]]\n[[/component]] %% not a comment\n[[/component]]\n",
])
def test_marker_line_paragraph_reparses(text):
    """Paragraphs that followed a component marker stay on that marker's line."""
    doc = parse_document(text)
    assert parse_document(emit_metamark(doc)) == doc


def test_marker_line_paragraph_emitted_after_end_marker():
    """The paragraph text rides on the [[/component]] line."""
    doc = parse_document("[[component: a]]\n[[/component]] # not a heading\n")
    assert [b.type for b in doc.blocks] == ["component", "paragraph"]
    assert emit_metamark(doc) == "[[component: a]]\n[[/component]] # not a heading\n"


def test_paragraph_that_cannot_start_a_line():
    """A stand-alone paragraph that would rescan as a heading is rejected."""
    doc = Document(blocks=(Paragraph(content=(Text(value="# x"),)),))
    with pytest.raises(ValueError, match="cannot start a line"):
        emit_metamark(doc)
