"""Immutable document tree produced by a single parse call"""

from enum import Enum
from typing import Annotated, Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


MetaValue = Union[bool, float, str, list[Any], dict[str, Any]]


class _Node(BaseModel):
    """Frozen, compared by value. Nodes holding a dict (Metadata, Component and
    their ancestors) are not hashable; treat those dicts as read-only."""
    model_config = ConfigDict(frozen=True, ser_json_bytes="base64", val_json_bytes="base64")


class Metadata(_Node):
    """Resolved frontmatter: string keys mapped to str/float/bool/list/dict values."""
    data: dict[str, MetaValue] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def keys(self):
        return self.data.keys()

    def __getitem__(self, key: str) -> MetaValue:
        return self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __len__(self) -> int:
        return len(self.data)


class Annotation(_Node):
    """A trailing @[kind: content] note attached to the block it follows."""
    kind:    str
    content: str


# --- inline ---

class Text(_Node):
    type: Literal["text"] = "text"
    value: str


class Bold(_Node):
    """Wraps exactly one inline node; emphasis does not nest further."""
    type: Literal["bold"] = "bold"
    inner: "Inline"


class Italic(_Node):
    """Wraps exactly one inline node; emphasis does not nest further."""
    type: Literal["italic"] = "italic"
    inner: "Inline"


class Code(_Node):
    type: Literal["code"] = "code"
    value: str


class Link(_Node):
    type: Literal["link"] = "link"
    text: str
    url:  str


class InlineMath(_Node):
    type: Literal["math"] = "math"
    value: str


Inline = Annotated[
    Union[Text, Bold, Italic, Code, Link, InlineMath],
    Field(discriminator="type"),
]


# --- blocks ---

class DiagramKind(str, Enum):
    """Diagram engines recognised from a fence language tag"""
    mermaid  = "mermaid"
    plantuml = "plantuml"
    graphviz = "graphviz"

    @classmethod
    def from_language(cls, language: Optional[str]) -> Optional["DiagramKind"]:
        """Map a fence language tag to a diagram kind, or None for ordinary code."""
        if not language:
            return None
        return DIAGRAM_LANGUAGES.get(language.lower())


DIAGRAM_LANGUAGES: dict[str, DiagramKind] = {
    "mermaid":  DiagramKind.mermaid,
    "plantuml": DiagramKind.plantuml,
    "puml":     DiagramKind.plantuml,
    "graphviz": DiagramKind.graphviz,
    "dot":      DiagramKind.graphviz,
}


class EncryptionInfo(_Node):
    algorithm: str
    key_id:    str
    nonce:     bytes


class Heading(_Node):
    type: Literal["heading"] = "heading"
    level:       int = Field(..., ge=1, le=6)
    content:     str
    annotations: tuple[Annotation, ...] = ()


class Paragraph(_Node):
    type: Literal["paragraph"] = "paragraph"
    content:     tuple[Inline, ...] = ()
    annotations: tuple[Annotation, ...] = ()


class Component(_Node):
    """Named, attributed container that owns its nested blocks."""
    type: Literal["component"] = "component"
    name:       str
    attributes: dict[str, str] = {}
    content:    tuple["Block", ...] = ()


class CodeBlock(_Node):
    type: Literal["code_block"] = "code_block"
    language: Optional[str] = None
    content:  str


class Diagram(_Node):
    type: Literal["diagram"] = "diagram"
    kind:    DiagramKind
    content: str


class SecureBlock(_Node):
    """Opaque encrypted region; never decrypted or produced by the parser."""
    type: Literal["secure_block"] = "secure_block"
    content:         bytes
    encryption_info: EncryptionInfo


class ListItem(_Node):
    content: tuple["Block", ...] = ()
    level:   int = Field(default=0, ge=0, description="Nesting depth from source indentation (2 spaces per level)")


class ListBlock(_Node):
    type: Literal["list"] = "list"
    items:   tuple[ListItem, ...] = ()
    ordered: bool = False


class Comment(_Node):
    type: Literal["comment"] = "comment"
    value: str


class MathBlock(_Node):
    type: Literal["math"] = "math"
    value: str


Block = Annotated[
    Union[Heading, Paragraph, Component, CodeBlock, Diagram, SecureBlock, ListBlock, Comment, MathBlock],
    Field(discriminator="type"),
]


class Document(_Node):
    """Root of the tree: optional frontmatter plus top-level blocks."""
    metadata: Optional[Metadata] = None
    blocks:   tuple[Block, ...] = ()

    def walk(self) -> Iterator[Any]:
        """Yield every block in document order, depth-first (list items are not yielded)."""
        stack = list(reversed(self.blocks))
        while stack:
            block = stack.pop()
            yield block
            if isinstance(block, Component):
                stack.extend(reversed(block.content))
            elif isinstance(block, ListBlock):
                for item in reversed(block.items):
                    stack.extend(reversed(item.content))


Bold.model_rebuild()
Italic.model_rebuild()
Component.model_rebuild()
ListItem.model_rebuild()
