"""Core document model for structured email documents.

The model mirrors the MJML document structure so that serialization is a
straight walk: ``Document -> MJML string -> HTML``. Nodes own their children
by value and carry no parent back-pointer; every traversal starts at the root.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

DOCUMENT_VERSION = 1
MAX_COLUMNS = 4


class NodeType(Enum):
    """Closed set of node variants, valued by their MJML tag name."""

    BODY = "mj-body"
    SECTION = "mj-section"
    COLUMN = "mj-column"
    WRAPPER = "mj-wrapper"
    HERO = "mj-hero"
    SOCIAL = "mj-social"
    TEXT = "mj-text"
    BUTTON = "mj-button"
    RAW = "mj-raw"
    IMAGE = "mj-image"
    DIVIDER = "mj-divider"
    SPACER = "mj-spacer"
    SOCIAL_ELEMENT = "mj-social-element"

    @property
    def tag(self) -> str:
        """MJML tag name for this variant."""
        return self.value

    @classmethod
    def from_tag(cls, tag: str) -> Optional["NodeType"]:
        """Look up a variant by tag name, returning None if unknown."""
        try:
            return cls(tag)
        except ValueError:
            return None


CONTAINER_NODE_TYPES: FrozenSet[NodeType] = frozenset({
    NodeType.BODY,
    NodeType.SECTION,
    NodeType.COLUMN,
    NodeType.WRAPPER,
    NodeType.HERO,
    NodeType.SOCIAL,
})

# Variants whose html_content is emitted as inner markup
CONTENT_NODE_TYPES: FrozenSet[NodeType] = frozenset({
    NodeType.TEXT,
    NodeType.BUTTON,
    NodeType.RAW,
})

SELF_CLOSING_NODE_TYPES: FrozenSet[NodeType] = frozenset({
    NodeType.IMAGE,
    NodeType.DIVIDER,
    NodeType.SPACER,
    NodeType.SOCIAL_ELEMENT,
})

VALID_NODE_TAGS: FrozenSet[str] = frozenset(node_type.value for node_type in NodeType)

_LEAF_CONTENT = frozenset({
    NodeType.TEXT,
    NodeType.BUTTON,
    NodeType.RAW,
    NodeType.IMAGE,
    NodeType.DIVIDER,
    NodeType.SPACER,
})

ALLOWED_CHILDREN: Dict[NodeType, FrozenSet[NodeType]] = {
    NodeType.BODY: frozenset({NodeType.SECTION, NodeType.WRAPPER, NodeType.HERO}),
    NodeType.WRAPPER: frozenset({NodeType.SECTION}),
    NodeType.SECTION: frozenset({NodeType.COLUMN}),
    NodeType.COLUMN: _LEAF_CONTENT | {NodeType.SOCIAL},
    NodeType.HERO: _LEAF_CONTENT,
    NodeType.SOCIAL: frozenset({NodeType.SOCIAL_ELEMENT}),
    NodeType.TEXT: frozenset(),
    NodeType.BUTTON: frozenset(),
    NodeType.RAW: frozenset(),
    NodeType.IMAGE: frozenset(),
    NodeType.DIVIDER: frozenset(),
    NodeType.SPACER: frozenset(),
    NodeType.SOCIAL_ELEMENT: frozenset(),
}


class ConditionOperator(Enum):
    """Comparison operators for conditional display rules."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"


@dataclass
class ConditionalRule:
    """Rule gating whether a node is emitted, e.g. ``{{plan}} equals pro``."""

    variable: str
    operator: ConditionOperator
    value: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.variable:
            raise ValueError("Condition variable cannot be empty")
        if not isinstance(self.operator, ConditionOperator):
            self.operator = ConditionOperator(self.operator)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "variable": self.variable,
            "operator": self.operator.value,
        }
        if self.value is not None:
            result["value"] = self.value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConditionalRule":
        value = data.get("value")
        return cls(
            variable=str(data["variable"]),
            operator=ConditionOperator(data["operator"]),
            value=None if value is None else str(value),
        )


@dataclass(eq=False)
class Node:
    """A single element of the document tree.

    Identity is the ``id``; two nodes are never compared structurally by the
    engine, so equality falls back to object identity.
    """

    id: str
    type: NodeType
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["Node"] = field(default_factory=list)
    html_content: Optional[str] = None
    condition: Optional[ConditionalRule] = None

    def __post_init__(self) -> None:
        """Validate node values."""
        if not self.id:
            raise ValueError("Node id cannot be empty")
        if not isinstance(self.type, NodeType):
            raise TypeError("Node type must be a NodeType member")

    @property
    def is_container(self) -> bool:
        return self.type in CONTAINER_NODE_TYPES

    @property
    def is_content(self) -> bool:
        return self.type in CONTENT_NODE_TYPES

    @property
    def is_self_closing(self) -> bool:
        return self.type in SELF_CLOSING_NODE_TYPES

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to its camelCase JSON shape."""
        result: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "attributes": dict(self.attributes),
            "children": [child.to_dict() for child in self.children],
        }
        if self.html_content is not None:
            result["htmlContent"] = self.html_content
        if self.condition is not None:
            result["condition"] = self.condition.to_dict()
        return result

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, type={self.type.value}, children={len(self.children)})"


@dataclass
class FontDeclaration:
    """Web font declared in the document head."""

    name: str
    href: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "href": self.href}


@dataclass
class HeadAttributes:
    """Document-level head data: default styles, fonts and preview text."""

    default_styles: Dict[str, Dict[str, str]] = field(default_factory=dict)
    fonts: List[FontDeclaration] = field(default_factory=list)
    preview_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "defaultStyles": {tag: dict(attrs) for tag, attrs in self.default_styles.items()},
            "fonts": [font.to_dict() for font in self.fonts],
            "previewText": self.preview_text,
        }


@dataclass
class Document:
    """The full editable unit: head attributes plus one root node."""

    body: Node
    head_attributes: HeadAttributes = field(default_factory=HeadAttributes)
    version: int = DOCUMENT_VERSION

    def __post_init__(self) -> None:
        """Validate document structure."""
        if self.version != DOCUMENT_VERSION:
            raise ValueError(f"Unsupported document version: {self.version}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert document to its camelCase JSON shape."""
        return {
            "version": self.version,
            "headAttributes": self.head_attributes.to_dict(),
            "body": self.body.to_dict(),
        }

    def snapshot(self) -> "Document":
        """Deep, independent copy; never an alias of this document."""
        return copy.deepcopy(self)


@dataclass
class LegalityViolation:
    """Describes an illegal parent/child pairing."""

    parent_type: NodeType
    child_type: NodeType
    reason: str

    def __str__(self) -> str:
        return self.reason


def is_allowed_child(parent_type: NodeType, child_type: NodeType) -> bool:
    """Check whether ``child_type`` may appear directly under ``parent_type``."""
    return child_type in ALLOWED_CHILDREN[parent_type]


def check_child(parent: Node, child: Node) -> Optional[LegalityViolation]:
    """Check structural legality of attaching ``child`` under ``parent``.

    Column capacity counts the existing children of ``parent``; callers moving
    a column within the same section must detach it first.

    Returns:
        LegalityViolation describing the problem, or None if legal
    """
    if not is_allowed_child(parent.type, child.type):
        return LegalityViolation(
            parent_type=parent.type,
            child_type=child.type,
            reason=f"{child.type.value} cannot be placed inside {parent.type.value}",
        )

    if parent.type == NodeType.SECTION and len(parent.children) >= MAX_COLUMNS:
        return LegalityViolation(
            parent_type=parent.type,
            child_type=child.type,
            reason=f"{parent.type.value} already holds {MAX_COLUMNS} columns",
        )

    return None
