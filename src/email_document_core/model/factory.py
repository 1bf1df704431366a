"""Node factory functions for every document variant.

Each factory applies MJML defaults appropriate to its variant so that a freshly
created subtree is legal under the structural rules as soon as it exists.
"""

import secrets
from typing import Dict, Iterable, Optional, Sequence

from email_document_core.model.types import (
    MAX_COLUMNS,
    Document,
    HeadAttributes,
    Node,
    NodeType,
)

ID_BYTES = 6  # 8 URL-safe characters

DEFAULT_PRIMARY_COLOR = "#01A8AB"
DEFAULT_BODY_BACKGROUND = "#f4f4f4"


def generate_id() -> str:
    """Generate a fresh node identifier.

    Identifiers are random, so collisions within a process are treated as
    impossible rather than checked for.
    """
    return secrets.token_urlsafe(ID_BYTES)


def create_node(
    node_type: NodeType,
    children: Optional[Iterable[Node]] = None,
    attributes: Optional[Dict[str, str]] = None,
    html_content: Optional[str] = None,
) -> Node:
    """Create a node of any variant with a fresh identifier."""
    return Node(
        id=generate_id(),
        type=node_type,
        attributes=dict(attributes or {}),
        children=list(children or []),
        html_content=html_content,
    )


def _merge(defaults: Dict[str, str], overrides: Optional[Dict[str, str]]) -> Dict[str, str]:
    merged = dict(defaults)
    if overrides:
        merged.update(overrides)
    return merged


def column_width(count: int) -> str:
    """Even width share for one of ``count`` columns, e.g. ``33.33%``."""
    if not 1 <= count <= MAX_COLUMNS:
        raise ValueError(f"column count must be between 1 and {MAX_COLUMNS}")
    share = f"{100 / count:.2f}".rstrip("0").rstrip(".")
    return f"{share}%"


def create_body(
    children: Optional[Iterable[Node]] = None,
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    return create_node(
        NodeType.BODY,
        children,
        _merge({"background-color": DEFAULT_BODY_BACKGROUND}, attributes),
    )


def create_section(
    columns: Optional[Sequence[Node]] = None,
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    """Create a section, distributing width evenly over columns that lack one.

    Raises:
        ValueError: If more than the maximum number of columns is given
    """
    columns = list(columns if columns is not None else [create_column()])
    if len(columns) > MAX_COLUMNS:
        raise ValueError(f"a section holds at most {MAX_COLUMNS} columns")

    if len(columns) > 1:
        width = column_width(len(columns))
        for column in columns:
            column.attributes.setdefault("width", width)

    return create_node(
        NodeType.SECTION,
        columns,
        _merge({"padding": "20px 0"}, attributes),
    )


def create_column(
    children: Optional[Iterable[Node]] = None,
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    return create_node(NodeType.COLUMN, children, attributes)


def create_columns_section(
    count: int,
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    """Create an ``count``-column section with empty, evenly sized columns."""
    width = column_width(count)
    return create_section(
        [create_column(attributes={"width": width}) for _ in range(count)],
        attributes,
    )


def create_column_layout(
    widths: Sequence[str],
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    """Create a section whose empty columns use the given widths."""
    return create_section(
        [create_column(attributes={"width": width}) for width in widths],
        attributes,
    )


def create_wrapper(
    sections: Optional[Iterable[Node]] = None,
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    return create_node(
        NodeType.WRAPPER,
        sections,
        _merge({"padding": "0"}, attributes),
    )


def create_text(
    html: str = "<p>Your text here</p>",
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    return create_node(
        NodeType.TEXT,
        attributes=_merge(
            {
                "font-size": "14px",
                "color": "#333333",
                "line-height": "1.5",
                "padding": "10px 25px",
            },
            attributes,
        ),
        html_content=html,
    )


def create_button(
    label: str = "Click here",
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    return create_node(
        NodeType.BUTTON,
        attributes=_merge(
            {
                "href": "#",
                "background-color": DEFAULT_PRIMARY_COLOR,
                "color": "#ffffff",
                "font-size": "14px",
                "border-radius": "4px",
                "inner-padding": "12px 24px",
                "padding": "10px 25px",
            },
            attributes,
        ),
        html_content=label,
    )


def create_raw(html: str = "", attributes: Optional[Dict[str, str]] = None) -> Node:
    return create_node(NodeType.RAW, attributes=attributes, html_content=html)


def create_image(attributes: Optional[Dict[str, str]] = None) -> Node:
    return create_node(
        NodeType.IMAGE,
        attributes=_merge(
            {
                "src": "https://via.placeholder.com/600x300",
                "alt": "",
                "padding": "10px 25px",
            },
            attributes,
        ),
    )


def create_divider(attributes: Optional[Dict[str, str]] = None) -> Node:
    return create_node(
        NodeType.DIVIDER,
        attributes=_merge(
            {
                "border-color": "#e5e7eb",
                "border-width": "1px",
                "border-style": "solid",
                "padding": "10px 25px",
            },
            attributes,
        ),
    )


def create_spacer(attributes: Optional[Dict[str, str]] = None) -> Node:
    return create_node(NodeType.SPACER, attributes=_merge({"height": "20px"}, attributes))


def create_social(
    elements: Optional[Iterable[Node]] = None,
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    return create_node(
        NodeType.SOCIAL,
        elements,
        _merge(
            {"mode": "horizontal", "align": "center", "icon-size": "24px"},
            attributes,
        ),
    )


def create_social_element(
    name: str,
    href: str = "#",
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    return create_node(
        NodeType.SOCIAL_ELEMENT,
        attributes=_merge({"name": name, "href": href}, attributes),
    )


def create_hero(
    children: Optional[Iterable[Node]] = None,
    attributes: Optional[Dict[str, str]] = None,
) -> Node:
    return create_node(
        NodeType.HERO,
        children,
        _merge(
            {
                "mode": "fluid-height",
                "background-color": "#1a1a2e",
                "padding": "40px 20px",
            },
            attributes,
        ),
    )


def create_default_document() -> Document:
    """Canonical empty state: one section, one column, one text node."""
    return Document(
        body=create_body([create_section([create_column([create_text()])])]),
        head_attributes=HeadAttributes(),
    )
