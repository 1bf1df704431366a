"""Validation boundary between untyped JSON and the document model.

Everything that arrives as plain JSON (model responses, persisted design
JSON) is coerced here into a ``Document``. Structural problems that cannot be
defaulted raise ``DocumentValidationError``; everything else is defaulted
field by field.
"""

from typing import Any, Dict, List, Optional, Set

from email_document_core.model.factory import generate_id
from email_document_core.model.types import (
    DOCUMENT_VERSION,
    ConditionalRule,
    Document,
    FontDeclaration,
    HeadAttributes,
    Node,
    NodeType,
)
from email_document_core.shared import RecoveryError, get_logger
from email_document_core.tree.mutation import count_nodes

logger = get_logger(__name__, component="document_validation")

DEFAULT_MAX_DEPTH = 32


class DocumentValidationError(RecoveryError):
    """Raised when JSON data cannot be coerced into a document."""


def _is_supported_version(version: Any) -> bool:
    if isinstance(version, bool) or not isinstance(version, (int, float)):
        return False
    return version == DOCUMENT_VERSION


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _coerce_attributes(data: Any) -> Dict[str, str]:
    if not isinstance(data, dict):
        return {}
    return {str(key): _stringify(value) for key, value in data.items() if value is not None}


def _coerce_head(data: Any) -> HeadAttributes:
    if not isinstance(data, dict):
        return HeadAttributes()

    styles: Dict[str, Dict[str, str]] = {}
    raw_styles = data.get("defaultStyles")
    if isinstance(raw_styles, dict):
        for tag, attrs in raw_styles.items():
            if isinstance(attrs, dict):
                styles[str(tag)] = _coerce_attributes(attrs)

    fonts: List[FontDeclaration] = []
    raw_fonts = data.get("fonts")
    if isinstance(raw_fonts, list):
        for font in raw_fonts:
            if isinstance(font, dict) and font.get("name"):
                fonts.append(FontDeclaration(
                    name=str(font["name"]),
                    href=str(font.get("href") or ""),
                ))

    preview = data.get("previewText")
    preview_text = "" if preview is None else str(preview)

    return HeadAttributes(default_styles=styles, fonts=fonts, preview_text=preview_text)


def _coerce_condition(data: Any) -> Optional[ConditionalRule]:
    if not isinstance(data, dict):
        return None
    try:
        return ConditionalRule.from_dict(data)
    except (KeyError, ValueError, TypeError):
        logger.warning("Invalid condition dropped", extra={"condition": repr(data)[:100]})
        return None


def _coerce_node(data: Any, seen_ids: Set[str], depth: int, max_depth: int) -> Node:
    if depth > max_depth:
        raise DocumentValidationError(f"Document nesting exceeds {max_depth} levels")
    if not isinstance(data, dict):
        raise DocumentValidationError(f"Invalid node: expected an object, got {type(data).__name__}")

    node_type = NodeType.from_tag(data.get("type")) if isinstance(data.get("type"), str) else None
    if node_type is None:
        raise DocumentValidationError(f'Invalid node type: "{data.get("type")}"')

    node_id = data.get("id")
    node_id = str(node_id) if node_id not in (None, "") else ""
    if not node_id or node_id in seen_ids:
        node_id = generate_id()
    seen_ids.add(node_id)

    raw_children = data.get("children")
    children = raw_children if isinstance(raw_children, list) else []

    html = data.get("htmlContent")

    return Node(
        id=node_id,
        type=node_type,
        attributes=_coerce_attributes(data.get("attributes")),
        children=[_coerce_node(child, seen_ids, depth + 1, max_depth) for child in children],
        html_content=None if html is None else str(html),
        condition=_coerce_condition(data.get("condition")),
    )


def validate_document_data(data: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> Document:
    """Coerce parsed JSON into a document.

    Node identifiers are kept when present and unique; missing or repeated
    ones are replaced.

    Args:
        data: Parsed JSON value
        max_depth: Deepest node level accepted below the body

    Returns:
        Validated Document

    Raises:
        DocumentValidationError: If the version, body, a node type or the nesting depth
            is invalid
    """
    if not isinstance(data, dict):
        raise DocumentValidationError("Document must be a JSON object")

    # Absent version means the current one; an explicit null is rejected
    version = data.get("version", DOCUMENT_VERSION)
    if not _is_supported_version(version):
        raise DocumentValidationError(
            f"Invalid document version: expected {DOCUMENT_VERSION}, got {version!r}"
        )

    body = data.get("body")
    if not isinstance(body, dict):
        raise DocumentValidationError("Missing or invalid body")
    if body.get("type") != NodeType.BODY.value:
        raise DocumentValidationError(
            f'body.type must be "{NodeType.BODY.value}", got "{body.get("type")}"'
        )

    try:
        root = _coerce_node(body, set(), 0, max_depth)
    except RecursionError:
        raise DocumentValidationError("Document nesting is too deep") from None

    document = Document(
        body=root,
        head_attributes=_coerce_head(data.get("headAttributes")),
        version=DOCUMENT_VERSION,
    )
    logger.debug("Document data validated", extra={"node_count": count_nodes(document.body)})
    return document


def regenerate_ids(node: Node) -> Node:
    """Give every node in the subtree a brand-new identifier, in place."""
    node.id = generate_id()
    for child in node.children:
        regenerate_ids(child)
    return node
