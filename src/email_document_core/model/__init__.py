"""Document model and node factories.

Key Components:
    NodeType: Closed enumeration of the 13 MJML node variants
    Node: Tree element with attributes, children and optional content
    Document: Head attributes plus one root node
    check_child: Structural legality of a parent/child pairing
    create_*: Variant factories producing immediately legal subtrees
"""

from .conditions import condition_filter, evaluate_condition, include_all
from .factory import (
    column_width,
    create_body,
    create_button,
    create_column,
    create_column_layout,
    create_columns_section,
    create_default_document,
    create_divider,
    create_hero,
    create_image,
    create_node,
    create_raw,
    create_section,
    create_social,
    create_social_element,
    create_spacer,
    create_text,
    create_wrapper,
    generate_id,
)
from .types import (
    ALLOWED_CHILDREN,
    CONTAINER_NODE_TYPES,
    CONTENT_NODE_TYPES,
    DOCUMENT_VERSION,
    MAX_COLUMNS,
    SELF_CLOSING_NODE_TYPES,
    VALID_NODE_TAGS,
    ConditionalRule,
    ConditionOperator,
    Document,
    FontDeclaration,
    HeadAttributes,
    LegalityViolation,
    Node,
    NodeType,
    check_child,
    is_allowed_child,
)

__all__ = [
    "condition_filter",
    "evaluate_condition",
    "include_all",
    "column_width",
    "create_body",
    "create_button",
    "create_column",
    "create_column_layout",
    "create_columns_section",
    "create_default_document",
    "create_divider",
    "create_hero",
    "create_image",
    "create_node",
    "create_raw",
    "create_section",
    "create_social",
    "create_social_element",
    "create_spacer",
    "create_text",
    "create_wrapper",
    "generate_id",
    "ALLOWED_CHILDREN",
    "CONTAINER_NODE_TYPES",
    "CONTENT_NODE_TYPES",
    "DOCUMENT_VERSION",
    "MAX_COLUMNS",
    "SELF_CLOSING_NODE_TYPES",
    "VALID_NODE_TAGS",
    "ConditionalRule",
    "ConditionOperator",
    "Document",
    "FontDeclaration",
    "HeadAttributes",
    "LegalityViolation",
    "Node",
    "NodeType",
    "check_child",
    "is_allowed_child",
]
