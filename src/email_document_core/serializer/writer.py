"""Document to MJML markup serialization.

The writer is total over well-formed documents: every node variant maps to
exactly one tag, and every emitted tag carries an identification class token
(``ebb-node-<id>``) inside its ``css-class`` attribute so a rendered element
can be mapped back to the node that produced it.
"""

from html import escape
from typing import Dict, List, Optional

from email_document_core.model.conditions import NodeFilter, include_all
from email_document_core.model.types import (
    CONTENT_NODE_TYPES,
    SELF_CLOSING_NODE_TYPES,
    Document,
    HeadAttributes,
    Node,
)
from email_document_core.shared import SerializerConfig, get_logger

CSS_CLASS_ATTRIBUTE = "css-class"


def node_class_token(node_id: str, prefix: str = "ebb-node-") -> str:
    """Identification class token for a node id."""
    return f"{prefix}{node_id}"


def strip_node_class_tokens(css_class: str, prefix: str = "ebb-node-") -> str:
    """Remove identification tokens from a css-class value."""
    return " ".join(token for token in css_class.split() if not token.startswith(prefix))


class MarkupWriter:
    """Serializes a document into MJML markup.

    Attributes render sorted by key for byte-stable output across
    re-serialization of unchanged nodes.
    """

    def __init__(
        self,
        config: Optional[SerializerConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or SerializerConfig()
        self.logger = get_logger(__name__, correlation_id, "markup_writer")

    def write(self, doc: Document, include: Optional[NodeFilter] = None) -> str:
        """Serialize a document.

        Args:
            doc: Document to serialize
            include: Predicate deciding whether a conditional node is emitted;
                defaults to including every node

        Returns:
            MJML markup string
        """
        include = include or include_all
        lines: List[str] = ["<mjml>"]
        self._write_head(doc.head_attributes, lines)
        self._write_node(doc.body, 1, lines, include, is_root=True)
        lines.append("</mjml>")

        markup = "\n".join(lines)
        self.logger.debug("Document serialized", extra={"markup_length": len(markup)})
        return markup

    def _pad(self, depth: int) -> str:
        return self.config.indent * depth

    def _render_attributes(self, attributes: Dict[str, str], node_id: Optional[str] = None) -> str:
        rendered = dict(attributes)
        prefix = self.config.node_class_prefix

        css_class = strip_node_class_tokens(rendered.pop(CSS_CLASS_ATTRIBUTE, ""), prefix)
        if node_id is not None and self.config.emit_node_ids:
            css_class = f"{css_class} {node_class_token(node_id, prefix)}".strip()

        parts = [f'{key}="{escape(str(value), quote=True)}"' for key, value in sorted(rendered.items())]
        if css_class:
            parts.append(f'{CSS_CLASS_ATTRIBUTE}="{escape(css_class, quote=True)}"')

        return "".join(f" {part}" for part in parts)

    def _write_head(self, head: HeadAttributes, lines: List[str]) -> None:
        pad = self._pad(1)
        inner = self._pad(2)
        lines.append(f"{pad}<mj-head>")

        for font in head.fonts:
            attrs = self._render_attributes({"name": font.name, "href": font.href})
            lines.append(f"{inner}<mj-font{attrs} />")

        if head.default_styles:
            lines.append(f"{inner}<mj-attributes>")
            for tag, styles in head.default_styles.items():
                attrs = self._render_attributes(styles)
                lines.append(f"{self._pad(3)}<{tag}{attrs} />")
            lines.append(f"{inner}</mj-attributes>")

        if head.preview_text or self.config.include_empty_preview:
            lines.append(f"{inner}<mj-preview>{escape(head.preview_text, quote=False)}</mj-preview>")

        lines.append(f"{pad}</mj-head>")

    def _write_node(
        self,
        node: Node,
        depth: int,
        lines: List[str],
        include: NodeFilter,
        is_root: bool = False,
    ) -> None:
        if not is_root and not include(node):
            return

        pad = self._pad(depth)
        tag = node.type.tag
        attrs = self._render_attributes(node.attributes, node.id)

        if node.type in SELF_CLOSING_NODE_TYPES:
            lines.append(f"{pad}<{tag}{attrs} />")
        elif node.type in CONTENT_NODE_TYPES:
            lines.append(f"{pad}<{tag}{attrs}>{node.html_content or ''}</{tag}>")
        elif not node.children:
            lines.append(f"{pad}<{tag}{attrs}></{tag}>")
        else:
            lines.append(f"{pad}<{tag}{attrs}>")
            for child in node.children:
                self._write_node(child, depth + 1, lines, include)
            lines.append(f"{pad}</{tag}>")


def document_to_markup(
    doc: Document,
    include: Optional[NodeFilter] = None,
    config: Optional[SerializerConfig] = None,
) -> str:
    """Serialize a document to MJML markup.

    Examples:
        >>> markup = document_to_markup(create_default_document())
        >>> markup.startswith('<mjml>')
        True
    """
    return MarkupWriter(config).write(doc, include)
