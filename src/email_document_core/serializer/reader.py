"""MJML markup to document parsing.

The reader never fails: any string produces some legal document. Unknown tags
are guessed or flattened, illegal nesting is coerced into the nearest legal
shape, and each such decision is recorded as a diagnostic. Identifiers are
always regenerated, so a parsed document is never an alias of its source.
"""

import re
import time
from collections import deque
from dataclasses import dataclass, field
from html import escape
from typing import Any, Dict, List, Optional, Set

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from email_document_core.model.factory import create_default_document, create_node
from email_document_core.model.types import (
    CONTENT_NODE_TYPES,
    MAX_COLUMNS,
    SELF_CLOSING_NODE_TYPES,
    Document,
    FontDeclaration,
    HeadAttributes,
    Node,
    NodeType,
    is_allowed_child,
)
from email_document_core.serializer.writer import CSS_CLASS_ATTRIBUTE, strip_node_class_tokens
from email_document_core.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    DiagnosticsMixin,
    SerializerConfig,
    get_logger,
)

# Containers the reader may synthesize to make a child legal
_WRAPPING_TYPES = (NodeType.SECTION, NodeType.COLUMN, NodeType.SOCIAL)

_SKIPPED_HEAD_CLASS = "mj-class"

_NEWLINE = re.compile(r"\n")


def _wrapping_chain(parent_type: NodeType, child_type: NodeType) -> Optional[List[NodeType]]:
    """Shortest list of synthesized containers placing ``child_type`` under ``parent_type``."""
    queue = deque([(parent_type, [])])
    seen = {parent_type}
    while queue:
        current, chain = queue.popleft()
        for candidate in _WRAPPING_TYPES:
            if candidate in seen or not is_allowed_child(current, candidate):
                continue
            if is_allowed_child(candidate, child_type):
                return chain + [candidate]
            seen.add(candidate)
            queue.append((candidate, chain + [candidate]))
    return None


@dataclass
class ReadResult(DiagnosticsMixin):
    """Document produced by the reader plus every coercion it applied."""

    document: Document = field(default_factory=create_default_document)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    processing_time_ms: float = 0.0
    correlation_id: Optional[str] = None

    @property
    def coercion_count(self) -> int:
        return len(self.get_diagnostics_by_severity(DiagnosticSeverity.WARNING))


class MarkupReader:
    """Builds a document from MJML markup with best-effort coercion."""

    def __init__(
        self,
        config: Optional[SerializerConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or SerializerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "markup_reader")

        self._synthetic: Set[str] = set()
        self._result = ReadResult(correlation_id=correlation_id)
        self._source = ""
        self._line_starts: List[int] = [0]

    def read(self, text: Any) -> ReadResult:
        """Parse markup into a document.

        Args:
            text: Markup string; None and non-strings are tolerated

        Returns:
            ReadResult whose document is always legal
        """
        start_time = time.time()
        self._synthetic = set()
        self._result = ReadResult(correlation_id=self.correlation_id)

        if text is None:
            text = ""
        elif not isinstance(text, str):
            text = str(text)

        try:
            self._result.document = self._build(text)
        except Exception as e:
            # Never-fail: fall back to the canonical empty document
            self.logger.exception("Markup parsing failed", extra={"input_length": len(text)})
            self._result.document = create_default_document()
            self._result.add_diagnostic(
                DiagnosticSeverity.ERROR,
                f"Markup parsing failed, default document used: {e}",
                "markup_reader",
                details={"exception_type": type(e).__name__},
            )

        self._result.processing_time_ms = (time.time() - start_time) * 1000
        self.logger.info(
            "Markup parsed",
            extra={
                "input_length": len(text),
                "coercions": self._result.coercion_count,
            },
        )
        return self._result

    def _warn(self, message: str, **details: Any) -> None:
        self._result.add_diagnostic(
            DiagnosticSeverity.WARNING, message, "markup_reader", details=details or None
        )

    def _build(self, text: str) -> Document:
        self._source = text
        self._line_starts = [0] + [match.end() for match in _NEWLINE.finditer(text)]
        soup = BeautifulSoup(text, "html.parser", multi_valued_attributes=None)
        root = soup.find("mjml") or soup
        if root is soup:
            self._result.add_diagnostic(
                DiagnosticSeverity.INFO, "No <mjml> root tag found", "markup_reader"
            )

        head_tag = root.find("mj-head")
        head = self._read_head(head_tag) if head_tag is not None else HeadAttributes()

        body_tag = root.find("mj-body")
        if body_tag is not None:
            body = create_node(NodeType.BODY, attributes=self._read_attributes(body_tag))
            contents = body_tag.contents
        else:
            self._warn("No <mj-body> tag found, top-level content used as body")
            body = create_node(NodeType.BODY, attributes={"background-color": "#f4f4f4"})
            contents = [
                item for item in root.contents
                if not (isinstance(item, Tag) and item.name == "mj-head")
            ]

        for item in contents:
            for node in self._convert(item):
                self._attach(body, node)

        return Document(body=body, head_attributes=head)

    # -- head -------------------------------------------------------------

    def _read_head(self, head_tag: Tag) -> HeadAttributes:
        head = HeadAttributes()

        for item in head_tag.find_all(True, recursive=False):
            if item.name == "mj-font":
                name = item.get("name")
                if name:
                    head.fonts.append(FontDeclaration(name=name, href=item.get("href", "")))
                else:
                    self._warn("mj-font without a name dropped")
            elif item.name == "mj-attributes":
                for style in item.find_all(True, recursive=False):
                    if style.name == _SKIPPED_HEAD_CLASS:
                        self._warn("mj-class declaration dropped", name=style.get("name"))
                        continue
                    head.default_styles.setdefault(style.name, {}).update(
                        {key: value for key, value in style.attrs.items()}
                    )
            elif item.name == "mj-preview":
                head.preview_text = item.get_text().strip()
            else:
                self._result.add_diagnostic(
                    DiagnosticSeverity.INFO,
                    f"Unsupported head tag <{item.name}> ignored",
                    "markup_reader",
                )

        return head

    # -- body -------------------------------------------------------------

    def _read_attributes(self, tag: Tag) -> Dict[str, str]:
        attributes = {key: "" if value is None else str(value) for key, value in tag.attrs.items()}

        if CSS_CLASS_ATTRIBUTE in attributes:
            remaining = strip_node_class_tokens(
                attributes[CSS_CLASS_ATTRIBUTE], self.config.node_class_prefix
            )
            if remaining:
                attributes[CSS_CLASS_ATTRIBUTE] = remaining
            else:
                del attributes[CSS_CLASS_ATTRIBUTE]

        return attributes

    def _convert_children(self, tag: Tag) -> List[Node]:
        nodes: List[Node] = []
        for item in tag.contents:
            nodes.extend(self._convert(item))
        return nodes

    def _convert(self, item: Any) -> List[Node]:
        """Convert one markup item into zero or more nodes."""
        if isinstance(item, Comment):
            return []

        if isinstance(item, NavigableString):
            stripped = str(item).strip()
            if not stripped:
                return []
            self._warn("Stray text wrapped in mj-text", text=stripped[:50])
            return [create_node(NodeType.TEXT, html_content=escape(stripped, quote=False))]

        if not isinstance(item, Tag):
            return []

        node_type = NodeType.from_tag(item.name)

        if node_type is None:
            if item.name.startswith("mj-"):
                self._warn(f"Unknown tag <{item.name}> flattened", tag=item.name)
                return self._convert_children(item)
            self._warn(f"HTML tag <{item.name}> kept as mj-raw", tag=item.name)
            return [create_node(NodeType.RAW, html_content=str(item))]

        if node_type == NodeType.BODY:
            self._warn("Nested mj-body flattened")
            return self._convert_children(item)

        attributes = self._read_attributes(item)

        if node_type in CONTENT_NODE_TYPES:
            return [create_node(node_type, attributes=attributes,
                                html_content=self._inner_markup(item))]

        if node_type in SELF_CLOSING_NODE_TYPES:
            node = create_node(node_type, attributes=attributes)
            hoisted = self._convert_children(item)
            if hoisted:
                self._warn(f"Content inside <{item.name}> moved after it", tag=item.name)
            return [node] + hoisted

        node = create_node(node_type, attributes=attributes)
        for child in self._convert_children(item):
            self._attach(node, child)
        return [node]

    def _inner_markup(self, tag: Tag) -> str:
        """Markup between a tag's open and close exactly as written in the source.

        Falls back to the re-serialized contents when the tag cannot be located
        in the source, for instance when the parser closed it implicitly.
        """
        raw = self._source_slice(tag)
        return tag.decode_contents() if raw is None else raw

    def _source_slice(self, tag: Tag) -> Optional[str]:
        if tag.sourceline is None or tag.sourcepos is None:
            return None
        if tag.sourceline > len(self._line_starts):
            return None

        text = self._source
        start = self._line_starts[tag.sourceline - 1] + tag.sourcepos
        if text[start:start + len(tag.name) + 1].lower() != f"<{tag.name}":
            return None

        # End of the opening tag; '>' may appear inside quoted attribute values
        quote = None
        open_end = -1
        for i in range(start + 1, len(text)):
            ch = text[i]
            if quote is not None:
                if ch == quote:
                    quote = None
            elif ch in "\"'":
                quote = ch
            elif ch == ">":
                open_end = i + 1
                break
        if open_end == -1:
            return None
        if text[open_end - 2] == "/":
            return ""

        pattern = re.compile(r"<(/?)" + re.escape(tag.name) + r"(?=[\s/>])", re.IGNORECASE)
        depth = 1
        for match in pattern.finditer(text, open_end):
            depth += -1 if match.group(1) else 1
            if depth == 0:
                return text[open_end:match.start()]
        return None

    def _attach(self, parent: Node, child: Node) -> None:
        """Append ``child`` to ``parent``, coercing illegal structure."""
        if is_allowed_child(parent.type, child.type):
            if parent.type == NodeType.SECTION and len(parent.children) >= MAX_COLUMNS:
                self._warn("Column beyond the maximum merged into the last column")
                for grandchild in child.children:
                    self._attach(parent.children[-1], grandchild)
                return
            parent.children.append(child)
            return

        chain = _wrapping_chain(parent.type, child.type)
        if chain is None:
            if child.children:
                self._warn(
                    f"{child.type.value} not allowed in {parent.type.value}, children flattened"
                )
                for grandchild in child.children:
                    self._attach(parent, grandchild)
            else:
                self._warn(f"{child.type.value} not allowed in {parent.type.value}, dropped")
            return

        target = parent
        for wrapper_type in chain:
            target = self._wrapper_under(target, wrapper_type)
        target.children.append(child)

    def _wrapper_under(self, parent: Node, wrapper_type: NodeType) -> Node:
        """Reuse the trailing synthesized wrapper or create a new one."""
        last = parent.children[-1] if parent.children else None
        if last is not None and last.type == wrapper_type and last.id in self._synthetic:
            return last

        if (
            wrapper_type == NodeType.COLUMN
            and parent.type == NodeType.SECTION
            and len(parent.children) >= MAX_COLUMNS
        ):
            return parent.children[-1]

        wrapper = create_node(wrapper_type)
        self._synthetic.add(wrapper.id)
        parent.children.append(wrapper)
        self._warn(f"Content wrapped in synthesized {wrapper_type.value}")
        return wrapper


def markup_to_document(text: Any) -> Document:
    """Parse MJML markup into a fresh document; never raises.

    Examples:
        >>> doc = markup_to_document('<mjml><mj-body></mj-body></mjml>')
        >>> doc.body.type.value
        'mj-body'
    """
    return MarkupReader().read(text).document


def markup_to_document_with_diagnostics(
    text: Any, correlation_id: Optional[str] = None
) -> ReadResult:
    """Parse MJML markup and report every coercion applied."""
    return MarkupReader(correlation_id=correlation_id).read(text)
