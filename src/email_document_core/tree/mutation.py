"""Tree mutation engine for email documents.

All operations are synchronous and locate nodes by identifier with a
depth-first walk from the root. A missing identifier is a legitimate outcome
(stale selection after a concurrent edit) and yields a no-op result; an
illegal reparenting yields a result carrying a ``MutationFailure`` and leaves
the document exactly as it was.
"""

import copy
from collections import Counter
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Sequence

from email_document_core.model.factory import generate_id
from email_document_core.model.types import (
    MAX_COLUMNS,
    ConditionalRule,
    Document,
    Node,
    NodeType,
    check_child,
    is_allowed_child,
)
from email_document_core.shared import get_logger

logger = get_logger(__name__, component="tree_mutation")


class MutationFailureKind(Enum):
    """Reasons a structural mutation can be rejected."""

    ILLEGAL_CHILD = auto()    # Variant not allowed under the target parent
    SECTION_FULL = auto()     # Section already holds the maximum column count
    ROOT_OPERATION = auto()   # The document root cannot be detached
    CYCLE = auto()            # Node would become its own descendant
    DUPLICATE_ID = auto()     # Inserted subtree reuses an id already in the document


@dataclass
class MutationFailure:
    """Typed failure for a rejected mutation."""

    kind: MutationFailureKind
    message: str
    parent_type: Optional[NodeType] = None
    child_type: Optional[NodeType] = None

    def __str__(self) -> str:
        return self.message


@dataclass
class MutationResult:
    """Outcome of a mutation.

    ``success`` is True only when the document changed. ``found`` is False when
    an identifier did not resolve, which is not an error. ``node`` carries the
    node the operation produced (detached subtree, inserted clone, ...).
    """

    document: Document
    success: bool = True
    node: Optional[Node] = None
    failure: Optional[MutationFailure] = None
    found: bool = True

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def not_found(cls, document: Document) -> "MutationResult":
        return cls(document=document, success=False, found=False)

    @classmethod
    def rejected(cls, document: Document, failure: MutationFailure) -> "MutationResult":
        logger.warning(
            "Mutation rejected",
            extra={"failure_kind": failure.kind.name, "reason": failure.message},
        )
        return cls(document=document, success=False, failure=failure)


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

def iter_nodes(node: Node) -> Iterator[Node]:
    """Iterate over ``node`` and all descendants in document order."""
    yield node
    for child in node.children:
        yield from iter_nodes(child)


def count_nodes(node: Node) -> int:
    return sum(1 for _ in iter_nodes(node))


def count_by_type(node: Node) -> Dict[NodeType, int]:
    """Number of nodes per variant in the subtree."""
    return dict(Counter(item.type for item in iter_nodes(node)))


def collect_ids(node: Node) -> List[str]:
    return [item.id for item in iter_nodes(node)]


def _find_in(node: Node, node_id: str) -> Optional[Node]:
    if node.id == node_id:
        return node
    for child in node.children:
        found = _find_in(child, node_id)
        if found is not None:
            return found
    return None


def _find_parent_in(node: Node, node_id: str) -> Optional[Node]:
    for child in node.children:
        if child.id == node_id:
            return node
        found = _find_parent_in(child, node_id)
        if found is not None:
            return found
    return None


def find_node(doc: Document, node_id: str) -> Optional[Node]:
    """Find a node by id, or None if it does not exist."""
    return _find_in(doc.body, node_id)


def find_parent(doc: Document, node_id: str) -> Optional[Node]:
    """Find the parent of a node by id; None for the root or a missing id."""
    return _find_parent_in(doc.body, node_id)


def _contains(ancestor: Node, node: Node) -> bool:
    return any(item is node for item in iter_nodes(ancestor))


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length))


def _legality_failure(
    parent: Node, child: Node, existing_children: int
) -> Optional[MutationFailure]:
    if not is_allowed_child(parent.type, child.type):
        violation = check_child(parent, child)
        return MutationFailure(
            kind=MutationFailureKind.ILLEGAL_CHILD,
            message=str(violation),
            parent_type=parent.type,
            child_type=child.type,
        )
    if parent.type == NodeType.SECTION and existing_children >= MAX_COLUMNS:
        return MutationFailure(
            kind=MutationFailureKind.SECTION_FULL,
            message=f"{parent.type.value} already holds {MAX_COLUMNS} columns",
            parent_type=parent.type,
            child_type=child.type,
        )
    return None


def _duplicate_id_failure(
    doc: Document, parent: Node, nodes: Sequence[Node]
) -> Optional[MutationFailure]:
    seen = set(collect_ids(doc.body))
    for node in nodes:
        for node_id in collect_ids(node):
            if node_id in seen:
                return MutationFailure(
                    kind=MutationFailureKind.DUPLICATE_ID,
                    message=f"node id {node_id} is already in the document",
                    parent_type=parent.type,
                    child_type=node.type,
                )
            seen.add(node_id)
    return None


# ---------------------------------------------------------------------------
# Structural mutations
# ---------------------------------------------------------------------------

def insert_node(doc: Document, parent_id: str, index: int, node: Node) -> MutationResult:
    """Insert ``node`` under ``parent_id`` at ``index`` (clamped into range)."""
    parent = find_node(doc, parent_id)
    if parent is None:
        return MutationResult.not_found(doc)

    failure = _legality_failure(parent, node, len(parent.children))
    if failure is None:
        failure = _duplicate_id_failure(doc, parent, [node])
    if failure is not None:
        return MutationResult.rejected(doc, failure)

    parent.children.insert(_clamp(index, len(parent.children)), node)
    logger.debug("Node inserted", extra={"node_id": node.id, "parent_id": parent_id})
    return MutationResult(document=doc, node=node)


def insert_nodes_after(doc: Document, reference_id: str, nodes: Sequence[Node]) -> MutationResult:
    """Insert ``nodes`` as siblings directly after ``reference_id``, all or none.

    An empty ``nodes`` is a no-op and reports ``success=False``.
    """
    if not nodes:
        return MutationResult(document=doc, success=False)

    parent = find_parent(doc, reference_id)
    if parent is None:
        return MutationResult.not_found(doc)

    for offset, node in enumerate(nodes):
        failure = _legality_failure(parent, node, len(parent.children) + offset)
        if failure is not None:
            return MutationResult.rejected(doc, failure)

    failure = _duplicate_id_failure(doc, parent, nodes)
    if failure is not None:
        return MutationResult.rejected(doc, failure)

    position = next(i for i, child in enumerate(parent.children) if child.id == reference_id)
    parent.children[position + 1:position + 1] = list(nodes)
    logger.debug(
        "Nodes inserted", extra={"node_count": len(nodes), "reference_id": reference_id}
    )
    return MutationResult(document=doc, node=nodes[0])


def remove_node(doc: Document, node_id: str) -> MutationResult:
    """Detach the subtree rooted at ``node_id``; the subtree is in ``result.node``."""
    if doc.body.id == node_id:
        return MutationResult.rejected(
            doc,
            MutationFailure(
                kind=MutationFailureKind.ROOT_OPERATION,
                message="the document root cannot be removed",
                child_type=doc.body.type,
            ),
        )

    parent = find_parent(doc, node_id)
    if parent is None:
        return MutationResult.not_found(doc)

    position = next(i for i, child in enumerate(parent.children) if child.id == node_id)
    detached = parent.children.pop(position)
    logger.debug("Node removed", extra={"node_id": node_id, "parent_id": parent.id})
    return MutationResult(document=doc, node=detached)


def move_node(doc: Document, node_id: str, new_parent_id: str, index: int) -> MutationResult:
    """Move a node under a new parent atomically.

    All checks run before the tree is touched. ``index`` addresses the target
    child list as it looks after the node has been detached.
    """
    node = find_node(doc, node_id)
    new_parent = find_node(doc, new_parent_id)
    if node is None or new_parent is None:
        return MutationResult.not_found(doc)

    if node is doc.body:
        return MutationResult.rejected(
            doc,
            MutationFailure(
                kind=MutationFailureKind.ROOT_OPERATION,
                message="the document root cannot be moved",
                child_type=node.type,
            ),
        )

    if _contains(node, new_parent):
        return MutationResult.rejected(
            doc,
            MutationFailure(
                kind=MutationFailureKind.CYCLE,
                message=f"{node.type.value} cannot be moved inside itself",
                parent_type=new_parent.type,
                child_type=node.type,
            ),
        )

    old_parent = find_parent(doc, node_id)
    remaining = len(new_parent.children) - (1 if old_parent is new_parent else 0)
    failure = _legality_failure(new_parent, node, remaining)
    if failure is not None:
        return MutationResult.rejected(doc, failure)

    old_parent.children.remove(node)
    new_parent.children.insert(_clamp(index, len(new_parent.children)), node)
    logger.debug(
        "Node moved",
        extra={"node_id": node_id, "from_parent": old_parent.id, "to_parent": new_parent_id},
    )
    return MutationResult(document=doc, node=node)


def _shift(doc: Document, node_id: str, delta: int) -> MutationResult:
    parent = find_parent(doc, node_id)
    if parent is None:
        return MutationResult.not_found(doc)

    position = next(i for i, child in enumerate(parent.children) if child.id == node_id)
    target = position + delta
    if not 0 <= target < len(parent.children):
        return MutationResult(document=doc, success=False)

    siblings = parent.children
    siblings[position], siblings[target] = siblings[target], siblings[position]
    return MutationResult(document=doc, node=siblings[target])


def move_node_up(doc: Document, node_id: str) -> MutationResult:
    """Swap a node with its previous sibling."""
    return _shift(doc, node_id, -1)


def move_node_down(doc: Document, node_id: str) -> MutationResult:
    """Swap a node with its next sibling."""
    return _shift(doc, node_id, 1)


def clone_subtree(node: Node) -> Node:
    """Deep copy with a new identifier for every node in the subtree."""
    return Node(
        id=generate_id(),
        type=node.type,
        attributes=dict(node.attributes),
        children=[clone_subtree(child) for child in node.children],
        html_content=node.html_content,
        condition=copy.deepcopy(node.condition),
    )


def duplicate_node(doc: Document, node_id: str) -> MutationResult:
    """Insert a fresh-id clone of a node right after the original."""
    if doc.body.id == node_id:
        return MutationResult.rejected(
            doc,
            MutationFailure(
                kind=MutationFailureKind.ROOT_OPERATION,
                message="the document root cannot be duplicated",
                child_type=doc.body.type,
            ),
        )

    original = find_node(doc, node_id)
    if original is None:
        return MutationResult.not_found(doc)

    result = insert_nodes_after(doc, node_id, [clone_subtree(original)])
    if result.success:
        logger.debug(
            "Node duplicated",
            extra={"original_id": node_id, "new_id": result.node.id},
        )
    return result


# ---------------------------------------------------------------------------
# Value mutations
# ---------------------------------------------------------------------------

def update_attribute(doc: Document, node_id: str, key: str, value: str) -> MutationResult:
    node = find_node(doc, node_id)
    if node is None:
        return MutationResult.not_found(doc)
    node.attributes[key] = value
    return MutationResult(document=doc, node=node)


def remove_attribute(doc: Document, node_id: str, key: str) -> MutationResult:
    """Drop an attribute so the renderer default applies again."""
    node = find_node(doc, node_id)
    if node is None:
        return MutationResult.not_found(doc)
    node.attributes.pop(key, None)
    return MutationResult(document=doc, node=node)


def update_content(doc: Document, node_id: str, html: str) -> MutationResult:
    node = find_node(doc, node_id)
    if node is None:
        return MutationResult.not_found(doc)
    node.html_content = html
    return MutationResult(document=doc, node=node)


def set_condition(
    doc: Document, node_id: str, rule: Optional[ConditionalRule]
) -> MutationResult:
    """Attach a display condition to a node, or clear it with None."""
    node = find_node(doc, node_id)
    if node is None:
        return MutationResult.not_found(doc)
    node.condition = rule
    return MutationResult(document=doc, node=node)
