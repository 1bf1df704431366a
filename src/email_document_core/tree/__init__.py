"""Tree mutation engine for email documents.

Key Components:
    find_node / find_parent: Depth-first lookup by identifier
    insert_node / remove_node / move_node: Structural mutations with legality checks
    clone_subtree: Deep copy with fresh identifiers
    MutationResult: Outcome object distinguishing no-op, success and rejection
"""

from .mutation import (
    MutationFailure,
    MutationFailureKind,
    MutationResult,
    clone_subtree,
    collect_ids,
    count_by_type,
    count_nodes,
    duplicate_node,
    find_node,
    find_parent,
    insert_node,
    insert_nodes_after,
    iter_nodes,
    move_node,
    move_node_down,
    move_node_up,
    remove_attribute,
    remove_node,
    set_condition,
    update_attribute,
    update_content,
)

__all__ = [
    "MutationFailure",
    "MutationFailureKind",
    "MutationResult",
    "clone_subtree",
    "collect_ids",
    "count_by_type",
    "count_nodes",
    "duplicate_node",
    "find_node",
    "find_parent",
    "insert_node",
    "insert_nodes_after",
    "iter_nodes",
    "move_node",
    "move_node_down",
    "move_node_up",
    "remove_attribute",
    "remove_node",
    "set_condition",
    "update_attribute",
    "update_content",
]
