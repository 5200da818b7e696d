"""Tree mutation engine."""

from __future__ import annotations

from treesync.tree.operations import (
    add_node_after,
    delete_node,
    get_children,
    get_depth,
    get_descendant_ids,
    get_flattened_order,
    indent_node,
    move_node,
    move_node_after,
    move_node_as_first_child,
    move_node_before,
    normalize_orders,
    outdent_node,
)
from treesync.tree.validation import TreeValidationError, find_problems, validate_snapshot

__all__ = [
    "TreeValidationError",
    "add_node_after",
    "delete_node",
    "find_problems",
    "get_children",
    "get_depth",
    "get_descendant_ids",
    "get_flattened_order",
    "indent_node",
    "move_node",
    "move_node_after",
    "move_node_as_first_child",
    "move_node_before",
    "normalize_orders",
    "outdent_node",
    "validate_snapshot",
]
