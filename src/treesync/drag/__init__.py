"""Drag-and-drop support for the tree diagram."""

from __future__ import annotations

from treesync.drag.calculator import (
    NODE_HEIGHT,
    apply_drop,
    calculate_node_width,
    drop_candidates,
    drop_outcome,
    resolve_drop_target,
    resolve_from_layout,
)

__all__ = [
    "NODE_HEIGHT",
    "apply_drop",
    "calculate_node_width",
    "drop_candidates",
    "drop_outcome",
    "resolve_drop_target",
    "resolve_from_layout",
]
