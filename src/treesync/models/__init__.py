"""Pydantic models used across the project."""

from __future__ import annotations

from treesync.models.drag import DropTarget, InsertMode, LayoutFunction, NodeRect
from treesync.models.tree import (
    ROOT_NODE_ID,
    FailureReason,
    NodeList,
    Snapshot,
    TreeNode,
    make_root,
)

__all__ = [
    "DropTarget",
    "FailureReason",
    "InsertMode",
    "LayoutFunction",
    "NodeList",
    "NodeRect",
    "ROOT_NODE_ID",
    "Snapshot",
    "TreeNode",
    "make_root",
]
