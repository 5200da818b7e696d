"""Drop-target resolution for drag gestures on the tree diagram.

The diagram is laid out left-to-right: parents sit in a column to the left of their children.
Candidates are split into two groups relative to the dragged node's horizontal span:

* left-nodes: the candidate's right edge is strictly left of the dragged node's left edge.
  Dropping near one of these attaches the dragged node as its first child.
* same-column nodes: everything else. Dropping near one of these reorders the dragged node
  as its sibling, before or after depending on which side of its vertical center it lands.

Same-column candidates win over left-nodes. Within a group the closest vertical center wins,
with the closest left edge as tie-break and input order as the final tie-break.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from treesync.logging import get_logger
from treesync.models.drag import DropTarget, InsertMode, LayoutFunction, NodeRect
from treesync.models.tree import ROOT_NODE_ID, FailureReason, NodeList, Snapshot
from treesync.tree.operations import (
    Outcome,
    move_after_outcome,
    move_before_outcome,
    move_first_child_outcome,
    move_outcome,
)

logger = get_logger(__name__)

BASE_NODE_WIDTH = 80
NODE_HEIGHT = 40
HORIZONTAL_PADDING = 32
CHAR_WIDTH = 8


def calculate_node_width(text: str) -> float:
    """Approximate rendered width of a node from its label."""

    return max(BASE_NODE_WIDTH, len(text) * CHAR_WIDTH + HORIZONTAL_PADDING)


def _center_y(rect: NodeRect) -> float:
    return rect.y + NODE_HEIGHT / 2


def _right_edge(rect: NodeRect) -> float:
    return rect.x + calculate_node_width(rect.label)


def _closest(dragged: NodeRect, candidates: Sequence[NodeRect]) -> NodeRect | None:
    if not candidates:
        return None
    dragged_center_y = _center_y(dragged)
    # min() keeps the first of equal keys, so input order settles exact ties.
    return min(
        candidates,
        key=lambda c: (abs(dragged_center_y - _center_y(c)), abs(dragged.x - c.x)),
    )


def insert_mode_for(dragged: NodeRect, target: NodeRect, *, is_left_target: bool) -> InsertMode:
    """Insert mode once a target has been chosen."""

    if is_left_target:
        return "child"
    return "before" if _center_y(dragged) < _center_y(target) else "after"


def resolve_drop_target(dragged: NodeRect, candidates: Iterable[NodeRect]) -> DropTarget | None:
    """Classify a drag gesture into a structural edit.

    Args:
        dragged: Current rectangle of the node being dragged.
        candidates: Rectangles of every other visible node (not the dragged node itself).

    Returns:
        The chosen target and insert mode, or None when there is nothing to drop onto
        (the caller promotes the node to the top level).
    """

    dragged_left = dragged.x
    left_nodes: list[NodeRect] = []
    same_column: list[NodeRect] = []
    for candidate in candidates:
        if _right_edge(candidate) < dragged_left:
            left_nodes.append(candidate)
        else:
            same_column.append(candidate)

    target = _closest(dragged, same_column)
    is_left_target = False
    if target is None:
        target = _closest(dragged, left_nodes)
        is_left_target = True
    if target is None:
        return None

    return DropTarget(
        target_id=target.id,
        insert_mode=insert_mode_for(dragged, target, is_left_target=is_left_target),
    )


def drop_candidates(rects: Iterable[NodeRect], dragged_id: str) -> list[NodeRect]:
    """Layout rectangles a dragged node may be dropped onto."""

    return [r for r in rects if r.id not in (dragged_id, ROOT_NODE_ID)]


def resolve_from_layout(layout: LayoutFunction, nodes: NodeList, dragged: NodeRect) -> DropTarget | None:
    """Lay out `nodes` and resolve where `dragged` would land among them."""

    return resolve_drop_target(dragged, drop_candidates(layout(tuple(nodes)), dragged.id))


def drop_outcome(nodes: NodeList, node_id: str, target: DropTarget | None) -> Outcome:
    """Apply a resolved drop to a snapshot.

    No target promotes the node to the top level, appended last.
    """

    if target is None:
        return move_outcome(nodes, node_id, ROOT_NODE_ID)
    if target.insert_mode == "before":
        return move_before_outcome(nodes, node_id, target.target_id)
    if target.insert_mode == "after":
        return move_after_outcome(nodes, node_id, target.target_id)
    return move_first_child_outcome(nodes, node_id, target.target_id)


def apply_drop(nodes: NodeList, node_id: str, target: DropTarget | None) -> Snapshot | None:
    outcome = drop_outcome(nodes, node_id, target)
    if isinstance(outcome, FailureReason):
        logger.debug("drop of %s produced no change: %s", node_id, outcome.value)
        return None
    return outcome
