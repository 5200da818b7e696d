"""Pure tree operations over flat node snapshots.

Every function takes a snapshot (any sequence of `TreeNode`) and never mutates it. Structural
edits come in two flavours:

* `*_outcome` functions return the new snapshot or a `FailureReason`, for callers that need
  to report why nothing happened (the store, the CLI, the API).
* the plain functions (`indent_node`, `move_node`, ...) return the new snapshot or `None`.

Splices work on half-steps between neighbours, so the group being spliced into is made dense
first; any order values are accepted on input. Every sibling group an edit touches is dense
again when the snapshot is returned.
"""

from __future__ import annotations

from collections import defaultdict

from treesync.logging import get_logger
from treesync.models.tree import ROOT_NODE_ID, FailureReason, NodeList, Snapshot, TreeNode

logger = get_logger(__name__)

Outcome = Snapshot | FailureReason

# Children of a deleted node are spliced in between the deleted slot and the next sibling.
_DELETE_SPLICE_SPAN = 1.0


def _index(nodes: NodeList) -> dict[str, TreeNode]:
    return {n.id: n for n in nodes}


def _children_index(nodes: NodeList) -> dict[str | None, list[TreeNode]]:
    groups: dict[str | None, list[TreeNode]] = defaultdict(list)
    for n in nodes:
        groups[n.parent_id].append(n)
    for group in groups.values():
        group.sort(key=lambda n: n.order)
    return groups


def _replace(nodes: NodeList, node_id: str, **update: object) -> Snapshot:
    return tuple(n.model_copy(update=update) if n.id == node_id else n for n in nodes)


def _unwrap(outcome: Outcome, op_name: str) -> Snapshot | None:
    if isinstance(outcome, FailureReason):
        logger.debug("%s produced no change: %s", op_name, outcome.value)
        return None
    return outcome


# ---------- Queries ----------


def get_children(nodes: NodeList, parent_id: str | None) -> list[TreeNode]:
    """Children of `parent_id`, sorted ascending by `order`."""

    return sorted((n for n in nodes if n.parent_id == parent_id), key=lambda n: n.order)


def get_descendant_ids(nodes: NodeList, node_id: str) -> set[str]:
    """All ids transitively below `node_id`, excluding `node_id` itself."""

    groups = _children_index(nodes)
    found: set[str] = set()
    pending = [node_id]
    while pending:
        current = pending.pop()
        for child in groups.get(current, ()):
            if child.id in found or child.id == node_id:
                continue
            found.add(child.id)
            pending.append(child.id)
    return found


def get_flattened_order(nodes: NodeList) -> list[TreeNode]:
    """Depth-first pre-order of every visible node (the outline display order)."""

    groups = _children_index(nodes)
    result: list[TreeNode] = []
    seen: set[str] = set()
    stack = list(reversed(groups.get(ROOT_NODE_ID, [])))
    while stack:
        node = stack.pop()
        if node.id in seen:
            continue
        seen.add(node.id)
        result.append(node)
        stack.extend(reversed(groups.get(node.id, [])))
    return result


def get_depth(nodes: NodeList, node_id: str) -> int:
    """Ancestor hops to the sentinel; top-level nodes (and unknown ids) are depth 0."""

    by_id = _index(nodes)
    node = by_id.get(node_id)
    depth = 0
    while node is not None and node.parent_id not in (None, ROOT_NODE_ID):
        depth += 1
        if depth > len(by_id):
            break
        node = by_id.get(node.parent_id)
    return depth


def normalize_orders(nodes: NodeList, parent_id: str | None) -> Snapshot:
    """Reassign `0..n-1` to the children of `parent_id`, keeping their relative order."""

    order_map = {s.id: i for i, s in enumerate(get_children(nodes, parent_id))}
    return tuple(
        n.model_copy(update={"order": order_map[n.id]}) if n.id in order_map else n for n in nodes
    )


def _next_child_order(nodes: NodeList, parent_id: str, exclude: str | None = None) -> float:
    orders = [s.order for s in nodes if s.parent_id == parent_id and s.id != exclude]
    return max(orders) + 1 if orders else 0


# ---------- Indent / Outdent ----------


def indent_outcome(nodes: NodeList, node_id: str) -> Outcome:
    """Make `node_id` the last child of its previous sibling."""

    node = _index(nodes).get(node_id)
    if node is None:
        return FailureReason.NOT_FOUND
    if node.parent_id is None:
        return FailureReason.INVALID_OPERATION

    siblings = get_children(nodes, node.parent_id)
    idx = next(i for i, s in enumerate(siblings) if s.id == node_id)
    if idx <= 0:
        return FailureReason.NO_OP

    new_parent_id = siblings[idx - 1].id
    updated = _replace(
        nodes,
        node_id,
        parent_id=new_parent_id,
        order=_next_child_order(nodes, new_parent_id),
    )
    updated = normalize_orders(updated, node.parent_id)
    return normalize_orders(updated, new_parent_id)


def outdent_outcome(nodes: NodeList, node_id: str) -> Outcome:
    """Make `node_id` the sibling immediately following its former parent."""

    by_id = _index(nodes)
    node = by_id.get(node_id)
    if node is None:
        return FailureReason.NOT_FOUND
    if node.parent_id is None:
        return FailureReason.INVALID_OPERATION
    if node.parent_id == ROOT_NODE_ID:
        return FailureReason.NO_OP
    if node.parent_id not in by_id:
        return FailureReason.NOT_FOUND

    grandparent_id = by_id[node.parent_id].parent_id
    nodes = normalize_orders(nodes, grandparent_id)
    parent = _index(nodes)[node.parent_id]
    updated = _replace(nodes, node_id, parent_id=grandparent_id, order=parent.order + 0.5)
    updated = normalize_orders(updated, parent.id)
    return normalize_orders(updated, grandparent_id)


def indent_node(nodes: NodeList, node_id: str) -> Snapshot | None:
    return _unwrap(indent_outcome(nodes, node_id), "indent")


def outdent_node(nodes: NodeList, node_id: str) -> Snapshot | None:
    return _unwrap(outdent_outcome(nodes, node_id), "outdent")


# ---------- Add / Delete ----------


def add_after_outcome(nodes: NodeList, after_node_id: str, new_node: TreeNode) -> Outcome:
    """Insert `new_node` as the sibling right after `after_node_id`.

    An unknown `after_node_id` degrades to appending `new_node` as given, so the caller is
    responsible for its `parent_id` in that case. The sentinel as anchor inserts the new node
    as the first top-level node, which is where it sits in display order.
    """

    by_id = _index(nodes)
    if new_node.id in by_id:
        return FailureReason.INVALID_OPERATION

    after = by_id.get(after_node_id)
    if after is None:
        return (*nodes, new_node)

    if after.parent_id is None:
        nodes = normalize_orders(nodes, after.id)
        placed = new_node.model_copy(update={"parent_id": after.id, "order": -0.5})
    else:
        nodes = normalize_orders(nodes, after.parent_id)
        after = _index(nodes)[after.id]
        placed = new_node.model_copy(update={"parent_id": after.parent_id, "order": after.order + 0.5})
    return normalize_orders((*nodes, placed), placed.parent_id)


def add_node_after(nodes: NodeList, after_node_id: str, new_node: TreeNode) -> Snapshot | None:
    return _unwrap(add_after_outcome(nodes, after_node_id, new_node), "add_after")


def delete_outcome(nodes: NodeList, node_id: str) -> Outcome:
    """Remove `node_id`, promoting its children into the slot it occupied."""

    node = _index(nodes).get(node_id)
    if node is None:
        return FailureReason.NOT_FOUND
    if node.parent_id is None:
        return FailureReason.INVALID_OPERATION

    nodes = normalize_orders(nodes, node.parent_id)
    node = _index(nodes)[node_id]
    children = get_children(nodes, node_id)
    step = _DELETE_SPLICE_SPAN / (len(children) + 1)
    promoted = {
        c.id: c.model_copy(update={"parent_id": node.parent_id, "order": node.order + (i + 1) * step})
        for i, c in enumerate(children)
    }

    remaining = tuple(promoted.get(n.id, n) for n in nodes if n.id != node_id)
    return normalize_orders(remaining, node.parent_id)


def delete_node(nodes: NodeList, node_id: str) -> Snapshot:
    """Delete `node_id`; an unknown id (or the sentinel) returns the input unchanged."""

    outcome = _unwrap(delete_outcome(nodes, node_id), "delete")
    return tuple(nodes) if outcome is None else outcome


# ---------- Move ----------


def move_outcome(
    nodes: NodeList,
    node_id: str,
    new_parent_id: str,
    insert_order: float | None = None,
) -> Outcome:
    """Reparent `node_id` under `new_parent_id`.

    `insert_order` positions the node among its new siblings; by default it is appended last.
    Moving a node under itself or one of its descendants is refused.
    """

    if node_id == new_parent_id:
        return FailureReason.INVALID_OPERATION

    by_id = _index(nodes)
    node = by_id.get(node_id)
    if node is None or new_parent_id not in by_id:
        return FailureReason.NOT_FOUND
    if node.parent_id is None:
        return FailureReason.INVALID_OPERATION
    if new_parent_id in get_descendant_ids(nodes, node_id):
        return FailureReason.INVALID_OPERATION

    if insert_order is None:
        insert_order = _next_child_order(nodes, new_parent_id, exclude=node_id)

    updated = _replace(nodes, node_id, parent_id=new_parent_id, order=insert_order)
    if node.parent_id != new_parent_id:
        updated = normalize_orders(updated, node.parent_id)
    return normalize_orders(updated, new_parent_id)


def _sibling_move_outcome(nodes: NodeList, node_id: str, target_id: str, offset: float) -> Outcome:
    target = _index(nodes).get(target_id)
    if target is None:
        return FailureReason.NOT_FOUND
    if target.parent_id is None:
        return FailureReason.INVALID_OPERATION
    nodes = normalize_orders(nodes, target.parent_id)
    target = _index(nodes)[target_id]
    return move_outcome(nodes, node_id, target.parent_id, target.order + offset)


def move_before_outcome(nodes: NodeList, node_id: str, target_id: str) -> Outcome:
    return _sibling_move_outcome(nodes, node_id, target_id, -0.5)


def move_after_outcome(nodes: NodeList, node_id: str, target_id: str) -> Outcome:
    return _sibling_move_outcome(nodes, node_id, target_id, 0.5)


def move_first_child_outcome(nodes: NodeList, node_id: str, target_id: str) -> Outcome:
    return move_outcome(normalize_orders(nodes, target_id), node_id, target_id, -0.5)


def move_node(
    nodes: NodeList,
    node_id: str,
    new_parent_id: str,
    insert_order: float | None = None,
) -> Snapshot | None:
    return _unwrap(move_outcome(nodes, node_id, new_parent_id, insert_order), "move")


def move_node_before(nodes: NodeList, node_id: str, target_id: str) -> Snapshot | None:
    """Insert `node_id` as the sibling immediately before `target_id`."""

    return _unwrap(move_before_outcome(nodes, node_id, target_id), "move_before")


def move_node_after(nodes: NodeList, node_id: str, target_id: str) -> Snapshot | None:
    """Insert `node_id` as the sibling immediately after `target_id`."""

    return _unwrap(move_after_outcome(nodes, node_id, target_id), "move_after")


def move_node_as_first_child(nodes: NodeList, node_id: str, target_id: str) -> Snapshot | None:
    """Insert `node_id` ahead of every existing child of `target_id`."""

    return _unwrap(move_first_child_outcome(nodes, node_id, target_id), "move_as_first_child")
