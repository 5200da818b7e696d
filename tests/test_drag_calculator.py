"""Tests for drop-target resolution."""

from __future__ import annotations

from treesync.drag.calculator import (
    apply_drop,
    calculate_node_width,
    drop_candidates,
    resolve_drop_target,
    resolve_from_layout,
)
from treesync.models.drag import DropTarget, NodeRect
from treesync.models.tree import ROOT_NODE_ID, TreeNode, make_root
from treesync.tree.operations import get_children

DRAGGED = NodeRect(id="dragged", x=100, y=100, label="")


def test_node_width_from_label() -> None:
    """It should use the base width for short labels and grow with longer ones."""

    assert calculate_node_width("") == 80
    assert calculate_node_width("abcdef") == 80
    assert calculate_node_width("abcdefghij") == 112


def test_same_column_candidate_below_gives_before() -> None:
    """It should insert before a same-column candidate whose center is below the dragged one."""

    candidate = NodeRect(id="c", x=100, y=150)
    assert resolve_drop_target(DRAGGED, [candidate]) == DropTarget(target_id="c", insert_mode="before")


def test_same_column_mode_follows_vertical_centers() -> None:
    """It should insert before a lower candidate and after a higher or level one."""

    below = NodeRect(id="c", x=120, y=160)
    assert resolve_drop_target(DRAGGED, [below]) == DropTarget(target_id="c", insert_mode="before")

    above = NodeRect(id="c", x=120, y=40)
    assert resolve_drop_target(DRAGGED, [above]) == DropTarget(target_id="c", insert_mode="after")

    level = NodeRect(id="c", x=120, y=100)
    assert resolve_drop_target(DRAGGED, [level]) == DropTarget(target_id="c", insert_mode="after")


def test_left_node_gives_child() -> None:
    """It should attach as first child of a node entirely to the left."""

    left = NodeRect(id="p", x=0, y=100)
    assert resolve_drop_target(DRAGGED, [left]) == DropTarget(target_id="p", insert_mode="child")


def test_same_column_wins_over_closer_left_node() -> None:
    """It should prefer same-column candidates even when a left node is vertically closer."""

    left = NodeRect(id="p", x=0, y=100)
    far_sibling = NodeRect(id="s", x=100, y=400)
    result = resolve_drop_target(DRAGGED, [left, far_sibling])
    assert result == DropTarget(target_id="s", insert_mode="before")


def test_right_edge_touching_left_edge_is_same_column() -> None:
    """It should treat a candidate whose right edge equals the dragged left edge as same-column."""

    touching = NodeRect(id="t", x=20, y=100)
    assert resolve_drop_target(DRAGGED, [touching]) == DropTarget(target_id="t", insert_mode="after")

    wide = NodeRect(id="w", x=0, y=100, label="a fairly long label here")
    assert resolve_drop_target(DRAGGED, [wide]).insert_mode == "after"


def test_vertical_tie_broken_by_horizontal_distance() -> None:
    """It should break |dy| ties by the smaller |dx| between left edges."""

    far = NodeRect(id="far", x=150, y=100)
    near = NodeRect(id="near", x=110, y=100)
    assert resolve_drop_target(DRAGGED, [far, near]).target_id == "near"

    left_far = NodeRect(id="lf", x=-100, y=60)
    left_near = NodeRect(id="ln", x=0, y=140)
    assert resolve_drop_target(DRAGGED, [left_far, left_near]) == DropTarget(
        target_id="ln", insert_mode="child"
    )


def test_exact_tie_is_deterministic() -> None:
    """It should pick the first candidate when both keys tie."""

    first = NodeRect(id="first", x=100, y=60)
    second = NodeRect(id="second", x=100, y=140)
    assert resolve_drop_target(DRAGGED, [first, second]).target_id == "first"
    assert resolve_drop_target(DRAGGED, [second, first]).target_id == "second"


def test_no_candidates_means_no_target() -> None:
    """It should return None when there is nothing to drop onto."""

    assert resolve_drop_target(DRAGGED, []) is None


def test_drop_candidates_skip_dragged_and_root() -> None:
    """It should exclude the dragged node and the sentinel from the candidates."""

    rects = [
        NodeRect(id=ROOT_NODE_ID, x=0, y=0),
        NodeRect(id="dragged", x=100, y=100),
        NodeRect(id="other", x=200, y=100),
    ]
    assert [r.id for r in drop_candidates(rects, "dragged")] == ["other"]


def _forest() -> tuple[TreeNode, ...]:
    return (
        make_root(),
        TreeNode(id="a", text="A", parent_id=ROOT_NODE_ID, order=0),
        TreeNode(id="a1", text="A1", parent_id="a", order=0),
        TreeNode(id="b", text="B", parent_id=ROOT_NODE_ID, order=1),
        TreeNode(id="c", text="C", parent_id=ROOT_NODE_ID, order=2),
    )


def test_apply_drop_maps_modes_to_moves() -> None:
    """It should call the move that matches each insert mode."""

    nodes = _forest()

    before = apply_drop(nodes, "c", DropTarget(target_id="a", insert_mode="before"))
    assert [n.id for n in get_children(before, ROOT_NODE_ID)] == ["c", "a", "b"]

    after = apply_drop(nodes, "a", DropTarget(target_id="b", insert_mode="after"))
    assert [n.id for n in get_children(after, ROOT_NODE_ID)] == ["b", "a", "c"]

    child = apply_drop(nodes, "c", DropTarget(target_id="a", insert_mode="child"))
    assert [n.id for n in get_children(child, "a")] == ["c", "a1"]


def test_apply_drop_without_target_promotes_to_top_level() -> None:
    """It should move the node to the end of the top level when there is no target."""

    result = apply_drop(_forest(), "a1", None)
    assert [n.id for n in get_children(result, ROOT_NODE_ID)] == ["a", "b", "c", "a1"]


def test_apply_drop_onto_own_descendant_fails() -> None:
    """It should refuse a drop that would create a cycle."""

    assert apply_drop(_forest(), "a", DropTarget(target_id="a1", insert_mode="child")) is None


def test_resolve_from_layout_uses_layout_positions() -> None:
    """It should lay out the snapshot and resolve against everything but the dragged node."""

    positions = {ROOT_NODE_ID: (-200, 50), "a": (0, 0), "a1": (200, 0), "b": (0, 50), "c": (0, 100)}

    def layout(nodes: tuple[TreeNode, ...]) -> list[NodeRect]:
        return [NodeRect(id=n.id, x=positions[n.id][0], y=positions[n.id][1], label=n.text) for n in nodes]

    dragged = NodeRect(id="c", x=0, y=10, label="C")
    assert resolve_from_layout(layout, _forest(), dragged) == DropTarget(target_id="a", insert_mode="after")
