"""Tests for OutlineStore."""

from __future__ import annotations

from treesync.models.drag import DropTarget
from treesync.models.tree import ROOT_NODE_ID, FailureReason, NodeList, Snapshot, TreeNode, make_root
from treesync.storage.memory import MemoryTreeStorage
from treesync.store import OutlineStore, create_sample_data
from treesync.tree.operations import get_children
from treesync.tree.validation import find_problems
from treesync.utils.ids import sequential_id_factory


def _nodes() -> Snapshot:
    return (
        make_root(),
        TreeNode(id="a", text="A", parent_id=ROOT_NODE_ID, order=0),
        TreeNode(id="a1", text="A1", parent_id="a", order=0),
        TreeNode(id="b", text="B", parent_id=ROOT_NODE_ID, order=1),
    )


def _store(**kwargs) -> OutlineStore:
    return OutlineStore(_nodes(), id_factory=sequential_id_factory(), **kwargs)


def _child_ids(store: OutlineStore, parent_id: str) -> list[str]:
    return [n.id for n in get_children(store.nodes, parent_id)]


def test_structural_edit_is_undoable() -> None:
    """It should record structural edits and restore them with undo/redo."""

    store = _store()
    before = store.nodes

    assert store.indent("b")
    assert _child_ids(store, "a") == ["a1", "b"]
    assert store.can_undo()

    assert store.undo()
    assert store.nodes == before
    assert store.can_redo()

    assert store.redo()
    assert _child_ids(store, "a") == ["a1", "b"]


def test_failed_edit_leaves_state_and_history_alone() -> None:
    """It should not record or change anything when an operation fails."""

    store = _store()
    before = store.nodes

    assert not store.indent("a")
    assert store.last_failure is FailureReason.NO_OP
    assert not store.move("a", "a1")
    assert store.last_failure is FailureReason.INVALID_OPERATION
    assert not store.outdent("missing")
    assert store.last_failure is FailureReason.NOT_FOUND

    assert store.nodes == before
    assert not store.can_undo()


def test_text_edits_are_not_recorded() -> None:
    """It should leave can_undo unchanged by label edits."""

    store = _store()
    assert store.update_node_text("a", "Alpha")
    assert not store.can_undo()
    assert store.get_node("a").text == "Alpha"

    store.indent("b")
    assert store.update_node_text("b", "Beta")
    assert store.can_undo()
    assert store.history.stats()["past"] == 1

    assert not store.update_node_text("missing", "x")
    assert not store.update_node_text(ROOT_NODE_ID, "x")


def test_history_limit_bounds_undo() -> None:
    """It should keep only the configured number of undo steps."""

    limit = 3
    store = _store(history_limit=limit)
    snapshots = [store.nodes]
    for _ in range(limit + 5):
        assert store.add_after("b") is not None
        snapshots.append(store.nodes)

    assert len(store.history.past) == limit
    for _ in range(limit):
        assert store.undo()

    assert not store.can_undo()
    assert store.nodes == snapshots[-1 - limit]


def test_add_after_selects_new_node() -> None:
    """It should insert after the anchor and select the new node."""

    store = _store()
    new_id = store.add_after("a1", "new")

    assert new_id == "n1"
    assert store.selected_node_id == "n1"
    assert _child_ids(store, "a") == ["a1", "n1"]


def test_add_after_unknown_anchor_appends_top_level() -> None:
    """It should append to the end of the top level when the anchor is unknown."""

    store = _store()
    new_id = store.add_after("missing")

    assert _child_ids(store, ROOT_NODE_ID) == ["a", "b", new_id]
    assert find_problems(store.nodes, require_dense_orders=True) == []


def test_remove_refuses_root_and_clears_selection() -> None:
    """It should refuse to delete the sentinel and drop a deleted selection."""

    store = _store()
    assert not store.remove(ROOT_NODE_ID)
    assert store.last_failure is FailureReason.INVALID_OPERATION

    store.set_selected_node_id("a")
    assert store.remove("a")
    assert store.selected_node_id is None
    assert _child_ids(store, ROOT_NODE_ID) == ["a1", "b"]

    assert not store.remove("a")
    assert store.last_failure is FailureReason.NOT_FOUND


def test_remove_and_reselect_prefers_previous_node() -> None:
    """It should select the previous node in display order, or the next one for the first."""

    store = _store()
    assert store.remove_and_reselect("b")
    assert store.selected_node_id == "a1"

    assert store.remove_and_reselect("a")
    assert store.selected_node_id == "a1"


def test_keyboard_style_navigation() -> None:
    """It should walk the selection through display order and stop at the ends."""

    store = _store()
    store.set_selected_node_id("a")

    assert store.select_next() == "a1"
    assert store.select_next() == "b"
    assert store.select_next() == "b"
    assert store.select_previous() == "a1"


def test_moves_and_drop() -> None:
    """It should expose every move variant and apply resolved drops."""

    store = _store()
    assert store.move_before("b", "a")
    assert _child_ids(store, ROOT_NODE_ID) == ["b", "a"]

    assert store.move_after("b", "a1")
    assert _child_ids(store, "a") == ["a1", "b"]

    assert store.move_as_first_child("b", "a1")
    assert _child_ids(store, "a1") == ["b"]

    assert store.drop("b", None)
    assert _child_ids(store, ROOT_NODE_ID) == ["a", "b"]

    assert store.drop("a1", DropTarget(target_id="b", insert_mode="child"))
    assert _child_ids(store, "b") == ["a1"]

    assert not store.drop("b", DropTarget(target_id="b", insert_mode="child"))
    assert store.history.stats()["past"] == 5


def test_subscribers_see_every_snapshot() -> None:
    """It should notify both views with the same snapshots until unsubscribed."""

    store = _store()
    outline_view: list[Snapshot] = []
    diagram_view: list[Snapshot] = []
    store.subscribe(outline_view.append)
    unsubscribe = store.subscribe(diagram_view.append)

    store.indent("b")
    store.update_node_text("a", "x")
    unsubscribe()
    store.undo()

    assert len(outline_view) == 3
    assert diagram_view == outline_view[:2]
    assert outline_view[-1] == store.nodes


def test_import_and_export_text() -> None:
    """It should replace the outline from text and export it back."""

    storage = MemoryTreeStorage()
    store = OutlineStore(_nodes(), storage=storage, id_factory=sequential_id_factory())
    store.set_selected_node_id("a")

    store.import_text("x\n y\nz")

    assert store.selected_node_id is None
    assert store.export_text() == "x\n y\nz"
    assert storage.load() == store.nodes


def test_persists_changes_and_loads_them_back() -> None:
    """It should save every change and start from the saved snapshot next time."""

    storage = MemoryTreeStorage()
    store = OutlineStore(_nodes(), storage=storage)

    assert store.indent("b")
    assert not store.indent("a")
    assert storage.save_count == 1

    reopened = OutlineStore(storage=storage)
    assert reopened.nodes == store.nodes


def test_invalid_stored_snapshot_falls_back_to_sample() -> None:
    """It should ignore a stored snapshot that breaks the invariants."""

    broken = (TreeNode(id="orphan", text="x", parent_id="nowhere", order=0),)
    store = OutlineStore(storage=MemoryTreeStorage(broken), id_factory=sequential_id_factory())

    assert store.nodes == create_sample_data(sequential_id_factory())
    assert find_problems(store.nodes) == []


class _BrokenStorage(MemoryTreeStorage):
    def save(self, nodes: NodeList) -> None:
        raise OSError("disk full")


def test_failed_save_keeps_the_edit() -> None:
    """It should keep an applied edit in memory when saving it fails."""

    store = OutlineStore(_nodes(), storage=_BrokenStorage())

    assert store.indent("b")
    assert _child_ids(store, "a") == ["a1", "b"]
    assert store.can_undo()
