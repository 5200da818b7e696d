"""Outline store: the caller-owned state handle shared by the outline and diagram views.

The store owns the current snapshot, the selection and the undo history. Every structural
edit goes through `_commit`, which records history, notifies subscribers and persists the
new snapshot. Views subscribe to the same store instance instead of reaching for a global.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from treesync.drag.calculator import drop_outcome
from treesync.history import DEFAULT_HISTORY_LIMIT, History
from treesync.logging import get_logger, log_exception, session_context
from treesync.models.drag import DropTarget
from treesync.models.tree import (
    ROOT_NODE_ID,
    FailureReason,
    NodeList,
    Snapshot,
    TreeNode,
    make_root,
)
from treesync.outliner.converter import format_outline, parse_outline
from treesync.storage.protocol import TreeStorage
from treesync.tree.operations import (
    Outcome,
    add_after_outcome,
    delete_outcome,
    get_children,
    get_flattened_order,
    indent_outcome,
    move_after_outcome,
    move_before_outcome,
    move_first_child_outcome,
    move_outcome,
    outdent_outcome,
)
from treesync.tree.validation import find_problems
from treesync.utils.ids import IdFactory, generate_id, session_id

logger = get_logger(__name__)

Listener = Callable[[Snapshot], None]


def create_sample_data(id_factory: IdFactory = generate_id) -> Snapshot:
    """Starter outline shown when nothing has been persisted yet."""

    r1, c11, c111, c12, r2, c21, c22 = (id_factory() for _ in range(7))
    return (
        make_root(),
        TreeNode(id=r1, text="Root 1", parent_id=ROOT_NODE_ID, order=0),
        TreeNode(id=c11, text="Child 1.1", parent_id=r1, order=0),
        TreeNode(id=c111, text="Child 1.1.1", parent_id=c11, order=0),
        TreeNode(id=c12, text="Child 1.2", parent_id=r1, order=1),
        TreeNode(id=r2, text="Root 2", parent_id=ROOT_NODE_ID, order=1),
        TreeNode(id=c21, text="Child 2.1", parent_id=r2, order=0),
        TreeNode(id=c22, text="Child 2.2", parent_id=r2, order=1),
    )


def load_initial_nodes(storage: TreeStorage | None, id_factory: IdFactory = generate_id) -> Snapshot:
    """Stored snapshot if it is usable, otherwise sample data."""

    saved = storage.load() if storage is not None else None
    if saved:
        problems = find_problems(saved)
        if not problems:
            return saved
        logger.warning("Stored outline rejected: %s", "; ".join(problems))
    return create_sample_data(id_factory)


class OutlineStore:
    """Mutable handle around immutable snapshots."""

    def __init__(
        self,
        nodes: Iterable[TreeNode] | None = None,
        *,
        storage: TreeStorage | None = None,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        id_factory: IdFactory = generate_id,
    ) -> None:
        self._storage = storage
        self._id_factory = id_factory
        self._nodes: Snapshot = (
            tuple(nodes) if nodes is not None else load_initial_nodes(storage, id_factory)
        )
        self._saved: Snapshot | None = None
        self._listeners: list[Listener] = []
        self.history = History(history_limit)
        self.selected_node_id: str | None = None
        self.last_failure: FailureReason | None = None
        self.session = session_id()

    # ---------- State access ----------

    @property
    def nodes(self) -> Snapshot:
        return self._nodes

    def get_node(self, node_id: str) -> TreeNode | None:
        return next((n for n in self._nodes if n.id == node_id), None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with every new snapshot. Returns an unsubscribe callable."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _adopt(self, nodes: Snapshot) -> None:
        self._nodes = nodes
        for listener in list(self._listeners):
            listener(nodes)
        self._persist()

    def _persist(self) -> None:
        if self._storage is None or self._nodes == self._saved:
            return
        try:
            self._storage.save(self._nodes)
        except Exception:
            # A failed save must not undo an edit the user already sees.
            log_exception(logger, "Failed to save outline", session=self.session, nodes=len(self._nodes))
            return
        self._saved = self._nodes

    def _commit(self, action: str, outcome: Outcome) -> bool:
        with session_context(session=self.session, action=action):
            if isinstance(outcome, FailureReason):
                self.last_failure = outcome
                logger.debug("%s refused: %s", action, outcome.value)
                return False

            self.last_failure = None
            self.history.record(self._nodes)
            self._adopt(outcome)
            logger.debug("%s applied (%d nodes)", action, len(outcome))
            return True

    # ---------- Label edits (not recorded in history) ----------

    def update_node_text(self, node_id: str, text: str) -> bool:
        if node_id == ROOT_NODE_ID or self.get_node(node_id) is None:
            self.last_failure = FailureReason.NOT_FOUND
            return False
        self.last_failure = None
        self._adopt(
            tuple(n.model_copy(update={"text": text}) if n.id == node_id else n for n in self._nodes)
        )
        return True

    # ---------- Structural edits ----------

    def indent(self, node_id: str) -> bool:
        return self._commit("indent", indent_outcome(self._nodes, node_id))

    def outdent(self, node_id: str) -> bool:
        return self._commit("outdent", outdent_outcome(self._nodes, node_id))

    def add_after(self, after_id: str, text: str = "") -> str | None:
        """Insert an empty (or `text`) node after `after_id` and select it.

        Returns the new id, or None when nothing was inserted.
        """

        new_id = self._id_factory()
        # Used as given only when `after_id` is unknown: last top-level node.
        new_node = TreeNode(
            id=new_id,
            text=text,
            parent_id=ROOT_NODE_ID,
            order=max((n.order for n in get_children(self._nodes, ROOT_NODE_ID)), default=-1) + 1,
        )
        if not self._commit("add_after", add_after_outcome(self._nodes, after_id, new_node)):
            return None
        self.selected_node_id = new_id
        return new_id

    def remove(self, node_id: str) -> bool:
        if node_id == ROOT_NODE_ID:
            self.last_failure = FailureReason.INVALID_OPERATION
            return False
        if not self._commit("remove", delete_outcome(self._nodes, node_id)):
            return False
        if self.selected_node_id == node_id:
            self.selected_node_id = None
        return True

    def remove_and_reselect(self, node_id: str) -> bool:
        """Delete a node and move the selection to its neighbour in display order.

        The previous node is preferred; the next one is used when deleting the first node.
        """

        flat = [n.id for n in get_flattened_order(self._nodes)]
        neighbour: str | None = None
        if node_id in flat:
            idx = flat.index(node_id)
            if idx > 0:
                neighbour = flat[idx - 1]
            elif len(flat) > 1:
                neighbour = flat[1]
        if not self.remove(node_id):
            return False
        self.selected_node_id = neighbour
        return True

    def move(self, node_id: str, new_parent_id: str, insert_order: float | None = None) -> bool:
        return self._commit("move", move_outcome(self._nodes, node_id, new_parent_id, insert_order))

    def move_before(self, node_id: str, target_id: str) -> bool:
        return self._commit("move_before", move_before_outcome(self._nodes, node_id, target_id))

    def move_after(self, node_id: str, target_id: str) -> bool:
        return self._commit("move_after", move_after_outcome(self._nodes, node_id, target_id))

    def move_as_first_child(self, node_id: str, target_id: str) -> bool:
        return self._commit("move_as_first_child", move_first_child_outcome(self._nodes, node_id, target_id))

    def drop(self, node_id: str, target: DropTarget | None) -> bool:
        """Apply the result of drop-target resolution for `node_id`."""

        return self._commit("drop", drop_outcome(self._nodes, node_id, target))

    # ---------- Undo / Redo ----------

    def undo(self) -> bool:
        previous = self.history.undo(self._nodes)
        if previous is None:
            return False
        self._adopt(previous)
        return True

    def redo(self) -> bool:
        following = self.history.redo(self._nodes)
        if following is None:
            return False
        self._adopt(following)
        return True

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # ---------- Selection / navigation ----------

    def set_selected_node_id(self, node_id: str | None) -> None:
        self.selected_node_id = node_id

    def _step_selection(self, delta: int) -> str | None:
        flat = [n.id for n in get_flattened_order(self._nodes)]
        if self.selected_node_id not in flat:
            return self.selected_node_id
        idx = flat.index(self.selected_node_id) + delta
        if 0 <= idx < len(flat):
            self.selected_node_id = flat[idx]
        return self.selected_node_id

    def select_previous(self) -> str | None:
        return self._step_selection(-1)

    def select_next(self) -> str | None:
        return self._step_selection(1)

    # ---------- Whole-snapshot operations ----------

    def set_nodes(self, nodes: NodeList) -> None:
        """Replace the snapshot wholesale (not recorded in history)."""

        self._adopt(tuple(nodes))

    def import_text(self, text: str) -> None:
        """Replace the outline with parsed text; stored state is discarded first."""

        if self._storage is not None:
            self._storage.clear()
            self._saved = None
        self.selected_node_id = None
        self._adopt(parse_outline(text, self._id_factory))

    def export_text(self) -> str:
        return format_outline(self._nodes)
