"""Bounded undo/redo history of tree snapshots."""

from __future__ import annotations

from collections import deque

from treesync.models.tree import Snapshot

DEFAULT_HISTORY_LIMIT = 50


class History:
    """Two bounded stacks of snapshots.

    `past` holds snapshots taken before each structural edit; `future` holds snapshots
    undone since the last edit. Both evict their oldest entry once `capacity` is reached.
    Label-only edits are never recorded here.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_LIMIT) -> None:
        if capacity < 1:
            raise ValueError("history capacity must be at least 1")
        self.capacity = capacity
        self._past: deque[Snapshot] = deque(maxlen=capacity)
        self._future: deque[Snapshot] = deque(maxlen=capacity)

    @property
    def past(self) -> list[Snapshot]:
        """Recorded snapshots, oldest first."""

        return list(self._past)

    @property
    def future(self) -> list[Snapshot]:
        """Redoable snapshots, next redo first."""

        return list(reversed(self._future))

    def record(self, before: Snapshot) -> None:
        """Record the pre-edit snapshot of a structural edit; invalidates redo."""

        self._past.append(before)
        self._future.clear()

    def undo(self, current: Snapshot) -> Snapshot | None:
        """Step back. Returns the snapshot to adopt, or None if there is nothing to undo."""

        if not self._past:
            return None
        previous = self._past.pop()
        self._future.append(current)
        return previous

    def redo(self, current: Snapshot) -> Snapshot | None:
        """Step forward. Returns the snapshot to adopt, or None if there is nothing to redo."""

        if not self._future:
            return None
        following = self._future.pop()
        self._past.append(current)
        return following

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()

    def stats(self) -> dict[str, int]:
        """Return basic stats."""

        return {"past": len(self._past), "future": len(self._future), "capacity": self.capacity}
