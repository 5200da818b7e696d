"""In-process storage, useful for tests and the default API app."""

from __future__ import annotations

from treesync.models.tree import NodeList, Snapshot
from treesync.storage.protocol import TreeStorage


class MemoryTreeStorage(TreeStorage):
    """Keeps the last saved snapshot in memory."""

    def __init__(self, nodes: NodeList | None = None) -> None:
        self._nodes: Snapshot | None = tuple(nodes) if nodes is not None else None
        self.save_count = 0

    def save(self, nodes: NodeList) -> None:
        self._nodes = tuple(nodes)
        self.save_count += 1

    def load(self) -> Snapshot | None:
        return self._nodes

    def clear(self) -> None:
        self._nodes = None
