"""Protocol for pluggable snapshot persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod

from treesync.models.tree import NodeList, Snapshot


class TreeStorage(ABC):
    """Opaque save/load of the node collection.

    Implementations know nothing about tree structure; validating what `load` returns is the
    caller's job.
    """

    @abstractmethod
    def save(self, nodes: NodeList) -> None:
        """Persist a snapshot, replacing whatever was stored before."""

    @abstractmethod
    def load(self) -> Snapshot | None:
        """Return the stored snapshot, or None when nothing usable is stored."""

    @abstractmethod
    def clear(self) -> None:
        """Forget the stored snapshot."""
