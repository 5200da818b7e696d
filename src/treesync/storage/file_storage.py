"""JSON file storage for node snapshots."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import ValidationError

from treesync.logging import get_logger
from treesync.models.tree import NodeList, Snapshot, snapshot_from_json, snapshot_to_json
from treesync.storage.protocol import TreeStorage

logger = get_logger(__name__)


class FileTreeStorage(TreeStorage):
    """Stores the snapshot as a JSON array in a single file.

    Writes go to a sibling temp file that then replaces the target, so a crash mid-write
    never leaves a truncated file behind.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def save(self, nodes: NodeList) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("wb") as f:
            f.write(snapshot_to_json(nodes))
            f.flush()
            os.fsync(f.fileno())
        tmp.replace(self.path)
        logger.debug("Saved %d nodes to %s", len(nodes), self.path)

    def load(self) -> Snapshot | None:
        try:
            payload = self.path.read_bytes()
        except FileNotFoundError:
            return None

        try:
            nodes = snapshot_from_json(payload)
        except ValidationError as e:
            logger.warning("Ignoring malformed snapshot in %s: %s", self.path, e)
            return None

        logger.info("Loaded %d nodes from %s", len(nodes), self.path)
        return nodes

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
