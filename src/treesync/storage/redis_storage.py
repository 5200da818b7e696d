"""Redis-based snapshot storage.

Optional alternative to the file store for deployments where several API processes share
one outline.
"""

from __future__ import annotations

from dataclasses import dataclass

import redis
from pydantic import ValidationError

from treesync.logging import get_logger
from treesync.models.tree import NodeList, Snapshot, snapshot_from_json, snapshot_to_json
from treesync.storage.protocol import TreeStorage

logger = get_logger(__name__)


@dataclass
class RedisTreeStorage(TreeStorage):
    """Stores the snapshot JSON under a single Redis key."""

    redis_url: str
    key_prefix: str

    def __post_init__(self) -> None:
        self._client = redis.Redis.from_url(self.redis_url, decode_responses=True)
        self._nodes_key = f"{self.key_prefix}:nodes"

    def save(self, nodes: NodeList) -> None:
        self._client.set(self._nodes_key, snapshot_to_json(nodes).decode("utf-8"))

    def load(self) -> Snapshot | None:
        payload = self._client.get(self._nodes_key)
        if payload is None:
            return None
        try:
            return snapshot_from_json(payload)
        except ValidationError as e:
            logger.warning("Ignoring malformed snapshot at %s: %s", self._nodes_key, e)
            return None

    def clear(self) -> None:
        self._client.delete(self._nodes_key)
