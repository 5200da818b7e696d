"""Persistence collaborators for node snapshots."""

from __future__ import annotations

from treesync.config import Settings
from treesync.storage.file_storage import FileTreeStorage
from treesync.storage.memory import MemoryTreeStorage
from treesync.storage.protocol import TreeStorage

__all__ = ["FileTreeStorage", "MemoryTreeStorage", "TreeStorage", "build_storage"]


def build_storage(settings: Settings) -> TreeStorage:
    """Create the storage backend selected by settings."""

    if settings.storage_backend == "redis":
        from treesync.storage.redis_storage import RedisTreeStorage

        return RedisTreeStorage(redis_url=settings.redis_url, key_prefix=settings.redis_key_prefix)
    if settings.storage_backend == "memory":
        return MemoryTreeStorage()
    return FileTreeStorage(settings.storage_path)
