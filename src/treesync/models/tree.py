"""Tree node models.

The outline is stored as a flat list of nodes linked by `parent_id`. Nesting is derived on
demand by the tree operations; nothing stores child lists.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from pydantic import BaseModel, ConfigDict, TypeAdapter

ROOT_NODE_ID = "__root__"
ROOT_NODE_TEXT = "__root__"


class TreeNode(BaseModel):
    """A single outline node.

    Instances are frozen; edits produce copies via `model_copy(update=...)`.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    parent_id: str | None = None
    order: float = 0


Snapshot = tuple[TreeNode, ...]
NodeList = Sequence[TreeNode]

snapshot_adapter: TypeAdapter[list[TreeNode]] = TypeAdapter(list[TreeNode])


class FailureReason(str, Enum):
    """Why a structural edit produced no new snapshot."""

    NOT_FOUND = "not_found"
    INVALID_OPERATION = "invalid_operation"
    NO_OP = "no_op"


def make_root() -> TreeNode:
    """Return the hidden forest-root sentinel."""

    return TreeNode(id=ROOT_NODE_ID, text=ROOT_NODE_TEXT, parent_id=None, order=0)


def snapshot_to_json(nodes: NodeList) -> bytes:
    return snapshot_adapter.dump_json(list(nodes))


def snapshot_from_json(payload: str | bytes) -> Snapshot:
    return tuple(snapshot_adapter.validate_json(payload))
