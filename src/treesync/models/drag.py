"""Drag-and-drop geometry models."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict

from treesync.models.tree import Snapshot

InsertMode = Literal["before", "after", "child"]


class NodeRect(BaseModel):
    """On-screen placement of a rendered node.

    `x`/`y` are the left-top corner; the width is approximated from `label`.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    x: float
    y: float
    label: str = ""


class DropTarget(BaseModel):
    """Structural intent inferred from a drag gesture."""

    model_config = ConfigDict(frozen=True)

    target_id: str
    insert_mode: InsertMode


# Supplied by the rendering side: snapshot -> rectangles of every laid-out node.
LayoutFunction = Callable[[Snapshot], Sequence[NodeRect]]
