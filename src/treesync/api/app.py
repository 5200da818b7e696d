"""FastAPI app exposing one outline store to both editor views."""

from __future__ import annotations

from typing import Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from treesync import __version__
from treesync.config import load_settings
from treesync.drag.calculator import drop_candidates, resolve_drop_target
from treesync.logging import configure_logging, get_logger
from treesync.models.drag import DropTarget, NodeRect
from treesync.models.tree import FailureReason, TreeNode
from treesync.storage import build_storage
from treesync.store import OutlineStore
from treesync.tree.validation import TreeValidationError, validate_snapshot


class OutlineText(BaseModel):
    """Outline in indented text form."""

    text: str


class TextUpdate(BaseModel):
    text: str


class AddRequest(BaseModel):
    text: str = ""


class MoveRequest(BaseModel):
    """Structural move; `parent` reparents under `target_id` at `insert_order` (default last)."""

    mode: Literal["before", "after", "child", "parent"]
    target_id: str
    insert_order: float | None = None


class DropRequest(BaseModel):
    """A released drag gesture: the dragged rectangle plus the current layout."""

    dragged: NodeRect
    layout: list[NodeRect] = Field(default_factory=list)


class StateResponse(BaseModel):
    nodes: list[TreeNode]
    selected_node_id: str | None
    can_undo: bool
    can_redo: bool


class DropResponse(StateResponse):
    target: DropTarget | None


_STATUS_FOR_FAILURE = {
    FailureReason.NOT_FOUND: 404,
    FailureReason.INVALID_OPERATION: 409,
    FailureReason.NO_OP: 409,
}


def create_app(store: OutlineStore | None = None) -> FastAPI:
    """Create FastAPI app.

    Args:
        store: Store to serve. When omitted, one is built from settings.
    """

    settings = load_settings()
    configure_logging(settings.log_level, show_locals=settings.app_env == "dev")
    logger = get_logger(__name__)

    if store is None:
        store = OutlineStore(storage=build_storage(settings), history_limit=settings.history_limit)

    app = FastAPI(title="treesync", version=__version__, debug=settings.app_env == "dev")
    app.state.store = store

    def state() -> StateResponse:
        return StateResponse(
            nodes=list(store.nodes),
            selected_node_id=store.selected_node_id,
            can_undo=store.can_undo(),
            can_redo=store.can_redo(),
        )

    def check(ok: bool, action: str) -> StateResponse:
        if not ok:
            reason = store.last_failure or FailureReason.NO_OP
            logger.info("API %s refused", action, extra={"reason": reason.value})
            raise HTTPException(status_code=_STATUS_FOR_FAILURE[reason], detail=reason.value)
        return state()

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/nodes")
    def get_nodes() -> StateResponse:
        return state()

    @app.put("/nodes")
    def put_nodes(nodes: list[TreeNode]) -> StateResponse:
        try:
            snapshot = validate_snapshot(nodes)
        except TreeValidationError as e:
            raise HTTPException(status_code=422, detail=e.problems) from e
        store.set_nodes(snapshot)
        return state()

    @app.get("/outline")
    def get_outline() -> OutlineText:
        return OutlineText(text=store.export_text())

    @app.put("/outline")
    def put_outline(req: OutlineText) -> StateResponse:
        logger.info("API outline import", extra={"text_len": len(req.text)})
        store.import_text(req.text)
        return state()

    @app.patch("/nodes/{node_id}")
    def patch_node(node_id: str, req: TextUpdate) -> StateResponse:
        return check(store.update_node_text(node_id, req.text), "rename")

    @app.post("/nodes/{node_id}/after")
    def add_after(node_id: str, req: AddRequest) -> StateResponse:
        return check(store.add_after(node_id, req.text) is not None, "add_after")

    @app.post("/nodes/{node_id}/indent")
    def indent(node_id: str) -> StateResponse:
        return check(store.indent(node_id), "indent")

    @app.post("/nodes/{node_id}/outdent")
    def outdent(node_id: str) -> StateResponse:
        return check(store.outdent(node_id), "outdent")

    @app.delete("/nodes/{node_id}")
    def delete(node_id: str) -> StateResponse:
        return check(store.remove(node_id), "delete")

    @app.post("/nodes/{node_id}/move")
    def move(node_id: str, req: MoveRequest) -> StateResponse:
        if req.mode == "before":
            ok = store.move_before(node_id, req.target_id)
        elif req.mode == "after":
            ok = store.move_after(node_id, req.target_id)
        elif req.mode == "child":
            ok = store.move_as_first_child(node_id, req.target_id)
        else:
            ok = store.move(node_id, req.target_id, req.insert_order)
        return check(ok, "move")

    @app.post("/drop")
    def drop(req: DropRequest) -> DropResponse:
        target = resolve_drop_target(req.dragged, drop_candidates(req.layout, req.dragged.id))
        check(store.drop(req.dragged.id, target), "drop")
        return DropResponse(**state().model_dump(), target=target)

    @app.post("/undo")
    def undo() -> StateResponse:
        store.undo()
        return state()

    @app.post("/redo")
    def redo() -> StateResponse:
        store.redo()
        return state()

    @app.get("/history")
    def history() -> dict[str, int]:
        return store.history.stats()

    return app
