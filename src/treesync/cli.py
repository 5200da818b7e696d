"""CLI entrypoints for treesync."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.tree import Tree

from treesync.config import Settings, load_settings
from treesync.logging import configure_logging, get_logger
from treesync.models.tree import ROOT_NODE_ID, FailureReason
from treesync.outliner.converter import format_outline, parse_outline
from treesync.storage import build_storage
from treesync.store import OutlineStore
from treesync.tree.operations import get_children

app = typer.Typer(add_completion=False, help="treesync outline / tree editor CLI")
logger = get_logger(__name__)
console = Console()

_FAILURE_MESSAGES = {
    FailureReason.NOT_FOUND: "node not found",
    FailureReason.INVALID_OPERATION: "operation not allowed (it would break the tree structure)",
    FailureReason.NO_OP: "nothing to do",
}


def _open_store(settings: Settings | None = None) -> OutlineStore:
    settings = settings or load_settings()
    configure_logging(settings.log_level, show_locals=settings.app_env == "dev")
    return OutlineStore(storage=build_storage(settings), history_limit=settings.history_limit)


def _resolve(store: OutlineStore, ref: str) -> str:
    """Accept a full node id or an unambiguous id prefix."""

    if store.get_node(ref) is not None and ref != ROOT_NODE_ID:
        return ref
    matches = [n.id for n in store.nodes if n.id.startswith(ref) and n.id != ROOT_NODE_ID]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise typer.BadParameter(f"No node matches {ref!r}.")
    raise typer.BadParameter(f"{ref!r} is ambiguous ({len(matches)} nodes match).")


def _finish(store: OutlineStore, ok: bool, action: str) -> None:
    if ok:
        logger.info("CLI %s applied", action)
        return
    reason = store.last_failure or FailureReason.NO_OP
    typer.secho(f"{action}: {_FAILURE_MESSAGES[reason]}", err=True, fg=typer.colors.RED)
    raise typer.Exit(code=1)


@app.command()
def show(ids: bool = typer.Option(True, "--ids/--no-ids", help="Show node id prefixes")) -> None:
    """Print the stored outline as a tree."""

    store = _open_store()
    tree = Tree("[bold]outline[/bold]")

    def visit(branch: Tree, parent_id: str) -> None:
        for child in get_children(store.nodes, parent_id):
            label = child.text or "[dim]...[/dim]"
            if ids:
                label = f"{label} [dim]{child.id[:8]}[/dim]"
            visit(branch.add(label), child.id)

    visit(tree, ROOT_NODE_ID)
    console.print(tree)


@app.command("export")
def export_outline(
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
) -> None:
    """Export the stored outline as indented text."""

    text = _open_store().export_text()
    if output is None:
        typer.echo(text)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text + "\n", encoding="utf-8")
    typer.echo(str(output))


@app.command("import")
def import_outline(source: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Replace the stored outline with an indented text file."""

    store = _open_store()
    store.import_text(source.read_text(encoding="utf-8"))
    typer.echo(f"Imported {len(store.nodes) - 1} nodes")


@app.command()
def normalize(
    source: Path = typer.Argument(..., exists=True, dir_okay=False),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file (default: stdout)"),
) -> None:
    """Rewrite an outline file with single-space indentation (storage untouched)."""

    text = format_outline(parse_outline(source.read_text(encoding="utf-8")))
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")


@app.command()
def add(
    text: str = typer.Argument("", help="Label of the new node"),
    after: str | None = typer.Option(None, "--after", "-a", help="Insert after this node"),
) -> None:
    """Add a node after another one (default: at the end of the top level)."""

    store = _open_store()
    if after is not None:
        anchor = _resolve(store, after)
    else:
        top = get_children(store.nodes, ROOT_NODE_ID)
        anchor = top[-1].id if top else ROOT_NODE_ID
    new_id = store.add_after(anchor, text)
    _finish(store, new_id is not None, "add")
    typer.echo(new_id)


@app.command()
def rename(node: str, text: str) -> None:
    """Change a node's label."""

    store = _open_store()
    _finish(store, store.update_node_text(_resolve(store, node), text), "rename")


@app.command()
def indent(node: str) -> None:
    """Make a node the last child of its previous sibling."""

    store = _open_store()
    _finish(store, store.indent(_resolve(store, node)), "indent")


@app.command()
def outdent(node: str) -> None:
    """Move a node up one level, right after its parent."""

    store = _open_store()
    _finish(store, store.outdent(_resolve(store, node)), "outdent")


@app.command()
def delete(node: str) -> None:
    """Delete a node; its children take its place."""

    store = _open_store()
    _finish(store, store.remove(_resolve(store, node)), "delete")


@app.command()
def move(
    node: str,
    before: str | None = typer.Option(None, "--before", help="Place as sibling before this node"),
    after: str | None = typer.Option(None, "--after", help="Place as sibling after this node"),
    into: str | None = typer.Option(None, "--into", help="Place as first child of this node"),
    top: bool = typer.Option(False, "--top", help="Move to the end of the top level"),
) -> None:
    """Move a node relative to another one."""

    chosen = [opt for opt in (before, after, into) if opt is not None]
    if len(chosen) + int(top) != 1:
        raise typer.BadParameter("Give exactly one of --before, --after, --into or --top.")

    store = _open_store()
    node_id = _resolve(store, node)
    if before is not None:
        ok = store.move_before(node_id, _resolve(store, before))
    elif after is not None:
        ok = store.move_after(node_id, _resolve(store, after))
    elif into is not None:
        ok = store.move_as_first_child(node_id, _resolve(store, into))
    else:
        ok = store.move(node_id, ROOT_NODE_ID)
    _finish(store, ok, "move")


if __name__ == "__main__":
    app()
