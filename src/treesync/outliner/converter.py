"""Conversion between node snapshots and indentation-based outline text.

One line is one node. Depth is expressed by leading indent characters, one per level:

    Root 1
     Child 1.1
      Child 1.1.1
     Child 1.2
    Root 2

Parsing accepts either spaces or tabs (the unit is taken from the first indented line);
formatting always writes a single space per level.
"""

from __future__ import annotations

from treesync.logging import get_logger
from treesync.models.tree import ROOT_NODE_ID, NodeList, Snapshot, TreeNode, make_root
from treesync.tree.operations import get_flattened_order
from treesync.utils.ids import IdFactory, generate_id

logger = get_logger(__name__)

FORMAT_INDENT = " "


def _leading_whitespace(line: str) -> str:
    return line[: len(line) - len(line.lstrip())]


def detect_indent_unit(lines: list[str]) -> str:
    """Indent unit used by the outline: a tab or a space (the default)."""

    for line in lines:
        indent = _leading_whitespace(line)
        if indent:
            return "\t" if indent[0] == "\t" else " "
    return " "


def parse_outline(text: str, id_factory: IdFactory = generate_id) -> Snapshot:
    """Parse outline text into a snapshot (sentinel included).

    Blank lines are skipped. Inconsistent indentation never raises: a line's depth is simply
    the number of indent units in its leading whitespace.
    """

    lines = [line for line in text.split("\n") if line.strip()]
    nodes: list[TreeNode] = [make_root()]
    if not lines:
        return tuple(nodes)

    unit = detect_indent_unit(lines)
    stack: list[tuple[int, str]] = []
    child_counts: dict[str, int] = {}

    for line in lines:
        depth = _leading_whitespace(line).count(unit)

        while stack and stack[-1][0] >= depth:
            stack.pop()

        parent_id = stack[-1][1] if stack else ROOT_NODE_ID
        order = child_counts.get(parent_id, 0)
        child_counts[parent_id] = order + 1

        node = TreeNode(id=id_factory(), text=line.strip(), parent_id=parent_id, order=order)
        nodes.append(node)
        stack.append((depth, node.id))

    logger.debug("Parsed %d outline lines (indent unit %r)", len(lines), unit)
    return tuple(nodes)


def format_outline(nodes: NodeList) -> str:
    """Render a snapshot as outline text in display order."""

    depths: dict[str, int] = {}
    lines: list[str] = []
    # Pre-order visits every parent before its children.
    for node in get_flattened_order(nodes):
        depth = 0 if node.parent_id == ROOT_NODE_ID else depths[node.parent_id] + 1
        depths[node.id] = depth
        lines.append(f"{FORMAT_INDENT * depth}{node.text}")
    return "\n".join(lines)
