"""Structural invariant checks for snapshots that come from outside the engine."""

from __future__ import annotations

from collections import Counter, defaultdict

from treesync.models.tree import ROOT_NODE_ID, NodeList, Snapshot


class TreeValidationError(ValueError):
    """Raised when a snapshot violates the forest invariants."""

    def __init__(self, problems: list[str]) -> None:
        super().__init__("; ".join(problems))
        self.problems = problems


def find_problems(nodes: NodeList, *, require_dense_orders: bool = False) -> list[str]:
    """Return a human-readable list of invariant violations (empty when valid)."""

    problems: list[str] = []

    dup_ids = [i for i, c in Counter(n.id for n in nodes).items() if c > 1]
    if dup_ids:
        problems.append(f"duplicate ids: {sorted(dup_ids)}")

    roots = [n for n in nodes if n.parent_id is None]
    if len(roots) != 1:
        problems.append(f"expected exactly one parentless node, found {len(roots)}")
    elif roots[0].id != ROOT_NODE_ID:
        problems.append(f"parentless node {roots[0].id!r} is not the forest root")

    by_id = {n.id: n for n in nodes}
    for n in nodes:
        if n.parent_id is not None and n.parent_id not in by_id:
            problems.append(f"node {n.id!r} references missing parent {n.parent_id!r}")

    for n in nodes:
        seen = {n.id}
        current = n
        while current.parent_id is not None and current.parent_id in by_id:
            if current.parent_id in seen:
                problems.append(f"cycle through node {n.id!r}")
                break
            seen.add(current.parent_id)
            current = by_id[current.parent_id]

    groups: dict[str | None, list[float]] = defaultdict(list)
    for n in nodes:
        groups[n.parent_id].append(n.order)
    for parent_id, orders in groups.items():
        if len(set(orders)) != len(orders):
            problems.append(f"duplicate sibling orders under {parent_id!r}")
        elif require_dense_orders and sorted(orders) != list(range(len(orders))):
            problems.append(f"orders under {parent_id!r} are not 0..{len(orders) - 1}")

    return problems


def validate_snapshot(nodes: NodeList, *, require_dense_orders: bool = False) -> Snapshot:
    """Return `nodes` as a snapshot, or raise `TreeValidationError`."""

    problems = find_problems(nodes, require_dense_orders=require_dense_orders)
    if problems:
        raise TreeValidationError(problems)
    return tuple(nodes)
