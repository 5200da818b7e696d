"""ID utilities."""

from __future__ import annotations

import itertools
import uuid
from collections.abc import Callable

IdFactory = Callable[[], str]


def generate_id() -> str:
    """Return a fresh globally-unique node id (UUID4 string)."""

    return str(uuid.uuid4())


def sequential_id_factory(prefix: str = "n") -> IdFactory:
    """Return a factory yielding predictable ids.

    Args:
        prefix: ID prefix.

    Returns:
        A callable producing `n1`, `n2`, ... on each call.
    """

    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


def session_id() -> str:
    """Short id used to tag a store session in log records."""

    return uuid.uuid4().hex[:8]
