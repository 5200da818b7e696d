"""treesync: one outline model behind a text outliner and a tree diagram."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
