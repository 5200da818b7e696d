"""Outline text import/export."""

from __future__ import annotations

from treesync.outliner.converter import detect_indent_unit, format_outline, parse_outline

__all__ = ["detect_indent_unit", "format_outline", "parse_outline"]
