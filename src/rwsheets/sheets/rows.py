"""Row sequence helpers."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, TypeVar

Row = TypeVar("Row")


def remove_row(rows: Sequence[Row], index: int) -> list[Row]:
    """Remove the row at a zero-based position.

    Rows after ``index`` shift down by one. An index outside
    ``0 <= index < len(rows)`` is a no-op. The input is not modified.

    Args:
        rows: Row records, e.g. ``RowData`` dicts from :func:`get_sheet_data`.
        index: Position of the row to drop.

    Returns:
        A new list of rows.
    """
    if index < 0 or index >= len(rows):
        return list(rows)

    return [*rows[:index], *rows[index + 1 :]]


def row(cells: Sequence[dict[str, Any]]) -> dict[str, Any]:
    """Wrap cells in a ``RowData`` dict."""
    return {"values": list(cells)}
