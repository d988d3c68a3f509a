"""Column projection for table scans.

A table read requests only the columns the consumer needs, in the order it
asks for them, so every returned row holds the projected columns
positionally: value ``i`` of a row belongs to ``projected_columns[i]``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from spanbridge.schema import ColumnInfo


def _resolve(columns: Sequence[ColumnInfo], projected_columns: Sequence[int]) -> list[ColumnInfo]:
    resolved = []
    for index in projected_columns:
        if not 0 <= index < len(columns):
            raise ValueError(
                f"projected column index {index} out of range for {len(columns)} columns"
            )
        resolved.append(columns[index])
    return resolved


def project_column_names(
    columns: Sequence[ColumnInfo], projected_columns: Sequence[int]
) -> list[str]:
    """Return the names of the projected columns, in projection order."""
    return [column.name for column in _resolve(columns, projected_columns)]


def project_rows(
    rows: Sequence[Sequence[Any]],
    columns: Sequence[ColumnInfo],
    projected_columns: Sequence[int],
) -> list[tuple[ColumnInfo, list[Any]]]:
    """Turn rows read in projection order into output column vectors.

    Each entry pairs the column's metadata with its values across all rows.
    An empty batch yields no columns at all.
    """
    if not rows:
        return []
    selected = _resolve(columns, projected_columns)
    width = len(selected)
    for row_number, row in enumerate(rows):
        if len(row) < width:
            raise ValueError(
                f"row {row_number} has {len(row)} values, expected {width}"
            )
    return [
        (column, [row[position] for row in rows])
        for position, column in enumerate(selected)
    ]