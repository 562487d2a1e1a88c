"""
Database Utilities
==================

Shared utilities for database operations across repositories and ops mixins.
"""

from typing import Any, Sequence


def row_to_dict(row) -> dict[str, Any]:
    """
    Convert database row to dictionary.

    Handles multiple row types:
    - None: Returns empty dict
    - dict: Returns as-is
    - Row object: Converts keys to dict

    Args:
        row: Database row (sqlite3.Row, dict, or None)

    Returns:
        Dictionary representation of the row
    """
    if row is None:
        return {}
    if isinstance(row, dict):
        return row
    # Handle sqlite3.Row or similar objects with keys() method
    return {k: row[k] for k in row.keys()}


def in_placeholders(values: Sequence[Any]) -> str:
    """
    Build the ``?, ?, ?`` list for an ``IN (...)`` clause.

    Only placeholders are interpolated into SQL; the values themselves are
    always passed as parameters.

    Examples:
        >>> sql = f"SELECT * FROM Students WHERE student_id IN ({in_placeholders(ids)})"
        >>> db.execute(sql, tuple(ids))
    """
    if not values:
        raise ValueError("IN clause requires at least one value")
    return ", ".join("?" for _ in values)
