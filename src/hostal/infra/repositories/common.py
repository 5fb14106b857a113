"""Shared SQL helpers for the repositories.

Table and column names are never taken from user input: callers pass a
whitelist and anything outside it raises.
"""

from __future__ import annotations

from typing import Any, Iterable

from psycopg2.extensions import cursor as PgCursor


def build_set_clause(fields: dict[str, Any], allowed: Iterable[str]) -> tuple[str, list[Any]]:
    """Return ("col_a = %s, col_b = %s", [a, b]) for a partial UPDATE.

    Raises:
        ValueError: If a field is not in allowed.
    """
    allowed = set(allowed)
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown columns: {', '.join(sorted(unknown))}")

    columns = sorted(fields)
    clause = ", ".join(f"{col} = %s" for col in columns)
    return clause, [fields[col] for col in columns]


def update_row(
    cur: PgCursor,
    *,
    table: str,
    row_id: int,
    fields: dict[str, Any],
    allowed: Iterable[str],
    returning: str,
) -> tuple[Any, ...] | None:
    """UPDATE one row by id and return the selected columns (None if missing)."""
    clause, params = build_set_clause(fields, allowed)
    cur.execute(
        f"""
        UPDATE {table}
        SET {clause}, updated_at = now()
        WHERE id = %s
        RETURNING {returning}
        """,
        (*params, row_id),
    )
    return cur.fetchone()


def insert_row(
    cur: PgCursor,
    *,
    table: str,
    fields: dict[str, Any],
    allowed: Iterable[str],
    returning: str,
) -> tuple[Any, ...]:
    """INSERT one row and return the selected columns."""
    allowed = set(allowed)
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown columns: {', '.join(sorted(unknown))}")

    columns = sorted(fields)
    placeholders = ", ".join(["%s"] * len(columns))
    cur.execute(
        f"""
        INSERT INTO {table} ({", ".join(columns)})
        VALUES ({placeholders})
        RETURNING {returning}
        """,
        [fields[col] for col in columns],
    )
    return cur.fetchone()
