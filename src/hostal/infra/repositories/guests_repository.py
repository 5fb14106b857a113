"""Guests repository - the hostel's guest directory.

Uses raw SQL with psycopg2 (no ORM). Guests are deactivated, never deleted,
because reservations keep pointing at them.
"""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor

from hostal.domain.models import Guest
from hostal.infra.repositories.common import insert_row, update_row

GUEST_COLUMNS = "id, full_name, document_id, email, phone, country, notes, is_active"

WRITABLE_COLUMNS = frozenset(
    {"full_name", "document_id", "email", "phone", "country", "notes", "is_active"}
)

DEFAULT_LIMIT = 100


def row_to_guest(row: tuple[Any, ...]) -> Guest:
    return Guest(
        id=row[0],
        full_name=row[1],
        document_id=row[2],
        email=row[3],
        phone=row[4],
        country=row[5],
        notes=row[6],
        is_active=row[7],
    )


def list_guests(
    cur: PgCursor,
    *,
    search: str | None = None,
    include_inactive: bool = False,
    limit: int = DEFAULT_LIMIT,
) -> list[Guest]:
    """List guests ordered by name.

    search matches full_name, document_id or email (case-insensitive).
    """
    conditions = ["TRUE"]
    params: list[Any] = []

    if not include_inactive:
        conditions.append("is_active")
    if search:
        pattern = f"%{search.strip()}%"
        conditions.append("(full_name ILIKE %s OR document_id ILIKE %s OR email ILIKE %s)")
        params.extend([pattern, pattern, pattern])

    cur.execute(
        f"""
        SELECT {GUEST_COLUMNS}
        FROM hostal_guests
        WHERE {" AND ".join(conditions)}
        ORDER BY full_name, id
        LIMIT %s
        """,
        (*params, limit),
    )
    return [row_to_guest(row) for row in cur.fetchall()]


def get_guest(cur: PgCursor, guest_id: int) -> Guest | None:
    cur.execute(f"SELECT {GUEST_COLUMNS} FROM hostal_guests WHERE id = %s", (guest_id,))
    row = cur.fetchone()
    return row_to_guest(row) if row else None


def insert_guest(cur: PgCursor, fields: dict[str, Any]) -> Guest:
    row = insert_row(
        cur, table="hostal_guests", fields=fields, allowed=WRITABLE_COLUMNS, returning=GUEST_COLUMNS
    )
    return row_to_guest(row)


def update_guest(cur: PgCursor, guest_id: int, fields: dict[str, Any]) -> Guest | None:
    if not fields:
        return get_guest(cur, guest_id)
    row = update_row(
        cur,
        table="hostal_guests",
        row_id=guest_id,
        fields=fields,
        allowed=WRITABLE_COLUMNS,
        returning=GUEST_COLUMNS,
    )
    return row_to_guest(row) if row else None
