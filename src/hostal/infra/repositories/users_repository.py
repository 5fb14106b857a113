"""Staff users repository.

Rows are created on first sign-in from the identity provider's subject;
here a superadmin only adjusts the role and the active flag.
"""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor

from hostal.domain.models import StaffUser
from hostal.infra.repositories.common import update_row

USER_COLUMNS = "id, external_subject, email, name, role, is_active, created_at"

WRITABLE_COLUMNS = frozenset({"name", "role", "is_active"})


def row_to_user(row: tuple[Any, ...]) -> StaffUser:
    return StaffUser(
        id=row[0],
        external_subject=row[1],
        email=row[2],
        name=row[3],
        role=row[4],
        is_active=row[5],
        created_at=row[6],
    )


def list_users(cur: PgCursor, *, include_inactive: bool = True) -> list[StaffUser]:
    """Newest first."""
    where = "" if include_inactive else "WHERE is_active"
    cur.execute(f"SELECT {USER_COLUMNS} FROM hostal_users {where} ORDER BY created_at DESC, id DESC")
    return [row_to_user(row) for row in cur.fetchall()]


def get_user(cur: PgCursor, user_id: int) -> StaffUser | None:
    cur.execute(f"SELECT {USER_COLUMNS} FROM hostal_users WHERE id = %s", (user_id,))
    row = cur.fetchone()
    return row_to_user(row) if row else None


def update_user(cur: PgCursor, user_id: int, fields: dict[str, Any]) -> StaffUser | None:
    if not fields:
        return get_user(cur, user_id)
    row = update_row(
        cur,
        table="hostal_users",
        row_id=user_id,
        fields=fields,
        allowed=WRITABLE_COLUMNS,
        returning=USER_COLUMNS,
    )
    return row_to_user(row) if row else None
