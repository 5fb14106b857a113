"""Housekeeping repository.

Uses raw SQL with psycopg2 (no ORM). One row per (room_id, date), written
with INSERT ... ON CONFLICT so repeating a write leaves a single row.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from psycopg2.extensions import cursor as PgCursor

from hostal.domain.models import HousekeepingEntry

HOUSEKEEPING_COLUMNS = "id, room_id, date, status, notes"


def row_to_entry(row: tuple[Any, ...]) -> HousekeepingEntry:
    return HousekeepingEntry(id=row[0], room_id=row[1], date=row[2], status=row[3], notes=row[4])


def list_for_date(cur: PgCursor, day: date) -> list[HousekeepingEntry]:
    cur.execute(
        f"""
        SELECT {HOUSEKEEPING_COLUMNS}
        FROM hostal_housekeeping
        WHERE date = %s
        ORDER BY room_id
        """,
        (day,),
    )
    return [row_to_entry(row) for row in cur.fetchall()]


def upsert_entry(
    cur: PgCursor,
    *,
    room_id: int,
    day: date,
    status: str,
    notes: str | None = None,
) -> HousekeepingEntry:
    cur.execute(
        f"""
        INSERT INTO hostal_housekeeping (room_id, date, status, notes)
        VALUES (%s, %s, %s, %s)
        ON CONFLICT (room_id, date) DO UPDATE
        SET status = EXCLUDED.status,
            notes = EXCLUDED.notes,
            updated_at = now()
        RETURNING {HOUSEKEEPING_COLUMNS}
        """,
        (room_id, day, status, notes),
    )
    return row_to_entry(cur.fetchone())
