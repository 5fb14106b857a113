"""Rooms repository.

Uses raw SQL with psycopg2 (no ORM).

Rooms that have ever been booked are archived instead of deleted so that
old reservations and reports keep their room.
"""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor

from hostal.domain.models import Room, RoomStatus
from hostal.infra.repositories.common import insert_row, update_row

ROOM_COLUMNS = (
    "id, code, name, room_type, status, capacity_adults, capacity_children, "
    "base_rate, currency, sort_order, annex, floor, notes"
)

WRITABLE_COLUMNS = frozenset(
    {
        "code",
        "name",
        "room_type",
        "status",
        "capacity_adults",
        "capacity_children",
        "base_rate",
        "currency",
        "sort_order",
        "annex",
        "floor",
        "notes",
    }
)


def row_to_room(row: tuple[Any, ...]) -> Room:
    return Room(
        id=row[0],
        code=row[1],
        name=row[2],
        room_type=row[3],
        status=row[4],
        capacity_adults=row[5],
        capacity_children=row[6],
        base_rate=row[7],
        currency=row[8],
        sort_order=row[9],
        annex=row[10],
        floor=row[11],
        notes=row[12],
    )


def list_rooms(
    cur: PgCursor,
    *,
    room_type: str | None = None,
    include_archived: bool = True,
) -> list[Room]:
    conditions = ["TRUE"]
    params: list[Any] = []

    if room_type:
        conditions.append("room_type = %s")
        params.append(room_type)
    if not include_archived:
        conditions.append("status <> %s")
        params.append(RoomStatus.ARCHIVED.value)

    cur.execute(
        f"""
        SELECT {ROOM_COLUMNS}
        FROM hostal_rooms
        WHERE {" AND ".join(conditions)}
        ORDER BY sort_order, id
        """,
        params,
    )
    return [row_to_room(row) for row in cur.fetchall()]


def get_room(cur: PgCursor, room_id: int) -> Room | None:
    cur.execute(f"SELECT {ROOM_COLUMNS} FROM hostal_rooms WHERE id = %s", (room_id,))
    row = cur.fetchone()
    return row_to_room(row) if row else None


def insert_room(cur: PgCursor, fields: dict[str, Any]) -> Room:
    row = insert_row(
        cur, table="hostal_rooms", fields=fields, allowed=WRITABLE_COLUMNS, returning=ROOM_COLUMNS
    )
    return row_to_room(row)


def update_room(cur: PgCursor, room_id: int, fields: dict[str, Any]) -> Room | None:
    if not fields:
        return get_room(cur, room_id)
    row = update_row(
        cur,
        table="hostal_rooms",
        row_id=room_id,
        fields=fields,
        allowed=WRITABLE_COLUMNS,
        returning=ROOM_COLUMNS,
    )
    return row_to_room(row) if row else None


def room_has_reservations(cur: PgCursor, room_id: int) -> bool:
    cur.execute(
        "SELECT EXISTS (SELECT 1 FROM hostal_reservations WHERE room_id = %s)",
        (room_id,),
    )
    return bool(cur.fetchone()[0])


def delete_or_archive_room(cur: PgCursor, room_id: int) -> str | None:
    """Delete a room, or archive it when reservations reference it.

    Returns:
        "deleted", "archived", or None if the room does not exist.
    """
    if get_room(cur, room_id) is None:
        return None

    if room_has_reservations(cur, room_id):
        update_room(cur, room_id, {"status": RoomStatus.ARCHIVED.value})
        return "archived"

    cur.execute("DELETE FROM hostal_housekeeping WHERE room_id = %s", (room_id,))
    cur.execute("DELETE FROM hostal_rooms WHERE id = %s", (room_id,))
    return "deleted"
