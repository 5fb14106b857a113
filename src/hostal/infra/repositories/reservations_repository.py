"""Reservations repository.

Uses raw SQL with psycopg2 (no ORM).

Overlap queries use the half-open form check_in < end AND check_out > start,
which is what the domain re-checks in memory. Locking reads use
FOR UPDATE OF r: the guest and company joins are outer joins and cannot be
locked.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable

from psycopg2.extensions import cursor as PgCursor

from hostal.domain.models import Reservation
from hostal.infra.repositories.common import insert_row, update_row

RESERVATION_COLUMNS = (
    "r.id, r.room_id, r.check_in, r.check_out, r.status, r.guest_id, r.company_id, "
    "r.code, r.adults, r.children, r.total_price, r.invoice_status, r.invoice_number, "
    "r.invoice_date, r.invoice_notes, r.notes, r.source, r.arrival_time, r.breakfast_time, "
    "g.full_name, g.document_id, c.name"
)

_FROM = """
    FROM hostal_reservations r
    LEFT JOIN hostal_guests g ON g.id = r.guest_id
    LEFT JOIN hostal_companies c ON c.id = r.company_id
"""

WRITABLE_COLUMNS = frozenset(
    {
        "room_id",
        "guest_id",
        "company_id",
        "check_in",
        "check_out",
        "status",
        "code",
        "adults",
        "children",
        "total_price",
        "invoice_status",
        "invoice_number",
        "invoice_date",
        "invoice_notes",
        "notes",
        "source",
        "arrival_time",
        "breakfast_time",
    }
)

LIST_LIMIT = 500


def row_to_reservation(row: tuple[Any, ...]) -> Reservation:
    return Reservation(
        id=row[0],
        room_id=row[1],
        check_in=row[2],
        check_out=row[3],
        status=row[4],
        guest_id=row[5],
        company_id=row[6],
        code=row[7],
        adults=row[8],
        children=row[9],
        total_price=row[10],
        invoice_status=row[11],
        invoice_number=row[12],
        invoice_date=row[13],
        invoice_notes=row[14],
        notes=row[15],
        source=row[16],
        arrival_time=row[17],
        breakfast_time=row[18],
        guest_name=row[19],
        guest_document=row[20],
        company_name=row[21],
    )


def list_overlapping(
    cur: PgCursor,
    start: date | None,
    end: date | None,
    *,
    room_id: int | None = None,
    statuses: Iterable[str] | None = None,
    company_id: int | None = None,
    guest_id: int | None = None,
    exclude_reservation_id: int | None = None,
    lock: bool = False,
    limit: int | None = None,
) -> list[Reservation]:
    """Reservations whose stay overlaps [start, end).

    start/end may be None to leave that side open.

    Args:
        cur: Database cursor.
        start: Window start (inclusive).
        end: Window end (exclusive).
        room_id: Only this room.
        statuses: Only these statuses (None means any).
        company_id: Only reservations billed to this company.
        guest_id: Only this guest's reservations.
        exclude_reservation_id: Skip this reservation (edit in place).
        lock: Append FOR UPDATE OF r.
        limit: Maximum rows.
    """
    conditions = ["TRUE"]
    params: list[Any] = []

    if end is not None:
        conditions.append("r.check_in < %s")
        params.append(end)
    if start is not None:
        conditions.append("r.check_out > %s")
        params.append(start)
    if room_id is not None:
        conditions.append("r.room_id = %s")
        params.append(room_id)
    if statuses is not None:
        conditions.append("r.status = ANY(%s)")
        params.append(list(statuses))
    if company_id is not None:
        conditions.append("r.company_id = %s")
        params.append(company_id)
    if guest_id is not None:
        conditions.append("r.guest_id = %s")
        params.append(guest_id)
    if exclude_reservation_id is not None:
        conditions.append("r.id <> %s")
        params.append(exclude_reservation_id)

    suffix = ""
    if limit is not None:
        suffix += " LIMIT %s"
        params.append(limit)
    if lock:
        suffix += " FOR UPDATE OF r"

    cur.execute(
        f"""
        SELECT {RESERVATION_COLUMNS}
        {_FROM}
        WHERE {" AND ".join(conditions)}
        ORDER BY r.check_in, r.id{suffix}
        """,
        params,
    )
    return [row_to_reservation(row) for row in cur.fetchall()]


def get_reservation(cur: PgCursor, reservation_id: int, *, lock: bool = False) -> Reservation | None:
    suffix = " FOR UPDATE OF r" if lock else ""
    cur.execute(
        f"""
        SELECT {RESERVATION_COLUMNS}
        {_FROM}
        WHERE r.id = %s{suffix}
        """,
        (reservation_id,),
    )
    row = cur.fetchone()
    return row_to_reservation(row) if row else None


def insert_reservation(cur: PgCursor, fields: dict[str, Any]) -> Reservation:
    row = insert_row(
        cur, table="hostal_reservations", fields=fields, allowed=WRITABLE_COLUMNS, returning="id"
    )
    return get_reservation(cur, row[0])


def update_reservation(cur: PgCursor, reservation_id: int, fields: dict[str, Any]) -> Reservation | None:
    if fields:
        row = update_row(
            cur,
            table="hostal_reservations",
            row_id=reservation_id,
            fields=fields,
            allowed=WRITABLE_COLUMNS,
            returning="id",
        )
        if row is None:
            return None
    return get_reservation(cur, reservation_id)


def delete_reservation(cur: PgCursor, reservation_id: int) -> bool:
    """Delete a reservation; companions go with it (ON DELETE CASCADE)."""
    cur.execute("DELETE FROM hostal_reservations WHERE id = %s RETURNING id", (reservation_id,))
    return cur.fetchone() is not None
