"""Reservation companions repository.

Uses raw SQL with psycopg2 (no ORM). A reservation's companion list is
always written as a whole: delete, then insert in order.
"""

from __future__ import annotations

from typing import Iterable

from psycopg2.extensions import cursor as PgCursor

from hostal.domain.models import Companion


def list_companions(cur: PgCursor, reservation_ids: Iterable[int]) -> dict[int, list[Companion]]:
    """Companions grouped by reservation id, in their stored order."""
    ids = list(reservation_ids)
    if not ids:
        return {}

    cur.execute(
        """
        SELECT id, reservation_id, full_name, document_id
        FROM hostal_reservation_companions
        WHERE reservation_id = ANY(%s)
        ORDER BY reservation_id, position, id
        """,
        (ids,),
    )
    grouped: dict[int, list[Companion]] = {}
    for row in cur.fetchall():
        grouped.setdefault(row[1], []).append(
            Companion(id=row[0], reservation_id=row[1], full_name=row[2], document_id=row[3])
        )
    return grouped


def replace_companions(
    cur: PgCursor, reservation_id: int, companions: list[Companion]
) -> list[Companion]:
    cur.execute(
        "DELETE FROM hostal_reservation_companions WHERE reservation_id = %s",
        (reservation_id,),
    )

    stored = []
    for position, companion in enumerate(companions):
        cur.execute(
            """
            INSERT INTO hostal_reservation_companions
                (reservation_id, position, full_name, document_id)
            VALUES (%s, %s, %s, %s)
            RETURNING id
            """,
            (reservation_id, position, companion.full_name, companion.document_id),
        )
        stored.append(
            Companion(
                id=cur.fetchone()[0],
                reservation_id=reservation_id,
                full_name=companion.full_name,
                document_id=companion.document_id,
            )
        )
    return stored
