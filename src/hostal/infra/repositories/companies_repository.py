"""Companies repository - corporate clients billed for stays.

Uses raw SQL with psycopg2 (no ORM).
"""

from __future__ import annotations

from typing import Any

from psycopg2.extensions import cursor as PgCursor

from hostal.domain.models import Company
from hostal.infra.repositories.common import insert_row, update_row

COMPANY_COLUMNS = (
    "id, name, tax_id, contact_person, email, phone, discount_percent, notes, is_active"
)

WRITABLE_COLUMNS = frozenset(
    {"name", "tax_id", "contact_person", "email", "phone", "discount_percent", "notes", "is_active"}
)


def row_to_company(row: tuple[Any, ...]) -> Company:
    return Company(
        id=row[0],
        name=row[1],
        tax_id=row[2],
        contact_person=row[3],
        email=row[4],
        phone=row[5],
        discount_percent=row[6],
        notes=row[7],
        is_active=row[8],
    )


def list_companies(
    cur: PgCursor,
    *,
    search: str | None = None,
    include_inactive: bool = True,
) -> list[Company]:
    conditions = ["TRUE"]
    params: list[Any] = []

    if not include_inactive:
        conditions.append("is_active")
    if search:
        pattern = f"%{search.strip()}%"
        conditions.append("(name ILIKE %s OR tax_id ILIKE %s)")
        params.extend([pattern, pattern])

    cur.execute(
        f"""
        SELECT {COMPANY_COLUMNS}
        FROM hostal_companies
        WHERE {" AND ".join(conditions)}
        ORDER BY name, id
        """,
        params,
    )
    return [row_to_company(row) for row in cur.fetchall()]


def get_company(cur: PgCursor, company_id: int) -> Company | None:
    cur.execute(f"SELECT {COMPANY_COLUMNS} FROM hostal_companies WHERE id = %s", (company_id,))
    row = cur.fetchone()
    return row_to_company(row) if row else None


def insert_company(cur: PgCursor, fields: dict[str, Any]) -> Company:
    row = insert_row(
        cur,
        table="hostal_companies",
        fields=fields,
        allowed=WRITABLE_COLUMNS,
        returning=COMPANY_COLUMNS,
    )
    return row_to_company(row)


def update_company(cur: PgCursor, company_id: int, fields: dict[str, Any]) -> Company | None:
    if not fields:
        return get_company(cur, company_id)
    row = update_row(
        cur,
        table="hostal_companies",
        row_id=company_id,
        fields=fields,
        allowed=WRITABLE_COLUMNS,
        returning=COMPANY_COLUMNS,
    )
    return row_to_company(row) if row else None


def delete_company(cur: PgCursor, company_id: int) -> str | None:
    """Delete a company, or deactivate it when reservations or payments reference it.

    Returns:
        "deleted", "deactivated", or None if the company does not exist.
    """
    if get_company(cur, company_id) is None:
        return None

    cur.execute(
        """
        SELECT EXISTS (SELECT 1 FROM hostal_reservations WHERE company_id = %s)
            OR EXISTS (SELECT 1 FROM hostal_payments WHERE company_id = %s)
        """,
        (company_id, company_id),
    )
    if cur.fetchone()[0]:
        update_company(cur, company_id, {"is_active": False})
        return "deactivated"

    cur.execute("DELETE FROM hostal_companies WHERE id = %s", (company_id,))
    return "deleted"
