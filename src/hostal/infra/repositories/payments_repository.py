"""Payments repository - money received, by method and fiscal document.

Uses raw SQL with psycopg2 (no ORM). Amounts are NUMERIC and come back as
Decimal.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from psycopg2.extensions import cursor as PgCursor

from hostal.domain.models import DocumentType, Payment, PaymentMethod
from hostal.infra.repositories.common import insert_row, update_row

PAYMENT_COLUMNS = (
    "id, amount, method, document_type, payment_date, currency, document_number, "
    "reservation_id, guest_id, company_id, notes"
)

WRITABLE_COLUMNS = frozenset(
    {
        "amount",
        "method",
        "document_type",
        "payment_date",
        "currency",
        "document_number",
        "reservation_id",
        "guest_id",
        "company_id",
        "notes",
    }
)

VALID_METHODS = {m.value for m in PaymentMethod}
VALID_DOCUMENT_TYPES = {d.value for d in DocumentType}


def row_to_payment(row: tuple[Any, ...]) -> Payment:
    return Payment(
        id=row[0],
        amount=row[1],
        method=row[2],
        document_type=row[3],
        payment_date=row[4],
        currency=row[5],
        document_number=row[6],
        reservation_id=row[7],
        guest_id=row[8],
        company_id=row[9],
        notes=row[10],
    )


def _check(fields: dict[str, Any]) -> None:
    if "method" in fields and fields["method"] not in VALID_METHODS:
        raise ValueError(f"Invalid method: {fields['method']}. Must be one of {sorted(VALID_METHODS)}")
    if "document_type" in fields and fields["document_type"] not in VALID_DOCUMENT_TYPES:
        raise ValueError(
            f"Invalid document type: {fields['document_type']}. "
            f"Must be one of {sorted(VALID_DOCUMENT_TYPES)}"
        )


def list_payments(
    cur: PgCursor,
    start: date | None = None,
    end: date | None = None,
    *,
    reservation_id: int | None = None,
) -> list[Payment]:
    """Payments with start <= payment_date < end (either bound optional)."""
    conditions = ["TRUE"]
    params: list[Any] = []

    if start is not None:
        conditions.append("payment_date >= %s")
        params.append(start)
    if end is not None:
        conditions.append("payment_date < %s")
        params.append(end)
    if reservation_id is not None:
        conditions.append("reservation_id = %s")
        params.append(reservation_id)

    cur.execute(
        f"""
        SELECT {PAYMENT_COLUMNS}
        FROM hostal_payments
        WHERE {" AND ".join(conditions)}
        ORDER BY payment_date, id
        """,
        params,
    )
    return [row_to_payment(row) for row in cur.fetchall()]


def get_payment(cur: PgCursor, payment_id: int) -> Payment | None:
    cur.execute(f"SELECT {PAYMENT_COLUMNS} FROM hostal_payments WHERE id = %s", (payment_id,))
    row = cur.fetchone()
    return row_to_payment(row) if row else None


def insert_payment(cur: PgCursor, fields: dict[str, Any]) -> Payment:
    """Insert a payment.

    Raises:
        ValueError: If method or document_type is not a known value.
    """
    _check(fields)
    row = insert_row(
        cur,
        table="hostal_payments",
        fields=fields,
        allowed=WRITABLE_COLUMNS,
        returning=PAYMENT_COLUMNS,
    )
    return row_to_payment(row)


def update_payment(cur: PgCursor, payment_id: int, fields: dict[str, Any]) -> Payment | None:
    _check(fields)
    if not fields:
        return get_payment(cur, payment_id)
    row = update_row(
        cur,
        table="hostal_payments",
        row_id=payment_id,
        fields=fields,
        allowed=WRITABLE_COLUMNS,
        returning=PAYMENT_COLUMNS,
    )
    return row_to_payment(row) if row else None


def delete_payment(cur: PgCursor, payment_id: int) -> bool:
    cur.execute("DELETE FROM hostal_payments WHERE id = %s RETURNING id", (payment_id,))
    return cur.fetchone() is not None
