"""Payments endpoints (recepcion+).

GET    /payments?from=&to=&reservation_id=  -> list
POST   /payments                            -> register a payment
PATCH  /payments/{id}                       -> correct a payment
DELETE /payments/{id}                       -> remove a payment
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from psycopg2 import errors as pg_errors
from pydantic import BaseModel, ConfigDict, Field

from hostal.api.auth import CurrentUser
from hostal.api.deps import default_currency, query_date
from hostal.api.rbac import require_role
from hostal.api.serializers import record_to_dict
from hostal.domain.dates import next_day, validate_window
from hostal.domain.models import DocumentType, PaymentMethod
from hostal.infra.db import txn
from hostal.infra.repositories import payments_repository
from hostal.infra.time import local_today
from hostal.observability.correlation import get_correlation_id
from hostal.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


class CreatePaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod
    document_type: DocumentType = DocumentType.NONE
    payment_date: date | None = None
    currency: str = Field(default_factory=default_currency)
    document_number: str | None = None
    reservation_id: int | None = None
    guest_id: int | None = None
    company_id: int | None = None
    notes: str | None = None


class UpdatePaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: Decimal | None = Field(None, gt=0)
    method: PaymentMethod | None = None
    document_type: DocumentType | None = None
    payment_date: date | None = None
    currency: str | None = None
    document_number: str | None = None
    reservation_id: int | None = None
    guest_id: int | None = None
    company_id: int | None = None
    notes: str | None = None


def _fields(body: BaseModel, *, exclude_unset: bool) -> dict:
    fields = body.model_dump(exclude_unset=exclude_unset)
    for key in ("method", "document_type"):
        if fields.get(key) is not None:
            fields[key] = fields[key].value
    return fields


@router.get("")
def list_payments(
    from_date: str | None = Query(None, alias="from"),
    to_date: str | None = Query(None, alias="to"),
    reservation_id: int | None = Query(None),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> list[dict]:
    """Payments dated within [from, to] (both optional, inclusive)."""
    start = query_date(from_date, "from") if from_date else None
    end = query_date(to_date, "to") if to_date else None
    if start and end:
        validate_window(start, end)

    with txn() as cur:
        payments = payments_repository.list_payments(
            cur, start, next_day(end) if end else None, reservation_id=reservation_id
        )
    return [record_to_dict(p) for p in payments]


@router.post("", status_code=201)
def create_payment(
    body: CreatePaymentRequest,
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    """Register a payment; payment_date defaults to today in the hostel's zone."""
    fields = _fields(body, exclude_unset=False)
    if fields["payment_date"] is None:
        fields["payment_date"] = local_today()

    with txn() as cur:
        try:
            payment = payments_repository.insert_payment(cur, fields)
        except pg_errors.ForeignKeyViolation:
            raise HTTPException(status_code=422, detail="Referenced reservation, guest or company not found")

    logger.info(
        "payment registered",
        extra={
            "extra_fields": {
                "correlationId": get_correlation_id(),
                "payment_id": payment.id,
                "method": payment.method,
                "document_type": payment.document_type,
                "reservation_id": payment.reservation_id,
            }
        },
    )
    return record_to_dict(payment)


@router.patch("/{payment_id}")
def update_payment(
    payment_id: int = Path(..., description="Payment ID"),
    body: UpdatePaymentRequest = ...,
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    fields = _fields(body, exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    for key in ("amount", "method", "document_type", "payment_date", "currency"):
        if key in fields and fields[key] is None:
            raise HTTPException(status_code=422, detail=f"{key} cannot be empty")

    with txn() as cur:
        try:
            payment = payments_repository.update_payment(cur, payment_id, fields)
        except pg_errors.ForeignKeyViolation:
            raise HTTPException(status_code=422, detail="Referenced reservation, guest or company not found")
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return record_to_dict(payment)


@router.delete("/{payment_id}", status_code=204)
def delete_payment(
    payment_id: int = Path(..., description="Payment ID"),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> None:
    with txn() as cur:
        deleted = payments_repository.delete_payment(cur, payment_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Payment not found")

    logger.info(
        "payment deleted",
        extra={"extra_fields": {"correlationId": get_correlation_id(), "payment_id": payment_id}},
    )
