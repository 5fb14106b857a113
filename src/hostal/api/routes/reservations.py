"""Reservations endpoints (recepcion+).

GET    /reservations                     -> list (window / status / room / company)
GET    /reservations/availability        -> is a room free for [check_in, check_out)
GET    /reservations/guest-register      -> holders and companions staying in a window
GET    /reservations/{id}                -> detail with companions
POST   /reservations                     -> create (409 on overlap)
PATCH  /reservations/{id}                -> update (409 on overlap)
PATCH  /reservations/{id}/status         -> status transition
PATCH  /reservations/{id}/invoice        -> invoicing data
DELETE /reservations/{id}                -> delete

Every write runs check and insert/update in one transaction through the
store scope.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, ConfigDict, Field

from hostal.api.auth import CurrentUser
from hostal.api.deps import get_store_scope, query_date
from hostal.api.rbac import require_role
from hostal.api.serializers import reservation_to_dict
from hostal.domain import reservations as reservation_service
from hostal.domain.companions import get_guest_register
from hostal.domain.dates import next_day, validate_window
from hostal.domain.models import InvoiceStatus, ReservationStatus
from hostal.domain.room_conflict import check_room_availability
from hostal.domain.store import StoreScope
from hostal.infra.db import txn
from hostal.infra.repositories import reservations_repository

router = APIRouter(prefix="/reservations", tags=["reservations"])


# ── Schemas ───────────────────────────────────────────────────────────────────


class CompanionIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(..., min_length=1)
    document_id: str | None = None


class CreateReservationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    room_id: int
    check_in: date
    check_out: date
    guest_id: int | None = None
    company_id: int | None = None
    status: ReservationStatus = ReservationStatus.PENDING
    adults: int = Field(1, ge=0)
    children: int = Field(0, ge=0)
    total_price: Decimal = Field(Decimal(0), ge=0)
    notes: str | None = None
    source: str | None = "manual"
    arrival_time: str | None = None
    breakfast_time: str | None = None
    companions: list[CompanionIn] = Field(default_factory=list)


class UpdateReservationRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    room_id: int | None = None
    check_in: date | None = None
    check_out: date | None = None
    guest_id: int | None = None
    company_id: int | None = None
    status: ReservationStatus | None = None
    adults: int | None = Field(None, ge=0)
    children: int | None = Field(None, ge=0)
    total_price: Decimal | None = Field(None, ge=0)
    notes: str | None = None
    source: str | None = None
    arrival_time: str | None = None
    breakfast_time: str | None = None
    companions: list[CompanionIn] | None = None


class StatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: ReservationStatus


class InvoiceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    invoice_status: InvoiceStatus
    invoice_number: str | None = None
    invoice_date: date | None = None
    invoice_notes: str | None = None


# ── Reads ─────────────────────────────────────────────────────────────────────


@router.get("")
def list_reservations(
    from_date: str | None = Query(None, alias="from"),
    to_date: str | None = Query(None, alias="to"),
    status: ReservationStatus | None = Query(None),
    room_id: int | None = Query(None),
    company_id: int | None = Query(None),
    guest_id: int | None = Query(None),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> list[dict]:
    """List reservations staying at least one night in [from, to] (both optional)."""
    start = query_date(from_date, "from") if from_date else None
    end = query_date(to_date, "to") if to_date else None
    if start and end:
        validate_window(start, end)
    window_end = next_day(end) if end else None

    with txn() as cur:
        reservations = reservations_repository.list_overlapping(
            cur,
            start,
            window_end,
            room_id=room_id,
            statuses=[status.value] if status else None,
            company_id=company_id,
            guest_id=guest_id,
            limit=reservations_repository.LIST_LIMIT,
        )
    return [reservation_to_dict(r) for r in reservations]


@router.get("/availability")
def availability(
    room_id: int = Query(...),
    check_in: str = Query(...),
    check_out: str = Query(...),
    exclude_reservation_id: int | None = Query(None),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    start = query_date(check_in, "check_in")
    end = query_date(check_out, "check_out")
    with open_store() as store:
        result = check_room_availability(
            store,
            room_id=room_id,
            check_in=start,
            check_out=end,
            exclude_reservation_id=exclude_reservation_id,
        )
    return result.to_dict()


@router.get("/guest-register")
def guest_register(
    from_date: str = Query(..., alias="from"),
    to_date: str = Query(..., alias="to"),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    start = query_date(from_date, "from")
    end = query_date(to_date, "to")
    with open_store() as store:
        entries = get_guest_register(store, start, end)
    return {"from": start.isoformat(), "to": end.isoformat(), "items": [e.to_dict() for e in entries]}


@router.get("/{reservation_id}")
def get_reservation(
    reservation_id: int = Path(..., description="Reservation ID"),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    with open_store() as store:
        reservation = store.get_reservation(reservation_id)
    if reservation is None:
        raise HTTPException(status_code=404, detail="Reservation not found")
    return reservation_to_dict(reservation)


# ── Writes ────────────────────────────────────────────────────────────────────


@router.post("", status_code=201)
def create_reservation(
    body: CreateReservationRequest,
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    """Create a reservation or block. 409 if the room is taken, 422 on bad dates."""
    data = body.model_dump(mode="json", exclude={"companions"})
    companions = [c.model_dump() for c in body.companions]
    with open_store() as store:
        reservation = reservation_service.create_reservation(store, data, companions=companions)
    return reservation_to_dict(reservation)


@router.patch("/{reservation_id}")
def update_reservation(
    reservation_id: int = Path(..., description="Reservation ID"),
    body: UpdateReservationRequest = ...,
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    """Partial update. companions, when given, replaces the whole list."""
    changes = body.model_dump(mode="json", exclude_unset=True, exclude={"companions"})
    companions = (
        [c.model_dump() for c in body.companions] if body.companions is not None else None
    )
    if not changes and companions is None:
        raise HTTPException(status_code=400, detail="No fields to update")

    with open_store() as store:
        reservation = reservation_service.update_reservation(
            store, reservation_id, changes, companions=companions
        )
    return reservation_to_dict(reservation)


@router.patch("/{reservation_id}/status")
def change_status(
    reservation_id: int = Path(..., description="Reservation ID"),
    body: StatusRequest = ...,
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    with open_store() as store:
        reservation = reservation_service.change_status(store, reservation_id, body.status.value)
    return reservation_to_dict(reservation)


@router.patch("/{reservation_id}/invoice")
def update_invoice(
    reservation_id: int = Path(..., description="Reservation ID"),
    body: InvoiceRequest = ...,
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    with open_store() as store:
        reservation = reservation_service.update_invoice(
            store,
            reservation_id,
            invoice_status=body.invoice_status.value,
            invoice_number=body.invoice_number,
            invoice_date=body.invoice_date,
            invoice_notes=body.invoice_notes,
        )
    return reservation_to_dict(reservation)


@router.delete("/{reservation_id}", status_code=204)
def delete_reservation(
    reservation_id: int = Path(..., description="Reservation ID"),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> None:
    with open_store() as store:
        reservation_service.delete_reservation(store, reservation_id)
