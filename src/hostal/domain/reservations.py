"""Reservation write flows.

Every flow runs against one store bound to one transaction:
lock -> validate -> availability check -> write -> companions.

The availability check is repeated whenever the room, the dates or a move
into a blocking status could create an overlap. The exclusion constraint on
hostal_reservations catches whatever slips past a concurrent writer, and the
store reports it as RoomConflictError too.
"""

from __future__ import annotations

import random
from datetime import date
from decimal import Decimal
from typing import Any, Iterable

from hostal.domain.companions import normalize_companions
from hostal.domain.dates import ValidationError, parse_date, validate_stay
from hostal.domain.models import Companion, InvoiceStatus, Reservation, ReservationStatus
from hostal.domain.reservation_codes import generate_reservation_code
from hostal.domain.reservation_status import validate_initial_status, validate_transition
from hostal.domain.room_conflict import BLOCKING_STATUSES, assert_room_available
from hostal.domain.store import RecordStore
from hostal.observability.correlation import get_correlation_id
from hostal.observability.logging import get_logger
from hostal.observability.redaction import safe_log_context

logger = get_logger(__name__)

# Columns a caller may set on create/update; everything else is derived.
EDITABLE_FIELDS = frozenset(
    {
        "room_id",
        "guest_id",
        "company_id",
        "check_in",
        "check_out",
        "status",
        "adults",
        "children",
        "total_price",
        "notes",
        "source",
        "arrival_time",
        "breakfast_time",
        "invoice_status",
        "invoice_number",
        "invoice_date",
        "invoice_notes",
    }
)

# Changing any of these can create an overlap.
_PLACEMENT_FIELDS = ("room_id", "check_in", "check_out", "status")

# Blocks carry no guest; a cancelled block keeps none.
GUESTLESS_STATUSES = frozenset({ReservationStatus.BLOCKED.value, ReservationStatus.CANCELLED.value})


class ReservationNotFoundError(Exception):
    def __init__(self, reservation_id: int) -> None:
        self.reservation_id = reservation_id
        super().__init__(f"Reservation {reservation_id} not found")


class RoomNotFoundError(Exception):
    def __init__(self, room_id: int) -> None:
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


def _clean_fields(data: dict[str, Any]) -> dict[str, Any]:
    unknown = set(data) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown reservation fields: {', '.join(sorted(unknown))}")

    fields = dict(data)
    for key in ("check_in", "check_out", "invoice_date"):
        if fields.get(key) is not None:
            fields[key] = parse_date(fields[key])
    if "invoice_status" in fields and fields["invoice_status"] is not None:
        try:
            fields["invoice_status"] = InvoiceStatus(fields["invoice_status"]).value
        except ValueError:
            raise ValidationError(f"Unknown invoice status '{fields['invoice_status']}'")
    if fields.get("total_price") is not None:
        fields["total_price"] = Decimal(str(fields["total_price"]))
        if fields["total_price"] < 0:
            raise ValidationError("total_price must not be negative")
    for key in ("adults", "children"):
        if fields.get(key) is not None and int(fields[key]) < 0:
            raise ValidationError(f"{key} must not be negative")
    return fields


def _require_guest(status: str, guest_id: int | None) -> None:
    if guest_id is None and status not in GUESTLESS_STATUSES:
        raise ValidationError("guest_id is required unless the reservation is a maintenance block")


def _require_room(store: RecordStore, room_id: int) -> None:
    room = store.get_room(room_id)
    if room is None:
        raise RoomNotFoundError(room_id)
    if room.is_archived:
        raise ValidationError(f"Room {room.code} is archived and cannot take reservations")


def _log(message: str, reservation: Reservation, **extra: Any) -> None:
    logger.info(
        message,
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(),
                reservation_id=reservation.id,
                room_id=reservation.room_id,
                check_in=reservation.check_in,
                check_out=reservation.check_out,
                status=reservation.status,
                **extra,
            )
        },
    )


def create_reservation(
    store: RecordStore,
    data: dict[str, Any],
    *,
    companions: Iterable[Companion | dict[str, Any]] = (),
    rng: random.Random | None = None,
) -> Reservation:
    """Create a reservation or maintenance block.

    Raises:
        ValidationError: Bad dates, unknown fields, a missing guest or a disallowed initial status.
        RoomNotFoundError: If the room does not exist.
        RoomConflictError: If the room is taken for any night of the stay.
    """
    fields = _clean_fields(data)
    for key in ("room_id", "check_in", "check_out"):
        if fields.get(key) is None:
            raise ValidationError(f"{key} is required")

    if not fields.get("status"):
        fields["status"] = ReservationStatus.PENDING.value
    validate_initial_status(fields["status"])
    _require_guest(fields["status"], fields.get("guest_id"))
    validate_stay(fields["check_in"], fields["check_out"])
    _require_room(store, fields["room_id"])

    if fields["status"] in BLOCKING_STATUSES:
        assert_room_available(
            store,
            room_id=fields["room_id"],
            check_in=fields["check_in"],
            check_out=fields["check_out"],
            lock=True,
        )

    fields["code"] = generate_reservation_code(fields["check_in"], rng)
    reservation = store.insert_reservation(fields)

    people = normalize_companions(companions)
    if people:
        reservation.companions = store.replace_companions(reservation.id, people)

    _log("reservation created", reservation, companions=len(people))
    return reservation


def update_reservation(
    store: RecordStore,
    reservation_id: int,
    changes: dict[str, Any],
    *,
    companions: Iterable[Companion | dict[str, Any]] | None = None,
) -> Reservation:
    """Apply a partial update.

    A status change goes through the state machine. Room and date changes
    are re-checked against every other reservation of the target room.

    companions=None leaves the companion list untouched; an empty list
    clears it.

    Raises:
        ReservationNotFoundError, RoomNotFoundError, ValidationError,
        RoomConflictError.
    """
    current = store.get_reservation(reservation_id, lock=True)
    if current is None:
        raise ReservationNotFoundError(reservation_id)

    fields = _clean_fields(changes)
    for key in ("room_id", "check_in", "check_out", "status"):
        if key in fields and fields[key] is None:
            raise ValidationError(f"{key} cannot be empty")

    target = {key: fields.get(key, getattr(current, key)) for key in _PLACEMENT_FIELDS}

    if target["status"] != current.status:
        validate_transition(current.status, target["status"])
    if "guest_id" in fields or target["status"] != current.status:
        _require_guest(target["status"], fields.get("guest_id", current.guest_id))
    validate_stay(target["check_in"], target["check_out"])
    if target["room_id"] != current.room_id:
        _require_room(store, target["room_id"])

    placement_changed = any(target[k] != getattr(current, k) for k in _PLACEMENT_FIELDS)
    if placement_changed and target["status"] in BLOCKING_STATUSES:
        assert_room_available(
            store,
            room_id=target["room_id"],
            check_in=target["check_in"],
            check_out=target["check_out"],
            exclude_reservation_id=reservation_id,
            lock=True,
        )

    reservation = store.update_reservation(reservation_id, fields) if fields else current
    if reservation is None:
        raise ReservationNotFoundError(reservation_id)

    if companions is not None:
        reservation.companions = store.replace_companions(
            reservation_id, normalize_companions(companions)
        )

    _log("reservation updated", reservation, changed=sorted(fields))
    return reservation


def change_status(store: RecordStore, reservation_id: int, status: str) -> Reservation:
    """Move a reservation to another status.

    Leaving cancelled puts the stay back on the room, so availability is
    checked again before the write.
    """
    current = store.get_reservation(reservation_id, lock=True)
    if current is None:
        raise ReservationNotFoundError(reservation_id)

    validate_transition(current.status, status)
    if status == current.status:
        return current
    _require_guest(status, current.guest_id)

    if current.status not in BLOCKING_STATUSES and status in BLOCKING_STATUSES:
        assert_room_available(
            store,
            room_id=current.room_id,
            check_in=current.check_in,
            check_out=current.check_out,
            exclude_reservation_id=reservation_id,
            lock=True,
        )

    reservation = store.update_reservation(reservation_id, {"status": status})
    if reservation is None:
        raise ReservationNotFoundError(reservation_id)

    _log("reservation status changed", reservation, previous_status=current.status)
    return reservation


def update_invoice(
    store: RecordStore,
    reservation_id: int,
    *,
    invoice_status: str,
    invoice_number: str | None = None,
    invoice_date: date | str | None = None,
    invoice_notes: str | None = None,
) -> Reservation:
    """Record invoicing data for a reservation (daybook)."""
    fields = _clean_fields(
        {
            "invoice_status": invoice_status,
            "invoice_number": invoice_number,
            "invoice_date": invoice_date,
            "invoice_notes": invoice_notes,
        }
    )
    if fields["invoice_status"] == InvoiceStatus.INVOICED.value and not fields["invoice_number"]:
        raise ValidationError("invoice_number is required when the reservation is invoiced")

    reservation = store.update_reservation(reservation_id, fields)
    if reservation is None:
        raise ReservationNotFoundError(reservation_id)

    _log("reservation invoice updated", reservation, invoice_status=fields["invoice_status"])
    return reservation


def delete_reservation(store: RecordStore, reservation_id: int) -> None:
    if not store.delete_reservation(reservation_id):
        raise ReservationNotFoundError(reservation_id)
    logger.info(
        "reservation deleted",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(), reservation_id=reservation_id
            )
        },
    )
