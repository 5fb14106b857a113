"""Room availability: does a room accept a stay for a date range?

Overlap formula:  (new_check_in < existing_check_out) AND (new_check_out > existing_check_in)
Strict inequality allows check-out day == check-in day (same-day turnover).

Every status except cancelled blocks the room by default, including pending
reservations and maintenance blocks.

The store query is a superset filter; each candidate row is confirmed with
dates.overlaps so a loose storage-side filter can never produce a false
conflict. Write flows call this with lock=True inside the same transaction
as the insert, and the database exclusion constraint on
hostal_reservations backs it up.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from hostal.domain.dates import overlaps, validate_stay
from hostal.domain.models import Reservation, ReservationStatus
from hostal.domain.reservation_codes import public_reservation_code
from hostal.domain.store import RecordStore
from hostal.observability.logging import get_logger

logger = get_logger(__name__)

BLOCKING_STATUSES: tuple[str, ...] = tuple(
    s.value for s in ReservationStatus if s is not ReservationStatus.CANCELLED
)


class RoomConflictError(Exception):
    """Raised when a room has an overlapping reservation."""

    def __init__(
        self,
        room_id: int | None,
        conflicting_reservation_id: int | None = None,
        conflicting_code: str | None = None,
        existing_check_in: date | None = None,
        existing_check_out: date | None = None,
    ) -> None:
        self.room_id = room_id
        self.conflicting_reservation_id = conflicting_reservation_id
        self.conflicting_code = conflicting_code
        self.existing_check_in = existing_check_in
        self.existing_check_out = existing_check_out

        if conflicting_code and existing_check_in and existing_check_out:
            message = (
                f"Room {room_id} is already booked by reservation {conflicting_code} "
                f"({existing_check_in.isoformat()} to {existing_check_out.isoformat()})"
            )
        elif room_id is not None:
            message = f"Room {room_id} already has a reservation overlapping these dates"
        else:
            message = "The room already has a reservation overlapping these dates"
        super().__init__(message)


@dataclass
class AvailabilityResult:
    room_id: int
    check_in: date
    check_out: date
    conflicts: list[Reservation] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return not self.conflicts

    @property
    def first_conflict(self) -> Reservation | None:
        return self.conflicts[0] if self.conflicts else None

    def to_dict(self) -> dict:
        conflict = self.first_conflict
        return {
            "room_id": self.room_id,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "available": self.available,
            "conflict": None
            if conflict is None
            else {
                "reservation_id": conflict.id,
                "code": public_reservation_code(conflict.id, conflict.code),
                "check_in": conflict.check_in.isoformat(),
                "check_out": conflict.check_out.isoformat(),
                "status": conflict.status,
            },
        }


def check_room_availability(
    store: RecordStore,
    *,
    room_id: int,
    check_in: date,
    check_out: date,
    exclude_reservation_id: int | None = None,
    blocking_statuses: Iterable[str] = BLOCKING_STATUSES,
    lock: bool = False,
) -> AvailabilityResult:
    """Check whether a room is free for [check_in, check_out).

    Args:
        store: Record store bound to the caller's transaction.
        room_id: Physical room identifier.
        check_in: Desired check-in date (inclusive).
        check_out: Desired check-out date (exclusive / departure day).
        exclude_reservation_id: Reservation to ignore (edit in place).
        blocking_statuses: Statuses that occupy the room.
        lock: Read candidate rows FOR UPDATE.

    Returns:
        AvailabilityResult listing every confirmed conflict, ordered by check-in.

    Raises:
        InvalidDateRangeError: If check_out is not after check_in.
    """
    validate_stay(check_in, check_out)
    statuses = tuple(blocking_statuses)

    candidates = store.list_reservations_overlapping(
        check_in,
        check_out,
        room_id=room_id,
        statuses=statuses,
        exclude_reservation_id=exclude_reservation_id,
        lock=lock,
    )

    conflicts = sorted(
        (
            r
            for r in candidates
            if r.id != exclude_reservation_id
            and r.room_id == room_id
            and r.status in statuses
            and overlaps(check_in, check_out, r.check_in, r.check_out)
        ),
        key=lambda r: (r.check_in, r.id),
    )

    result = AvailabilityResult(
        room_id=room_id, check_in=check_in, check_out=check_out, conflicts=conflicts
    )

    if conflicts:
        first = conflicts[0]
        # log only non-PII fields
        logger.warning(
            "room conflict detected",
            extra={
                "extra_fields": {
                    "room_id": room_id,
                    "requested_check_in": check_in.isoformat(),
                    "requested_check_out": check_out.isoformat(),
                    "conflicting_reservation_id": first.id,
                    "existing_check_in": first.check_in.isoformat(),
                    "existing_check_out": first.check_out.isoformat(),
                    "conflict_count": len(conflicts),
                },
            },
        )

    return result


def assert_room_available(
    store: RecordStore,
    *,
    room_id: int,
    check_in: date,
    check_out: date,
    exclude_reservation_id: int | None = None,
    blocking_statuses: Iterable[str] = BLOCKING_STATUSES,
    lock: bool = False,
) -> None:
    """Raise RoomConflictError if the room is taken for the period.

    All arguments are forwarded to check_room_availability.
    """
    result = check_room_availability(
        store,
        room_id=room_id,
        check_in=check_in,
        check_out=check_out,
        exclude_reservation_id=exclude_reservation_id,
        blocking_statuses=blocking_statuses,
        lock=lock,
    )
    conflict = result.first_conflict
    if conflict is not None:
        raise RoomConflictError(
            room_id=room_id,
            conflicting_reservation_id=conflict.id,
            conflicting_code=public_reservation_code(conflict.id, conflict.code),
            existing_check_in=conflict.check_in,
            existing_check_out=conflict.check_out,
        )
