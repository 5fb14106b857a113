"""Calendar projection: place reservations on a room-by-day grid.

The view window is half-open [view_start, view_end). Each reservation that
intersects it becomes a block clipped to the window, positioned by day offset
and by percentage of the window width. Overlapping blocks in one room are
returned as-is; laying them out in lanes is up to the client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable

from hostal.domain.dates import InvalidDateRangeError, overlaps
from hostal.domain.models import Reservation, Room
from hostal.domain.reservation_codes import public_reservation_code
from hostal.domain.room_conflict import BLOCKING_STATUSES
from hostal.domain.store import RecordStore

MAX_VIEW_DAYS = 62


class CalendarView(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def view_window(anchor: date, view: CalendarView | str) -> tuple[date, date]:
    """Half-open window for a day, week (Monday first) or month view."""
    view = CalendarView(view)
    if view is CalendarView.DAY:
        return anchor, anchor + timedelta(days=1)
    if view is CalendarView.WEEK:
        start = anchor - timedelta(days=anchor.weekday())
        return start, start + timedelta(days=7)

    start = anchor.replace(day=1)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


@dataclass
class CalendarBlock:
    reservation_id: int
    code: str
    status: str
    check_in: date
    check_out: date
    start: date
    end: date
    offset_days: int
    duration_days: int
    left_pct: float
    width_pct: float
    guest_name: str | None = None
    company_name: str | None = None
    clipped_start: bool = False
    clipped_end: bool = False

    def to_dict(self) -> dict:
        return {
            "reservation_id": self.reservation_id,
            "code": self.code,
            "status": self.status,
            "guest_name": self.guest_name,
            "company_name": self.company_name,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "offset_days": self.offset_days,
            "duration_days": self.duration_days,
            "left_pct": self.left_pct,
            "width_pct": self.width_pct,
            "clipped_start": self.clipped_start,
            "clipped_end": self.clipped_end,
        }


@dataclass
class CalendarRow:
    room_id: int
    code: str
    name: str
    room_type: str
    status: str
    blocks: list[CalendarBlock] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "room_id": self.room_id,
            "code": self.code,
            "name": self.name,
            "room_type": self.room_type,
            "status": self.status,
            "blocks": [b.to_dict() for b in self.blocks],
        }


@dataclass
class CalendarProjection:
    view_start: date
    view_end: date
    rooms: list[CalendarRow] = field(default_factory=list)

    @property
    def total_days(self) -> int:
        return (self.view_end - self.view_start).days

    @property
    def days(self) -> list[date]:
        return [self.view_start + timedelta(days=i) for i in range(self.total_days)]

    def to_dict(self) -> dict:
        return {
            "view_start": self.view_start.isoformat(),
            "view_end": self.view_end.isoformat(),
            "total_days": self.total_days,
            "days": [d.isoformat() for d in self.days],
            "rooms": [r.to_dict() for r in self.rooms],
        }


def _block(reservation: Reservation, view_start: date, view_end: date) -> CalendarBlock:
    total_days = (view_end - view_start).days
    start = max(reservation.check_in, view_start)
    end = min(reservation.check_out, view_end)
    offset = (start - view_start).days
    duration = (end - start).days
    return CalendarBlock(
        reservation_id=reservation.id,
        code=public_reservation_code(reservation.id, reservation.code),
        status=reservation.status,
        check_in=reservation.check_in,
        check_out=reservation.check_out,
        start=start,
        end=end,
        offset_days=offset,
        duration_days=duration,
        left_pct=round(offset / total_days * 100, 4),
        width_pct=round(duration / total_days * 100, 4),
        guest_name=reservation.guest_name,
        company_name=reservation.company_name,
        clipped_start=reservation.check_in < view_start,
        clipped_end=reservation.check_out > view_end,
    )


def project_calendar(
    rooms: Iterable[Room],
    reservations: Iterable[Reservation],
    view_start: date,
    view_end: date,
) -> CalendarProjection:
    """Build the room grid for [view_start, view_end).

    Archived rooms are left out. Blocks are ordered by start date then id.

    Raises:
        InvalidDateRangeError: If view_end is not after view_start.
    """
    if view_end <= view_start:
        raise InvalidDateRangeError(
            view_start,
            view_end,
            f"view end ({view_end.isoformat()}) must be after view start ({view_start.isoformat()})",
        )

    ordered = sorted((r for r in rooms if not r.is_archived), key=lambda r: (r.sort_order, r.id))
    rows = {
        room.id: CalendarRow(
            room_id=room.id,
            code=room.code,
            name=room.name,
            room_type=room.room_type,
            status=room.status,
        )
        for room in ordered
    }

    for reservation in sorted(reservations, key=lambda r: (r.check_in, r.id)):
        row = rows.get(reservation.room_id)
        if row is None:
            continue
        if not overlaps(reservation.check_in, reservation.check_out, view_start, view_end):
            continue
        row.blocks.append(_block(reservation, view_start, view_end))

    return CalendarProjection(view_start=view_start, view_end=view_end, rooms=list(rows.values()))


def get_calendar(
    store: RecordStore,
    view_start: date,
    view_end: date,
    *,
    room_type: str | None = None,
    statuses: Iterable[str] = BLOCKING_STATUSES,
) -> CalendarProjection:
    if view_end > view_start and (view_end - view_start).days > MAX_VIEW_DAYS:
        raise InvalidDateRangeError(
            view_start, view_end, f"Calendar view cannot exceed {MAX_VIEW_DAYS} days"
        )
    rooms = store.list_rooms(room_type=room_type)
    reservations = (
        store.list_reservations_overlapping(view_start, view_end, statuses=tuple(statuses))
        if view_end > view_start
        else []
    )
    return project_calendar(rooms, reservations, view_start, view_end)
