"""Occupancy aggregation over an inclusive reporting window [from, to].

A room is occupied on day D when a counted reservation on it satisfies
check_in <= D < check_out. Rooms are counted once per day however many
reservations cover them; more than one is an overbooking and is logged.

Candidate reservations are fetched once with the half-open window
[from, to + 1 day), then every day is tested in memory.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from hostal.domain.dates import inclusive_window, iter_days, occupies_day, validate_window, window_days
from hostal.domain.models import Reservation, Room
from hostal.domain.room_conflict import BLOCKING_STATUSES
from hostal.domain.store import RecordStore
from hostal.observability.logging import get_logger

logger = get_logger(__name__)

OCCUPYING_STATUSES = BLOCKING_STATUSES

MAX_RANGE_DAYS = 366


def occupancy_rate(occupied: int, total: int) -> float:
    """Percentage of total occupied, rounded to 2 decimals (0 when total is 0)."""
    if total <= 0:
        return 0.0
    return round(occupied / total * 100, 2)


@dataclass
class DailyOccupancy:
    date: date
    occupied: int
    occupancy_rate: float

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "occupied": self.occupied,
            "occupancy_rate": self.occupancy_rate,
        }


@dataclass
class RoomTypeOccupancy:
    room_type: str
    rooms: int
    available_room_nights: int
    occupied_room_nights: int

    @property
    def occupancy_rate(self) -> float:
        return occupancy_rate(self.occupied_room_nights, self.available_room_nights)

    def to_dict(self) -> dict:
        return {
            "room_type": self.room_type,
            "rooms": self.rooms,
            "available_room_nights": self.available_room_nights,
            "occupied_room_nights": self.occupied_room_nights,
            "occupancy_rate": self.occupancy_rate,
        }


@dataclass
class OccupancyReport:
    from_date: date
    to_date: date
    total_rooms: int
    daily: list[DailyOccupancy] = field(default_factory=list)
    by_room_type: list[RoomTypeOccupancy] = field(default_factory=list)

    @property
    def days(self) -> int:
        return window_days(self.from_date, self.to_date)

    @property
    def average_rate(self) -> float:
        """Mean of the daily rates (not weighted by room-nights)."""
        if not self.daily:
            return 0.0
        return round(sum(d.occupancy_rate for d in self.daily) / len(self.daily), 2)

    @property
    def snapshot(self) -> DailyOccupancy | None:
        """Occupancy on the reference day (the last day of the window)."""
        return self.daily[-1] if self.daily else None

    def to_dict(self) -> dict:
        snapshot = self.snapshot
        return {
            "from": self.from_date.isoformat(),
            "to": self.to_date.isoformat(),
            "total_rooms": self.total_rooms,
            "occupied_rooms": snapshot.occupied if snapshot else 0,
            "occupancy_rate": snapshot.occupancy_rate if snapshot else 0.0,
            "average_occupancy_rate": self.average_rate,
            "daily_occupancy": [d.to_dict() for d in self.daily],
            "occupancy_by_room_type": [r.to_dict() for r in self.by_room_type],
        }


def compute_occupancy(
    rooms: Iterable[Room],
    reservations: Iterable[Reservation],
    from_date: date,
    to_date: date,
    *,
    statuses: Iterable[str] = OCCUPYING_STATUSES,
) -> OccupancyReport:
    """Aggregate occupancy for [from_date, to_date] in memory.

    Archived rooms are not part of the inventory, and reservations on rooms
    outside the given set are ignored, so occupied never exceeds total.
    """
    counted_rooms = {r.id: r for r in rooms if not r.is_archived}
    counted_statuses = frozenset(statuses)
    total_rooms = len(counted_rooms)
    days = list(iter_days(from_date, to_date))

    stays = [
        r for r in reservations if r.room_id in counted_rooms and r.status in counted_statuses
    ]

    occupied_by_day: dict[date, set[int]] = {}
    for day in days:
        covering = [r for r in stays if occupies_day(r.check_in, r.check_out, day)]
        rooms_today = {r.room_id for r in covering}
        if len(covering) > len(rooms_today):
            logger.warning(
                "overbooking detected",
                extra={
                    "extra_fields": {
                        "date": day.isoformat(),
                        "reservations": len(covering),
                        "rooms": len(rooms_today),
                    }
                },
            )
        occupied_by_day[day] = rooms_today

    daily = [
        DailyOccupancy(
            date=day,
            occupied=len(occupied_by_day[day]),
            occupancy_rate=occupancy_rate(len(occupied_by_day[day]), total_rooms),
        )
        for day in days
    ]

    rooms_per_type: dict[str, int] = defaultdict(int)
    for room in counted_rooms.values():
        rooms_per_type[room.room_type] += 1

    occupied_nights_per_type: dict[str, int] = defaultdict(int)
    for day_rooms in occupied_by_day.values():
        for room_id in day_rooms:
            occupied_nights_per_type[counted_rooms[room_id].room_type] += 1

    by_room_type = [
        RoomTypeOccupancy(
            room_type=room_type,
            rooms=count,
            available_room_nights=count * len(days),
            occupied_room_nights=occupied_nights_per_type[room_type],
        )
        for room_type, count in sorted(rooms_per_type.items())
    ]

    return OccupancyReport(
        from_date=from_date,
        to_date=to_date,
        total_rooms=total_rooms,
        daily=daily,
        by_room_type=by_room_type,
    )


def get_occupancy_report(
    store: RecordStore,
    from_date: date,
    to_date: date,
    *,
    room_type: str | None = None,
    status: str | None = None,
    company_id: int | None = None,
) -> OccupancyReport:
    """Fetch rooms and candidate reservations once, then aggregate.

    Args:
        store: Record store.
        from_date: First day of the window (inclusive).
        to_date: Last day of the window (inclusive).
        room_type: Only rooms of this type.
        status: Count only reservations in this status (default: all but cancelled).
        company_id: Count only reservations billed to this company.

    Raises:
        InvalidDateRangeError: If to_date precedes from_date or the window
            exceeds MAX_RANGE_DAYS.
    """
    validate_window(from_date, to_date, max_days=MAX_RANGE_DAYS)
    statuses = (status,) if status else OCCUPYING_STATUSES
    start, end = inclusive_window(from_date, to_date)

    rooms = store.list_rooms(room_type=room_type)
    reservations = store.list_reservations_overlapping(
        start, end, statuses=statuses, company_id=company_id
    )
    return compute_occupancy(rooms, reservations, from_date, to_date, statuses=statuses)
