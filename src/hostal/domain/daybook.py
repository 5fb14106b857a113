"""Daybook: the reservations a front desk deals with on one date.

A reservation is listed when check_in <= date <= check_out and it is not
cancelled, so departures of the day still show up for invoicing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from hostal.domain.models import Reservation
from hostal.domain.reservation_codes import public_reservation_code
from hostal.domain.room_conflict import BLOCKING_STATUSES
from hostal.domain.store import RecordStore

_UNSORTED = 999


@dataclass
class DaybookEntry:
    reservation: Reservation
    room_code: str | None
    room_name: str | None
    room_type: str | None
    movement: str

    def to_dict(self) -> dict:
        r = self.reservation
        return {
            "id": r.id,
            "code": public_reservation_code(r.id, r.code),
            "room_id": r.room_id,
            "room_code": self.room_code,
            "room_name": self.room_name,
            "room_type": self.room_type,
            "guest_id": r.guest_id,
            "guest_name": r.guest_name,
            "company_id": r.company_id,
            "company_name": r.company_name,
            "check_in": r.check_in.isoformat(),
            "check_out": r.check_out.isoformat(),
            "status": r.status,
            "movement": self.movement,
            "adults": r.adults,
            "children": r.children,
            "total_price": r.total_price,
            "invoice_status": r.invoice_status,
            "invoice_number": r.invoice_number,
            "invoice_date": r.invoice_date.isoformat() if r.invoice_date else None,
            "arrival_time": r.arrival_time,
            "breakfast_time": r.breakfast_time,
            "companions": len(r.companions),
        }


def _movement(reservation: Reservation, day: date) -> str:
    if reservation.check_in == day:
        return "arrival"
    if reservation.check_out == day:
        return "departure"
    return "in_house"


def get_daybook(store: RecordStore, day: date) -> list[DaybookEntry]:
    """Reservations active on day, ordered by the rooms' sort order."""
    rooms = {room.id: room for room in store.list_rooms()}
    candidates = store.list_reservations_overlapping(
        day - timedelta(days=1), day + timedelta(days=1), statuses=BLOCKING_STATUSES
    )

    entries = []
    for r in candidates:
        if not (r.check_in <= day <= r.check_out) or r.status not in BLOCKING_STATUSES:
            continue
        room = rooms.get(r.room_id)
        entries.append(
            DaybookEntry(
                reservation=r,
                room_code=room.code if room else None,
                room_name=room.name if room else None,
                room_type=room.room_type if room else None,
                movement=_movement(r, day),
            )
        )

    def sort_key(entry: DaybookEntry) -> tuple[int, int, int]:
        room = rooms.get(entry.reservation.room_id)
        return (room.sort_order if room else _UNSORTED, entry.reservation.room_id, entry.reservation.id)

    return sorted(entries, key=sort_key)
