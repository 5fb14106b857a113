"""Housekeeping status per room and day.

There is at most one entry per (room, date); writing again replaces the
status and notes in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from hostal.domain.dates import ValidationError
from hostal.domain.models import HousekeepingEntry, HousekeepingStatus
from hostal.domain.reservations import RoomNotFoundError
from hostal.domain.store import RecordStore
from hostal.observability.correlation import get_correlation_id
from hostal.observability.logging import get_logger

logger = get_logger(__name__)


class UnknownHousekeepingStatusError(ValidationError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Unknown housekeeping status '{status}'")


@dataclass
class BoardItem:
    room_id: int
    room_code: str
    room_name: str
    housekeeping_id: int | None = None
    status: str | None = None
    notes: str | None = None

    def to_dict(self) -> dict:
        return {
            "housekeeping_id": self.housekeeping_id,
            "room_id": self.room_id,
            "room_code": self.room_code,
            "room_name": self.room_name,
            "status": self.status,
            "notes": self.notes,
        }


def record_housekeeping(
    store: RecordStore,
    *,
    room_id: int,
    day: date,
    status: str,
    notes: str | None = None,
) -> HousekeepingEntry:
    """Set the housekeeping status of a room for a day (upsert)."""
    try:
        status = HousekeepingStatus(status).value
    except ValueError:
        raise UnknownHousekeepingStatusError(status)

    if store.get_room(room_id) is None:
        raise RoomNotFoundError(room_id)

    entry = store.upsert_housekeeping(room_id=room_id, day=day, status=status, notes=notes)
    logger.info(
        "housekeeping recorded",
        extra={
            "extra_fields": {
                "correlationId": get_correlation_id(),
                "room_id": room_id,
                "date": day.isoformat(),
                "status": status,
            }
        },
    )
    return entry


def housekeeping_board(store: RecordStore, day: date) -> list[BoardItem]:
    """Every active room with its entry for the day (status None when unset)."""
    entries = {e.room_id: e for e in store.list_housekeeping(day)}
    rooms = sorted(
        (r for r in store.list_rooms() if not r.is_archived), key=lambda r: (r.sort_order, r.id)
    )

    board = []
    for room in rooms:
        entry = entries.get(room.id)
        board.append(
            BoardItem(
                room_id=room.id,
                room_code=room.code,
                room_name=room.name,
                housekeeping_id=entry.id if entry else None,
                status=entry.status if entry else None,
                notes=entry.notes if entry else None,
            )
        )
    return board
