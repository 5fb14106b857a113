"""Record store interface consumed by the domain logic.

The domain modules never open connections themselves: callers hand them a
store bound to one transaction. hostal.infra.store.PgRecordStore is the
PostgreSQL implementation; tests use an in-memory one.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, ContextManager, Iterable, Protocol

from hostal.domain.models import (
    Companion,
    Company,
    HousekeepingEntry,
    Payment,
    Reservation,
    Room,
)


class StoreError(Exception):
    """The datastore is unreachable or rejected the operation."""


class RecordStore(Protocol):
    """Queries and writes the domain logic depends on.

    Date ranges are half-open: reservations overlapping [start, end) satisfy
    check_in < end AND check_out > start; payments satisfy
    start <= payment_date < end.
    """

    def list_rooms(self, *, room_type: str | None = None) -> list[Room]:
        ...

    def get_room(self, room_id: int) -> Room | None:
        ...

    def list_reservations_overlapping(
        self,
        start: date,
        end: date,
        *,
        room_id: int | None = None,
        statuses: Iterable[str] | None = None,
        company_id: int | None = None,
        exclude_reservation_id: int | None = None,
        lock: bool = False,
    ) -> list[Reservation]:
        ...

    def get_reservation(self, reservation_id: int, *, lock: bool = False) -> Reservation | None:
        ...

    def insert_reservation(self, fields: dict[str, Any]) -> Reservation:
        ...

    def update_reservation(self, reservation_id: int, fields: dict[str, Any]) -> Reservation | None:
        ...

    def delete_reservation(self, reservation_id: int) -> bool:
        ...

    def list_companions(self, reservation_ids: Iterable[int]) -> dict[int, list[Companion]]:
        ...

    def replace_companions(self, reservation_id: int, companions: list[Companion]) -> list[Companion]:
        ...

    def list_payments(self, start: date, end: date) -> list[Payment]:
        ...

    def list_companies(self) -> list[Company]:
        ...

    def list_housekeeping(self, day: date) -> list[HousekeepingEntry]:
        ...

    def upsert_housekeeping(
        self,
        *,
        room_id: int,
        day: date,
        status: str,
        notes: str | None = None,
    ) -> HousekeepingEntry:
        ...


# A zero-argument callable opening a store bound to one transaction.
StoreScope = Callable[[], ContextManager[RecordStore]]
