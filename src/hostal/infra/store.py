"""PostgreSQL-backed RecordStore.

PgRecordStore wraps one psycopg2 cursor, so everything done through it runs
in the caller's transaction. Driver errors are translated at this boundary:

- exclusion violation on hostal_reservations -> RoomConflictError
- foreign key violation (unknown room, guest or company) -> ValidationError
- connection-level failures -> StoreError (never retried here)
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Any, Iterable, Iterator

import psycopg2
import psycopg2.errors
from psycopg2.extensions import cursor as PgCursor

from hostal.domain.dates import ValidationError
from hostal.domain.models import (
    Companion,
    Company,
    HousekeepingEntry,
    Payment,
    Reservation,
    Room,
)
from hostal.domain.room_conflict import RoomConflictError
from hostal.domain.store import StoreError
from hostal.infra.db import txn
from hostal.infra.repositories import (
    companies_repository,
    companions_repository,
    housekeeping_repository,
    payments_repository,
    reservations_repository,
    rooms_repository,
)
from hostal.observability.correlation import get_correlation_id
from hostal.observability.logging import get_logger

logger = get_logger(__name__)

_CONNECTION_ERRORS = (psycopg2.OperationalError, psycopg2.InterfaceError)

# Default constraint names are <table>_<column>_fkey.
_REFERENCE_COLUMNS = ("room_id", "guest_id", "company_id")


def _store_failure(exc: Exception, operation: str) -> StoreError:
    logger.error(
        "record store failure",
        extra={
            "extra_fields": {
                "correlationId": get_correlation_id(),
                "operation": operation,
                "error_type": type(exc).__name__,
            }
        },
    )
    return StoreError(f"Datastore unavailable during {operation}")


class PgRecordStore:
    """RecordStore over a psycopg2 cursor inside an open transaction."""

    def __init__(self, cur: PgCursor) -> None:
        self.cur = cur

    def list_rooms(self, *, room_type: str | None = None) -> list[Room]:
        return rooms_repository.list_rooms(self.cur, room_type=room_type)

    def get_room(self, room_id: int) -> Room | None:
        return rooms_repository.get_room(self.cur, room_id)

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
        return reservations_repository.list_overlapping(
            self.cur,
            start,
            end,
            room_id=room_id,
            statuses=statuses,
            company_id=company_id,
            exclude_reservation_id=exclude_reservation_id,
            lock=lock,
        )

    def get_reservation(self, reservation_id: int, *, lock: bool = False) -> Reservation | None:
        reservation = reservations_repository.get_reservation(self.cur, reservation_id, lock=lock)
        if reservation is not None:
            reservation.companions = self.list_companions([reservation_id]).get(reservation_id, [])
        return reservation

    def insert_reservation(self, fields: dict[str, Any]) -> Reservation:
        try:
            return reservations_repository.insert_reservation(self.cur, fields)
        except psycopg2.errors.ExclusionViolation as exc:
            raise self._overlap(fields.get("room_id"), exc) from exc
        except psycopg2.errors.ForeignKeyViolation as exc:
            raise self._missing_reference(fields, exc) from exc

    def update_reservation(self, reservation_id: int, fields: dict[str, Any]) -> Reservation | None:
        try:
            reservation = reservations_repository.update_reservation(self.cur, reservation_id, fields)
        except psycopg2.errors.ExclusionViolation as exc:
            raise self._overlap(fields.get("room_id"), exc) from exc
        except psycopg2.errors.ForeignKeyViolation as exc:
            raise self._missing_reference(fields, exc) from exc
        if reservation is not None:
            reservation.companions = self.list_companions([reservation_id]).get(reservation_id, [])
        return reservation

    def delete_reservation(self, reservation_id: int) -> bool:
        return reservations_repository.delete_reservation(self.cur, reservation_id)

    def list_companions(self, reservation_ids: Iterable[int]) -> dict[int, list[Companion]]:
        return companions_repository.list_companions(self.cur, reservation_ids)

    def replace_companions(self, reservation_id: int, companions: list[Companion]) -> list[Companion]:
        return companions_repository.replace_companions(self.cur, reservation_id, companions)

    def list_payments(self, start: date, end: date) -> list[Payment]:
        return payments_repository.list_payments(self.cur, start, end)

    def list_companies(self) -> list[Company]:
        return companies_repository.list_companies(self.cur)

    def list_housekeeping(self, day: date) -> list[HousekeepingEntry]:
        return housekeeping_repository.list_for_date(self.cur, day)

    def upsert_housekeeping(
        self,
        *,
        room_id: int,
        day: date,
        status: str,
        notes: str | None = None,
    ) -> HousekeepingEntry:
        return housekeeping_repository.upsert_entry(
            self.cur, room_id=room_id, day=day, status=status, notes=notes
        )

    @staticmethod
    def _missing_reference(fields: dict[str, Any], exc: Exception) -> ValidationError:
        constraint = getattr(getattr(exc, "diag", None), "constraint_name", None) or str(exc)
        column = next((c for c in _REFERENCE_COLUMNS if f"_{c}_fkey" in constraint), None)
        logger.warning(
            "reservation reference rejected by database",
            extra={
                "extra_fields": {
                    "correlationId": get_correlation_id(),
                    "column": column,
                }
            },
        )
        if column is None:
            return ValidationError("Referenced room, guest or company not found")
        return ValidationError(f"{column[:-3].capitalize()} {fields.get(column)} not found")

    @staticmethod
    def _overlap(room_id: int | None, exc: Exception) -> RoomConflictError:
        logger.warning(
            "room overlap rejected by database",
            extra={
                "extra_fields": {
                    "correlationId": get_correlation_id(),
                    "room_id": room_id,
                    "constraint": getattr(getattr(exc, "diag", None), "constraint_name", None),
                }
            },
        )
        return RoomConflictError(room_id=room_id)


@contextmanager
def pg_store_scope() -> Iterator[PgRecordStore]:
    """Open a connection and transaction and yield a store bound to it.

    Commits when the block exits normally, rolls back otherwise.

    Raises:
        StoreError: If the database cannot be reached or drops the connection.
    """
    try:
        with txn() as cur:
            yield PgRecordStore(cur)
    except _CONNECTION_ERRORS as exc:
        raise _store_failure(exc, "transaction") from exc
