"""Shared test helper functions for the hostal panel tests.

This module contains helper functions that can be imported by both conftest.py
and individual test files. These are NOT fixtures - they are regular functions
and plain classes.
"""

from __future__ import annotations

import base64
import time
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable

import jwt
from cryptography.hazmat.primitives.asymmetric import rsa

from hostal.domain.models import (
    Companion,
    Company,
    HousekeepingEntry,
    Payment,
    Reservation,
    Room,
)
from hostal.domain.store import StoreError

TEST_ISSUER = "https://auth.example.com"
TEST_AUDIENCE = "hostal-api"


def _generate_rsa_keypair():
    """Generate RSA key pair for test JWT signing."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    public_key = private_key.public_key()
    return private_key, public_key


def _create_jwks(public_key, kid: str = "test-key-1") -> dict:
    """Create JWKS from public key."""
    public_numbers = public_key.public_numbers()

    def int_to_base64(n: int) -> str:
        byte_length = (n.bit_length() + 7) // 8
        return (
            base64.urlsafe_b64encode(n.to_bytes(byte_length, "big"))
            .rstrip(b"=")
            .decode()
        )

    return {
        "keys": [
            {
                "kty": "RSA",
                "use": "sig",
                "alg": "RS256",
                "kid": kid,
                "n": int_to_base64(public_numbers.n),
                "e": int_to_base64(public_numbers.e),
            }
        ]
    }


def _create_token(
    private_key,
    kid: str = "test-key-1",
    sub: str = "user-123",
    iss: str = TEST_ISSUER,
    aud: str = TEST_AUDIENCE,
    exp: int | None = None,
    azp: str | None = None,
) -> str:
    """Create signed JWT for testing."""
    now = int(time.time())
    payload = {
        "sub": sub,
        "iss": iss,
        "aud": aud,
        "exp": exp if exp is not None else now + 3600,
        "iat": now,
    }
    if azp:
        payload["azp"] = azp

    return jwt.encode(payload, private_key, algorithm="RS256", headers={"kid": kid})


# ── Record builders ─────────────────────────────────────────────────────


def make_room(room_id: int, room_type: str = "double", **kwargs: Any) -> Room:
    kwargs.setdefault("code", str(100 + room_id))
    kwargs.setdefault("name", f"Room {100 + room_id}")
    kwargs.setdefault("sort_order", room_id)
    return Room(id=room_id, room_type=room_type, **kwargs)


def make_reservation(
    reservation_id: int,
    room_id: int,
    check_in: date,
    check_out: date,
    status: str = "confirmed",
    **kwargs: Any,
) -> Reservation:
    return Reservation(
        id=reservation_id,
        room_id=room_id,
        check_in=check_in,
        check_out=check_out,
        status=status,
        **kwargs,
    )


def make_payment(
    payment_id: int,
    amount: str | int,
    payment_date: date | datetime,
    method: str = "cash",
    document_type: str = "receipt",
    **kwargs: Any,
) -> Payment:
    return Payment(
        id=payment_id,
        amount=Decimal(str(amount)),
        method=method,
        document_type=document_type,
        payment_date=payment_date,
        **kwargs,
    )


# ── In-memory record store ──────────────────────────────────────────────


def _day(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


class InMemoryStore:
    """RecordStore kept in dicts, with the same half-open filters as SQL.

    Every overlap query is recorded in overlap_calls so tests can assert on
    the window and the lock flag.
    """

    def __init__(
        self,
        rooms: Iterable[Room] = (),
        reservations: Iterable[Reservation] = (),
        payments: Iterable[Payment] = (),
        companies: Iterable[Company] = (),
    ) -> None:
        self.rooms: dict[int, Room] = {r.id: r for r in rooms}
        self.reservations: dict[int, Reservation] = {r.id: r for r in reservations}
        self.payments: list[Payment] = list(payments)
        self.companies: list[Company] = list(companies)
        self.companions: dict[int, list[Companion]] = {}
        self.housekeeping: dict[tuple[int, date], HousekeepingEntry] = {}
        self.overlap_calls: list[dict[str, Any]] = []
        self._companion_seq = 0
        self._housekeeping_seq = 0

    def _with_companions(self, reservation: Reservation) -> Reservation:
        return replace(reservation, companions=list(self.companions.get(reservation.id, [])))

    def list_rooms(self, *, room_type: str | None = None) -> list[Room]:
        rooms = [r for r in self.rooms.values() if room_type is None or r.room_type == room_type]
        return sorted(rooms, key=lambda r: (r.sort_order, r.id))

    def get_room(self, room_id: int) -> Room | None:
        return self.rooms.get(room_id)

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
        statuses = tuple(statuses) if statuses is not None else None
        self.overlap_calls.append(
            {
                "start": start,
                "end": end,
                "room_id": room_id,
                "statuses": statuses,
                "company_id": company_id,
                "exclude_reservation_id": exclude_reservation_id,
                "lock": lock,
            }
        )
        result = []
        for r in self.reservations.values():
            if not (r.check_in < end and r.check_out > start):
                continue
            if room_id is not None and r.room_id != room_id:
                continue
            if statuses is not None and r.status not in statuses:
                continue
            if company_id is not None and r.company_id != company_id:
                continue
            if exclude_reservation_id is not None and r.id == exclude_reservation_id:
                continue
            result.append(replace(r))
        return sorted(result, key=lambda r: (r.check_in, r.id))

    def get_reservation(self, reservation_id: int, *, lock: bool = False) -> Reservation | None:
        reservation = self.reservations.get(reservation_id)
        return self._with_companions(reservation) if reservation else None

    def insert_reservation(self, fields: dict[str, Any]) -> Reservation:
        reservation_id = max(self.reservations, default=0) + 1
        reservation = Reservation(id=reservation_id, **fields)
        self.reservations[reservation_id] = reservation
        return replace(reservation)

    def update_reservation(self, reservation_id: int, fields: dict[str, Any]) -> Reservation | None:
        current = self.reservations.get(reservation_id)
        if current is None:
            return None
        updated = replace(current, **fields)
        self.reservations[reservation_id] = updated
        return self._with_companions(updated)

    def delete_reservation(self, reservation_id: int) -> bool:
        self.companions.pop(reservation_id, None)
        return self.reservations.pop(reservation_id, None) is not None

    def list_companions(self, reservation_ids: Iterable[int]) -> dict[int, list[Companion]]:
        return {
            rid: list(self.companions[rid]) for rid in reservation_ids if self.companions.get(rid)
        }

    def replace_companions(self, reservation_id: int, companions: list[Companion]) -> list[Companion]:
        stored = []
        for companion in companions:
            self._companion_seq += 1
            stored.append(
                Companion(
                    id=self._companion_seq,
                    reservation_id=reservation_id,
                    full_name=companion.full_name,
                    document_id=companion.document_id,
                )
            )
        self.companions[reservation_id] = stored
        return list(stored)

    def list_payments(self, start: date, end: date) -> list[Payment]:
        return [p for p in self.payments if start <= _day(p.payment_date) < end]

    def list_companies(self) -> list[Company]:
        return list(self.companies)

    def list_housekeeping(self, day: date) -> list[HousekeepingEntry]:
        return [e for (_, d), e in self.housekeeping.items() if d == day]

    def upsert_housekeeping(
        self,
        *,
        room_id: int,
        day: date,
        status: str,
        notes: str | None = None,
    ) -> HousekeepingEntry:
        existing = self.housekeeping.get((room_id, day))
        if existing is None:
            self._housekeeping_seq += 1
            entry_id = self._housekeeping_seq
        else:
            entry_id = existing.id
        entry = HousekeepingEntry(id=entry_id, room_id=room_id, date=day, status=status, notes=notes)
        self.housekeeping[(room_id, day)] = entry
        return entry


def memory_scope(store: InMemoryStore):
    """StoreScope yielding the given in-memory store."""

    @contextmanager
    def scope():
        yield store

    return scope


def failing_scope():
    """StoreScope whose datastore is unreachable."""

    @contextmanager
    def scope():
        raise StoreError("Datastore unavailable during transaction")
        yield  # pragma: no cover

    return scope
