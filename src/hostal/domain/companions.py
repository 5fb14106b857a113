"""Reservation companions and the guest register.

Older rows kept companions as a JSON list embedded in the reservation notes:

    Late arrival [COMPANIONS_JSON][{"name": "Ana", "document": "12.345.678-9"}][/COMPANIONS_JSON]

split_legacy_companions pulls that fragment out so the companions can be
stored one row each and the notes left readable.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable

from hostal.domain.dates import ValidationError, inclusive_window, validate_window
from hostal.domain.models import Companion, Reservation, ReservationStatus
from hostal.domain.store import RecordStore

LEGACY_TAG_START = "[COMPANIONS_JSON]"
LEGACY_TAG_END = "[/COMPANIONS_JSON]"

MAX_COMPANIONS = 20

MAX_REGISTER_DAYS = 366

# Blocks carry no guests.
GUEST_STATUSES = tuple(
    s.value
    for s in ReservationStatus
    if s not in (ReservationStatus.CANCELLED, ReservationStatus.BLOCKED)
)


class LegacyCompanionsError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Malformed legacy companions fragment: {detail}")


def normalize_companions(items: Iterable[Companion | dict[str, Any]]) -> list[Companion]:
    """Coerce companion input to Companion records.

    Accepts Companion instances or dicts shaped {full_name, document_id} or
    the legacy {name, document}. Entries without a name are dropped.
    """
    result: list[Companion] = []
    for item in items:
        if isinstance(item, Companion):
            name, document = item.full_name, item.document_id
        else:
            name = item.get("full_name") or item.get("name")
            document = item.get("document_id") or item.get("document")
        name = (name or "").strip()
        if not name:
            continue
        document = (document or "").strip() or None
        result.append(Companion(full_name=name, document_id=document))

    if len(result) > MAX_COMPANIONS:
        raise ValidationError(f"A reservation cannot list more than {MAX_COMPANIONS} companions")
    return result


def split_legacy_companions(notes: str | None) -> tuple[str | None, list[Companion]]:
    """Separate the legacy companions fragment from free-text notes.

    Returns (remaining_notes, companions). Notes without a fragment come back
    unchanged with an empty list; remaining notes that are blank become None.

    Raises:
        LegacyCompanionsError: If the fragment is unterminated or not a JSON list.
    """
    if not notes or LEGACY_TAG_START not in notes:
        return notes, []

    start = notes.index(LEGACY_TAG_START)
    end = notes.find(LEGACY_TAG_END, start)
    if end == -1:
        raise LegacyCompanionsError("missing closing tag")

    payload = notes[start + len(LEGACY_TAG_START) : end]
    try:
        data = json.loads(payload) if payload.strip() else []
    except json.JSONDecodeError as exc:
        raise LegacyCompanionsError(str(exc)) from exc
    if not isinstance(data, list) or not all(isinstance(i, dict) for i in data):
        raise LegacyCompanionsError("expected a list of objects")

    remaining = (notes[:start] + notes[end + len(LEGACY_TAG_END) :]).strip()
    return remaining or None, normalize_companions(data)


@dataclass
class RegisterEntry:
    reservation_id: int
    check_in: date
    check_out: date
    status: str
    full_name: str
    document_id: str | None
    is_holder: bool
    room_id: int
    source: str | None = None

    def to_dict(self) -> dict:
        return {
            "reservation_id": self.reservation_id,
            "room_id": self.room_id,
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "status": self.status,
            "full_name": self.full_name,
            "document_id": self.document_id,
            "type": "holder" if self.is_holder else "companion",
            "source": self.source,
        }


def build_guest_register(reservations: Iterable[Reservation]) -> list[RegisterEntry]:
    """One line per person staying: the holder first, then each companion."""
    entries: list[RegisterEntry] = []
    for r in sorted(reservations, key=lambda r: (r.check_in, r.id)):
        common = dict(
            reservation_id=r.id,
            check_in=r.check_in,
            check_out=r.check_out,
            status=r.status,
            room_id=r.room_id,
            source=r.source,
        )
        entries.append(
            RegisterEntry(
                full_name=r.guest_name or "",
                document_id=r.guest_document,
                is_holder=True,
                **common,
            )
        )
        for companion in r.companions:
            entries.append(
                RegisterEntry(
                    full_name=companion.full_name,
                    document_id=companion.document_id,
                    is_holder=False,
                    **common,
                )
            )
    return entries


def get_guest_register(store: RecordStore, from_date: date, to_date: date) -> list[RegisterEntry]:
    """Everyone staying at least one night in [from_date, to_date]."""
    validate_window(from_date, to_date, max_days=MAX_REGISTER_DAYS)
    start, end = inclusive_window(from_date, to_date)
    reservations = store.list_reservations_overlapping(start, end, statuses=GUEST_STATUSES)
    companions = store.list_companions([r.id for r in reservations])
    for r in reservations:
        r.companions = companions.get(r.id, [])
    return build_guest_register(reservations)
