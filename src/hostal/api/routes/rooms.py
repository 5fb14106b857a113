"""Rooms endpoints.

GET    /rooms                 -> list   (recepcion+)
POST   /rooms                 -> create (superadmin)
PATCH  /rooms/{id}            -> update (superadmin)
PATCH  /rooms/{id}/status     -> operational status (recepcion+)
DELETE /rooms/{id}            -> delete, or archive when booked (superadmin)
"""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from psycopg2 import errors as pg_errors
from pydantic import BaseModel, ConfigDict, Field

from hostal.api.auth import CurrentUser
from hostal.api.deps import default_currency
from hostal.api.rbac import require_role
from hostal.api.serializers import record_to_dict
from hostal.domain.models import RoomStatus
from hostal.infra.db import txn
from hostal.infra.repositories import rooms_repository
from hostal.observability.correlation import get_correlation_id
from hostal.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/rooms", tags=["rooms"])


# ── Schemas ───────────────────────────────────────────────────────────────────


class CreateRoomRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    room_type: str = Field(..., min_length=1)
    status: RoomStatus = RoomStatus.AVAILABLE
    capacity_adults: int = Field(1, ge=1)
    capacity_children: int = Field(0, ge=0)
    base_rate: Decimal | None = Field(None, ge=0)
    currency: str = Field(default_factory=default_currency)
    sort_order: int = 0
    annex: str | None = None
    floor: int | None = None
    notes: str | None = None


class UpdateRoomRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str | None = Field(None, min_length=1)
    name: str | None = Field(None, min_length=1)
    room_type: str | None = Field(None, min_length=1)
    status: RoomStatus | None = None
    capacity_adults: int | None = Field(None, ge=1)
    capacity_children: int | None = Field(None, ge=0)
    base_rate: Decimal | None = Field(None, ge=0)
    currency: str | None = None
    sort_order: int | None = None
    annex: str | None = None
    floor: int | None = None
    notes: str | None = None


class RoomStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: RoomStatus


def _log(message: str, room_id: int, **fields) -> None:
    logger.info(
        message,
        extra={
            "extra_fields": {"correlationId": get_correlation_id(), "room_id": room_id, **fields}
        },
    )


# ── Routes ────────────────────────────────────────────────────────────────────


@router.get("")
def list_rooms(
    room_type: str | None = Query(None),
    include_archived: bool = Query(False),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> list[dict]:
    """List rooms ordered by sort_order. Archived rooms only on request."""
    with txn() as cur:
        rooms = rooms_repository.list_rooms(
            cur, room_type=room_type, include_archived=include_archived
        )
    return [record_to_dict(r) for r in rooms]


@router.post("", status_code=201)
def create_room(
    body: CreateRoomRequest,
    user: CurrentUser = Depends(require_role("superadmin")),
) -> dict:
    """Create a room. 409 if the code is already used."""
    fields = body.model_dump(mode="json")
    fields["base_rate"] = body.base_rate
    with txn() as cur:
        try:
            room = rooms_repository.insert_room(cur, fields)
        except pg_errors.UniqueViolation:
            raise HTTPException(status_code=409, detail="Room code already exists")

    _log("room created", room.id)
    return record_to_dict(room)


@router.patch("/{room_id}")
def update_room(
    room_id: int = Path(..., description="Room ID"),
    body: UpdateRoomRequest = ...,
    user: CurrentUser = Depends(require_role("superadmin")),
) -> dict:
    """Partial update; only the provided fields change."""
    fields = body.model_dump(mode="json", exclude_unset=True)
    if "base_rate" in fields:
        fields["base_rate"] = body.base_rate
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    with txn() as cur:
        try:
            room = rooms_repository.update_room(cur, room_id, fields)
        except pg_errors.UniqueViolation:
            raise HTTPException(status_code=409, detail="Room code already exists")

    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")

    _log("room updated", room_id, changed=sorted(fields))
    return record_to_dict(room)


@router.patch("/{room_id}/status")
def change_room_status(
    room_id: int = Path(..., description="Room ID"),
    body: RoomStatusRequest = ...,
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    """Set the operational status (available, cleaning, maintenance...).

    Archiving goes through DELETE.
    """
    if body.status is RoomStatus.ARCHIVED:
        raise HTTPException(status_code=422, detail="Use DELETE /rooms/{id} to archive a room")

    with txn() as cur:
        room = rooms_repository.update_room(cur, room_id, {"status": body.status.value})

    if room is None:
        raise HTTPException(status_code=404, detail="Room not found")

    _log("room status changed", room_id, status=body.status.value)
    return record_to_dict(room)


@router.delete("/{room_id}")
def delete_room(
    room_id: int = Path(..., description="Room ID"),
    user: CurrentUser = Depends(require_role("superadmin")),
) -> dict:
    """Delete a room, or archive it when any reservation references it."""
    with txn() as cur:
        outcome = rooms_repository.delete_or_archive_room(cur, room_id)

    if outcome is None:
        raise HTTPException(status_code=404, detail="Room not found")

    _log("room removed", room_id, outcome=outcome)
    return {"id": room_id, "result": outcome}
