"""Guest directory endpoints (recepcion+).

GET   /guests?search=   -> list
GET   /guests/{id}      -> detail
POST  /guests           -> create
PATCH /guests/{id}      -> update / deactivate
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, ConfigDict, Field

from hostal.api.auth import CurrentUser
from hostal.api.rbac import require_role
from hostal.api.serializers import record_to_dict
from hostal.infra.db import txn
from hostal.infra.repositories import guests_repository
from hostal.observability.correlation import get_correlation_id
from hostal.observability.logging import get_logger
from hostal.observability.redaction import safe_log_context

logger = get_logger(__name__)

router = APIRouter(prefix="/guests", tags=["guests"])


class CreateGuestRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(..., min_length=1)
    document_id: str | None = None
    email: str | None = None
    phone: str | None = None
    country: str | None = None
    notes: str | None = None


class UpdateGuestRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(None, min_length=1)
    document_id: str | None = None
    email: str | None = None
    phone: str | None = None
    country: str | None = None
    notes: str | None = None
    is_active: bool | None = None


@router.get("")
def list_guests(
    search: str | None = Query(None, max_length=100),
    include_inactive: bool = Query(False),
    limit: int = Query(guests_repository.DEFAULT_LIMIT, ge=1, le=500),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> list[dict]:
    with txn() as cur:
        guests = guests_repository.list_guests(
            cur, search=search, include_inactive=include_inactive, limit=limit
        )
    return [record_to_dict(g) for g in guests]


@router.get("/{guest_id}")
def get_guest(
    guest_id: int = Path(..., description="Guest ID"),
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    with txn() as cur:
        guest = guests_repository.get_guest(cur, guest_id)
    if guest is None:
        raise HTTPException(status_code=404, detail="Guest not found")
    return record_to_dict(guest)


@router.post("", status_code=201)
def create_guest(
    body: CreateGuestRequest,
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    with txn() as cur:
        guest = guests_repository.insert_guest(cur, body.model_dump())

    # the guest's name, phone and document never reach the logs
    logger.info(
        "guest created",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(), guest_id=guest.id, user_id=user.id
            )
        },
    )
    return record_to_dict(guest)


@router.patch("/{guest_id}")
def update_guest(
    guest_id: int = Path(..., description="Guest ID"),
    body: UpdateGuestRequest = ...,
    user: CurrentUser = Depends(require_role("recepcion")),
) -> dict:
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    with txn() as cur:
        guest = guests_repository.update_guest(cur, guest_id, fields)
    if guest is None:
        raise HTTPException(status_code=404, detail="Guest not found")

    logger.info(
        "guest updated",
        extra={
            "extra_fields": safe_log_context(
                correlationId=get_correlation_id(), guest_id=guest_id, fields=sorted(fields)
            )
        },
    )
    return record_to_dict(guest)
