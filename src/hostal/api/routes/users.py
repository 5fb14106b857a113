"""Staff user administration (superadmin only).

GET   /users        -> list, newest first
PATCH /users/{id}   -> change name, role or active flag

Accounts themselves live in the identity provider; a row appears here the
first time someone signs in.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel, ConfigDict, Field

from hostal.api.auth import CurrentUser
from hostal.api.rbac import require_role
from hostal.api.serializers import record_to_dict
from hostal.domain.models import StaffRole
from hostal.infra.db import txn
from hostal.infra.repositories import users_repository
from hostal.observability.correlation import get_correlation_id
from hostal.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


class UpdateUserRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1)
    role: StaffRole | None = None
    is_active: bool | None = None


@router.get("")
def list_users(
    include_inactive: bool = Query(True),
    user: CurrentUser = Depends(require_role("superadmin")),
) -> list[dict]:
    with txn() as cur:
        users = users_repository.list_users(cur, include_inactive=include_inactive)
    return [record_to_dict(u) for u in users]


@router.patch("/{user_id}")
def update_user(
    user_id: int = Path(..., description="Staff user ID"),
    body: UpdateUserRequest = ...,
    user: CurrentUser = Depends(require_role("superadmin")),
) -> dict:
    fields = body.model_dump(mode="json", exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=400, detail="No fields to update")
    for key in ("role", "is_active"):
        if key in fields and fields[key] is None:
            raise HTTPException(status_code=422, detail=f"{key} cannot be empty")

    # A superadmin cannot lock themselves out.
    if user_id == user.id and (
        fields.get("role", StaffRole.SUPERADMIN.value) != StaffRole.SUPERADMIN.value
        or fields.get("is_active") is False
    ):
        raise HTTPException(status_code=400, detail="You cannot demote or deactivate yourself")

    with txn() as cur:
        updated = users_repository.update_user(cur, user_id, fields)
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")

    logger.info(
        "staff user updated",
        extra={
            "extra_fields": {
                "correlationId": get_correlation_id(),
                "user_id": user_id,
                "updated_by": user.id,
                "fields": sorted(fields),
            }
        },
    )
    return record_to_dict(updated)
