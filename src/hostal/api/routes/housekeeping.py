"""Housekeeping endpoints (housekeeping+).

GET  /housekeeping?date=   -> every active room with its status for the day
POST /housekeeping         -> set a room's status for a day (upsert)
"""

from __future__ import annotations

import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict

from hostal.api.auth import CurrentUser
from hostal.api.deps import get_store_scope, query_date
from hostal.api.rbac import require_role
from hostal.api.serializers import record_to_dict
from hostal.domain.housekeeping import housekeeping_board, record_housekeeping
from hostal.domain.models import HousekeepingStatus
from hostal.domain.store import StoreScope
from hostal.infra.time import local_today

router = APIRouter(prefix="/housekeeping", tags=["housekeeping"])


class HousekeepingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    room_id: int
    date: datetime.date
    status: HousekeepingStatus
    notes: str | None = None


@router.get("")
def get_board(
    day: str | None = Query(None, alias="date"),
    user: CurrentUser = Depends(require_role("housekeeping")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    board_date = query_date(day, "date", default=local_today())
    with open_store() as store:
        items = housekeeping_board(store, board_date)
    return {"date": board_date.isoformat(), "items": [i.to_dict() for i in items]}


@router.post("")
def upsert_entry(
    body: HousekeepingRequest,
    user: CurrentUser = Depends(require_role("housekeeping")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    with open_store() as store:
        entry = record_housekeeping(
            store,
            room_id=body.room_id,
            day=body.date,
            status=body.status.value,
            notes=body.notes,
        )
    return record_to_dict(entry)
