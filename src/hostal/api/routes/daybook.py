"""Daybook endpoint (recepcion+).

GET /daybook?date=   -> arrivals, stays and departures of the day

Invoicing data is updated through PATCH /reservations/{id}/invoice.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from hostal.api.auth import CurrentUser
from hostal.api.deps import get_store_scope, query_date
from hostal.api.rbac import require_role
from hostal.domain.daybook import get_daybook
from hostal.domain.store import StoreScope
from hostal.infra.time import local_today

router = APIRouter(prefix="/daybook", tags=["daybook"])


@router.get("")
def daybook(
    day: str | None = Query(None, alias="date"),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    book_date = query_date(day, "date", default=local_today())
    with open_store() as store:
        entries = get_daybook(store, book_date)
    return {"date": book_date.isoformat(), "items": [e.to_dict() for e in entries]}
