"""Calendar endpoint (housekeeping+).

GET /calendar?view=day|week|month&date=YYYY-MM-DD
GET /calendar?from=YYYY-MM-DD&to=YYYY-MM-DD      (inclusive custom range)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from hostal.api.auth import CurrentUser
from hostal.api.deps import get_store_scope, query_date
from hostal.api.rbac import require_role
from hostal.domain.calendar import CalendarView, get_calendar, view_window
from hostal.domain.dates import inclusive_window, validate_window
from hostal.domain.store import StoreScope
from hostal.infra.time import local_today

router = APIRouter(prefix="/calendar", tags=["calendar"])


@router.get("")
def calendar(
    view: CalendarView = Query(CalendarView.WEEK),
    anchor: str | None = Query(None, alias="date"),
    from_date: str | None = Query(None, alias="from"),
    to_date: str | None = Query(None, alias="to"),
    room_type: str | None = Query(None),
    user: CurrentUser = Depends(require_role("housekeeping")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    """Room-by-day grid; an explicit from/to range takes precedence over view."""
    if from_date or to_date:
        start = query_date(from_date, "from")
        end = query_date(to_date, "to")
        validate_window(start, end)
        view_start, view_end = inclusive_window(start, end)
    else:
        view_start, view_end = view_window(query_date(anchor, "date", default=local_today()), view)

    with open_store() as store:
        projection = get_calendar(store, view_start, view_end, room_type=room_type)
    return projection.to_dict()
