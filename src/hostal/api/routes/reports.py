"""Report endpoints (recepcion+).

GET /reports/dashboard?from=&to=&top=   -> financial + occupancy + company ranking
GET /reports/occupancy?from=&to=&room_type=&status=&company_id=
GET /reports/financial?from=&to=
GET /reports/companies?from=&to=&top=
GET /reports/today                      -> occupied rooms, pending arrivals, month income

from/to are inclusive calendar dates. The dashboard defaults to the first of
the current month through today.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from hostal.api.auth import CurrentUser
from hostal.api.deps import get_store_scope, query_date
from hostal.api.rbac import require_role
from hostal.domain.dashboard import (
    DEFAULT_TOP_COMPANIES,
    build_dashboard,
    build_today_summary,
    default_dashboard_window,
)
from hostal.domain.financial import get_company_revenue, get_financial_summary
from hostal.domain.models import ReservationStatus
from hostal.domain.occupancy import get_occupancy_report
from hostal.domain.store import StoreScope
from hostal.infra.time import local_today

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/dashboard")
def dashboard(
    from_date: str | None = Query(None, alias="from"),
    to_date: str | None = Query(None, alias="to"),
    top: int = Query(DEFAULT_TOP_COMPANIES, ge=1, le=100),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    default_from, default_to = default_dashboard_window(local_today())
    start = query_date(from_date, "from", default=default_from)
    end = query_date(to_date, "to", default=default_to)

    with open_store() as store:
        return build_dashboard(store, start, end, top_companies=top)


@router.get("/occupancy")
def occupancy(
    from_date: str = Query(..., alias="from"),
    to_date: str = Query(..., alias="to"),
    room_type: str | None = Query(None),
    status: ReservationStatus | None = Query(None),
    company_id: int | None = Query(None),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    start = query_date(from_date, "from")
    end = query_date(to_date, "to")
    with open_store() as store:
        report = get_occupancy_report(
            store,
            start,
            end,
            room_type=room_type,
            status=status.value if status else None,
            company_id=company_id,
        )
    return report.to_dict()


@router.get("/financial")
def financial(
    from_date: str = Query(..., alias="from"),
    to_date: str = Query(..., alias="to"),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    start = query_date(from_date, "from")
    end = query_date(to_date, "to")
    with open_store() as store:
        return get_financial_summary(store, start, end).to_dict()


@router.get("/companies")
def companies(
    from_date: str = Query(..., alias="from"),
    to_date: str = Query(..., alias="to"),
    top: int | None = Query(None, ge=1, le=100),
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> list[dict]:
    start = query_date(from_date, "from")
    end = query_date(to_date, "to")
    with open_store() as store:
        ranking = get_company_revenue(store, start, end, top_n=top)
    return [c.to_dict() for c in ranking]


@router.get("/today")
def today(
    user: CurrentUser = Depends(require_role("recepcion")),
    open_store: StoreScope = Depends(get_store_scope),
) -> dict:
    with open_store() as store:
        return build_today_summary(store, local_today()).to_dict()
