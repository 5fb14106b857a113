"""Report dashboards: the period dashboard and the front-desk "today" card."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from hostal.domain.calendar import CalendarView, view_window
from hostal.domain.financial import (
    MAX_RANGE_DAYS,
    get_financial_summary,
    rank_companies_by_revenue,
    window_rev_par,
)
from hostal.domain.dates import inclusive_window, next_day, validate_window
from hostal.domain.models import ReservationStatus
from hostal.domain.occupancy import OCCUPYING_STATUSES, compute_occupancy, occupancy_rate
from hostal.domain.store import RecordStore

DEFAULT_TOP_COMPANIES = 5

# A stay counts as "in the house today" only in these statuses; blocks and
# finished stays do not.
TODAY_OCCUPYING_STATUSES = (
    ReservationStatus.PENDING.value,
    ReservationStatus.CONFIRMED.value,
    ReservationStatus.CHECKED_IN.value,
)

PENDING_ARRIVAL_STATUSES = (ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value)


def default_dashboard_window(today: date) -> tuple[date, date]:
    """First day of today's month through today."""
    return today.replace(day=1), today


def build_dashboard(
    store: RecordStore,
    from_date: date,
    to_date: date,
    *,
    top_companies: int | None = DEFAULT_TOP_COMPANIES,
) -> dict:
    """Financial summary, occupancy and company ranking for one window.

    Rooms and reservations are read once and shared by the occupancy and
    company aggregations.
    """
    validate_window(from_date, to_date, max_days=MAX_RANGE_DAYS)
    start, end = inclusive_window(from_date, to_date)

    financial = get_financial_summary(store, from_date, to_date)
    rooms = store.list_rooms()
    reservations = store.list_reservations_overlapping(start, end, statuses=OCCUPYING_STATUSES)

    occupancy = compute_occupancy(rooms, reservations, from_date, to_date)
    companies = rank_companies_by_revenue(reservations, store.list_companies(), top_n=top_companies)

    return {
        "from": from_date.isoformat(),
        "to": to_date.isoformat(),
        "financial": financial.to_dict(),
        "occupancy": occupancy.to_dict(),
        "rev_par": window_rev_par(financial, occupancy.total_rooms),
        "top_companies": [c.to_dict() for c in companies],
    }


@dataclass
class TodaySummary:
    date: date
    total_rooms: int
    occupied_rooms: int
    pending_check_ins: int
    month_income: Decimal

    @property
    def occupancy_rate(self) -> float:
        return occupancy_rate(self.occupied_rooms, self.total_rooms)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "total_rooms": self.total_rooms,
            "occupied_rooms": self.occupied_rooms,
            "occupancy_rate": self.occupancy_rate,
            "pending_check_ins": self.pending_check_ins,
            "month_income": self.month_income,
        }


def build_today_summary(store: RecordStore, today: date) -> TodaySummary:
    rooms = [r for r in store.list_rooms() if not r.is_archived]
    room_ids = {r.id for r in rooms}
    reservations = [
        r
        for r in store.list_reservations_overlapping(
            today, next_day(today), statuses=TODAY_OCCUPYING_STATUSES
        )
        if r.room_id in room_ids
        and r.status in TODAY_OCCUPYING_STATUSES
        and r.check_in <= today < r.check_out
    ]

    # Whole calendar month, payments dated after today included.
    month_start, month_end = view_window(today, CalendarView.MONTH)
    income = get_financial_summary(store, month_start, month_end - timedelta(days=1)).total_income

    return TodaySummary(
        date=today,
        total_rooms=len(rooms),
        occupied_rooms=len({r.room_id for r in reservations}),
        pending_check_ins=sum(
            1 for r in reservations if r.check_in == today and r.status in PENDING_ARRIVAL_STATUSES
        ),
        month_income=income,
    )
