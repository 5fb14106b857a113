"""Financial rollups over an inclusive window [from, to].

Payments are fetched once with payment_date >= from AND payment_date < to + 1
day, which also catches rows whose payment_date carries a time of day.
Amounts are plain sums in the single local currency: no conversion, no
rounding beyond the stored values.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from hostal.domain.dates import inclusive_window, iter_days, validate_window, window_days
from hostal.domain.models import Company, Payment, Reservation, ReservationStatus
from hostal.domain.occupancy import OCCUPYING_STATUSES
from hostal.domain.store import RecordStore

UNKNOWN = "unknown"

MAX_RANGE_DAYS = 366


def _payment_day(payment: Payment) -> date:
    value = payment.payment_date
    return value.date() if isinstance(value, datetime) else value


def rev_par(total_income: Decimal, total_rooms: int, days: int) -> Decimal:
    """Revenue per available room-night (0 when there are no room-nights)."""
    room_nights = total_rooms * days
    if room_nights <= 0:
        return Decimal(0)
    return (Decimal(total_income) / room_nights).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass
class FinancialSummary:
    from_date: date
    to_date: date
    total_income: Decimal
    income_by_method: dict[str, Decimal]
    income_by_document_type: dict[str, Decimal]
    daily_income: list[tuple[date, Decimal]]
    payments_count: int = 0

    def to_dict(self) -> dict:
        return {
            "from": self.from_date.isoformat(),
            "to": self.to_date.isoformat(),
            "total_income": self.total_income,
            "payments_count": self.payments_count,
            "income_by_method": [
                {"method": method, "amount": amount}
                for method, amount in self.income_by_method.items()
            ],
            "income_by_document_type": [
                {"document_type": doc, "amount": amount}
                for doc, amount in self.income_by_document_type.items()
            ],
            "daily_income": [
                {"date": day.isoformat(), "amount": amount} for day, amount in self.daily_income
            ],
        }


@dataclass
class CompanyRevenue:
    company_id: int
    name: str | None
    total_revenue: Decimal
    reservations: int

    def to_dict(self) -> dict:
        return {
            "company_id": self.company_id,
            "name": self.name,
            "total_revenue": self.total_revenue,
            "reservations": self.reservations,
        }


def summarize_payments(
    payments: Iterable[Payment],
    from_date: date,
    to_date: date,
) -> FinancialSummary:
    """Group payment amounts by method, document type and day.

    Payments dated outside [from_date, to_date] are skipped, so the grand
    total always equals each grouping's sum.
    """
    total = Decimal(0)
    by_method: dict[str, Decimal] = defaultdict(Decimal)
    by_document: dict[str, Decimal] = defaultdict(Decimal)
    by_day: dict[date, Decimal] = {day: Decimal(0) for day in iter_days(from_date, to_date)}
    count = 0

    for payment in payments:
        day = _payment_day(payment)
        if day not in by_day:
            continue
        amount = Decimal(payment.amount or 0)
        total += amount
        by_method[payment.method or UNKNOWN] += amount
        by_document[payment.document_type or UNKNOWN] += amount
        by_day[day] += amount
        count += 1

    return FinancialSummary(
        from_date=from_date,
        to_date=to_date,
        total_income=total,
        income_by_method=dict(by_method),
        income_by_document_type=dict(by_document),
        daily_income=sorted(by_day.items()),
        payments_count=count,
    )


def rank_companies_by_revenue(
    reservations: Iterable[Reservation],
    companies: Iterable[Company] = (),
    *,
    top_n: int | None = None,
) -> list[CompanyRevenue]:
    """Sum total_price per company over non-cancelled company reservations.

    Sorted by revenue descending, then company id. top_n=None returns all.
    """
    names = {c.id: c.name for c in companies}
    revenue: dict[int, Decimal] = defaultdict(Decimal)
    counts: dict[int, int] = defaultdict(int)

    for r in reservations:
        if r.company_id is None or r.status == ReservationStatus.CANCELLED.value:
            continue
        revenue[r.company_id] += Decimal(r.total_price or 0)
        counts[r.company_id] += 1
        if r.company_id not in names and r.company_name:
            names[r.company_id] = r.company_name

    ranking = sorted(
        (
            CompanyRevenue(
                company_id=company_id,
                name=names.get(company_id),
                total_revenue=amount,
                reservations=counts[company_id],
            )
            for company_id, amount in revenue.items()
        ),
        key=lambda c: (-c.total_revenue, c.company_id),
    )
    return ranking if top_n is None else ranking[:top_n]


def get_financial_summary(store: RecordStore, from_date: date, to_date: date) -> FinancialSummary:
    validate_window(from_date, to_date, max_days=MAX_RANGE_DAYS)
    start, end = inclusive_window(from_date, to_date)
    return summarize_payments(store.list_payments(start, end), from_date, to_date)


def get_company_revenue(
    store: RecordStore,
    from_date: date,
    to_date: date,
    *,
    top_n: int | None = None,
) -> list[CompanyRevenue]:
    """Company ranking for reservations overlapping [from_date, to_date]."""
    validate_window(from_date, to_date, max_days=MAX_RANGE_DAYS)
    start, end = inclusive_window(from_date, to_date)
    reservations = store.list_reservations_overlapping(start, end, statuses=OCCUPYING_STATUSES)
    return rank_companies_by_revenue(reservations, store.list_companies(), top_n=top_n)


def window_rev_par(summary: FinancialSummary, total_rooms: int) -> Decimal:
    return rev_par(summary.total_income, total_rooms, window_days(summary.from_date, summary.to_date))
