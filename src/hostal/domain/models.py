"""Domain records and enums.

Records are plain dataclasses built by the repositories from database rows;
the aggregation modules consume them without touching the database.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


# ── Enums ─────────────────────────────────────────────────


class RoomStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    CLEANING = "cleaning"
    OUT_OF_SERVICE = "out_of_service"
    ARCHIVED = "archived"


class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"
    BLOCKED = "blocked"


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    INVOICED = "invoiced"
    PARTIAL = "partial"


class PaymentMethod(str, Enum):
    CASH = "cash"
    TRANSFER = "transfer"
    CARD = "card"
    GATEWAY = "gateway"
    OTHER = "other"


class DocumentType(str, Enum):
    RECEIPT = "receipt"
    INVOICE = "invoice"
    WAYBILL = "waybill"
    NONE = "none"


class HousekeepingStatus(str, Enum):
    DIRTY = "dirty"
    CLEANING = "cleaning"
    READY = "ready"
    MAINTENANCE = "maintenance"


class StaffRole(str, Enum):
    HOUSEKEEPING = "housekeeping"
    RECEPCION = "recepcion"
    SUPERADMIN = "superadmin"


# ── Records ───────────────────────────────────────────────


@dataclass
class Room:
    id: int
    code: str
    name: str
    room_type: str
    status: str = RoomStatus.AVAILABLE.value
    capacity_adults: int = 1
    capacity_children: int = 0
    base_rate: Decimal | None = None
    currency: str = "CLP"
    sort_order: int = 0
    annex: str | None = None
    floor: int | None = None
    notes: str | None = None

    @property
    def is_archived(self) -> bool:
        return self.status == RoomStatus.ARCHIVED.value


@dataclass
class Guest:
    id: int
    full_name: str
    document_id: str | None = None
    email: str | None = None
    phone: str | None = None
    country: str | None = None
    notes: str | None = None
    is_active: bool = True


@dataclass
class Company:
    id: int
    name: str
    tax_id: str | None = None
    contact_person: str | None = None
    email: str | None = None
    phone: str | None = None
    discount_percent: Decimal | None = None
    notes: str | None = None
    is_active: bool = True


@dataclass
class Companion:
    full_name: str
    document_id: str | None = None
    id: int | None = None
    reservation_id: int | None = None


@dataclass
class Reservation:
    id: int
    room_id: int
    check_in: date
    check_out: date
    status: str
    guest_id: int | None = None
    company_id: int | None = None
    code: str | None = None
    adults: int = 1
    children: int = 0
    total_price: Decimal = Decimal(0)
    invoice_status: str = InvoiceStatus.PENDING.value
    invoice_number: str | None = None
    invoice_date: date | None = None
    invoice_notes: str | None = None
    notes: str | None = None
    source: str | None = None
    arrival_time: str | None = None
    breakfast_time: str | None = None
    guest_name: str | None = None
    guest_document: str | None = None
    company_name: str | None = None
    companions: list[Companion] = field(default_factory=list)


@dataclass
class Payment:
    id: int
    amount: Decimal
    method: str
    document_type: str
    payment_date: date | datetime
    currency: str = "CLP"
    document_number: str | None = None
    reservation_id: int | None = None
    guest_id: int | None = None
    company_id: int | None = None
    notes: str | None = None


@dataclass
class HousekeepingEntry:
    id: int
    room_id: int
    date: date
    status: str
    notes: str | None = None


@dataclass
class StaffUser:
    id: int
    external_subject: str
    email: str | None = None
    name: str | None = None
    role: str = StaffRole.RECEPCION.value
    is_active: bool = True
    created_at: datetime | None = None
