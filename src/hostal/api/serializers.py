"""Record-to-JSON helpers shared by the routers.

Dates and Decimals are left to FastAPI's encoder.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from hostal.domain.dates import nights
from hostal.domain.models import Reservation
from hostal.domain.reservation_codes import public_reservation_code


def record_to_dict(record: Any) -> dict:
    return asdict(record)


def reservation_to_dict(reservation: Reservation) -> dict:
    data = asdict(reservation)
    data["public_code"] = public_reservation_code(reservation.id, reservation.code)
    data["nights"] = nights(reservation.check_in, reservation.check_out)
    return data
