"""Reservation codes.

Internal code: R-YYMMDD-NNNN (check-in date plus a random 4-digit suffix).
Public code shown to guests and staff: LB-00042, derived from the row id.
"""

from __future__ import annotations

import random
from datetime import date

PUBLIC_PREFIX = "LB"


def generate_reservation_code(check_in: date, rng: random.Random | None = None) -> str:
    rng = rng or random
    suffix = rng.randint(1000, 9999)
    return f"R-{check_in.strftime('%y%m%d')}-{suffix}"


def public_reservation_code(reservation_id: int | str | None, code: str | None = None) -> str:
    """Format the code staff and guests see for a reservation.

    Falls back to the internal code when the id is missing or not a positive
    integer.
    """
    if reservation_id is not None:
        try:
            id_num = int(reservation_id)
        except (TypeError, ValueError):
            id_num = 0
        if id_num > 0:
            return f"{PUBLIC_PREFIX}-{id_num:05d}"

    if code:
        return code

    return f"{PUBLIC_PREFIX}-SIN-CODIGO"
