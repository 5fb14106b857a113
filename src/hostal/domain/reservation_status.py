"""Reservation status state machine.

    pending      -> confirmed, checked_in, cancelled
    confirmed    -> pending, checked_in, cancelled
    checked_in   -> checked_out, confirmed      (undo a mistaken check-in)
    checked_out  -> checked_in                  (reopen a stay)
    cancelled    -> pending                     (reinstate; availability re-checked)
    blocked      -> cancelled                   (release a maintenance block)

Staying in the same status is always allowed. Blocks are created directly
as blocked and never turn into guest stays.
"""

from __future__ import annotations

from hostal.domain.dates import ValidationError
from hostal.domain.models import ReservationStatus as S

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    S.PENDING.value: frozenset({S.CONFIRMED.value, S.CHECKED_IN.value, S.CANCELLED.value}),
    S.CONFIRMED.value: frozenset({S.PENDING.value, S.CHECKED_IN.value, S.CANCELLED.value}),
    S.CHECKED_IN.value: frozenset({S.CHECKED_OUT.value, S.CONFIRMED.value}),
    S.CHECKED_OUT.value: frozenset({S.CHECKED_IN.value}),
    S.CANCELLED.value: frozenset({S.PENDING.value}),
    S.BLOCKED.value: frozenset({S.CANCELLED.value}),
}

# Statuses a reservation may be created with
INITIAL_STATUSES = frozenset({S.PENDING.value, S.CONFIRMED.value, S.CHECKED_IN.value, S.BLOCKED.value})


class InvalidStatusTransitionError(ValidationError):
    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot change reservation status from '{current}' to '{target}'")


class UnknownStatusError(ValidationError):
    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Unknown reservation status '{status}'")


def _check_known(status: str) -> None:
    if status not in ALLOWED_TRANSITIONS:
        raise UnknownStatusError(status)


def can_transition(current: str, target: str) -> bool:
    _check_known(current)
    _check_known(target)
    return current == target or target in ALLOWED_TRANSITIONS[current]


def validate_transition(current: str, target: str) -> None:
    """Raise InvalidStatusTransitionError if current -> target is not allowed."""
    if not can_transition(current, target):
        raise InvalidStatusTransitionError(current, target)


def validate_initial_status(status: str) -> None:
    _check_known(status)
    if status not in INITIAL_STATUSES:
        raise InvalidStatusTransitionError("new", status)
