"""Unit tests for room availability.

These tests run against the in-memory record store, so no Postgres is needed.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import patch

import pytest

from hostal.domain.dates import InvalidDateRangeError
from hostal.domain.room_conflict import (
    BLOCKING_STATUSES,
    RoomConflictError,
    assert_room_available,
    check_room_availability,
)

from .helpers import InMemoryStore, make_reservation, make_room


@pytest.fixture
def store():
    """Room 1 booked 2025-03-10 -> 2025-03-15 by reservation 99."""
    return InMemoryStore(
        rooms=[make_room(1), make_room(2)],
        reservations=[
            make_reservation(99, 1, date(2025, 3, 10), date(2025, 3, 15), code="R-250310-1234")
        ],
    )


class TestBlockingStatuses:
    def test_every_status_but_cancelled_blocks(self):
        assert "cancelled" not in BLOCKING_STATUSES
        for status in ("pending", "confirmed", "checked_in", "checked_out", "blocked"):
            assert status in BLOCKING_STATUSES


class TestCheckRoomAvailabilityNoConflict:
    """Cases where the room is free."""

    def test_disjoint_dates(self, store):
        result = check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 1), check_out=date(2025, 3, 5)
        )
        assert result.available
        assert result.first_conflict is None

    def test_checkin_on_existing_checkout(self, store):
        """Check-out A == check-in B does not conflict (same-day turnover)."""
        result = check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 15), check_out=date(2025, 3, 20)
        )
        assert result.available

    def test_checkout_on_existing_checkin(self, store):
        result = check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 5), check_out=date(2025, 3, 10)
        )
        assert result.available

    def test_other_room_is_free(self, store):
        result = check_room_availability(
            store, room_id=2, check_in=date(2025, 3, 10), check_out=date(2025, 3, 15)
        )
        assert result.available

    def test_cancelled_reservation_ignored(self, store):
        store.reservations[99].status = "cancelled"
        result = check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 11), check_out=date(2025, 3, 12)
        )
        assert result.available

    def test_excluding_itself(self, store):
        """Editing reservation 99 in place never conflicts with itself."""
        result = check_room_availability(
            store,
            room_id=1,
            check_in=date(2025, 3, 9),
            check_out=date(2025, 3, 16),
            exclude_reservation_id=99,
        )
        assert result.available
        assert store.overlap_calls[-1]["exclude_reservation_id"] == 99


class TestCheckRoomAvailabilityConflict:
    @pytest.mark.parametrize(
        "check_in, check_out",
        [
            (date(2025, 3, 8), date(2025, 3, 11)),  # overlaps the start
            (date(2025, 3, 14), date(2025, 3, 18)),  # overlaps the end
            (date(2025, 3, 11), date(2025, 3, 12)),  # inside
            (date(2025, 3, 1), date(2025, 3, 31)),  # contains
        ],
    )
    def test_overlapping_dates(self, store, check_in, check_out):
        result = check_room_availability(store, room_id=1, check_in=check_in, check_out=check_out)
        assert not result.available
        assert result.first_conflict.id == 99

    @pytest.mark.parametrize("status", ["pending", "checked_out", "blocked"])
    def test_any_non_cancelled_status_blocks(self, store, status):
        store.reservations[99].status = status
        result = check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 12), check_out=date(2025, 3, 13)
        )
        assert not result.available

    def test_conflicts_ordered_by_check_in(self, store):
        store.reservations[98] = make_reservation(98, 1, date(2025, 3, 15), date(2025, 3, 18))
        store.reservations[97] = make_reservation(97, 1, date(2025, 3, 5), date(2025, 3, 10))
        result = check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 1), check_out=date(2025, 3, 31)
        )
        assert [r.id for r in result.conflicts] == [97, 99, 98]

    def test_lock_flag_forwarded(self, store):
        check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 1), check_out=date(2025, 3, 2), lock=True
        )
        assert store.overlap_calls[-1]["lock"] is True

    def test_loose_store_rows_are_rechecked(self):
        """Rows the store returns that do not really overlap are not conflicts."""

        class LooseStore(InMemoryStore):
            def list_reservations_overlapping(self, start, end, **kwargs):
                return list(self.reservations.values())

        store = LooseStore(
            reservations=[make_reservation(5, 1, date(2025, 3, 1), date(2025, 3, 5))]
        )
        result = check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 5), check_out=date(2025, 3, 8)
        )
        assert result.available

    def test_conflict_logged_without_pii(self, store):
        store.reservations[99].guest_name = "Ana Perez"
        with patch("hostal.domain.room_conflict.logger") as mock_logger:
            check_room_availability(
                store, room_id=1, check_in=date(2025, 3, 12), check_out=date(2025, 3, 13)
            )
        mock_logger.warning.assert_called_once()
        fields = mock_logger.warning.call_args.kwargs["extra"]["extra_fields"]
        assert fields["conflicting_reservation_id"] == 99
        assert "Ana Perez" not in str(fields)

    def test_to_dict_reports_public_code(self, store):
        result = check_room_availability(
            store, room_id=1, check_in=date(2025, 3, 12), check_out=date(2025, 3, 13)
        )
        data = result.to_dict()
        assert data["available"] is False
        assert data["conflict"]["code"] == "LB-00099"
        assert data["conflict"]["check_out"] == "2025-03-15"


class TestInvalidRange:
    def test_zero_nights_rejected(self, store):
        with pytest.raises(InvalidDateRangeError):
            check_room_availability(
                store, room_id=1, check_in=date(2025, 3, 1), check_out=date(2025, 3, 1)
            )
        assert store.overlap_calls == []


class TestAssertRoomAvailable:
    def test_raises_with_conflict_details(self, store):
        with pytest.raises(RoomConflictError) as exc_info:
            assert_room_available(
                store, room_id=1, check_in=date(2025, 3, 14), check_out=date(2025, 3, 16)
            )
        exc = exc_info.value
        assert exc.room_id == 1
        assert exc.conflicting_reservation_id == 99
        assert exc.conflicting_code == "LB-00099"
        assert exc.existing_check_in == date(2025, 3, 10)
        assert "LB-00099" in str(exc)

    def test_passes_when_free(self, store):
        assert_room_available(
            store, room_id=1, check_in=date(2025, 3, 15), check_out=date(2025, 3, 16)
        )

    def test_error_without_details_has_generic_message(self):
        assert "already has a reservation" in str(RoomConflictError(room_id=None))
