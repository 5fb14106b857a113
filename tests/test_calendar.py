"""Tests for the calendar projection."""

from __future__ import annotations

from datetime import date

import pytest

from hostal.domain.calendar import (
    CalendarView,
    get_calendar,
    project_calendar,
    view_window,
)
from hostal.domain.dates import InvalidDateRangeError

from .helpers import InMemoryStore, make_reservation, make_room


class TestViewWindow:
    def test_day(self):
        assert view_window(date(2024, 9, 4), "day") == (date(2024, 9, 4), date(2024, 9, 5))

    def test_week_starts_monday(self):
        # 2024-09-04 is a Wednesday
        assert view_window(date(2024, 9, 4), CalendarView.WEEK) == (
            date(2024, 9, 2),
            date(2024, 9, 9),
        )

    def test_month(self):
        assert view_window(date(2024, 2, 14), "month") == (date(2024, 2, 1), date(2024, 3, 1))

    def test_december_rolls_over(self):
        assert view_window(date(2024, 12, 31), "month") == (date(2024, 12, 1), date(2025, 1, 1))

    def test_unknown_view(self):
        with pytest.raises(ValueError):
            view_window(date(2024, 9, 4), "year")


class TestProjectCalendar:
    @pytest.fixture
    def rooms(self):
        return [
            make_room(1, code="B", sort_order=2),
            make_room(2, code="A", sort_order=1),
            make_room(3, code="X", status="archived"),
        ]

    def test_rooms_ordered_and_archived_left_out(self, rooms):
        projection = project_calendar(rooms, [], date(2024, 9, 1), date(2024, 9, 8))
        assert [r.code for r in projection.rooms] == ["A", "B"]
        assert projection.total_days == 7

    def test_block_inside_window(self, rooms):
        reservation = make_reservation(5, 1, date(2024, 9, 2), date(2024, 9, 4), guest_name="Ana")
        projection = project_calendar(rooms, [reservation], date(2024, 9, 1), date(2024, 9, 11))
        block = projection.rooms[1].blocks[0]

        assert block.code == "LB-00005"
        assert block.offset_days == 1
        assert block.duration_days == 2
        assert block.left_pct == 10.0
        assert block.width_pct == 20.0
        assert not block.clipped_start and not block.clipped_end

    def test_block_clipped_to_window(self, rooms):
        reservation = make_reservation(5, 2, date(2024, 8, 28), date(2024, 9, 12))
        projection = project_calendar(rooms, [reservation], date(2024, 9, 1), date(2024, 9, 8))
        block = projection.rooms[0].blocks[0]

        assert block.start == date(2024, 9, 1)
        assert block.end == date(2024, 9, 8)
        assert block.width_pct == 100.0
        assert block.clipped_start and block.clipped_end
        assert block.check_in == date(2024, 8, 28)

    def test_checkout_on_view_start_not_shown(self, rooms):
        reservation = make_reservation(5, 1, date(2024, 8, 28), date(2024, 9, 1))
        projection = project_calendar(rooms, [reservation], date(2024, 9, 1), date(2024, 9, 8))
        assert all(not r.blocks for r in projection.rooms)

    def test_reservations_on_unknown_rooms_ignored(self, rooms):
        reservation = make_reservation(5, 3, date(2024, 9, 2), date(2024, 9, 4))
        projection = project_calendar(rooms, [reservation], date(2024, 9, 1), date(2024, 9, 8))
        assert all(not r.blocks for r in projection.rooms)

    def test_blocks_ordered_by_check_in(self, rooms):
        reservations = [
            make_reservation(8, 1, date(2024, 9, 5), date(2024, 9, 6)),
            make_reservation(9, 1, date(2024, 9, 2), date(2024, 9, 5)),
        ]
        projection = project_calendar(rooms, reservations, date(2024, 9, 1), date(2024, 9, 8))
        assert [b.reservation_id for b in projection.rooms[1].blocks] == [9, 8]

    def test_empty_window_rejected(self, rooms):
        with pytest.raises(InvalidDateRangeError):
            project_calendar(rooms, [], date(2024, 9, 1), date(2024, 9, 1))

    def test_to_dict(self, rooms):
        data = project_calendar(rooms, [], date(2024, 9, 1), date(2024, 9, 3)).to_dict()
        assert data["days"] == ["2024-09-01", "2024-09-02"]
        assert data["rooms"][0]["blocks"] == []


class TestGetCalendar:
    def test_cancelled_reservations_not_fetched(self):
        store = InMemoryStore(
            rooms=[make_room(1)],
            reservations=[
                make_reservation(1, 1, date(2024, 9, 2), date(2024, 9, 3), status="cancelled"),
                make_reservation(2, 1, date(2024, 9, 3), date(2024, 9, 4), status="blocked"),
            ],
        )
        projection = get_calendar(store, date(2024, 9, 1), date(2024, 9, 8))
        assert [b.reservation_id for b in projection.rooms[0].blocks] == [2]

    def test_view_too_long(self):
        with pytest.raises(InvalidDateRangeError, match="cannot exceed"):
            get_calendar(InMemoryStore(), date(2024, 1, 1), date(2024, 6, 1))
