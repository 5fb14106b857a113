"""Tests for the report, calendar, daybook and housekeeping endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from .helpers import make_payment, make_reservation, make_room


@pytest.fixture(autouse=True)
def seeded(store):
    """Two rooms; room 1 stays 09-01 -> 09-03, paid on 09-02."""
    store.rooms[1] = make_room(1)
    store.rooms[2] = make_room(2, room_type="single")
    store.reservations[1] = make_reservation(
        1, 1, date(2024, 9, 1), date(2024, 9, 3), guest_name="Ana Perez"
    )
    store.payments.append(make_payment(1, 100000, date(2024, 9, 2)))


class TestReports:
    def test_occupancy(self, client, auth_headers):
        response = client.get("/reports/occupancy?from=2024-09-01&to=2024-09-03", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total_rooms"] == 2
        assert [d["occupied"] for d in data["daily_occupancy"]] == [1, 1, 0]
        assert {r["room_type"] for r in data["occupancy_by_room_type"]} == {"double", "single"}

    def test_occupancy_requires_both_ends(self, client, auth_headers):
        response = client.get("/reports/occupancy?from=2024-09-01", headers=auth_headers)
        assert response.status_code == 422

    def test_occupancy_rejects_inverted_window(self, client, auth_headers):
        response = client.get("/reports/occupancy?from=2024-09-03&to=2024-09-01", headers=auth_headers)
        assert response.status_code == 422

    def test_financial(self, client, auth_headers):
        response = client.get("/reports/financial?from=2024-09-01&to=2024-09-30", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["payments_count"] == 1
        assert Decimal(str(data["total_income"])) == Decimal("100000")
        assert len(data["daily_income"]) == 30

    def test_dashboard_defaults_to_month_to_date(self, client, auth_headers):
        with patch("hostal.api.routes.reports.local_today", return_value=date(2024, 9, 2)):
            response = client.get("/reports/dashboard", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert (data["from"], data["to"]) == ("2024-09-01", "2024-09-02")
        assert data["financial"]["payments_count"] == 1

    def test_today(self, client, auth_headers):
        with patch("hostal.api.routes.reports.local_today", return_value=date(2024, 9, 2)):
            response = client.get("/reports/today", headers=auth_headers)

        data = response.json()
        assert data["date"] == "2024-09-02"
        assert data["total_rooms"] == 2
        assert data["occupied_rooms"] == 1
        assert data["pending_check_ins"] == 0
        assert data["occupancy_rate"] == 50.0

    def test_companies_top_is_bounded(self, client, auth_headers):
        response = client.get("/reports/companies?from=2024-09-01&to=2024-09-30&top=0", headers=auth_headers)
        assert response.status_code == 422


class TestCalendar:
    def test_day_view(self, client, auth_headers):
        response = client.get("/calendar?view=day&date=2024-09-02", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["view_start"] == "2024-09-02"
        rooms = {r["room_id"]: r for r in data["rooms"]}
        assert [b["reservation_id"] for b in rooms[1]["blocks"]] == [1]
        assert rooms[2]["blocks"] == []

    def test_custom_range(self, client, auth_headers):
        response = client.get("/calendar?from=2024-09-01&to=2024-09-07", headers=auth_headers)
        data = response.json()
        assert (data["view_start"], data["total_days"]) == ("2024-09-01", 7)

    def test_range_needs_both_ends(self, client, auth_headers):
        assert client.get("/calendar?from=2024-09-01", headers=auth_headers).status_code == 422

    def test_unknown_view(self, client, auth_headers):
        assert client.get("/calendar?view=year", headers=auth_headers).status_code == 422

    def test_range_too_long(self, client, auth_headers):
        response = client.get("/calendar?from=2024-01-01&to=2024-12-31", headers=auth_headers)
        assert response.status_code == 422


class TestDaybook:
    def test_departure_day(self, client, auth_headers):
        response = client.get("/daybook?date=2024-09-03", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "2024-09-03"
        assert [(i["id"], i["movement"]) for i in data["items"]] == [(1, "departure")]
        assert data["items"][0]["code"] == "LB-00001"

    def test_bad_date(self, client, auth_headers):
        assert client.get("/daybook?date=2024-13-01", headers=auth_headers).status_code == 422


class TestHousekeeping:
    @pytest.mark.parametrize("staff_role", ["housekeeping"])
    def test_record_then_read_board(self, client, auth_headers):
        response = client.post(
            "/housekeeping",
            json={"room_id": 2, "date": "2024-09-02", "status": "ready", "notes": "Fresh towels"},
            headers=auth_headers,
        )
        assert response.status_code == 200

        board = client.get("/housekeeping?date=2024-09-02", headers=auth_headers).json()
        assert [(i["room_id"], i["status"]) for i in board["items"]] == [(1, None), (2, "ready")]

    def test_board_defaults_to_today(self, client, auth_headers):
        with patch("hostal.api.routes.housekeeping.local_today", return_value=date(2024, 9, 2)):
            response = client.get("/housekeeping", headers=auth_headers)
        assert response.json()["date"] == "2024-09-02"

    def test_unknown_room(self, client, auth_headers):
        response = client.post(
            "/housekeeping", json={"room_id": 9, "date": "2024-09-02", "status": "dirty"}, headers=auth_headers
        )
        assert response.status_code == 404

    def test_unknown_status(self, client, auth_headers):
        response = client.post(
            "/housekeeping", json={"room_id": 1, "date": "2024-09-02", "status": "sparkling"}, headers=auth_headers
        )
        assert response.status_code == 422
