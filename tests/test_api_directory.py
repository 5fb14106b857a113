"""Tests for the rooms, guests, companies and payments endpoints.

These routes talk to the repositories directly, so the tests patch txn
and the repository functions of each router module.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from psycopg2 import errors as pg_errors

from hostal.domain.models import Company, Guest

from .helpers import make_payment, make_room


@contextmanager
def _db(module: str):
    """Patch txn in a router module and yield the cursor it hands out."""
    cur = MagicMock()
    with patch(f"hostal.api.routes.{module}.txn") as mock_txn:
        mock_txn.return_value.__enter__.return_value = cur
        yield cur


class TestRooms:
    def test_list_hides_archived_by_default(self, client, auth_headers):
        with _db("rooms") as cur, patch(
            "hostal.api.routes.rooms.rooms_repository.list_rooms", return_value=[make_room(1), make_room(2)]
        ) as mock_list:
            response = client.get("/rooms?room_type=double", headers=auth_headers)

        assert response.status_code == 200
        assert [r["code"] for r in response.json()] == ["101", "102"]
        mock_list.assert_called_once_with(cur, room_type="double", include_archived=False)

    @pytest.mark.parametrize("staff_role", ["superadmin"])
    def test_create(self, client, auth_headers):
        with _db("rooms"), patch(
            "hostal.api.routes.rooms.rooms_repository.insert_room", return_value=make_room(7)
        ) as mock_insert:
            response = client.post(
                "/rooms",
                json={"code": "107", "name": "Room 107", "room_type": "double", "base_rate": "45000"},
                headers=auth_headers,
            )

        assert response.status_code == 201
        assert response.json()["id"] == 7
        fields = mock_insert.call_args.args[1]
        assert fields["base_rate"] == Decimal("45000")
        assert fields["status"] == "available"

    @pytest.mark.parametrize("staff_role", ["superadmin"])
    def test_duplicate_code_is_409(self, client, auth_headers):
        with _db("rooms"), patch(
            "hostal.api.routes.rooms.rooms_repository.insert_room",
            side_effect=pg_errors.UniqueViolation("duplicate key value"),
        ):
            response = client.post(
                "/rooms", json={"code": "101", "name": "Dup", "room_type": "double"}, headers=auth_headers
            )
        assert response.status_code == 409

    @pytest.mark.parametrize("staff_role", ["superadmin"])
    def test_update_without_fields_is_400(self, client, auth_headers):
        with _db("rooms"):
            assert client.patch("/rooms/1", json={}, headers=auth_headers).status_code == 400

    @pytest.mark.parametrize("staff_role", ["superadmin"])
    def test_update_missing_is_404(self, client, auth_headers):
        with _db("rooms"), patch(
            "hostal.api.routes.rooms.rooms_repository.update_room", return_value=None
        ):
            response = client.patch("/rooms/9", json={"name": "New"}, headers=auth_headers)
        assert response.status_code == 404

    def test_reception_sets_operational_status(self, client, auth_headers):
        with _db("rooms") as cur, patch(
            "hostal.api.routes.rooms.rooms_repository.update_room",
            return_value=make_room(1, status="cleaning"),
        ) as mock_update:
            response = client.patch("/rooms/1/status", json={"status": "cleaning"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "cleaning"
        mock_update.assert_called_once_with(cur, 1, {"status": "cleaning"})

    def test_status_cannot_archive(self, client, auth_headers):
        with _db("rooms") as cur:
            response = client.patch("/rooms/1/status", json={"status": "archived"}, headers=auth_headers)
        assert response.status_code == 422
        cur.execute.assert_not_called()

    @pytest.mark.parametrize("staff_role", ["superadmin"])
    @pytest.mark.parametrize("outcome", ["deleted", "archived"])
    def test_delete_reports_outcome(self, client, auth_headers, outcome):
        with _db("rooms"), patch(
            "hostal.api.routes.rooms.rooms_repository.delete_or_archive_room", return_value=outcome
        ):
            response = client.delete("/rooms/3", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"id": 3, "result": outcome}

    @pytest.mark.parametrize("staff_role", ["superadmin"])
    def test_delete_missing_is_404(self, client, auth_headers):
        with _db("rooms"), patch(
            "hostal.api.routes.rooms.rooms_repository.delete_or_archive_room", return_value=None
        ):
            assert client.delete("/rooms/3", headers=auth_headers).status_code == 404


class TestGuests:
    def test_search(self, client, auth_headers):
        guest = Guest(id=5, full_name="Ana Perez", document_id="12.345.678-9")
        with _db("guests") as cur, patch(
            "hostal.api.routes.guests.guests_repository.list_guests", return_value=[guest]
        ) as mock_list:
            response = client.get("/guests?search=perez&limit=10", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()[0]["full_name"] == "Ana Perez"
        mock_list.assert_called_once_with(cur, search="perez", include_inactive=False, limit=10)

    def test_limit_is_bounded(self, client, auth_headers):
        assert client.get("/guests?limit=1000", headers=auth_headers).status_code == 422

    def test_create_logs_no_personal_data(self, client, auth_headers):
        guest = Guest(id=5, full_name="Ana Perez", phone="+56987654321")
        with _db("guests"), patch(
            "hostal.api.routes.guests.guests_repository.insert_guest", return_value=guest
        ), patch("hostal.api.routes.guests.logger") as mock_logger:
            response = client.post(
                "/guests", json={"full_name": "Ana Perez", "phone": "+56987654321"}, headers=auth_headers
            )

        assert response.status_code == 201
        logged = str(mock_logger.info.call_args)
        assert "Ana Perez" not in logged
        assert "987654321" not in logged

    def test_get_missing_is_404(self, client, auth_headers):
        with _db("guests"), patch(
            "hostal.api.routes.guests.guests_repository.get_guest", return_value=None
        ):
            assert client.get("/guests/5", headers=auth_headers).status_code == 404

    def test_deactivate(self, client, auth_headers):
        guest = Guest(id=5, full_name="Ana Perez", is_active=False)
        with _db("guests") as cur, patch(
            "hostal.api.routes.guests.guests_repository.update_guest", return_value=guest
        ) as mock_update:
            response = client.patch("/guests/5", json={"is_active": False}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        mock_update.assert_called_once_with(cur, 5, {"is_active": False})


class TestCompanies:
    def test_create(self, client, auth_headers):
        company = Company(id=3, name="Minera Sur", discount_percent=Decimal("10"))
        with _db("companies"), patch(
            "hostal.api.routes.companies.companies_repository.insert_company", return_value=company
        ) as mock_insert:
            response = client.post(
                "/companies", json={"name": "Minera Sur", "discount_percent": "10"}, headers=auth_headers
            )

        assert response.status_code == 201
        assert response.json()["name"] == "Minera Sur"
        assert mock_insert.call_args.args[1]["discount_percent"] == Decimal("10")

    def test_discount_above_100_is_422(self, client, auth_headers):
        response = client.post(
            "/companies", json={"name": "Minera Sur", "discount_percent": "150"}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_referenced_company_is_deactivated(self, client, auth_headers):
        with _db("companies"), patch(
            "hostal.api.routes.companies.companies_repository.delete_company", return_value="deactivated"
        ):
            response = client.delete("/companies/3", headers=auth_headers)
        assert response.json() == {"id": 3, "result": "deactivated"}

    def test_update_missing_is_404(self, client, auth_headers):
        with _db("companies"), patch(
            "hostal.api.routes.companies.companies_repository.update_company", return_value=None
        ):
            response = client.patch("/companies/3", json={"name": "X"}, headers=auth_headers)
        assert response.status_code == 404


class TestPayments:
    def test_list_uses_inclusive_window(self, client, auth_headers):
        with _db("payments") as cur, patch(
            "hostal.api.routes.payments.payments_repository.list_payments",
            return_value=[make_payment(1, 20000, date(2024, 9, 30))],
        ) as mock_list:
            response = client.get("/payments?from=2024-09-01&to=2024-09-30", headers=auth_headers)

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [1]
        mock_list.assert_called_once_with(
            cur, date(2024, 9, 1), date(2024, 10, 1), reservation_id=None
        )

    def test_create_defaults_to_local_today(self, client, auth_headers):
        with _db("payments"), patch(
            "hostal.api.routes.payments.local_today", return_value=date(2024, 9, 1)
        ), patch(
            "hostal.api.routes.payments.payments_repository.insert_payment",
            return_value=make_payment(4, 15000, date(2024, 9, 1), method="transfer"),
        ) as mock_insert:
            response = client.post(
                "/payments", json={"amount": "15000", "method": "transfer"}, headers=auth_headers
            )

        assert response.status_code == 201
        fields = mock_insert.call_args.args[1]
        assert fields["payment_date"] == date(2024, 9, 1)
        assert fields["method"] == "transfer"
        assert fields["document_type"] == "none"
        assert fields["amount"] == Decimal("15000")
        assert fields["currency"] == "CLP"

    def test_currency_default_from_env(self, client, auth_headers):
        with _db("payments"), patch.dict("os.environ", {"HOSTAL_CURRENCY": "USD"}), patch(
            "hostal.api.routes.payments.payments_repository.insert_payment",
            return_value=make_payment(4, 80, date(2024, 9, 1), currency="USD"),
        ) as mock_insert:
            response = client.post(
                "/payments",
                json={"amount": "80", "method": "card", "payment_date": "2024-09-01"},
                headers=auth_headers,
            )

        assert response.status_code == 201
        assert mock_insert.call_args.args[1]["currency"] == "USD"

    @pytest.mark.parametrize("amount", ["0", "-5"])
    def test_non_positive_amount_is_422(self, client, auth_headers, amount):
        response = client.post("/payments", json={"amount": amount, "method": "cash"}, headers=auth_headers)
        assert response.status_code == 422

    def test_unknown_method_is_422(self, client, auth_headers):
        response = client.post("/payments", json={"amount": "10", "method": "crypto"}, headers=auth_headers)
        assert response.status_code == 422

    def test_unknown_reservation_is_422(self, client, auth_headers):
        with _db("payments"), patch(
            "hostal.api.routes.payments.payments_repository.insert_payment",
            side_effect=pg_errors.ForeignKeyViolation("violates foreign key"),
        ):
            response = client.post(
                "/payments",
                json={"amount": "10", "method": "cash", "payment_date": "2024-09-01", "reservation_id": 99},
                headers=auth_headers,
            )
        assert response.status_code == 422

    def test_update_cannot_clear_amount(self, client, auth_headers):
        with _db("payments"):
            response = client.patch("/payments/1", json={"amount": None}, headers=auth_headers)
        assert response.status_code == 422

    def test_delete_missing_is_404(self, client, auth_headers):
        with _db("payments"), patch(
            "hostal.api.routes.payments.payments_repository.delete_payment", return_value=False
        ):
            assert client.delete("/payments/1", headers=auth_headers).status_code == 404

    def test_datastore_down_is_503(self, client, auth_headers):
        import psycopg2

        with patch("hostal.api.routes.payments.txn", side_effect=psycopg2.OperationalError("down")):
            response = client.get("/payments", headers=auth_headers)
        assert response.status_code == 503
