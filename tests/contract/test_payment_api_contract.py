"""Contract tests for payment API endpoints: envelopes and status codes."""

import pytest
from fastapi.testclient import TestClient

from parish_ledger.services.ledger_service import LedgerService


class TestFamilyLedgerContract:
    """GET /api/families/{id}/payments"""

    def test_ledger_shape(self, client, family):
        body = client.get(f"/api/families/{family.id}/payments").json()

        assert body["success"] is True
        assert set(body["data"]) == {"family", "payment_history", "summary", "all_payments"}
        assert body["data"]["family"]["card_no"] == "HC-001"
        assert body["data"]["family"]["unit_name"] == "ST. JOSEPH"
        entry = body["data"]["payment_history"][0]
        assert set(entry) == {"month", "display_name", "is_current", "status", "payment"}
        assert entry == {
            "month": "2025-09",
            "display_name": "September 2025",
            "is_current": True,
            "status": "Pending",
            "payment": None,
        }

    def test_unknown_family(self, client):
        response = client.get("/api/families/999/payments")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Family not found", "code": "not_found"}


class TestRecordPaymentContract:
    """POST /api/families/{id}/payments and POST /api/payments"""

    def test_created(self, client, family):
        response = client.post(
            f"/api/families/{family.id}/payments",
            json={"month": "2025-08", "amount_paid": 25, "payment_date": "2025-08-10", "remarks": "Cash"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Payment recorded successfully"
        data = body["data"]
        assert data["family_id"] == family.id
        assert data["month"] == "2025-08"
        assert data["amount_paid"] == 25
        assert data["payment_date"] == "2025-08-10"
        assert data["remarks"] == "Cash"
        assert {"id", "created_at", "updated_at"} <= set(data)

    @pytest.mark.parametrize(
        "payload, message",
        [
            ({"month": "2025-08", "amount_paid": 10, "payment_date": "2025-08-10"}, "Amount must be at least 25"),
            ({"month": "2025-06", "amount_paid": 25, "payment_date": "2025-06-10"}, "Month must be July 2025 or later"),
            ({"month": "2025-10", "amount_paid": 25, "payment_date": "2025-10-01"}, "Month cannot be in the future"),
            ({"month": "2025/08", "amount_paid": 25, "payment_date": "2025-08-10"}, "Invalid month format. Use YYYY-MM"),
            ({"month": "2025-08", "amount_paid": 25, "payment_date": "10-08-2025"}, "Invalid payment date"),
            ({"month": "2025-08", "amount_paid": 25}, "Month, amount paid, and payment date are required"),
            ({}, "Month, amount paid, and payment date are required"),
        ],
    )
    def test_validation_errors(self, client, family, payload, message):
        response = client.post(f"/api/families/{family.id}/payments", json=payload)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": message, "code": "validation_error"}

    def test_non_numeric_amount(self, client, family):
        response = client.post(
            f"/api/families/{family.id}/payments",
            json={"month": "2025-08", "amount_paid": "lots", "payment_date": "2025-08-10"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["code"] == "validation_error"

    @pytest.mark.parametrize("amount", [2**31, 10**20, 1e20])
    def test_amount_above_storable_range(self, client, family, amount):
        response = client.post(
            f"/api/families/{family.id}/payments",
            json={"month": "2025-08", "amount_paid": amount, "payment_date": "2025-08-10"},
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Amount must be at most 2147483647",
            "code": "validation_error",
        }
        assert client.get(f"/api/families/{family.id}/payments").json()["data"]["all_payments"] == []

    @pytest.mark.parametrize("amount", ["30", True])
    def test_amount_must_be_json_number(self, client, family, amount):
        response = client.post(
            f"/api/families/{family.id}/payments",
            json={"month": "2025-08", "amount_paid": amount, "payment_date": "2025-08-10"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"
        assert response.json()["error"].startswith("amount_paid")

    def test_unknown_family(self, client):
        response = client.post(
            "/api/families/999/payments",
            json={"month": "2025-08", "amount_paid": 25, "payment_date": "2025-08-10"},
        )
        assert response.status_code == 404

    def test_record_with_family_in_body(self, client, family):
        response = client.post(
            "/api/payments",
            json={"family_id": family.id, "month": "2025-07", "amount_paid": 25, "payment_date": "2025-07-15"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["family_id"] == family.id

    def test_family_id_required_in_body(self, client):
        response = client.post(
            "/api/payments", json={"month": "2025-07", "amount_paid": 25, "payment_date": "2025-07-15"}
        )
        assert response.status_code == 400
        assert response.json()["error"].startswith("family_id")


class TestEditDeleteContract:
    """PUT and DELETE /api/families/{id}/payments/{payment_id}"""

    @pytest.fixture
    def payment_id(self, client, family):
        return client.post(
            f"/api/families/{family.id}/payments",
            json={"month": "2025-08", "amount_paid": 25, "payment_date": "2025-08-10"},
        ).json()["data"]["id"]

    def test_update(self, client, family, payment_id):
        response = client.put(
            f"/api/families/{family.id}/payments/{payment_id}",
            json={"amount_paid": 35, "payment_date": "2025-08-11"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["amount_paid"] == 35

    def test_update_below_minimum(self, client, family, payment_id):
        response = client.put(
            f"/api/families/{family.id}/payments/{payment_id}",
            json={"amount_paid": 5, "payment_date": "2025-08-11"},
        )
        assert response.status_code == 400

    def test_delete(self, client, family, payment_id):
        response = client.delete(f"/api/families/{family.id}/payments/{payment_id}")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == payment_id
        assert client.delete(f"/api/families/{family.id}/payments/{payment_id}").status_code == 404

    def test_delete_through_other_family(self, client, family, family_without_email, payment_id):
        response = client.delete(f"/api/families/{family_without_email.id}/payments/{payment_id}")

        assert response.status_code == 404
        assert response.json()["error"] == "Payment not found"


class TestReportContract:
    """GET /api/payments, /api/payments/months, /api/payments/{family_id}"""

    def test_month_required(self, client):
        response = client.get("/api/payments")
        assert response.status_code == 400
        assert response.json()["error"] == "Month is required"

    @pytest.mark.parametrize("month", ["2025-06", "2025-13", "next"])
    def test_invalid_month(self, client, month):
        assert client.get("/api/payments", params={"month": month}).status_code == 400

    def test_invalid_status(self, client):
        response = client.get("/api/payments", params={"month": "2025-08", "status": "late"})
        assert response.status_code == 400

    def test_invalid_unit(self, client):
        response = client.get("/api/payments", params={"month": "2025-08", "unit_id": "north"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid unit selected"

    def test_invalid_page(self, client):
        assert client.get("/api/payments", params={"month": "2025-08", "page": 0}).status_code == 400

    def test_report_row_shape(self, client, family):
        body = client.get("/api/payments", params={"month": "2025-08"}).json()

        assert set(body) >= {"success", "data", "pagination"}
        assert set(body["data"][0]) == {
            "family_id",
            "card_no",
            "head_name",
            "unit_name",
            "member_count",
            "month",
            "status",
            "payment",
        }

    def test_raw_history(self, client, family):
        for month in ("2025-07", "2025-09"):
            client.post(
                f"/api/families/{family.id}/payments",
                json={"month": month, "amount_paid": 25, "payment_date": f"{month}-01"},
            )

        body = client.get(f"/api/payments/{family.id}").json()
        assert [payment["month"] for payment in body["data"]] == ["2025-09", "2025-07"]


class TestUnexpectedErrors:
    def test_internal_error_envelope(self, app, family, monkeypatch):
        def explode(self, family_id):
            raise RuntimeError("database on fire")

        monkeypatch.setattr(LedgerService, "family_ledger", explode)

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get(f"/api/families/{family.id}/payments")

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Internal server error",
            "code": "internal_error",
        }
