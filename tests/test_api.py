"""End-to-end tests of the HTTP API using FastAPI TestClient."""

import pytest
from fastapi.testclient import TestClient

from components.core import init_db
from components.core.database import DatabaseManager
from restapi.router import create_app

from conftest import sqlite_engine


@pytest.fixture
def client(monkeypatch):
    """Client wired to a fresh in-memory database."""
    engine = sqlite_engine()
    monkeypatch.setattr(init_db, "db_manager", DatabaseManager(engine))
    app = create_app()
    app.add_event_handler("shutdown", engine.dispose)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers(client):
    r = client.post("/auth/register", json={"login": "operator", "password": "secret123", "pin": "4321"})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture
def partner_id(client, auth_headers):
    r = client.post("/partners/", json={"first_name": "Ana", "last_name": "Torres"}, headers=auth_headers)
    assert r.status_code == 201
    return r.json()["id"]


def _grant(client, headers, partner_id, **overrides):
    body = {
        "partner_id": partner_id,
        "loan_type": "standard",
        "total_amount": "1200",
        "number_of_installments": 12,
        "interest_rate": "5",
        "start_date": "2024-01-15T00:00:00Z",
    }
    body.update(overrides)
    return client.post("/loans/", json=body, headers=headers)


class TestServiceEndpoints:

    def test_health(self, client):
        r = client.get("/health_check/")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"
        assert r.json()["database"] == "reachable"

    def test_requires_token(self, client):
        assert client.get("/partners/").status_code == 401


class TestAuth:

    def test_login_and_unlock(self, client, auth_headers):
        r = client.post("/auth/login", data={"username": "operator", "password": "secret123"})
        assert r.status_code == 200
        assert r.json()["login"] == "operator"

        assert client.post("/auth/unlock", json={"pin": "0000"}, headers=auth_headers).status_code == 401
        assert client.post("/auth/unlock", json={"pin": "4321"}, headers=auth_headers).status_code == 200

    def test_wrong_password(self, client, auth_headers):
        r = client.post("/auth/login", data={"username": "operator", "password": "nope"})
        assert r.status_code == 401

    def test_duplicate_login(self, client, auth_headers):
        r = client.post("/auth/register", json={"login": "operator", "password": "secret123"})
        assert r.status_code == 400


class TestLoanFlow:

    def test_grant_pay_and_finish(self, client, auth_headers, partner_id):
        r = _grant(client, auth_headers, partner_id, total_amount="200", number_of_installments=2)
        assert r.status_code == 201
        loan = r.json()
        assert [i["total_amount"] for i in loan["installments"]] == [110.0, 105.0]

        ids = [i["id"] for i in loan["installments"]]
        r = client.post("/payments/installments", json={
            "loan_id": loan["id"],
            "installment_ids": ids,
            "payment_date": "2024-03-01T00:00:00Z",
        }, headers=auth_headers)
        assert r.status_code == 201
        assert r.json()["total_amount"] == 215.0

        r = client.get(f"/loans/{loan['id']}", headers=auth_headers)
        assert r.json()["status"] == "Finalizado"
        assert all(i["status"] == "paid" for i in r.json()["installments"])

        r = client.get("/receipts/", params={"search": "ana"}, headers=auth_headers)
        assert len(r.json()) == 3

    def test_overpaying_contribution_is_a_bad_request(self, client, auth_headers, partner_id):
        loan = _grant(client, auth_headers, partner_id, loan_type="custom",
                      total_amount="100", number_of_installments=0).json()

        r = client.post("/payments/contribution", json={
            "loan_id": loan["id"],
            "partner_id": partner_id,
            "amount": "150",
            "payment_date": "2024-03-01T00:00:00Z",
        }, headers=auth_headers)

        assert r.status_code == 400
        assert "overpayment" in r.json()["detail"]

    def test_unknown_loan_is_not_found(self, client, auth_headers):
        assert client.get("/loans/missing", headers=auth_headers).status_code == 404

    def test_sweep_and_revert_payment(self, client, auth_headers, partner_id):
        loan = _grant(client, auth_headers, partner_id).json()
        r = client.post("/maintenance/sweep", json={"reference_date": "2024-03-01"}, headers=auth_headers)
        assert r.json()["count"] == 1

        first = loan["installments"][0]["id"]
        payment = client.post("/payments/bulk", json={"installment_ids": [first]}, headers=auth_headers).json()[0]
        r = client.post("/maintenance/revert-payment", json={"payment_id": payment["id"]}, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["count"] == 1

        r = client.get(f"/loans/{loan['id']}", headers=auth_headers)
        assert r.json()["installments"][0]["status"] == "overdue"

    def test_reports(self, client, auth_headers, partner_id):
        _grant(client, auth_headers, partner_id)

        r = client.get("/reports/unpaid", params={"year": 2024, "month": 2}, headers=auth_headers)
        assert r.json()["total_receivable"] == 160.0

        r = client.get("/reports/dashboard", headers=auth_headers)
        assert r.json()["active_loans"] == 1


def test_partner_import_endpoint(client, auth_headers):
    files = {"file": ("partners.csv", b"Name,Apellido\nAna,Torres\nLuis,Mendoza\n", "text/csv")}
    r = client.post("/partners/import", files=files, headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["imported"] == 2
    assert len(client.get("/partners/", headers=auth_headers).json()) == 2
