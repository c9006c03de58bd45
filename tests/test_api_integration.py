"""
Integration tests for the Payment System API
Tests end-to-end workflows using FastAPI TestClient
"""

import logging
import pytest
from fastapi.testclient import TestClient

from payment_system.api import create_app
from payment_system.config import PaymentSystemConfig
from payment_system.ledger import PaymentSystem


EMISSION = "BY00EMIS00000000000000000000"
ALICE = "BY12345678901234567890123456"
BOB = "BY98765432109876543210987654"


@pytest.fixture
def system():
    return PaymentSystem(config=PaymentSystemConfig())


@pytest.fixture
def client(system):
    """Create a test client bound to an isolated ledger"""
    return TestClient(create_app(system))


@pytest.fixture
def funded_client(client):
    """Client with two accounts and 1000 emitted"""
    client.post("/accounts", json={"account_id": ALICE})
    client.post("/accounts", json={"account_id": BOB})
    client.post("/emission", json={"amount": "1000"})
    return client


class TestHealthEndpoints:
    """Test basic health endpoint"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"


class TestAccountEndpoints:
    """Account management tests"""

    def test_open_account(self, client):
        """Test opening an account"""
        r = client.post("/accounts", json={"account_id": ALICE})
        assert r.status_code == 201
        assert r.json() == {"id": ALICE, "balance": "0", "active": True}

    def test_open_duplicate_account(self, client):
        """Test reopening an account conflicts"""
        client.post("/accounts", json={"account_id": ALICE})
        r = client.post("/accounts", json={"account_id": ALICE})
        assert r.status_code == 409
        assert r.json()["detail"]["error"] == "account_already_exists"

    def test_open_blank_account(self, client):
        r = client.post("/accounts", json={"account_id": " "})
        assert r.status_code == 400

    def test_get_account(self, funded_client):
        r = funded_client.get(f"/accounts/{EMISSION}")
        assert r.status_code == 200
        assert r.json()["balance"] == "1000.00"

    def test_get_unknown_account(self, client):
        r = client.get("/accounts/BY00NOPE")
        assert r.status_code == 404
        assert r.json()["detail"] == {
            "error": "account_not_found",
            "detail": "Account BY00NOPE not found",
            "account_id": "BY00NOPE"
        }

    def test_list_accounts(self, funded_client):
        """Test snapshot of all accounts"""
        r = funded_client.get("/accounts")
        assert r.status_code == 200
        data = r.json()
        assert len(data) == 4
        assert data[ALICE] == {"id": ALICE, "balance": "0", "active": True}

    def test_deactivate_and_activate(self, funded_client):
        r = funded_client.post(f"/accounts/{BOB}/deactivate")
        assert r.status_code == 200
        assert r.json()["active"] is False

        r = funded_client.post(f"/accounts/{BOB}/activate")
        assert r.status_code == 200
        assert r.json()["active"] is True

    def test_deactivate_reserved_account(self, client):
        r = client.post(f"/accounts/{EMISSION}/deactivate")
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "reserved_account"

    def test_deactivate_unknown_account(self, client):
        r = client.post("/accounts/BY00NOPE/deactivate")
        assert r.status_code == 404


class TestMoneySupplyEndpoints:
    """Emission and destruction tests"""

    def test_emission(self, client):
        r = client.post("/emission", json={"amount": "250.50"})
        assert r.status_code == 200
        assert r.json() == {"id": EMISSION, "balance": "250.50", "active": True}

    def test_destruction(self, client):
        r = client.post("/destruction", json={"amount": "10"})
        assert r.status_code == 200
        assert r.json()["balance"] == "10.00"

    def test_invalid_emission_amount(self, client):
        r = client.post("/emission", json={"amount": "-5"})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "invalid_amount"


class TestTransferEndpoint:
    """End-to-end transfer tests"""

    def test_transfer(self, funded_client, system):
        """Test transfer out of the emission account"""
        r = funded_client.post("/transfers", json={"from": EMISSION, "to": ALICE, "amount": 500})
        assert r.status_code == 200
        assert r.json() == {"status": "completed"}

        accounts = funded_client.get("/accounts").json()
        assert accounts[EMISSION]["balance"] == "500.00"
        assert accounts[ALICE]["balance"] == "500.00"
        assert system.check_conservation()

    def test_insufficient_funds(self, funded_client):
        """Test overdraft is rejected with the source error"""
        r = funded_client.post("/transfers", json={"from": ALICE, "to": BOB, "amount": 600})
        assert r.status_code == 422
        detail = r.json()["detail"]
        assert detail["error"] == "invalid_source_account"
        assert detail["account_id"] == ALICE

    def test_unknown_destination(self, funded_client):
        r = funded_client.post("/transfers", json={"from": EMISSION, "to": "BY00NOPE", "amount": 1})
        assert r.status_code == 422
        assert r.json()["detail"]["error"] == "invalid_destination_account"

    def test_malformed_body(self, funded_client):
        r = funded_client.post(
            "/transfers", content=b"not json",
            headers={"Content-Type": "application/json"}
        )
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "malformed_request"

    def test_negative_amount(self, funded_client):
        r = funded_client.post("/transfers", json={"from": EMISSION, "to": ALICE, "amount": -1})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "invalid_amount"

    def test_sub_minor_unit_amount(self, funded_client):
        """Test a fraction of a minor unit is rejected instead of rounded"""
        r = funded_client.post("/transfers", json={"from": EMISSION, "to": ALICE, "amount": 0.005})
        assert r.status_code == 400
        assert r.json()["detail"]["error"] == "invalid_amount"
        assert funded_client.get(f"/accounts/{ALICE}").json()["balance"] == "0"


class TestCorrelationId:
    """Correlation id propagation from request headers to ledger logs"""

    def test_header_echoed_and_logged(self, funded_client, caplog):
        caplog.set_level(logging.INFO, logger="paysys.ledger")

        r = funded_client.post(
            "/transfers", json={"from": EMISSION, "to": ALICE, "amount": 5},
            headers={"X-Correlation-ID": "req-123"}
        )

        assert r.status_code == 200
        assert r.headers["X-Correlation-ID"] == "req-123"
        transfers = [rec for rec in caplog.records
                     if getattr(rec, "action", None) == "transfer_money"]
        assert transfers
        assert transfers[-1].correlation_id == "req-123"

    def test_generated_when_missing(self, client):
        r = client.get("/health")
        assert r.headers["X-Correlation-ID"]
