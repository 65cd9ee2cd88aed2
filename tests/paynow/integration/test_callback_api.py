"""Integration tests for the Pay Now callback endpoints."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from paynow.api.routes import router
from paynow.orders import InMemoryOrderStore, OrderStatus, set_order_store
from paynow.verifier import FakeVerifier, set_verifier

ACCOUNT_URL = "https://shop.test/my-account/"


@pytest.fixture()
def api_store(monkeypatch):
    monkeypatch.setenv("PAYNOW_ACCOUNT_URL", ACCOUNT_URL)
    monkeypatch.setenv("PAYNOW_ENV", "test")
    store = InMemoryOrderStore(base_url="https://shop.test")
    set_order_store(store)
    return store


@pytest.fixture()
def fake_verifier():
    verifier = FakeVerifier()
    set_verifier(verifier)
    return verifier


@pytest.fixture()
def client(api_store, fake_verifier):
    app = FastAPI()
    app.include_router(router)
    return TestClient(app, follow_redirects=False)


def _ipn(order_id="100", key="abc", amount="249.99", accepted="true", **extra):
    data = {
        "Reference": order_id,
        "Amount": amount,
        "TransactionAccepted": accepted,
        "Method": "1",
        "Extra1": "42",
        "Extra2": "https://shop.test/cart/?cancel_order=true",
        "Extra3": key,
        "RequestTrace": "trace-api-001",
    }
    data.update(extra)
    return data


class TestReturnTrip:
    def test_get_redirects_to_account(self, client):
        response = client.get("/paynow/callback")
        assert response.status_code == 302
        assert response.headers["location"] == ACCOUNT_URL
        assert ACCOUNT_URL in response.text

    def test_query_string_is_not_a_payload(self, client):
        response = client.get("/paynow/callback", params={"Reference": "100", "TransactionAccepted": "true"})
        assert response.headers["location"] == ACCOUNT_URL

    def test_missing_account_url_is_500(self, client, monkeypatch):
        monkeypatch.setenv("PAYNOW_ACCOUNT_URL", "")
        response = client.get("/paynow/callback")
        assert response.status_code == 500
        assert "No 'redirect' URL set." in response.text


class TestNotification:
    def test_accepted_ipn(self, client, api_store):
        api_store.add_order("100", key="abc", total_amount="249.99")
        response = client.post("/paynow/callback", data=_ipn(ccHolder="J Smith", ccMasked="4111****1111"))
        order = api_store.get_order("100")
        assert order.status == OrderStatus.PROCESSING
        assert response.status_code == 302
        assert response.headers["location"] == api_store.build_return_url(order)
        assert "<script>window.location=" in response.text

    def test_key_mismatch_redirects_to_extra2(self, client, api_store):
        api_store.add_order("101", key="xyz", total_amount="10.00")
        response = client.post("/paynow/callback", data=_ipn(order_id="101", key="zzz", amount="10.00"))
        assert response.headers["location"] == "https://shop.test/cart/?cancel_order=true"
        assert api_store.get_order("101").status == OrderStatus.PENDING

    def test_rejected_by_processor(self, client, api_store, fake_verifier):
        api_store.add_order("100", key="abc", total_amount="249.99")
        fake_verifier.configure(should_verify=False)
        response = client.post("/paynow/callback", data=_ipn())
        assert response.status_code == 302
        assert api_store.get_order("100").status == OrderStatus.PENDING

    def test_header_matches_inline_script(self, client, api_store):
        api_store.add_order("100", key="abc", total_amount="249.99")
        response = client.post("/paynow/callback", data=_ipn(accepted="false", Reason="Cancelled by user"))
        location = response.headers["location"]
        assert response.text == f'<script>window.location="{location}"</script>'


class TestDevelopmentEndpoints:
    def test_seed_and_inspect_order(self, client):
        response = client.post(
            "/paynow/orders",
            json={"order_id": "300", "key": "k-300", "total_amount": "99.50"},
        )
        assert response.status_code == 201
        data = client.get("/paynow/orders/300").json()
        assert data["status"] == "pending"
        assert data["key"] == "k-300"

    def test_inspect_missing_order(self, client):
        assert client.get("/paynow/orders/nope").status_code == 404

    def test_configure_verifier(self, client, fake_verifier):
        response = client.post("/paynow/verifier/configure", json={"should_verify": False})
        assert response.status_code == 200
        assert response.json() == {"verifier": "FakeVerifier", "should_verify": False, "should_error": False}
        assert fake_verifier.should_verify is False

    def test_blocked_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PAYNOW_ENV", "production")
        assert client.post("/paynow/verifier/configure", json={"should_verify": True}).status_code == 403
        assert client.get("/paynow/orders/100").status_code == 403

    def test_configure_blocked_for_non_fake_verifier(self, client):
        from paynow.verifier import LocalVerifier

        set_verifier(LocalVerifier())
        response = client.post("/paynow/verifier/configure", json={"should_verify": True})
        assert response.status_code == 400
