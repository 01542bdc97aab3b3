"""
API Tests for the settlement endpoints

Tests cover:
1. Revenue snapshot and analytics reads
2. Withdrawal acceptance and typed rejections
3. Seller payout lifecycle over HTTP
4. Store outage mapped to 503
"""

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient

from settlement import api
from settlement.errors import StoreUnavailableError
from settlement.service import PayoutService, RevenueService, WithdrawalService
from settlement.storage import InMemoryStorage
from settlement.tests.helpers import PLATFORM, SELLER, item, product


@pytest.fixture
def client(storage, settings, make_order, monkeypatch):
    storage.add_product(product("prod-a", cost_price="700"))
    storage.add_order(make_order())
    storage.add_order(make_order(order_id="ord-2", items=[item("prod-a", SELLER, "1000", 1)]))

    monkeypatch.setattr(api, "revenue_service", RevenueService(storage, settings))
    monkeypatch.setattr(api, "withdrawal_service", WithdrawalService(storage, settings))
    monkeypatch.setattr(api, "payout_service", PayoutService(storage, settings))
    return TestClient(api.app)


class TestRevenueEndpoints:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_snapshot(self, client):
        response = client.get("/revenue/snapshot")
        assert response.status_code == 200

        body = response.json()
        # ord-1 contributes 550, ord-2 is third-party so only fees (250)
        assert Decimal(body["total_revenue"]) == Decimal("800")
        assert len(body["contributions"]) == 2

    def test_recent_events_limit(self, client):
        response = client.get("/revenue/recent", params={"limit": 1})
        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_analytics_overview(self, client):
        body = client.get("/analytics/overview").json()

        assert body["total_orders"] == 2
        assert body["total_products"] == 1
        assert len(body["sales_by_day"]) == 7
        assert body["top_products"][0]["units_sold"] == 2
        assert "conversion_rate" not in body

    def test_sales_window_param(self, client):
        assert len(client.get("/analytics/sales", params={"days": 14}).json()) == 14


class TestWithdrawalEndpoints:
    def test_accepted_withdrawal(self, client):
        response = client.post("/withdrawals", json={"amount": "800"})
        assert response.status_code == 201
        assert Decimal(response.json()["available_balance"]) == Decimal("0")

        history = client.get("/withdrawals").json()
        assert len(history["withdrawals"]) == 1

    def test_insufficient_balance(self, client):
        response = client.post("/withdrawals", json={"amount": "800.01"})
        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "InsufficientBalance"

    def test_invalid_amount(self, client):
        response = client.post("/withdrawals", json={"amount": "0"})
        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "InvalidAmount"

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "abc", None])
    def test_unparseable_amount_is_typed_rejection(self, client, amount):
        response = client.post("/withdrawals", json={"amount": amount})

        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "InvalidAmount"
        assert client.get("/withdrawals").json()["withdrawals"] == []

    def test_numeric_json_amount(self, client):
        response = client.post("/withdrawals", json={"amount": 250.5})
        assert response.status_code == 201
        assert Decimal(response.json()["record"]["amount"]) == Decimal("250.5")


class TestPayoutEndpoints:
    def test_payout_lifecycle(self, client):
        balance = client.get(f"/sellers/{SELLER}/revenue").json()
        assert Decimal(balance["available_balance"]) == Decimal("1000")

        created = client.post(f"/sellers/{SELLER}/payouts", json={"amount": "400"})
        assert created.status_code == 201
        payout_id = created.json()["payout"]["id"]

        completed = client.post(f"/payouts/{payout_id}/complete")
        assert completed.status_code == 200
        assert completed.json()["status"] == "Completed"

        again = client.post(f"/payouts/{payout_id}/complete")
        assert again.status_code == 400

        assert len(client.get(f"/sellers/{SELLER}/payouts").json()) == 1

    @pytest.mark.parametrize("amount", ["NaN", "abc"])
    def test_unparseable_payout_amount(self, client, amount):
        response = client.post(f"/sellers/{SELLER}/payouts", json={"amount": amount})

        assert response.status_code == 400
        assert response.json()["detail"]["reason"] == "InvalidAmount"

    def test_unknown_payout(self, client):
        assert client.post("/payouts/nope/complete").status_code == 404

    def test_platform_items_tally_under_platform_seller(self, client):
        balance = client.get(f"/sellers/{PLATFORM}/revenue").json()
        assert Decimal(balance["net_revenue"]) == Decimal("1000")


class OfflineStorage(InMemoryStorage):
    def list_orders(self, status=None):
        raise StoreUnavailableError("order feed offline")


class TestStoreOutage:
    def test_snapshot_unavailable(self, settings, monkeypatch):
        monkeypatch.setattr(api, "revenue_service", RevenueService(OfflineStorage(), settings))
        response = TestClient(api.app).get("/revenue/snapshot")

        assert response.status_code == 503
        assert "offline" in response.json()["detail"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
