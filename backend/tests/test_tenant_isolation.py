# Overview: Pytest coverage for per-owner data isolation.

"""
Owner Isolation Tests

SECURITY TESTS: Prove that one warehouse owner can never see or change
another owner's data.

These tests create two verified owners, each with one item, then verify that:
1. Listings and reports only contain the caller's own records
2. Foreign item ids behave exactly like missing ones
3. Writes against foreign items leave them untouched
"""

import pytest

from warehouse.models import Item, Sale
from warehouse.services import inventory_service, reporting_service
from warehouse.services.sales_service import record_sale
from warehouse.validation import NotFoundError


class TestOwnerScopedReads:

    def test_item_list_excludes_foreign_items(self, client, item_a, item_b, headers_a, headers_b):
        ids_a = [row["id"] for row in client.get("/api/items", headers=headers_a).json]
        ids_b = [row["id"] for row in client.get("/api/items", headers=headers_b).json]

        assert ids_a == [item_a.id]
        assert ids_b == [item_b.id]

    def test_reports_exclude_foreign_sales(self, client, user_a, user_b, item_a, item_b, headers_a):
        record_sale(user_a.id, item_a.id, 1)
        record_sale(user_b.id, item_b.id, 4)

        summary = client.get("/api/sales/summary", headers=headers_a).json
        trend = client.get("/api/sales/trend", headers=headers_a).json

        assert [row["item_id"] for row in summary] == [item_a.id]
        assert [row["total_sales"] for row in trend] == [2.0]
        assert reporting_service.sales_summary(user_b.id)[0]["total_amount"] == 20.0


class TestForeignItemsLookMissing:

    def test_foreign_and_missing_answer_alike(self, client, item_b, headers_a):
        foreign = client.delete(f"/api/items/{item_b.id}", headers=headers_a)
        missing = client.delete("/api/items/99999", headers=headers_a)

        assert foreign.status_code == missing.status_code == 404
        assert foreign.json == missing.json

    def test_get_owned_item_refuses_foreign(self, db_session, user_a, item_b):
        with pytest.raises(NotFoundError, match="Item not found"):
            inventory_service.get_owned_item(user_a.id, item_b.id)


class TestForeignWritesBlocked:

    def test_no_writes_reach_foreign_item(self, client, db_session, item_b, headers_a):
        client.patch(f"/api/items/{item_b.id}", json={"quantity": 50}, headers=headers_a)
        client.post("/api/sales", json={"itemId": item_b.id, "quantity": 2}, headers=headers_a)
        client.delete(f"/api/items/{item_b.id}", headers=headers_a)

        item = db_session.get(Item, item_b.id)
        assert item is not None
        assert item.quantity == 10
        assert db_session.query(Sale).count() == 0
