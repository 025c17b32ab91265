"""
Sales reporting tests.

Verifies:
- Summary groups the caller's sales per item
- Trend sums revenue per UTC day in ascending order
- Deleted items drop out of the summary but stay in the trend
- Day windows are half-open at midnight UTC
"""

from datetime import date, datetime

from warehouse.models import Sale
from warehouse.services import inventory_service, reporting_service
from warehouse.services.sales_service import record_sale

from conftest import make_item


def _add_sale(db_session, user, item, quantity, total, created_at):
    sale = Sale(
        user_id=user.id,
        item_id=item.id if item is not None else None,
        quantity=quantity,
        total_amount=total,
        created_at=created_at,
    )
    db_session.add(sale)
    db_session.commit()
    return sale


class TestSalesSummary:

    def test_groups_per_item(self, client, db_session, user_a, item_a, headers_a):
        bolts = make_item(db_session, user_a, name="Bolts", quantity=50, price=0.5)
        record_sale(user_a.id, item_a.id, 2)
        record_sale(user_a.id, item_a.id, 3)
        record_sale(user_a.id, bolts.id, 10)

        resp = client.get("/api/sales/summary", headers=headers_a)

        assert resp.status_code == 200
        assert resp.json == [
            {"item_id": bolts.id, "item_name": "Bolts", "total_quantity": 10, "total_amount": 5.0},
            {"item_id": item_a.id, "item_name": "Widget", "total_quantity": 5, "total_amount": 10.0},
        ]

    def test_scoped_to_caller(self, client, db_session, user_a, user_b, item_b, headers_a):
        record_sale(user_b.id, item_b.id, 2)

        resp = client.get("/api/sales/summary", headers=headers_a)

        assert resp.status_code == 200
        assert resp.json == []

    def test_deleted_item_excluded(self, db_session, user_a, item_a):
        record_sale(user_a.id, item_a.id, 2)
        inventory_service.delete_item(user_a.id, item_a.id)

        assert reporting_service.sales_summary(user_a.id) == []


class TestSalesTrend:

    def test_revenue_per_day(self, client, db_session, user_a, item_a, headers_a):
        _add_sale(db_session, user_a, item_a, 2, 4.0, datetime(2024, 1, 1, 9, 30))
        _add_sale(db_session, user_a, item_a, 3, 6.0, datetime(2024, 1, 1, 17, 0))
        _add_sale(db_session, user_a, item_a, 1, 5.0, datetime(2024, 1, 2, 0, 0))

        resp = client.get("/api/sales/trend", headers=headers_a)

        assert resp.status_code == 200
        assert resp.json == [
            {"date": "2024-01-01", "total_sales": 10.0},
            {"date": "2024-01-02", "total_sales": 5.0},
        ]

    def test_ascending_regardless_of_insert_order(self, db_session, user_a, item_a):
        _add_sale(db_session, user_a, item_a, 1, 1.0, datetime(2024, 3, 5, 12, 0))
        _add_sale(db_session, user_a, item_a, 1, 1.0, datetime(2024, 2, 1, 12, 0))

        dates = [row["date"] for row in reporting_service.sales_trend(user_a.id)]
        assert dates == ["2024-02-01", "2024-03-05"]

    def test_deleted_item_still_counted(self, db_session, user_a, item_a):
        _add_sale(db_session, user_a, item_a, 2, 4.0, datetime(2024, 1, 1, 8, 0))
        inventory_service.delete_item(user_a.id, item_a.id)

        assert reporting_service.sales_trend(user_a.id) == [{"date": "2024-01-01", "total_sales": 4.0}]

    def test_scoped_to_caller(self, db_session, user_a, user_b, item_b):
        _add_sale(db_session, user_b, item_b, 1, 5.0, datetime(2024, 1, 1, 8, 0))

        assert reporting_service.sales_trend(user_a.id) == []


class TestSalesForDay:

    def test_half_open_window(self, db_session, user_a, item_a):
        _add_sale(db_session, user_a, item_a, 1, 2.0, datetime(2024, 1, 30, 23, 59, 59))
        inside_start = _add_sale(db_session, user_a, item_a, 2, 4.0, datetime(2024, 1, 31, 0, 0))
        inside_end = _add_sale(db_session, user_a, item_a, 3, 6.0, datetime(2024, 1, 31, 23, 59, 59))
        _add_sale(db_session, user_a, item_a, 4, 8.0, datetime(2024, 2, 1, 0, 0))

        rows = reporting_service.sales_for_day(user_a.id, date(2024, 1, 31))

        assert [row["sale_id"] for row in rows] == [inside_start.id, inside_end.id]
        assert rows[0]["item_name"] == "Widget"
        assert rows[0]["created_at"] == "2024-01-31T00:00:00Z"

    def test_deleted_item_named_placeholder(self, db_session, user_a, item_a):
        _add_sale(db_session, user_a, item_a, 1, 2.0, datetime(2024, 1, 31, 10, 0))
        inventory_service.delete_item(user_a.id, item_a.id)

        rows = reporting_service.sales_for_day(user_a.id, date(2024, 1, 31))

        assert rows[0]["item_id"] is None
        assert rows[0]["item_name"] == "(deleted item)"
