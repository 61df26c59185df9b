"""
Sales reporting tests.

Verifies:
- Daily sales use inclusive [00:00:00.000, 23:59:59.999] bounds
- Range queries accept dates or datetimes and include the whole end day
- Reports never mix businesses
"""

from datetime import date, datetime

import pytest

from posadmin.errors import ValidationError
from posadmin.models import Transaction, TransactionLine
from posadmin.services import reporting_service
from posadmin.time_utils import local_day_bounds, utcnow


def _sale(session, business, created_at, total_cents, receipt):
    transaction = Transaction(
        pos_id=business.id,
        receipt_number=receipt,
        subtotal_cents=total_cents,
        tax_cents=0,
        total_cents=total_cents,
        tax_rate="0",
        payment_method="cash",
        created_at=created_at,
    )
    transaction.lines.append(TransactionLine(
        line_number=1,
        product_id=1,
        name="Item",
        unit_price_cents=total_cents,
        quantity=1,
    ))
    session.add(transaction)
    session.commit()
    return transaction


@pytest.fixture
def march_sales(db_session, cafe, bakery):
    _sale(db_session, cafe, datetime(2024, 3, 9, 23, 59, 59, 999000), 100, "R-000001")
    _sale(db_session, cafe, datetime(2024, 3, 10, 0, 0, 0), 434, "R-000002")
    _sale(db_session, cafe, datetime(2024, 3, 10, 12, 30), 1000, "R-000003")
    _sale(db_session, cafe, datetime(2024, 3, 10, 23, 59, 59, 999000), 66, "R-000004")
    _sale(db_session, cafe, datetime(2024, 3, 11, 0, 0, 0), 5000, "R-000005")
    _sale(db_session, bakery, datetime(2024, 3, 10, 12, 0), 9999, "R-000001")


class TestDailySales:

    def test_day_bounds_inclusive(self, client, march_sales, cafe_headers):
        resp = client.get("/api/sales/daily?date=2024-03-10", headers=cafe_headers)
        assert resp.status_code == 200
        body = resp.json
        assert body["date"] == "2024-03-10"
        assert body["total_transaction_count"] == 3
        assert body["total_sales"] == "15.00"
        assert [t["receipt_number"] for t in body["transactions"]] == ["R-000004", "R-000003", "R-000002"]

    def test_empty_day(self, client, march_sales, cafe_headers):
        resp = client.get("/api/sales/daily?date=2023-01-01", headers=cafe_headers)
        assert resp.json["total_sales"] == "0.00"
        assert resp.json["total_transaction_count"] == 0
        assert resp.json["transactions"] == []

    def test_defaults_to_today(self, client, cafe_headers):
        resp = client.get("/api/sales/daily", headers=cafe_headers)
        assert resp.status_code == 200
        assert resp.json["date"] == reporting_service.today().isoformat()

    def test_bad_date(self, client, cafe_headers):
        resp = client.get("/api/sales/daily?date=10/03/2024", headers=cafe_headers)
        assert resp.status_code == 400

    def test_other_business_excluded(self, client, march_sales, bakery_headers):
        resp = client.get("/api/sales/daily?date=2024-03-10", headers=bakery_headers)
        assert resp.json["total_sales"] == "99.99"
        assert resp.json["total_transaction_count"] == 1


class TestRangeSales:

    def test_date_range_includes_whole_end_day(self, client, march_sales, cafe_headers):
        resp = client.get("/api/sales/range?start=2024-03-09&end=2024-03-10", headers=cafe_headers)
        assert resp.status_code == 200
        assert resp.json["count"] == 4

    def test_datetime_range(self, client, march_sales, cafe_headers):
        resp = client.get(
            "/api/sales/range?start=2024-03-10T12:00:00Z&end=2024-03-11T00:00:00Z",
            headers=cafe_headers,
        )
        assert [t["receipt_number"] for t in resp.json["items"]] == ["R-000005", "R-000004", "R-000003"]

    @pytest.mark.parametrize("query", [
        "",
        "?start=2024-03-10",
        "?end=2024-03-10",
        "?start=garbage&end=2024-03-10",
        "?start=2024-03-11&end=2024-03-10",
    ])
    def test_invalid_range(self, client, cafe_headers, query):
        resp = client.get(f"/api/sales/range{query}", headers=cafe_headers)
        assert resp.status_code == 400


class TestSummary:

    def test_summary(self, client, march_sales, cafe_headers):
        resp = client.get("/api/sales/summary", headers=cafe_headers)
        assert resp.status_code == 200
        assert resp.json["total_sales"] == "66.00"
        assert resp.json["total_transactions"] == 5
        assert len(resp.json["recent_transactions"]) == 5
        assert resp.json["recent_transactions"][0]["receipt_number"] == "R-000005"

    def test_summary_without_sales(self, client, cafe_headers):
        resp = client.get("/api/sales/summary", headers=cafe_headers)
        assert resp.json == {"total_sales": "0.00", "total_transactions": 0, "recent_transactions": []}


class TestDayBounds:

    def test_utc_bounds(self):
        start, end = local_day_bounds(date(2024, 3, 10), "UTC")
        assert start == datetime(2024, 3, 10, 0, 0, 0)
        assert end == datetime(2024, 3, 10, 23, 59, 59, 999000)

    def test_zone_offset_applied(self):
        # New York is UTC-5 on 2024-01-15
        start, end = local_day_bounds(date(2024, 1, 15), "America/New_York")
        assert start == datetime(2024, 1, 15, 5, 0, 0)
        assert end == datetime(2024, 1, 16, 4, 59, 59, 999000)

    def test_range_service_rejects_missing_bounds(self, app, cafe):
        with pytest.raises(ValidationError):
            reporting_service.range_sales(cafe.id, None, "2024-03-10")


class TestTimestampPrecision:

    def test_utcnow_has_whole_milliseconds(self):
        assert utcnow().microsecond % 1000 == 0

    def test_checkout_at_last_millisecond_counts_for_that_day(self, client, db_session, cafe, muffin, cafe_headers):
        created = client.post("/api/checkout", headers=cafe_headers, json={
            "items": [{"product_id": muffin.id, "quantity": 1}],
            "payment_method": "cash",
        })
        transaction = db_session.get(Transaction, created.json["id"])
        assert transaction.created_at.microsecond % 1000 == 0

        transaction.created_at = datetime(2024, 3, 10, 23, 59, 59, 999000)
        db_session.commit()

        resp = client.get("/api/sales/daily?date=2024-03-10", headers=cafe_headers)
        assert resp.json["total_transaction_count"] == 1
