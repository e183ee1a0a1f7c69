"""Statystyki i raporty sprzedazy dla admina i vendora."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.data.models import UserModel
from storefront.domain.errors import ForbiddenError
from storefront.services.checkout_service import CheckoutService
from storefront.services.order_service import OrderService
from storefront.services.report_service import ReportService


@pytest.fixture
def shop(db, lock_service, notifications, make_user, make_product, fill_cart):
    make_user(1)
    make_user(2)
    make_user(10, role="vendor")
    make_user(11, role="vendor")
    make_user(99, role="admin")
    make_product(1, price="10.00", quantity=50, vendor_id=10)
    make_product(2, price="25.00", quantity=50, vendor_id=11)

    checkout = CheckoutService(db, lock_service=lock_service, notification_service=notifications)
    orders = OrderService(db, notification_service=notifications)

    fill_cart(1, (1, 2))
    first = checkout.checkout(1, "cash")["order_id"]  # 20.00, vendor 10
    fill_cart(1, (1, 1), (2, 2))
    second = checkout.checkout(1, "credit")["order_id"]  # 60.00, 10.00 vendor 10 + 50.00 vendor 11
    fill_cart(2, (2, 1))
    third = checkout.checkout(2, "cash")["order_id"]  # 25.00, vendor 11

    orders.update_status(second, "processing")
    orders.update_status(second, "shipped")
    orders.update_status(second, "delivered")
    orders.cancel_order(third, requesting_user_id=2)

    return {"first": first, "second": second, "third": third}


@pytest.fixture
def reports(db):
    return ReportService(db)


class TestStatistics:
    def test_platform_statistics(self, db, reports, shop):
        stats = reports.statistics(db.get(UserModel, 99))

        assert stats["total_orders"] == 3
        assert stats["pending_orders"] == 1
        assert stats["completed_orders"] == 1
        assert stats["total_revenue"] == Decimal("80.00")
        assert stats["orders_by_status"] == [
            {"status": "cancelled", "count": 1},
            {"status": "delivered", "count": 1},
            {"status": "pending", "count": 1},
        ]
        assert len(stats["recent_orders"]) == 3

    def test_vendor_statistics_count_only_own_lines(self, db, reports, shop):
        stats = reports.statistics(db.get(UserModel, 11))

        assert stats["total_orders"] == 2
        assert stats["completed_orders"] == 1
        # anulowane zamowienie nie liczy sie do przychodu
        assert stats["total_revenue"] == Decimal("50.00")
        assert stats["total_products_sold"] == 2

    def test_users_are_forbidden(self, db, reports, shop):
        with pytest.raises(ForbiddenError):
            reports.statistics(db.get(UserModel, 1))
        with pytest.raises(ForbiddenError):
            reports.sales_report(db.get(UserModel, 1))


class TestSalesReport:
    def test_platform_report_all_time(self, db, reports, shop):
        report = reports.sales_report(db.get(UserModel, 99))

        assert report["period"] == {"start": "all time", "end": "present"}
        assert report["summary"] == {
            "total_orders": 2,
            "total_sales": Decimal("80.00"),
            "average_order_value": Decimal("40.00"),
        }
        assert report["sales_by_payment_method"] == [
            {"key": "cash", "count": 1, "total": Decimal("20.00")},
            {"key": "credit", "count": 1, "total": Decimal("60.00")},
        ]
        # bez obu dat brak rozbicia dziennego
        assert report["daily_sales"] == []

    def test_daily_sales_with_date_range(self, db, reports, shop):
        now = datetime.now(timezone.utc)
        report = reports.sales_report(
            db.get(UserModel, 99), start=now - timedelta(days=1), end=now + timedelta(days=1)
        )

        assert report["summary"]["total_orders"] == 2
        assert sum(day["count"] for day in report["daily_sales"]) == 2
        assert sum(day["total"] for day in report["daily_sales"]) == Decimal("80.00")

    def test_range_in_the_past_is_empty(self, db, reports, shop):
        now = datetime.now(timezone.utc)
        report = reports.sales_report(
            db.get(UserModel, 99), start=now - timedelta(days=10), end=now - timedelta(days=9)
        )

        assert report["summary"]["total_orders"] == 0
        assert report["summary"]["average_order_value"] == Decimal("0.00")

    def test_vendor_report_uses_own_lines(self, db, reports, shop):
        report = reports.sales_report(db.get(UserModel, 10))

        assert report["summary"] == {
            "total_orders": 2,
            "total_sales": Decimal("30.00"),
            "average_order_value": Decimal("15.00"),
            "total_products_sold": 3,
        }
