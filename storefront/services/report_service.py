# storefront/services/report_service.py
"""
Statystyki i raporty sprzedazy.

Tylko odczyt. Admin widzi cala platforme, vendor tylko zamowienia
zawierajace jego produkty i tylko swoje pozycje w przychodach.
"""
from collections import defaultdict
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.user import UserModel
from storefront.domain.enums import OrderStatus, Role
from storefront.domain.errors import ForbiddenError
from storefront.repos.order_repo import OrderRepo
from storefront.services.order_service import serialize_order


def _line_total(item) -> Decimal:
    return Decimal(item.price) * item.quantity


def _period(start: datetime | None, end: datetime | None) -> Dict[str, Any]:
    return {
        "start": start.isoformat() if start else "all time",
        "end": end.isoformat() if end else "present",
    }


def _grouped(buckets: Dict[str, Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"key": key, "count": data["count"], "total": data["total"]}
        for key, data in sorted(buckets.items())
    ]


class ReportService:
    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def statistics(self, user: UserModel) -> Dict[str, Any]:
        handler = _STATISTICS.get(Role(user.role))
        if handler is None:
            raise ForbiddenError("Access to statistics not allowed for this role")
        return handler(self, user)

    def sales_report(
        self,
        user: UserModel,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Dict[str, Any]:
        handler = _SALES_REPORTS.get(Role(user.role))
        if handler is None:
            raise ForbiddenError("Access to sales reports not allowed for this role")
        return handler(self, user, start, end)

    def _platform_statistics(self, user: UserModel) -> Dict[str, Any]:
        by_status = {status: count for status, count in self.repo.count_by_status()}
        recent, total = self.repo.list_orders(offset=0, limit=10)

        return {
            "total_orders": total,
            "pending_orders": by_status.get(OrderStatus.PENDING.value, 0),
            "completed_orders": by_status.get(OrderStatus.DELIVERED.value, 0),
            "total_revenue": Decimal(self.repo.revenue(exclude_status=OrderStatus.CANCELLED.value)),
            "orders_by_status": [
                {"status": status, "count": count} for status, count in sorted(by_status.items())
            ],
            "recent_orders": [serialize_order(o) for o in recent],
        }

    def _vendor_statistics(self, user: UserModel) -> Dict[str, Any]:
        orders = self.repo.find_orders(vendor_id=user.id)

        total_revenue = Decimal("0.00")
        total_products_sold = 0
        by_status: Dict[str, int] = defaultdict(int)

        for order in orders:
            by_status[order.status] += 1
            if order.status == OrderStatus.CANCELLED.value:
                continue
            for item in order.items:
                if item.vendor_id == user.id:
                    total_revenue += _line_total(item)
                    total_products_sold += item.quantity

        return {
            "total_orders": len(orders),
            "pending_orders": by_status.get(OrderStatus.PENDING.value, 0),
            "completed_orders": by_status.get(OrderStatus.DELIVERED.value, 0),
            "total_revenue": total_revenue,
            "total_products_sold": total_products_sold,
            "orders_by_status": [
                {"status": status, "count": count} for status, count in sorted(by_status.items())
            ],
        }

    def _platform_sales_report(self, user, start, end) -> Dict[str, Any]:
        orders = self.repo.find_orders(
            exclude_status=OrderStatus.CANCELLED.value, start=start, end=end
        )
        return self._sales_summary(orders, start, end, lambda order: Decimal(order.total_amount))

    def _vendor_sales_report(self, user, start, end) -> Dict[str, Any]:
        orders = self.repo.find_orders(
            exclude_status=OrderStatus.CANCELLED.value, start=start, end=end, vendor_id=user.id
        )

        def vendor_share(order: OrderModel) -> Decimal:
            return sum(
                (_line_total(i) for i in order.items if i.vendor_id == user.id),
                Decimal("0.00"),
            )

        report = self._sales_summary(orders, start, end, vendor_share)
        report["summary"]["total_products_sold"] = sum(
            i.quantity for order in orders for i in order.items if i.vendor_id == user.id
        )
        return report

    def _sales_summary(
        self,
        orders: List[OrderModel],
        start: datetime | None,
        end: datetime | None,
        amount_of: Callable[[OrderModel], Decimal],
    ) -> Dict[str, Any]:
        total_sales = Decimal("0.00")
        by_payment: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "total": Decimal("0.00")})
        daily: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "total": Decimal("0.00")})

        for order in orders:
            amount = amount_of(order)
            total_sales += amount

            by_payment[order.payment_method]["count"] += 1
            by_payment[order.payment_method]["total"] += amount

            # dzienna sprzedaz tylko dla zamknietego zakresu dat
            if start and end:
                day = order.placed_at.date().isoformat()
                daily[day]["count"] += 1
                daily[day]["total"] += amount

        average = (total_sales / len(orders)).quantize(Decimal("0.01")) if orders else Decimal("0.00")

        return {
            "period": _period(start, end),
            "summary": {
                "total_orders": len(orders),
                "total_sales": total_sales,
                "average_order_value": average,
            },
            "sales_by_payment_method": _grouped(by_payment),
            "daily_sales": _grouped(daily),
        }


_STATISTICS = {
    Role.ADMIN: ReportService._platform_statistics,
    Role.VENDOR: ReportService._vendor_statistics,
}

_SALES_REPORTS = {
    Role.ADMIN: ReportService._platform_sales_report,
    Role.VENDOR: ReportService._vendor_sales_report,
}
