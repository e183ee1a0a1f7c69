# storefront/services/order_service.py
import math
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.user import UserModel
from storefront.data.unit_of_work import UnitOfWork
from storefront.domain.calculator import compute_total
from storefront.domain.enums import OrderStatus, Role, can_transition
from storefront.domain.errors import (
    ForbiddenError,
    InvalidCancelStateError,
    InvalidTransitionError,
    OrderNotFoundError,
    ValidationError,
)
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.notification_service import NotificationService
from storefront.services.stock_service import LineItem, StockReservation
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def serialize_order(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "cart_id": order.cart_id,
        "items": [
            {
                "product_id": i.product_id,
                "product_name": i.product_name,
                "vendor_id": i.vendor_id,
                "price": i.price,
                "quantity": i.quantity,
            }
            for i in order.items
        ],
        "total_amount": order.total_amount,
        "payment_method": order.payment_method,
        "status": order.status,
        "placed_at": order.placed_at,
    }


class OrderService:
    """
    Cykl zycia zamowienia i zapytania.
    Zamowienie tworzy CheckoutService, tutaj tylko status i anulowanie.
    """

    def __init__(self, db: Session, notification_service: NotificationService):
        self.db = db
        self.repo = OrderRepo(db)
        self.users = UserRepo(db)
        self.stock = StockReservation(db)
        self.notification_service = notification_service

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: int, user: UserModel) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFoundError()

        if user.role == Role.USER.value and order.user_id != user.id:
            raise ForbiddenError("Not authorized to view this order")

        return serialize_order(order)

    def list_orders(
        self,
        user: UserModel,
        status: str | None = None,
        page: int = 1,
        limit: int | None = None,
        user_id: int | None = None,
    ) -> Dict[str, Any]:
        if status is not None and status not in {s.value for s in OrderStatus}:
            raise ValidationError("Validation failed", errors=[_status_message()])

        listing = _LISTINGS[Role(user.role)]
        return listing(self, user, status, page, limit, user_id)

    def _list_own(self, user, status, page, limit, user_id):
        return self._paginate(page, limit or 10, user_id=user.id, status=status)

    def _list_all(self, user, status, page, limit, user_id):
        return self._paginate(page, limit or 20, user_id=user_id, status=status)

    def _list_vendor(self, user, status, page, limit, user_id):
        return self._paginate(page, limit or 20, vendor_id=user.id, status=status)

    def _paginate(self, page: int, limit: int, **filters) -> Dict[str, Any]:
        orders, total = self.repo.list_orders(offset=(page - 1) * limit, limit=limit, **filters)
        return {
            "orders": [serialize_order(o) for o in orders],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
            },
        }

    # =====================================================
    # COMMANDS
    # =====================================================
    def update_status(self, order_id: int, new_status: str) -> Dict[str, Any]:
        if new_status not in {s.value for s in OrderStatus}:
            raise ValidationError("Validation failed", errors=[_status_message()])

        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError()

        current = OrderStatus(order.status)
        target = OrderStatus(new_status)
        if not can_transition(current, target):
            raise InvalidTransitionError(current.value, target.value)

        if target is OrderStatus.CANCELLED:
            # anulowanie przez sprzedawce/admina, ta sama kompensacja co u usera
            refunded_points = self._compensate(order, expected=current)
        else:
            with UnitOfWork(self.db):
                if self.repo.set_status_if(order.id, current.value, target.value) == 0:
                    raise InvalidTransitionError(current.value, target.value)
            refunded_points = None

        logger.info(f"Order {order.id} status {current.value} -> {target.value}")
        self.notification_service.send_status_changed(order.user_id, order.id, target.value)

        result = {"order_id": order.id, "status": target.value}
        if refunded_points is not None:
            result["refunded_points"] = refunded_points
        return result

    def cancel_order(self, order_id: int, requesting_user_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFoundError()

        if order.user_id != requesting_user_id:
            raise ForbiddenError("Not authorized to cancel this order")

        if order.status != OrderStatus.PENDING.value:
            raise InvalidCancelStateError(order.status)

        refunded_points = self._compensate(order, expected=OrderStatus.PENDING)

        logger.info(
            f"Order {order.id} cancelled by user {requesting_user_id}, "
            f"refunded {refunded_points} points"
        )
        self.notification_service.send_order_cancelled(order.user_id, order.id)

        return {
            "order_id": order.id,
            "status": OrderStatus.CANCELLED.value,
            "refunded_amount": order.total_amount,
            "refunded_points": refunded_points,
        }

    def _compensate(self, order: OrderModel, expected: OrderStatus) -> int:
        """
        Zwrot stanow i punktow + status cancelled w jednej transakcji.

        Status zmieniany warunkowo (WHERE status = expected) jako pierwszy,
        wiec drugie/rownolegle anulowanie nie zwroci niczego drugi raz.
        Punkty: zwracamy tyle, ile zamowienie by naliczylo od total_amount,
        nie tyle ile zostalo wydane.
        """
        lines = [LineItem(product_id=i.product_id, quantity=i.quantity) for i in order.items]
        refunded_points = compute_total(order.total_amount, 0).points_earned

        with UnitOfWork(self.db):
            if self.repo.set_status_if(order.id, expected.value, OrderStatus.CANCELLED.value) == 0:
                raise InvalidCancelStateError(self._current_status(order.id))

            self.stock.restore_reservation(lines)
            self.users.add_points(order.user_id, refunded_points)

        return refunded_points

    def _current_status(self, order_id: int) -> str:
        order = self.repo.get_order(order_id)
        self.db.refresh(order)
        return order.status


def _status_message() -> str:
    return "Status must be one of: " + ", ".join(s.value for s in OrderStatus)


# jawna tabela rola -> handler zamiast if/elif po roli
_LISTINGS: Dict[Role, Callable[..., Dict[str, Any]]] = {
    Role.USER: OrderService._list_own,
    Role.ADMIN: OrderService._list_all,
    Role.VENDOR: OrderService._list_vendor,
}
