# storefront/services/checkout_service.py
import uuid
from decimal import Decimal
from enum import Enum
from typing import Any, Dict

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.unit_of_work import UnitOfWork
from storefront.domain.calculator import compute_total
from storefront.domain.enums import OrderStatus, PaymentMethod
from storefront.domain.errors import (
    CheckoutInProgressError,
    ConcurrencyConflictError,
    EmptyCartError,
    NotFoundError,
    ValidationError,
)
from storefront.domain.points import validate_spend
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.stock_service import LineItem, StockReservation
from storefront.utils.logging import get_logger
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS

logger = get_logger(__name__)


class CheckoutState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    RESERVING = "reserving"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"


class CheckoutService:
    """
    Checkout: koszyk -> zamowienie.

    1. walidacja koszyka, produktow i punktow (bez zapisow)
    2. rezerwacja stanow (warunkowy UPDATE per pozycja)
    3. punkty usera (compare-and-swap na wersji)
    4. zapis zamowienia ze snapshotem pozycji
    5. czyszczenie koszyka

    Kroki 2-5 ida w jednej transakcji (UnitOfWork), wyjatek w dowolnym
    miejscu cofa wszystko. Rownolegly checkout tego samego usera
    blokuje lock w redisie.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService,
    ):
        self.db = db
        self.carts = CartRepo(db)
        self.users = UserRepo(db)
        self.orders = OrderRepo(db)
        self.stock = StockReservation(db)
        self.lock_service = lock_service
        self.notification_service = notification_service
        self.state = CheckoutState.IDLE

    def _enter(self, state: CheckoutState) -> None:
        logger.debug(f"Checkout state {self.state.value} -> {state.value}")
        self.state = state

    def checkout(self, user_id: int, payment_method: str, points_to_use: int = 0) -> Dict[str, Any]:
        if payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError(
                "Validation failed",
                errors=["Valid payment method is required (cash or credit)"],
            )

        token = uuid.uuid4().hex
        if not self.lock_service.acquire_checkout_lock(user_id, token, CHECKOUT_LOCK_TTL_SECONDS):
            raise CheckoutInProgressError()

        try:
            receipt = self._run(user_id, payment_method, points_to_use)
        except Exception as e:
            self._enter(CheckoutState.FAILED)
            logger.info(f"Checkout failed for user {user_id}: {e}")
            raise
        finally:
            self._release_lock(user_id, token)

        self.notification_service.send_order_placed(user_id, receipt["order_id"])
        return receipt

    def _release_lock(self, user_id: int, token: str) -> None:
        # lock i tak wygasnie po TTL
        try:
            self.lock_service.release_checkout_lock(user_id, token)
        except RedisError as e:
            logger.warning(f"Could not release checkout lock for user {user_id}: {e}")

    def _run(self, user_id: int, payment_method: str, points_to_use: int) -> Dict[str, Any]:
        self._enter(CheckoutState.VALIDATING)

        cart = self.carts.get_cart_by_user(user_id)
        items = self.carts.get_cart_items(cart.id) if cart else []
        if not items:
            raise EmptyCartError()

        lines = [LineItem(product_id=i.product_id, quantity=i.quantity) for i in items]
        resolved = self.stock.reserve_all(lines)
        cart_total = sum((line.subtotal for line in resolved), Decimal("0.00"))

        user = self.users.get_user(user_id)
        if not user:
            raise NotFoundError("User")

        validate_spend(points_to_use, user.points, cart_total)
        calculation = compute_total(cart_total, points_to_use)
        new_balance = user.points - calculation.points_used + calculation.points_earned

        with UnitOfWork(self.db):
            self._enter(CheckoutState.RESERVING)
            self.stock.commit_reservation(resolved)

            self._enter(CheckoutState.PERSISTING)
            if self.users.update_points(user.id, user.version, new_balance) == 0:
                raise ConcurrencyConflictError("user points")

            order = self.orders.create_order(
                OrderModel(
                    user_id=user_id,
                    cart_id=cart.id,
                    total_amount=calculation.final_amount,
                    payment_method=payment_method,
                    status=OrderStatus.PENDING.value,
                    items=[
                        OrderItemModel(
                            product_id=line.product.id,
                            vendor_id=line.product.vendor_id,
                            product_name=line.product.name,
                            price=line.product.price,
                            quantity=line.quantity,
                        )
                        for line in resolved
                    ],
                )
            )

            self.carts.clear_items(cart.id)
            if self.carts.update_cart_version(cart.id, cart.version) == 0:
                raise ConcurrencyConflictError("cart")

        self._enter(CheckoutState.COMPLETED)
        logger.info(
            f"Order {order.id} placed by user {user_id}: total {calculation.final_amount}, "
            f"points used {calculation.points_used}, earned {calculation.points_earned}"
        )

        return {
            "order_id": order.id,
            "total_amount": calculation.final_amount,
            "points_used": calculation.points_used,
            "discount": calculation.discount,
            "points_earned": calculation.points_earned,
            "new_points_balance": new_balance,
            "status": order.status,
            "payment_method": order.payment_method,
            "placed_at": order.placed_at,
        }
