# storefront/api/routers/orders.py
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import (
    get_current_user,
    get_lock_service,
    get_notification_service,
    require_roles,
)
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.enums import Role
from storefront.domain.schemas import (
    ApiResponse,
    CancelOut,
    CheckoutIn,
    OrderListOut,
    OrderOut,
    ReceiptOut,
    Report,
    StatusOut,
    StatusUpdateIn,
)
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.report_service import ReportService

router = APIRouter(prefix="/api/orders", tags=["orders"])

buyer = require_roles(Role.USER)
staff = require_roles(Role.VENDOR, Role.ADMIN)


def get_service(db: Session, notifications: NotificationService):
    return OrderService(db, notification_service=notifications)


@router.post("/", response_model=ApiResponse[ReceiptOut], status_code=201)
def create_order(
    payload: CheckoutIn,
    user: UserModel = Depends(buyer),
    db: Session = Depends(get_db),
    locks: LockService = Depends(get_lock_service),
    notifications: NotificationService = Depends(get_notification_service),
):
    """
    Checkout: tworzy zamowienie z koszyka usera, czysci koszyk.
    """
    svc = CheckoutService(db, lock_service=locks, notification_service=notifications)
    receipt = svc.checkout(
        user_id=user.id,
        payment_method=payload.payment_method.value,
        points_to_use=payload.points_to_use,
    )
    return ApiResponse(data=receipt, message="Order placed successfully")


@router.get("/", response_model=ApiResponse[OrderListOut])
def list_orders(
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    customer_id: int | None = Query(None, gt=0),
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
):
    svc = get_service(db, notifications)
    orders = svc.list_orders(user, status=status, page=page, limit=limit, user_id=customer_id)
    return ApiResponse(data=orders, message="Orders retrieved successfully")


@router.get("/statistics", response_model=ApiResponse[Report])
def statistics(user: UserModel = Depends(staff), db: Session = Depends(get_db)):
    return ApiResponse(
        data=ReportService(db).statistics(user),
        message="Statistics retrieved successfully",
    )


@router.get("/sales-report", response_model=ApiResponse[Report])
def sales_report(
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    user: UserModel = Depends(staff),
    db: Session = Depends(get_db),
):
    return ApiResponse(
        data=ReportService(db).sales_report(user, start=start_date, end=end_date),
        message="Sales report generated successfully",
    )


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(
    order_id: int,
    user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
):
    svc = get_service(db, notifications)
    return ApiResponse(data=svc.get_order(order_id, user), message="Order retrieved successfully")


@router.put("/{order_id}/status", response_model=ApiResponse[StatusOut])
def update_status(
    order_id: int,
    payload: StatusUpdateIn,
    user: UserModel = Depends(staff),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
):
    svc = get_service(db, notifications)
    result = svc.update_status(order_id, payload.status)
    return ApiResponse(data=result, message="Order status updated successfully")


@router.delete("/{order_id}/cancel", response_model=ApiResponse[CancelOut])
def cancel_order(
    order_id: int,
    user: UserModel = Depends(buyer),
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
):
    """
    Anuluje zamowienie pending, zwraca towar na stan i punkty.
    """
    svc = get_service(db, notifications)
    result = svc.cancel_order(order_id, requesting_user_id=user.id)
    return ApiResponse(
        data=result,
        message="Order cancelled successfully. Products and points have been refunded.",
    )
