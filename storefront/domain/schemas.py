# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from storefront.domain.enums import PaymentMethod, Role

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Koperta odpowiedzi: {success, message, data}."""

    success: bool = True
    message: str = "Success"
    data: T | None = None


class UserCreate(BaseModel):
    """Schema dla tworzenia uzytkownika."""

    id: int = Field(..., gt=0, description="ID uzytkownika (musi byc > 0)")
    name: str = Field(..., min_length=1, max_length=100)
    role: Role = Role.USER


class UserRead(BaseModel):
    id: int
    name: str
    role: Role
    points: int

    model_config = ConfigDict(from_attributes=True)


class CartItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi byc > 0)")
    quantity: int = Field(..., ge=1, description="Ilosc produktu (co najmniej 1)")


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class CartLineOut(BaseModel):
    product_id: int
    product_name: str
    price: Decimal
    quantity: int
    available_quantity: int
    subtotal: Decimal
    status: str


class CartOut(BaseModel):
    cart_id: int
    user_id: int
    items: List[CartLineOut]
    total: Decimal
    items_count: int


class CheckoutIn(BaseModel):
    """Schema dla checkoutu. Punkty ujemne odrzuca walidacja punktow."""

    payment_method: PaymentMethod
    points_to_use: int = 0


class ReceiptOut(BaseModel):
    order_id: int
    total_amount: Decimal
    points_used: int
    discount: Decimal
    points_earned: int
    new_points_balance: int
    status: str
    payment_method: str
    placed_at: datetime


class OrderItemOut(BaseModel):
    product_id: int | None
    product_name: str
    vendor_id: int | None
    price: Decimal
    quantity: int


class OrderOut(BaseModel):
    id: int
    user_id: int
    cart_id: int | None
    items: List[OrderItemOut]
    total_amount: Decimal
    payment_method: str
    status: str
    placed_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class OrderListOut(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class StatusUpdateIn(BaseModel):
    status: str


class StatusOut(BaseModel):
    order_id: int
    status: str
    refunded_points: int | None = None


class CancelOut(BaseModel):
    order_id: int
    status: str
    refunded_amount: Decimal
    refunded_points: int


Report = Dict[str, Any]
