#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import require_roles
from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.enums import Role
from storefront.domain.schemas import ApiResponse, CartItemIn, CartItemUpdate, CartOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])

buyer = require_roles(Role.USER)


def get_service(db: Session):
    return CartService(db=db)


@router.get("/", response_model=ApiResponse[CartOut])
def get_cart(user: UserModel = Depends(buyer), db: Session = Depends(get_db)):
    svc = get_service(db)
    return ApiResponse(data=svc.get_cart(user.id), message="Cart retrieved successfully")


@router.post("/items", response_model=ApiResponse[CartOut])
def add_item(
    payload: CartItemIn,
    user: UserModel = Depends(buyer),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    cart = svc.add_product(
        user_id=user.id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    return ApiResponse(data=cart, message="Item added to cart successfully")


@router.put("/items/{product_id}", response_model=ApiResponse[CartOut])
def update_item(
    product_id: int,
    payload: CartItemUpdate,
    user: UserModel = Depends(buyer),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    cart = svc.update_product(user.id, product_id, payload.quantity)
    return ApiResponse(data=cart, message="Cart item updated successfully")


@router.delete("/items/{product_id}", response_model=ApiResponse[CartOut])
def remove_item(
    product_id: int,
    user: UserModel = Depends(buyer),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    cart = svc.remove_product(user.id, product_id)
    return ApiResponse(data=cart, message="Item removed from cart successfully")


@router.delete("/", response_model=ApiResponse[CartOut])
def clear_cart(user: UserModel = Depends(buyer), db: Session = Depends(get_db)):
    svc = get_service(db)
    return ApiResponse(data=svc.clear_cart(user.id), message="Cart cleared successfully")
