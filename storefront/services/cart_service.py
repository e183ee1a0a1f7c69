from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.enums import ProductStatus
from storefront.domain.errors import (
    ConcurrencyConflictError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Prosta implementacja cqrs dla koszyka
    commands (add, update, remove, clear) modyfikuja stan
    query (get) tylko odczyt, koszyk tworzony leniwie przy pierwszym uzyciu
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    def _get_or_create(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        cart = self.repo.create_cart(CartModel(user_id=user_id, version=1))
        self.repo.commit()
        logger.info(f"Utworzono nowy koszyk {cart.id} dla uzytkownika {user_id}")
        return cart

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._get_or_create(user_id)
        items = self.repo.get_cart_items(cart.id)

        lines = []
        total = Decimal("0.00")
        for i in items:
            product = i.product
            # produkt usuniety z katalogu, pomijamy w widoku
            if product is None:
                continue
            subtotal = Decimal(product.price) * i.quantity
            total += subtotal
            lines.append(
                {
                    "product_id": i.product_id,
                    "product_name": product.name,
                    "price": product.price,
                    "quantity": i.quantity,
                    "available_quantity": product.quantity,
                    "subtotal": subtotal,
                    "status": product.status,
                }
            )

        #dict przeksztalcany w jsona
        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": lines,
            "total": total,
            "items_count": len(lines),
        }

    #commands
    def add_product(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValidationError("Quantity must be at least 1")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product")

        if product.status != ProductStatus.APPROVED.value:
            raise ValidationError("Product is not available for purchase")

        cart = self._get_or_create(user_id)
        existing_item = self.repo.get_cart_item(cart.id, product_id)
        requested = quantity + (existing_item.quantity if existing_item else 0)

        if product.quantity < requested:
            raise InsufficientStockError(product.name, product.quantity)

        if existing_item:
            logger.info(
                f"Produkt {product_id} juz jest w koszyku, zwiekszam ilosc "
                f"z {existing_item.quantity} do {requested}"
            )
            existing_item.quantity = requested
        else:
            logger.info(f"Dodaje nowy produkt {product_id} do koszyka {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
            )

        self._bump_version(cart)
        return self.get_cart(user_id)

    def update_product(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValidationError("Quantity must be at least 1")

        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart")

        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise NotFoundError("Item in cart")

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("Product")

        if product.quantity < quantity:
            raise InsufficientStockError(product.name, product.quantity)

        item.quantity = quantity
        self._bump_version(cart)
        return self.get_cart(user_id)

    def remove_product(self, user_id: int, product_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart")

        logger.info(f"Usuwanie produktu {product_id} z koszyka {cart.id}")
        if self.repo.delete_cart_item(cart.id, product_id) == 0:
            raise NotFoundError("Item in cart")

        self._bump_version(cart)
        return self.get_cart(user_id)

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart")

        self.repo.clear_items(cart.id)
        self._bump_version(cart)
        logger.info(f"Koszyk {cart.id} wyczyszczony")
        return self.get_cart(user_id)

    def _bump_version(self, cart: CartModel) -> None:
        # Optimistic locking warunek na wersje
        # np w bazie update set version 2 where id 1 and version 1
        old_version = cart.version
        rowcount = self.repo.update_cart_version(cart_id=cart.id, old_version=old_version)

        if rowcount == 0:
            self.repo.rollback()
            raise ConcurrencyConflictError("cart")

        self.repo.commit()
        logger.info(f"Koszyk {cart.id}, nowa wersja: {old_version + 1}")
