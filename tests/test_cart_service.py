"""Koszyk: leniwe tworzenie, jedna pozycja na produkt, wersjonowanie."""

from decimal import Decimal

import pytest

from storefront.data.models import CartModel
from storefront.domain.errors import (
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from storefront.services.cart_service import CartService


@pytest.fixture
def buyer(make_user):
    return make_user(1)


class TestCartService:
    def test_get_cart_creates_empty_cart(self, db, buyer):
        cart = CartService(db).get_cart(buyer.id)

        assert cart["items"] == []
        assert cart["total"] == Decimal("0.00")
        assert db.query(CartModel).filter_by(user_id=buyer.id).count() == 1

    def test_duplicate_add_increments_quantity(self, db, buyer, make_product):
        make_product(1, price="10.00", quantity=10)
        svc = CartService(db)

        svc.add_product(buyer.id, 1, 2)
        cart = svc.add_product(buyer.id, 1, 3)

        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 5
        assert cart["total"] == Decimal("50.00")

    def test_each_mutation_bumps_version(self, db, buyer, make_product, reload):
        make_product(1, quantity=10)
        svc = CartService(db)

        cart_id = svc.get_cart(buyer.id)["cart_id"]
        svc.add_product(buyer.id, 1, 1)
        svc.update_product(buyer.id, 1, 4)

        assert reload(CartModel, cart_id).version == 3

    def test_add_rejects_unapproved_product(self, db, buyer, make_product):
        make_product(1, status="pending")

        with pytest.raises(ValidationError):
            CartService(db).add_product(buyer.id, 1, 1)

    def test_add_rejects_missing_product(self, db, buyer):
        with pytest.raises(NotFoundError):
            CartService(db).add_product(buyer.id, 7, 1)

    def test_add_checks_stock_including_existing_line(self, db, buyer, make_product):
        make_product(1, quantity=3)
        svc = CartService(db)
        svc.add_product(buyer.id, 1, 2)

        with pytest.raises(InsufficientStockError):
            svc.add_product(buyer.id, 1, 2)

    def test_quantity_must_be_positive(self, db, buyer, make_product):
        make_product(1)

        with pytest.raises(ValidationError):
            CartService(db).add_product(buyer.id, 1, 0)

    def test_remove_and_clear(self, db, buyer, make_product):
        make_product(1)
        make_product(2)
        svc = CartService(db)
        svc.add_product(buyer.id, 1, 1)
        svc.add_product(buyer.id, 2, 1)

        cart = svc.remove_product(buyer.id, 1)
        assert [i["product_id"] for i in cart["items"]] == [2]

        cart = svc.clear_cart(buyer.id)
        assert cart["items_count"] == 0

    def test_remove_unknown_item(self, db, buyer):
        svc = CartService(db)
        svc.get_cart(buyer.id)

        with pytest.raises(NotFoundError):
            svc.remove_product(buyer.id, 5)
