from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.enums import ProductStatus


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_products(self, product_ids: Iterable[int]) -> dict[int, ProductModel]:
        ids = list(set(product_ids))
        if not ids:
            return {}
        rows = self.db.execute(
            select(ProductModel).where(ProductModel.id.in_(ids))
        ).scalars().all()
        return {p.id: p for p in rows}

    def decrement_if_available(self, product_id: int, quantity: int) -> int:
        """
        Atomowe zdjecie ze stanu.
        UPDATE products SET quantity = quantity - n WHERE id = ? AND quantity >= n AND status = 'approved'
        Zwraca rowcount, 0 = za malo towaru albo produkt niedostepny.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.quantity >= quantity,
                ProductModel.status == ProductStatus.APPROVED.value,
            )
            .values(
                quantity=ProductModel.quantity - quantity,
                version=ProductModel.version + 1,
            )
        )
        return result.rowcount

    def increment(self, product_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(
                quantity=ProductModel.quantity + quantity,
                version=ProductModel.version + 1,
            )
        )
        return result.rowcount
