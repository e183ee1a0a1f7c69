# storefront/services/stock_service.py
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.enums import ProductStatus
from storefront.domain.errors import CartUnavailableError, InsufficientStockError
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LineItem:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class ResolvedLine:
    product: ProductModel
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return Decimal(self.product.price) * self.quantity


class StockReservation:
    """
    Rezerwacja stanow magazynowych.

    Najpierw walidacja wszystkich pozycji (bez zmian w bazie), potem
    commit_reservation zdejmuje ze stanu atomowym warunkowym UPDATE.
    Wszystko w transakcji wywolujacego, wiec blad w polowie = rollback.
    """

    def __init__(self, db: Session):
        self.products = ProductRepo(db)

    def check_lines(self, lines: Iterable[LineItem]) -> tuple[List[ResolvedLine], List[str]]:
        lines = list(lines)
        products = self.products.get_products(line.product_id for line in lines)

        resolved: List[ResolvedLine] = []
        problems: List[str] = []

        for line in lines:
            product = products.get(line.product_id)

            if product is None:
                problems.append("Product no longer exists")
                continue

            if product.status != ProductStatus.APPROVED.value:
                problems.append(f"{product.name} is not available")
                continue

            if product.quantity < line.quantity:
                problems.append(f"{product.name} - only {product.quantity} available")
                continue

            resolved.append(ResolvedLine(product=product, quantity=line.quantity))

        return resolved, problems

    def reserve_all(self, lines: Iterable[LineItem]) -> List[ResolvedLine]:
        resolved, problems = self.check_lines(lines)
        if problems:
            logger.info(f"Reservation rejected, unavailable lines: {problems}")
            raise CartUnavailableError(problems)
        return resolved

    def commit_reservation(self, lines: Iterable[ResolvedLine]) -> None:
        for line in lines:
            rowcount = self.products.decrement_if_available(line.product.id, line.quantity)
            if rowcount == 0:
                # ktos wykupil towar miedzy walidacja a zapisem
                logger.warning(
                    f"Conditional decrement failed for product {line.product.id} "
                    f"(requested {line.quantity})"
                )
                raise InsufficientStockError(line.product.name)

            logger.info(f"Reserved {line.quantity} x product {line.product.id}")

    def restore_reservation(self, lines: Iterable[LineItem]) -> None:
        for line in lines:
            if line.product_id is None:
                logger.warning("Skipping stock restore for a line without product")
                continue

            rowcount = self.products.increment(line.product_id, line.quantity)
            if rowcount == 0:
                logger.warning(f"Product {line.product_id} no longer exists, stock not restored")
            else:
                logger.info(f"Restored {line.quantity} x product {line.product_id}")
