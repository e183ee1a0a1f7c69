# storefront/domain/calculator.py
from dataclasses import dataclass
from decimal import Decimal

from storefront.domain.points import points_earned, points_to_discount


@dataclass(frozen=True)
class OrderCalculation:
    cart_total: Decimal
    points_used: int
    discount: Decimal
    final_amount: Decimal
    points_earned: int


def compute_total(cart_total: Decimal, points_to_use: int = 0) -> OrderCalculation:
    """Laczy sume koszyka z rabatem za punkty. Kwota koncowa nie schodzi ponizej zera."""
    cart_total = Decimal(cart_total)
    discount = points_to_discount(points_to_use)
    final_amount = max(Decimal("0"), cart_total - discount)

    return OrderCalculation(
        cart_total=cart_total,
        points_used=points_to_use,
        discount=discount,
        final_amount=final_amount,
        points_earned=points_earned(final_amount),
    )
