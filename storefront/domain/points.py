# storefront/domain/points.py
"""
Punkty lojalnosciowe.

100 punktow = 1 jednostka waluty rabatu, 1 jednostka zaplacona = 1 punkt.
Czyste funkcje, bez efektow ubocznych.
"""
from decimal import Decimal, ROUND_FLOOR

from storefront.domain.errors import (
    ExceedsCartValueError,
    InsufficientBalanceError,
    NegativePointsError,
)

POINTS_PER_UNIT = 100


def points_to_discount(points: int) -> Decimal:
    if points < 0:
        raise NegativePointsError()
    return Decimal(points) / POINTS_PER_UNIT


def points_earned(final_amount: Decimal) -> int:
    return int(Decimal(final_amount).to_integral_value(rounding=ROUND_FLOOR))


def validate_spend(points_to_use: int, available_balance: int, cart_total: Decimal) -> bool:
    # kolejnosc ma znaczenie, pierwszy blad przerywa
    if points_to_use < 0:
        raise NegativePointsError()

    if points_to_use > available_balance:
        raise InsufficientBalanceError()

    max_points = Decimal(cart_total) * POINTS_PER_UNIT
    if points_to_use > max_points:
        raise ExceedsCartValueError(max_points.normalize())

    return True
