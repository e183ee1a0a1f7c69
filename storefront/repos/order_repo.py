# storefront/repos/order_repo.py
from datetime import datetime
from decimal import Decimal
from typing import List, Sequence, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        # bez commita, commit robi UnitOfWork
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def set_status_if(self, order_id: int, expected: str, status: str) -> int:
        # warunkowa zmiana statusu, 0 = status zmienil sie pod nami
        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == expected)
            .values(status=status)
        )
        return result.rowcount

    def list_orders(
        self,
        user_id: int | None = None,
        vendor_id: int | None = None,
        status: str | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[OrderModel], int]:
        conditions = []
        if user_id is not None:
            conditions.append(OrderModel.user_id == user_id)
        if vendor_id is not None:
            conditions.append(OrderModel.items.any(OrderItemModel.vendor_id == vendor_id))
        if status:
            conditions.append(OrderModel.status == status)

        orders = self.db.execute(
            select(OrderModel)
            .where(*conditions)
            .order_by(OrderModel.placed_at.desc(), OrderModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars().all()
        total = self.db.execute(
            select(func.count(OrderModel.id)).where(*conditions)
        ).scalar_one()
        return list(orders), total

    def find_orders(
        self,
        status: str | None = None,
        exclude_status: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        vendor_id: int | None = None,
    ) -> List[OrderModel]:
        query = select(OrderModel)
        if status:
            query = query.where(OrderModel.status == status)
        if exclude_status:
            query = query.where(OrderModel.status != exclude_status)
        if start is not None:
            query = query.where(OrderModel.placed_at >= start)
        if end is not None:
            query = query.where(OrderModel.placed_at <= end)
        if vendor_id is not None:
            # zamowienia z przynajmniej jedna pozycja vendora
            query = query.where(
                OrderModel.items.any(OrderItemModel.vendor_id == vendor_id)
            )
        return list(
            self.db.execute(
                query.order_by(OrderModel.placed_at.desc(), OrderModel.id.desc())
            ).scalars().all()
        )

    def count_by_status(self) -> Sequence[Tuple[str, int]]:
        return self.db.execute(
            select(OrderModel.status, func.count(OrderModel.id)).group_by(OrderModel.status)
        ).all()

    def revenue(self, exclude_status: str) -> Decimal:
        return self.db.execute(
            select(func.coalesce(func.sum(OrderModel.total_amount), 0)).where(
                OrderModel.status != exclude_status
            )
        ).scalar_one()
