# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal, init_db
from storefront.data.models import ProductModel, UserModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def seed():
    init_db()
    db = SessionLocal()
    try:
        # seed tylko do pustej bazy
        if db.query(UserModel).first():
            logger.info("Database already seeded")
            return

        db.add_all(
            [
                UserModel(id=1, name="Admin", role="admin"),
                UserModel(id=2, name="Keyboard Shop", role="vendor"),
                UserModel(id=3, name="Buyer", role="user", points=500),
            ]
        )
        db.flush()
        db.add_all(
            [
                ProductModel(id=1, vendor_id=2, name="Keyboard", price=Decimal("199.99"), quantity=10, status="approved"),
                ProductModel(id=2, vendor_id=2, name="Mouse", price=Decimal("49.50"), quantity=25, status="approved"),
                ProductModel(id=3, vendor_id=2, name="Monitor", price=Decimal("899.00"), quantity=3, status="pending"),
            ]
        )
        db.commit()
        logger.info("Seeded users and products")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
