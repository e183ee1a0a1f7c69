"""
Shared pytest fixtures.

Testy chodza na SQLite w pamieci, Celery w trybie eager, a lock
redisa i powiadomienia sa podmienione na wersje w pamieci.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

from decimal import Decimal  # noqa: E402
from typing import List, Tuple  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from storefront.api.deps import get_lock_service, get_notification_service  # noqa: E402
from storefront.data import models  # noqa: E402,F401
from storefront.data.database import Base, SessionLocal, engine  # noqa: E402
from storefront.data.models import CartItemModel, CartModel, ProductModel, UserModel  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.services.notification_service import NotificationService  # noqa: E402


class InMemoryLockService:
    """Zachowuje sie jak LockService (SET NX + release tylko przez wlasciciela)."""

    def __init__(self):
        self.locks = {}

    def acquire_checkout_lock(self, user_id: int, token: str, ttl: int) -> bool:
        if user_id in self.locks:
            return False
        self.locks[user_id] = token
        return True

    def release_checkout_lock(self, user_id: int, token: str) -> bool:
        if self.locks.get(user_id) == token:
            del self.locks[user_id]
            return True
        return False


class RecordingNotificationService(NotificationService):
    def __init__(self):
        self.events: List[Tuple[int, int, str]] = []

    def _publish(self, user_id: int, order_id: int, event: str) -> None:
        self.events.append((user_id, order_id, event))


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def lock_service():
    return InMemoryLockService()


@pytest.fixture
def notifications():
    return RecordingNotificationService()


@pytest.fixture
def client(lock_service, notifications):
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_notification_service] = lambda: notifications
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============================================================================
# DATA FACTORIES
# ============================================================================


@pytest.fixture
def make_user(db):
    def factory(user_id: int, role: str = "user", points: int = 0, name: str | None = None) -> UserModel:
        user = UserModel(id=user_id, name=name or f"user-{user_id}", role=role, points=points)
        db.add(user)
        db.commit()
        return user

    return factory


@pytest.fixture
def make_product(db):
    def factory(
        product_id: int,
        price: str = "100.00",
        quantity: int = 10,
        status: str = "approved",
        vendor_id: int | None = None,
        name: str | None = None,
    ) -> ProductModel:
        product = ProductModel(
            id=product_id,
            vendor_id=vendor_id,
            name=name or f"product-{product_id}",
            price=Decimal(price),
            quantity=quantity,
            status=status,
        )
        db.add(product)
        db.commit()
        return product

    return factory


@pytest.fixture
def fill_cart(db):
    def factory(user_id: int, *lines: Tuple[int, int]) -> CartModel:
        cart = db.query(CartModel).filter_by(user_id=user_id).one_or_none()
        if cart is None:
            cart = CartModel(user_id=user_id, version=1)
            db.add(cart)
            db.flush()
        for product_id, quantity in lines:
            db.add(CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity))
        db.commit()
        return cart

    return factory


@pytest.fixture
def reload(db):
    """Swiezy odczyt z bazy z pominieciem identity map."""

    def factory(model, pk):
        db.expire_all()
        return db.get(model, pk)

    return factory
