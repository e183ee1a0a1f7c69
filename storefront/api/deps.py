# storefront/api/deps.py
from functools import lru_cache
from typing import Callable

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.domain.enums import Role
from storefront.domain.errors import ForbiddenError, UnauthorizedError
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService


@lru_cache
def get_lock_service() -> LockService:
    # jeden klient redisa na proces
    return LockService()


@lru_cache
def get_notification_service() -> NotificationService:
    return NotificationService()


def get_current_user(
    user_id: int = Query(..., gt=0, description="ID zalogowanego uzytkownika"),
    db: Session = Depends(get_db),
) -> UserModel:
    # tozsamosc dostarcza zewnetrzna warstwa auth, tu tylko ja rozwiazujemy
    user = db.get(UserModel, user_id)
    if not user:
        raise UnauthorizedError("User no longer exists")
    return user


def require_roles(*roles: Role) -> Callable[..., UserModel]:
    allowed = {r.value for r in roles}

    def dependency(user: UserModel = Depends(get_current_user)) -> UserModel:
        if user.role not in allowed:
            raise ForbiddenError("Access forbidden for this role")
        return user

    return dependency
