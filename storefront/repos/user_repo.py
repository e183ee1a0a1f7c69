from sqlalchemy import update
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def update_points(self, user_id: int, old_version: int, points: int) -> int:
        # compare-and-swap na wersji, 0 = ktos inny zmienil usera w miedzyczasie
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.version == old_version)
            .values(points=points, version=old_version + 1)
        )
        return result.rowcount

    def add_points(self, user_id: int, points: int) -> int:
        # atomowy increment, bez czytania salda
        result = self.db.execute(
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(points=UserModel.points + points, version=UserModel.version + 1)
        )
        return result.rowcount
