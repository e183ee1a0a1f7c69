from sqlalchemy import CheckConstraint, Column, Integer, String

from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="user")  # user, vendor, admin

    points = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (CheckConstraint("points >= 0", name="ck_user_points"),)
