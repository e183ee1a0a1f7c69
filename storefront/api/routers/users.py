from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import ApiResponse, UserCreate, UserRead
from storefront.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/", response_model=ApiResponse[UserRead], status_code=201)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    service = UserService(db)
    return ApiResponse(data=service.create_user(payload), message="User created successfully")


@router.get("/{user_id}", response_model=ApiResponse[UserRead])
def get_user(user_id: int, db: Session = Depends(get_db)):
    service = UserService(db)
    return ApiResponse(data=service.get_user(user_id), message="User retrieved successfully")
