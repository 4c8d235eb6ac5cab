from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.db.session import get_session
from app.models.user import User, UserRole
from app.core.exceptions import ForbiddenException, NotFoundException
from app.core.schemas import CamelModel
from app.routers.auth import get_current_user, UserPublic
from app.services.user import UserService

router = APIRouter()

class UserUpdate(CamelModel):
    is_active: Optional[bool] = None
    role: Optional[UserRole] = None

def get_user_service(session: Session = Depends(get_session)) -> UserService:
    return UserService(session)

def get_admin_user(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenException("Admin access required")
    return current_user

@router.get("/", response_model=List[UserPublic])
def read_users(
    skip: int = 0,
    limit: int = 100,
    admin: User = Depends(get_admin_user),
    service: UserService = Depends(get_user_service)
):
    """
    Retrieve users. Only for admins.
    """
    return service.get_all_users(skip=skip, limit=limit)

@router.get("/me", response_model=UserPublic)
def read_user_me(current_user: User = Depends(get_current_user)):
    """
    Get current user.
    """
    return current_user

@router.patch("/{user_id}", response_model=UserPublic)
def update_user(
    user_id: str,
    user_in: UserUpdate,
    admin: User = Depends(get_admin_user),
    service: UserService = Depends(get_user_service)
):
    """
    Update a user's role or status. Only for admins.
    """
    updated_user = service.update_user_status(user_id, user_in.is_active, user_in.role)
    if not updated_user:
        raise NotFoundException("User not found")
    return updated_user
