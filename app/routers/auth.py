import logging
from fastapi import APIRouter, Depends, HTTPException, status
from typing import Optional
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from sqlmodel import Session
from pydantic import BaseModel, Field
from app.db.session import get_session
from app.models.user import User, UserRole
from app.core.exceptions import UnauthenticatedException
from app.core.permissions import Identity
from app.core.schemas import CamelModel
from app.core.security import decode_access_token
from app.services.auth import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="api/v1/auth/token", auto_error=False)


class Token(BaseModel):
    access_token: str
    token_type: str

class UserCreate(CamelModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=8)
    first_name: Optional[str] = None
    last_name: Optional[str] = None

class UserPublic(CamelModel):
    id: str
    email: str
    name: str
    role: UserRole
    is_active: bool

def get_auth_service(session: Session = Depends(get_session)) -> AuthService:
    return AuthService(session)

@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(user_in: UserCreate, service: AuthService = Depends(get_auth_service)):
    return service.register_user(
        user_in.email,
        user_in.password,
        first_name=user_in.first_name,
        last_name=user_in.last_name
    )

@router.post("/token", response_model=Token)
def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: AuthService = Depends(get_auth_service)
):
    user, error_message = service.authenticate_user(form_data.username, form_data.password)
    if not user:
        logger.info("Failed login for %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": service.create_access_token(user), "token_type": "bearer"}

def get_current_user_optional(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    session: Session = Depends(get_session)
) -> Optional[User]:
    if not token:
        return None
    payload = decode_access_token(token)
    if not payload:
        return None
    user_id = payload.get("sub")
    if user_id is None:
        return None

    user = session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user

def get_current_identity_optional(
    user: Optional[User] = Depends(get_current_user_optional)
) -> Optional[Identity]:
    if user is None:
        return None
    # Role is read from the users row so a demotion applies to tokens already issued
    return Identity(id=user.id, role=user.role)

def get_current_user(user: Optional[User] = Depends(get_current_user_optional)) -> User:
    if user is None:
        raise UnauthenticatedException("Could not validate credentials")
    return user
