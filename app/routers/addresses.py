from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from pydantic import Field
from app.db.session import get_session
from app.core.permissions import Identity, ensure_address_access
from app.core.schemas import CamelModel, MessageResponse
from app.routers.auth import get_current_identity_optional
from app.services.address import AddressService

router = APIRouter()

class AddressFields(CamelModel):
    full_name: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    pincode: str = Field(min_length=1)
    area: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)

    def details(self) -> dict:
        return self.model_dump(include=set(AddressFields.model_fields))

class AddressCreate(AddressFields):
    is_default: bool = False

class AddressUpdate(AddressFields):
    id: str = Field(min_length=1)
    is_default: bool

class AddressDelete(CamelModel):
    id: str = Field(min_length=1)

class AddressResponse(AddressFields):
    id: str
    is_default: bool

class AddressCreated(MessageResponse):
    id: str

def get_address_service(session: Session = Depends(get_session)) -> AddressService:
    return AddressService(session)

def require_address_access(
    user_id: str,
    identity: Optional[Identity] = Depends(get_current_identity_optional)
) -> Identity:
    """The address book owner only; admins get no override here"""
    return ensure_address_access(identity, user_id)

@router.get("/{user_id}", response_model=List[AddressResponse])
def list_addresses(
    user_id: str,
    identity: Identity = Depends(require_address_access),
    service: AddressService = Depends(get_address_service)
):
    """Default address first, then newest first"""
    return service.list_addresses(user_id)

@router.post("/{user_id}", response_model=AddressCreated, status_code=status.HTTP_201_CREATED)
def create_address(
    user_id: str,
    address_in: AddressCreate,
    identity: Identity = Depends(require_address_access),
    service: AddressService = Depends(get_address_service)
):
    address = service.create_address(user_id, address_in.details(), address_in.is_default)
    return AddressCreated(message="Address added", id=address.id)

@router.put("/{user_id}", response_model=MessageResponse)
def update_address(
    user_id: str,
    address_in: AddressUpdate,
    identity: Identity = Depends(require_address_access),
    service: AddressService = Depends(get_address_service)
):
    service.update_address(user_id, address_in.id, address_in.details(), address_in.is_default)
    return MessageResponse(message="Address updated")

@router.delete("/{user_id}", response_model=MessageResponse)
def delete_address(
    user_id: str,
    address_in: AddressDelete,
    identity: Identity = Depends(require_address_access),
    service: AddressService = Depends(get_address_service)
):
    service.delete_address(user_id, address_in.id)
    return MessageResponse(message="Address deleted")
