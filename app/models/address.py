import uuid
from typing import Optional
from datetime import datetime, timezone
from sqlmodel import Field, SQLModel

class Address(SQLModel, table=True):
    __tablename__ = "addresses"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)

    # Recipient
    full_name: str
    phone_number: str

    # Location
    pincode: str
    area: str
    city: str
    state: str

    # At most one default per user; enforced by AddressService, not by the schema
    is_default: bool = Field(default=False)

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
