import uuid
from enum import Enum
from typing import Optional
from datetime import datetime, timezone
from sqlmodel import Field, SQLModel
from pydantic import computed_field

class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"

class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    # Basic Info
    email: str = Field(unique=True, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    # Null for accounts created through an OAuth provider
    password_hash: Optional[str] = None
    auth_provider: str = Field(default="credentials")

    # Account Status
    role: UserRole = Field(default=UserRole.USER)
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @computed_field
    @property
    def name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()
