"""
Access rules for per-user resources.

Carts and address books use different policies: an admin may act on any
user's cart, while an address book is reachable by its owner only.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from app.core.exceptions import ForbiddenException, UnauthenticatedException
from app.models.user import UserRole

logger = logging.getLogger(__name__)


class Identity(BaseModel):
    """Who is making the request, resolved once from the bearer token"""
    id: str
    role: UserRole = UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def can_access_cart(identity: Identity, target_user_id: str) -> bool:
    return identity.is_admin or identity.id == target_user_id


def can_access_addresses(identity: Identity, target_user_id: str) -> bool:
    return identity.id == target_user_id


def ensure_cart_access(identity: Optional[Identity], target_user_id: str) -> Identity:
    if identity is None:
        raise UnauthenticatedException()
    if not can_access_cart(identity, target_user_id):
        logger.warning("User %s denied access to cart of %s", identity.id, target_user_id)
        raise ForbiddenException()
    return identity


def ensure_address_access(identity: Optional[Identity], target_user_id: str) -> Identity:
    if identity is None:
        raise UnauthenticatedException()
    if not can_access_addresses(identity, target_user_id):
        logger.warning("User %s denied access to addresses of %s", identity.id, target_user_id)
        raise ForbiddenException()
    return identity
