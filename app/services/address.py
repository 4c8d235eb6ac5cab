import logging
from datetime import datetime, timezone
from typing import List
from sqlmodel import Session, select
from sqlalchemy import update, delete
from sqlalchemy.exc import SQLAlchemyError

from app.models.address import Address
from app.db.session import transaction
from app.core.exceptions import NotFoundException, ServerErrorException

logger = logging.getLogger(__name__)

class AddressService:
    """Shipping address book of a single user.

    Every write that sets ``is_default`` clears the user's other defaults in the
    same transaction, so a user never ends up with two default addresses.
    """

    def __init__(self, session: Session):
        self.session = session

    def list_addresses(self, user_id: str) -> List[Address]:
        try:
            return self.session.exec(
                select(Address)
                .where(Address.user_id == user_id)
                .order_by(Address.is_default.desc(), Address.created_at.desc())
            ).all()
        except SQLAlchemyError as e:
            logger.exception("Failed to list addresses of user %s", user_id)
            raise ServerErrorException.from_error("Server error", e)

    def _clear_defaults(self, user_id: str, keep_id: str = None):
        statement = update(Address).where(Address.user_id == user_id)
        if keep_id is not None:
            statement = statement.where(Address.id != keep_id)
        self.session.exec(statement.values(is_default=False))

    def create_address(self, user_id: str, details: dict, is_default: bool = False) -> Address:
        address = Address(user_id=user_id, is_default=is_default, **details)
        try:
            with transaction(self.session):
                if is_default:
                    self._clear_defaults(user_id)
                self.session.add(address)
        except SQLAlchemyError as e:
            logger.exception("Failed to create address for user %s", user_id)
            raise ServerErrorException.from_error("Server error", e)

        logger.info("Created address %s for user %s (default=%s)", address.id, user_id, is_default)
        return address

    def update_address(self, user_id: str, address_id: str, details: dict, is_default: bool) -> None:
        try:
            with transaction(self.session):
                if is_default:
                    self._clear_defaults(user_id, keep_id=address_id)

                result = self.session.exec(
                    update(Address)
                    .where(Address.id == address_id, Address.user_id == user_id)
                    .values(is_default=is_default, updated_at=datetime.now(timezone.utc), **details)
                )
                if result.rowcount == 0:
                    # Rolls back the cleared defaults along with it
                    raise NotFoundException("Address not found")
        except SQLAlchemyError as e:
            logger.exception("Failed to update address %s of user %s", address_id, user_id)
            raise ServerErrorException.from_error("Server error", e)

    def delete_address(self, user_id: str, address_id: str) -> None:
        try:
            with transaction(self.session):
                result = self.session.exec(
                    delete(Address).where(Address.id == address_id, Address.user_id == user_id)
                )
                if result.rowcount == 0:
                    raise NotFoundException("Address not found")
        except SQLAlchemyError as e:
            logger.exception("Failed to delete address %s of user %s", address_id, user_id)
            raise ServerErrorException.from_error("Server error", e)
