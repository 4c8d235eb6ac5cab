import logging
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from sqlalchemy import update, delete
from sqlalchemy.exc import SQLAlchemyError
from pydantic import Field
from app.db.session import get_session
from app.models.cart import CartItem
from app.models.product import Product
from app.core.exceptions import NotFoundException, ServerErrorException
from app.core.permissions import Identity, ensure_cart_access
from app.core.schemas import CamelModel, MessageResponse
from app.routers.auth import get_current_identity_optional

logger = logging.getLogger(__name__)

router = APIRouter()

class CartItemCreate(CamelModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(default=1, gt=0)

class CartItemUpdate(CamelModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=0)

class CartItemDelete(CamelModel):
    product_id: str = Field(min_length=1)

class CartItemResponse(CamelModel):
    id: str
    quantity: int
    product_id: str
    name: str
    price: float
    main_image: Optional[str]

class CartClearResponse(MessageResponse):
    removed: int

def get_cart_service(session: Session = Depends(get_session)) -> 'CartService':
    return CartService(session)

def require_cart_access(
    user_id: str,
    identity: Optional[Identity] = Depends(get_current_identity_optional)
) -> Identity:
    """The cart owner, or any admin"""
    return ensure_cart_access(identity, user_id)

class CartService:
    def __init__(self, session: Session):
        self.session = session

    def _fail(self, message: str, error: SQLAlchemyError) -> ServerErrorException:
        self.session.rollback()
        logger.exception(message)
        return ServerErrorException.from_error(message, error)

    def get_user_cart(self, user_id: str) -> List[CartItemResponse]:
        """Get all cart items for a user with product details"""
        try:
            rows = self.session.exec(
                select(CartItem, Product)
                .join(Product, Product.id == CartItem.product_id)
                .where(CartItem.user_id == user_id)
            ).all()
        except SQLAlchemyError as e:
            raise self._fail("Server error while loading the cart", e)

        return [
            CartItemResponse(
                id=item.id,
                quantity=item.quantity,
                product_id=product.id,
                name=product.name,
                price=product.price,
                main_image=product.main_image
            )
            for item, product in rows
        ]

    def add_to_cart(self, user_id: str, product_id: str, quantity: int = 1) -> MessageResponse:
        """Add item to cart, or increase its quantity if already there"""
        try:
            existing_item = self.session.exec(
                select(CartItem).where(
                    CartItem.user_id == user_id,
                    CartItem.product_id == product_id
                )
            ).first()

            if existing_item:
                # Increment in SQL so concurrent adds are not lost
                self.session.exec(
                    update(CartItem)
                    .where(CartItem.id == existing_item.id)
                    .values(quantity=CartItem.quantity + quantity)
                )
            else:
                self.session.add(CartItem(
                    user_id=user_id,
                    product_id=product_id,
                    quantity=quantity
                ))

            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("Server error while adding to the cart", e)

        logger.info("Added %s x %s to cart of user %s", quantity, product_id, user_id)
        return MessageResponse(message="Item added to cart")

    def set_quantity(self, user_id: str, product_id: str, quantity: int) -> MessageResponse:
        """Set an item's quantity; zero removes it"""
        item_filter = (CartItem.user_id == user_id, CartItem.product_id == product_id)
        try:
            if quantity == 0:
                # Removing an item that is not in the cart is still a success
                self.session.exec(delete(CartItem).where(*item_filter))
                self.session.commit()
                return MessageResponse(message="Item removed from cart")

            result = self.session.exec(
                update(CartItem).where(*item_filter).values(quantity=quantity)
            )
            if result.rowcount == 0:
                self.session.rollback()
                raise NotFoundException("Item not found in cart")
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("Server error while updating the cart", e)

        return MessageResponse(message="Cart quantity updated")

    def remove_from_cart(self, user_id: str, product_id: str) -> MessageResponse:
        """Remove item from cart"""
        try:
            result = self.session.exec(
                delete(CartItem).where(
                    CartItem.user_id == user_id,
                    CartItem.product_id == product_id
                )
            )
            if result.rowcount == 0:
                self.session.rollback()
                raise NotFoundException("Item not found in cart")
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("Server error while removing from the cart", e)

        return MessageResponse(message="Item removed from cart")

    def clear_cart(self, user_id: str) -> CartClearResponse:
        """Clear all items from user's cart"""
        try:
            result = self.session.exec(delete(CartItem).where(CartItem.user_id == user_id))
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail("Server error while clearing the cart", e)

        return CartClearResponse(message="Cart cleared", removed=result.rowcount)

@router.get("/{user_id}", response_model=List[CartItemResponse])
def get_cart(
    user_id: str,
    identity: Identity = Depends(require_cart_access),
    service: CartService = Depends(get_cart_service)
):
    """Get a user's cart items"""
    return service.get_user_cart(user_id)

@router.post("/{user_id}", response_model=MessageResponse)
def add_to_cart(
    user_id: str,
    cart_item: CartItemCreate,
    identity: Identity = Depends(require_cart_access),
    service: CartService = Depends(get_cart_service)
):
    """Add item to cart"""
    return service.add_to_cart(user_id, cart_item.product_id, cart_item.quantity)

@router.put("/{user_id}", response_model=MessageResponse)
def update_cart_item(
    user_id: str,
    cart_update: CartItemUpdate,
    identity: Identity = Depends(require_cart_access),
    service: CartService = Depends(get_cart_service)
):
    """Set cart item quantity"""
    return service.set_quantity(user_id, cart_update.product_id, cart_update.quantity)

@router.delete("/{user_id}/clear", response_model=CartClearResponse)
def clear_cart(
    user_id: str,
    identity: Identity = Depends(require_cart_access),
    service: CartService = Depends(get_cart_service)
):
    """Clear entire cart"""
    return service.clear_cart(user_id)

@router.delete("/{user_id}", response_model=MessageResponse)
def remove_from_cart(
    user_id: str,
    cart_item: CartItemDelete,
    identity: Identity = Depends(require_cart_access),
    service: CartService = Depends(get_cart_service)
):
    """Remove item from cart"""
    return service.remove_from_cart(user_id, cart_item.product_id)
