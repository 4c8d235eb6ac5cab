# Import all models to register them with SQLModel
from app.models.user import User, UserRole
from app.models.product import Product
from app.models.cart import CartItem
from app.models.address import Address

__all__ = [
    "User",
    "UserRole",
    "Product",
    "CartItem",
    "Address",
]
