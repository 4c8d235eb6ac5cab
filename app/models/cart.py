import uuid
from sqlmodel import Field, SQLModel

class CartItem(SQLModel, table=True):
    __tablename__ = "cart_items"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    # One row per (user_id, product_id), kept by the cart upsert
    user_id: str = Field(foreign_key="users.id", index=True)
    product_id: str = Field(foreign_key="products.id")

    quantity: int = Field(default=1, ge=1)
