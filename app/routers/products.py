from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session, select
from app.db.session import get_session
from app.models.product import Product
from app.core.exceptions import NotFoundException

router = APIRouter()

@router.get("/", response_model=List[Product])
def read_products(session: Session = Depends(get_session)):
    return session.exec(
        select(Product).where(Product.is_active == True).order_by(Product.name)
    ).all()

@router.get("/{product_id}", response_model=Product)
def read_product(product_id: str, session: Session = Depends(get_session)):
    product = session.get(Product, product_id)
    if not product or not product.is_active:
        raise NotFoundException("Product not found")
    return product
