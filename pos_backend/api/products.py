from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import inventory
from ..database import get_db
from ..models import Product
from ..schemas import ProductCreate, ProductOut, ProductUpdate, StockAdjust

router = APIRouter(prefix="/api/products", tags=["products"])


def to_product_out(p: Product) -> ProductOut:
    return ProductOut(id=p.id, name=p.name, price=p.price, stock=p.stock)


@router.get("", response_model=List[ProductOut])
def list_products(name: Optional[str] = None, db: Session = Depends(get_db)):
    return [to_product_out(p) for p in inventory.list_products(db, name)]


@router.post("", response_model=ProductOut, status_code=201)
def create_product(body: ProductCreate, db: Session = Depends(get_db)):
    return to_product_out(inventory.create_product(db, body.name, body.price, body.stock))


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return to_product_out(inventory.find_product(db, product_id))


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: int, body: ProductUpdate, db: Session = Depends(get_db)):
    return to_product_out(inventory.update_product(db, product_id, body.name, body.price))


@router.post("/{product_id}/stock", response_model=ProductOut)
def adjust_stock(product_id: int, body: StockAdjust, db: Session = Depends(get_db)):
    return to_product_out(inventory.adjust_stock(db, product_id, body.delta))


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    inventory.delete_product(db, product_id)
    return {"message": "Product deleted successfully"}
