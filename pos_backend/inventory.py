"""Inventory store. Stock only changes through conditional relative UPDATEs."""
import logging
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import unit_of_work
from .errors import InsufficientStock, InvalidInput, ProductNotFound, translate_store_error
from .models import Product

logger = logging.getLogger(__name__)


def product_query(product_id: int, for_update: bool = False):
    stmt = (
        select(Product)
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    return stmt


def get_product(db: Session, product_id: int, for_update: bool = False) -> Product:
    """Read a product row fresh from the database.

    With ``for_update`` the row is locked (SELECT ... FOR UPDATE) until the
    surrounding transaction ends.
    """
    product = db.execute(product_query(product_id, for_update)).scalar_one_or_none()
    if product is None:
        raise ProductNotFound(product_id)
    return product


def decrement_stock(db: Session, product_id: int, quantity: int) -> None:
    """Subtract ``quantity`` from stock only if at least that much is left.

    Either the whole decrement applies or nothing changes. Does not commit.
    """
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        return

    row = db.execute(select(Product.name, Product.stock).where(Product.id == product_id)).one_or_none()
    if row is None:
        raise ProductNotFound(product_id)
    raise InsufficientStock(product_id, row.name, requested=quantity, available=row.stock)


def list_products(db: Session, name: Optional[str] = None) -> List[Product]:
    stmt = select(Product).order_by(Product.id)
    if name:
        stmt = stmt.where(Product.name.ilike(f"%{name}%"))
    try:
        return list(db.execute(stmt).scalars().all())
    except SQLAlchemyError as exc:
        raise translate_store_error(exc) from exc


def find_product(db: Session, product_id: int) -> Product:
    try:
        return get_product(db, product_id)
    except SQLAlchemyError as exc:
        raise translate_store_error(exc) from exc


def _check_price(price: int) -> None:
    if price < 0:
        raise InvalidInput("price cannot be negative")


def create_product(db: Session, name: str, price: int, stock: int = 0) -> Product:
    _check_price(price)
    if stock < 0:
        raise InvalidInput("stock cannot be negative")

    product = Product(name=name, price=price, stock=stock)
    with unit_of_work(db):
        db.add(product)
        db.flush()
    logger.info("product %s created (id: %d)", product.name, product.id)
    return product


def update_product(db: Session, product_id: int, name: str, price: int) -> Product:
    """Change name and price. Stock is left alone so in-flight checkouts are not overwritten."""
    _check_price(price)

    with unit_of_work(db):
        result = db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(name=name, price=price)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ProductNotFound(product_id)
        product = get_product(db, product_id)
    return product


def adjust_stock(db: Session, product_id: int, delta: int) -> Product:
    """Restock (positive delta) or write off (negative delta) relative to current stock."""
    if delta == 0:
        raise InvalidInput("delta must not be zero")

    with unit_of_work(db):
        if delta < 0:
            decrement_stock(db, product_id, -delta)
        else:
            result = db.execute(
                update(Product)
                .where(Product.id == product_id)
                .values(stock=Product.stock + delta)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ProductNotFound(product_id)
        product = get_product(db, product_id)
    logger.info("stock for product id %d adjusted by %+d", product_id, delta)
    return product


def delete_product(db: Session, product_id: int) -> None:
    with unit_of_work(db):
        result = db.execute(
            delete(Product)
            .where(Product.id == product_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ProductNotFound(product_id)
    logger.info("product id %d deleted", product_id)
