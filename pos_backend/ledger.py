"""Ledger writer: records one checkout as a single all-or-nothing unit of work."""
import logging
from datetime import datetime
from typing import Callable, Iterable

from sqlalchemy.orm import Session

from . import inventory
from .database import begin_locked, unit_of_work
from .errors import ConcurrentStockConflict, InsufficientStock
from .models import Transaction, TransactionDetail
from .schemas import CheckoutItem

logger = logging.getLogger(__name__)


def record_checkout(
    db: Session,
    items: Iterable[CheckoutItem],
    use_lock: bool = False,
    clock: Callable[[], datetime] = datetime.now,
) -> Transaction:
    """Validate, decrement and record ``items`` as one committed Transaction.

    Quantities must already be validated as positive by the caller.

    Raises:
        ProductNotFound: an item references an unknown product.
        InsufficientStock: an item asks for more than is in stock.
        ConcurrentStockConflict: stock changed between our read and our write.
        TransientStoreFailure / StoreFailure: the datastore failed.
    """
    with unit_of_work(db):
        if use_lock:
            begin_locked(db)

        total_amount = 0
        details = []

        for item in items:
            # 1) current name/price/stock
            product = inventory.get_product(db, item.product_id, for_update=use_lock)

            # 2) availability
            if product.stock < item.quantity:
                raise InsufficientStock(
                    product.id, product.name, requested=item.quantity, available=product.stock
                )

            subtotal = product.price * item.quantity
            total_amount += subtotal

            # 3) conditional decrement; re-validates the stock we just read
            try:
                inventory.decrement_stock(db, product.id, item.quantity)
            except InsufficientStock:
                raise ConcurrentStockConflict(product.id) from None

            details.append(
                TransactionDetail(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=item.quantity,
                    subtotal=subtotal,
                )
            )

        # 4) header + lines, ids assigned on flush
        tx = Transaction(total_amount=total_amount, created_at=clock(), details=details)
        db.add(tx)
        db.flush()

    logger.info(
        "transaction %d committed: %d line(s), total %d, lock=%s",
        tx.id, len(details), total_amount, use_lock,
    )
    return tx
