import logging
from datetime import datetime
from typing import Callable, List

from sqlalchemy.orm import Session

from . import ledger
from .errors import ConcurrentStockConflict, InvalidInput, PosError
from .models import Transaction
from .schemas import CheckoutItem

logger = logging.getLogger(__name__)


def validate_items(items: List[CheckoutItem]) -> None:
    if not items:
        raise InvalidInput("checkout requires at least one item")
    for item in items:
        if item.quantity <= 0:
            raise InvalidInput(f"quantity must be greater than 0 (product id {item.product_id})")


def checkout(
    db: Session,
    items: List[CheckoutItem],
    use_lock: bool = False,
    clock: Callable[[], datetime] = datetime.now,
) -> Transaction:
    """Check out a cart. Invalid carts are rejected before the store is touched.

    Conflicts are not retried here; the caller decides whether to retry.
    """
    validate_items(items)
    try:
        return ledger.record_checkout(db, items, use_lock=use_lock, clock=clock)
    except ConcurrentStockConflict as exc:
        logger.info("checkout conflict on product id %d (lock=%s)", exc.product_id, use_lock)
        raise
    except PosError as exc:
        logger.info("checkout rejected: %s", exc.code)
        raise
