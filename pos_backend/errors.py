"""Typed errors; the HTTP layer maps them to responses by type."""
from typing import Optional

from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError


class PosError(Exception):
    """Base class for all errors surfaced by the POS core."""

    code: str = "POS_ERROR"
    status_code: int = 500

    def to_dict(self) -> dict:
        return {"error": self.code, "message": str(self)}


class InvalidInput(PosError):
    """Malformed request: non-positive quantity, empty cart, bad date."""

    code: str = "INVALID_INPUT"
    status_code: int = 400


class ProductNotFound(PosError):
    code: str = "PRODUCT_NOT_FOUND"
    status_code: int = 404

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"product id {product_id} not found")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "product_id": self.product_id}


class InsufficientStock(PosError):
    """Requested quantity exceeds the stock available at validation time."""

    code: str = "INSUFFICIENT_STOCK"
    status_code: int = 400

    def __init__(
        self,
        product_id: int,
        product_name: str,
        requested: Optional[int] = None,
        available: Optional[int] = None,
    ):
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(f"product {product_name} (id: {product_id}) has insufficient stock")

    def to_dict(self) -> dict:
        data = {**super().to_dict(), "product_id": self.product_id, "product_name": self.product_name}
        if self.requested is not None:
            data["requested"] = self.requested
        if self.available is not None:
            data["available"] = self.available
        return data


class ConcurrentStockConflict(PosError):
    """The conditional decrement matched no row: stock changed after it was read."""

    code: str = "CONCURRENT_STOCK_CONFLICT"
    status_code: int = 409

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"stock for product id {product_id} changed concurrently, retry the checkout")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "product_id": self.product_id}


class StoreFailure(PosError):
    code: str = "STORE_FAILURE"
    status_code: int = 500

    def __init__(self, message: str = "datastore error"):
        super().__init__(message)


class TransientStoreFailure(StoreFailure):
    code: str = "TRANSIENT_STORE_FAILURE"
    status_code: int = 503

    def __init__(self, message: str = "datastore unavailable, retry later"):
        super().__init__(message)


def translate_store_error(exc: SQLAlchemyError) -> StoreFailure:
    """Wrap a raw SQLAlchemy error so callers never see driver messages."""
    if isinstance(exc, (OperationalError, PoolTimeoutError)):
        return TransientStoreFailure()
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return TransientStoreFailure()
    return StoreFailure()
