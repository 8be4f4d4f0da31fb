# pos_backend/models.py
from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)  # smallest currency unit
    stock = Column(Integer, nullable=False, default=0)


class Transaction(Base):
    """Committed sale header. Rows are append-only."""

    __tablename__ = "transactions"
    id = Column(Integer, primary_key=True, autoincrement=True)
    total_amount = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, index=True)

    details = relationship(
        "TransactionDetail",
        back_populates="transaction",
        order_by="TransactionDetail.id",
        cascade="all, delete-orphan",
    )


class TransactionDetail(Base):
    __tablename__ = "transaction_details"
    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    # no FK to products: history must survive product deletion
    product_id = Column(Integer, nullable=False, index=True)
    product_name = Column(String(100), nullable=False)  # name at time of sale
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Integer, nullable=False)

    transaction = relationship("Transaction", back_populates="details")
