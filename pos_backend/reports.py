"""Sales reports over committed transactions, in half-open windows."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import InvalidInput, translate_store_error
from .models import Transaction, TransactionDetail
from .schemas import BestSellingProduct, SalesSummary

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
NO_BEST_SELLER = "-"
ONE_DAY = timedelta(hours=24)


def sales_summary(db: Session, start: datetime, end: datetime) -> SalesSummary:
    """Revenue, transaction count and best-selling product in ``[start, end)``.

    Best seller ties go to the lowest product id. The name shown is the one
    recorded on that product's most recent sale in the window.
    """
    in_window = (Transaction.created_at >= start, Transaction.created_at < end)

    try:
        # 1) count + revenue
        count, revenue = db.execute(
            select(
                func.count(Transaction.id),
                func.coalesce(func.sum(Transaction.total_amount), 0),
            ).where(*in_window)
        ).one()

        # 2) best seller by summed quantity
        total_qty = func.sum(TransactionDetail.quantity).label("total_qty")
        best = db.execute(
            select(TransactionDetail.product_id, total_qty)
            .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
            .where(*in_window)
            .group_by(TransactionDetail.product_id)
            .order_by(total_qty.desc(), TransactionDetail.product_id.asc())
            .limit(1)
        ).first()

        if best is None:
            best_selling = BestSellingProduct(name=NO_BEST_SELLER, quantity_sold=0)
        else:
            name = db.execute(
                select(TransactionDetail.product_name)
                .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
                .where(*in_window, TransactionDetail.product_id == best.product_id)
                .order_by(Transaction.created_at.desc(), TransactionDetail.id.desc())
                .limit(1)
            ).scalar_one()
            best_selling = BestSellingProduct(name=name, quantity_sold=int(best.total_qty))
    except SQLAlchemyError as exc:
        raise translate_store_error(exc) from exc

    logger.debug("sales summary [%s, %s): %d transaction(s)", start, end, count)
    return SalesSummary(
        total_revenue=int(revenue),
        total_transactions=int(count),
        best_selling=best_selling,
        start=start,
        end=end,
    )


def day_window(now: datetime):
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + ONE_DAY


def daily_report(db: Session, now: Optional[datetime] = None) -> SalesSummary:
    start, end = day_window(now or datetime.now())
    return sales_summary(db, start, end)


def parse_date(value: Optional[str], field: str) -> datetime:
    if not value:
        raise InvalidInput(f"{field} is required (YYYY-MM-DD)")
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise InvalidInput(f"invalid {field} format (YYYY-MM-DD)") from None


def custom_report(db: Session, start_date: Optional[str], end_date: Optional[str]) -> SalesSummary:
    """Report from ``start_date`` through ``end_date``, both days included."""
    start = parse_date(start_date, "start_date")
    end = parse_date(end_date, "end_date")
    if start > end:
        raise InvalidInput("start_date must not be after end_date")
    return sales_summary(db, start, end + ONE_DAY)
