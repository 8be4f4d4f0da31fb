from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..checkout import checkout as run_checkout
from ..database import get_db
from ..models import Transaction
from ..schemas import CheckoutRequest, TransactionDetailOut, TransactionOut

router = APIRouter(prefix="/api", tags=["checkout"])


def to_transaction_out(tx: Transaction) -> TransactionOut:
    return TransactionOut(
        id=tx.id,
        total_amount=tx.total_amount,
        created_at=tx.created_at,
        details=[
            TransactionDetailOut(
                id=d.id,
                transaction_id=d.transaction_id,
                product_id=d.product_id,
                product_name=d.product_name,
                quantity=d.quantity,
                subtotal=d.subtotal,
            )
            for d in tx.details
        ],
    )


# Several items per cart, each with its quantity. ?lock=true selects row locking.
@router.post("/checkout", response_model=TransactionOut)
def checkout(req: CheckoutRequest, lock: bool = False, db: Session = Depends(get_db)):
    # Typed errors (PosError) are turned into responses by the app-level handler
    tx = run_checkout(db, req.items, use_lock=lock)
    return to_transaction_out(tx)
