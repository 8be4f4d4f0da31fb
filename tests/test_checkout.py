import pytest

from pos_backend import checkout as checkout_module
from pos_backend.checkout import checkout
from pos_backend.errors import InsufficientStock, InvalidInput, ProductNotFound
from pos_backend.schemas import CheckoutItem


@pytest.fixture
def ledger_must_not_run(monkeypatch):
    def _fail(*args, **kwargs):
        raise AssertionError("ledger reached with invalid input")

    monkeypatch.setattr(checkout_module.ledger, "record_checkout", _fail)


@pytest.mark.parametrize("quantity", [0, -1])
def test_non_positive_quantity_rejected_before_store(db, products, stock_of, ledger_must_not_run, quantity):
    cart = [
        CheckoutItem(product_id=products["Indomie"], quantity=1),
        CheckoutItem(product_id=products["Kecap"], quantity=quantity),
    ]
    with pytest.raises(InvalidInput):
        checkout(db, cart)
    assert stock_of(products["Indomie"]) == 10


def test_empty_cart_rejected(db, ledger_must_not_run):
    with pytest.raises(InvalidInput):
        checkout(db, [])


def test_use_lock_is_passed_through(db, products, monkeypatch):
    seen = {}

    def _record(session, items, use_lock=False, clock=None):
        seen["use_lock"] = use_lock
        return "tx"

    monkeypatch.setattr(checkout_module.ledger, "record_checkout", _record)

    assert checkout(db, [CheckoutItem(product_id=products["Indomie"], quantity=1)], use_lock=True) == "tx"
    assert seen["use_lock"] is True


def test_checkout_then_unknown_product(db, products, stock_of, clock):
    """A failing checkout leaves the previous one's stock change untouched."""
    tx = checkout(db, [CheckoutItem(product_id=products["Indomie"], quantity=2)], clock=clock)
    assert tx.total_amount == 7000

    with pytest.raises(ProductNotFound) as exc_info:
        checkout(db, [CheckoutItem(product_id=999, quantity=1)], clock=clock)

    assert exc_info.value.product_id == 999
    assert stock_of(products["Indomie"]) == 8


def test_insufficient_stock_keeps_product_context(db, products, clock):
    with pytest.raises(InsufficientStock) as exc_info:
        checkout(db, [CheckoutItem(product_id=products["Kecap"], quantity=50)], clock=clock)

    err = exc_info.value
    assert (err.product_id, err.product_name) == (products["Kecap"], "Kecap")
    assert err.to_dict()["error"] == "INSUFFICIENT_STOCK"
