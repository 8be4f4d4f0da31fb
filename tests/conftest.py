"""
Pytest fixtures for the POS backend test suite.

Provides:
- A fresh SQLite file database per test (file-backed so several threads
  can open their own connections)
- A session factory and a default session
- Seeded products
- A FastAPI TestClient whose get_db dependency uses the test database
"""

import os
import tempfile

# pos_backend.database reads DB_URL at import time
os.environ.setdefault(
    "DB_URL", "sqlite:///" + os.path.join(tempfile.gettempdir(), "pos_backend_test.db")
)
os.environ.setdefault("DB_SEED", "false")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from pos_backend.database import Base, get_db, make_engine, make_session_factory
from pos_backend.main import app
from pos_backend.models import Product, Transaction, TransactionDetail


class FixedClock:
    """Clock returning a settable moment, for deterministic created_at values."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'pos.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def products(session_factory):
    """Three products; returns {name: id}."""
    with session_factory() as s:
        rows = [
            Product(name="Indomie", price=3500, stock=10),
            Product(name="Vit 1000ml", price=3000, stock=40),
            Product(name="Kecap", price=12000, stock=20),
        ]
        s.add_all(rows)
        s.commit()
        return {p.name: p.id for p in rows}


@pytest.fixture
def stock_of(session_factory):
    """Read a product's stock through a brand new session."""

    def _stock(product_id: int) -> int:
        with session_factory() as s:
            return s.execute(select(Product.stock).where(Product.id == product_id)).scalar_one()

    return _stock


@pytest.fixture
def ledger_rows(session_factory):
    """Return (transaction count, detail count) through a new session."""

    def _counts():
        with session_factory() as s:
            tx = len(s.execute(select(Transaction.id)).all())
            details = len(s.execute(select(TransactionDetail.id)).all())
            return tx, details

    return _counts


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 14, 10, 30, 0))


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield TestClient(app)
    app.dependency_overrides.clear()
