# pos_backend/database.py
import logging
import os
from contextlib import contextmanager

from dotenv import load_dotenv
from sqlalchemy import create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from .errors import PosError, translate_store_error

logger = logging.getLogger(__name__)

# Load .env
load_dotenv()

DB_URL = os.getenv("DB_URL")
if not DB_URL:
    raise RuntimeError("DB_URL environment variable is not set. Check your '.env' file.")

# Path to the CA bundle for MySQL over TLS (optional)
DB_SSL_CA = os.getenv("DB_SSL_CA")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")
DB_SEED = os.getenv("DB_SEED", "true").lower() in ("1", "true", "yes")

SAMPLE_PRODUCTS = [
    {"name": "Indomie", "price": 3500, "stock": 10},
    {"name": "Vit 1000ml", "price": 3000, "stock": 40},
    {"name": "Kecap", "price": 12000, "stock": 20},
]


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        # sessions are handed across threadpool workers by FastAPI
        return {"check_same_thread": False, "timeout": 30}
    if url.startswith("mysql") and DB_SSL_CA:
        return {"ssl": {"ca": DB_SSL_CA}}
    return {}


def make_engine(url: str, echo: bool = False) -> Engine:
    """Build an engine that recovers dropped connections (pool_pre_ping)."""
    return create_engine(
        url,
        pool_pre_ping=True,
        echo=echo,
        connect_args=_connect_args(url),
    )


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False)


engine = make_engine(DB_URL, echo=DB_ECHO)

# Session factory
SessionLocal = make_session_factory(engine)


# Base class for every model
class Base(DeclarativeBase):
    pass


# FastAPI dependency: one session per request, always closed afterwards
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine, seed: bool = True) -> None:
    """Create tables and insert the sample products when the table is empty."""
    from .models import Product  # register models on Base.metadata

    Base.metadata.create_all(bind=bind)
    logger.info("database tables ready")

    if not seed:
        return

    with Session(bind) as s:
        count = s.execute(select(func.count()).select_from(Product)).scalar_one()
        if count:
            return
        s.add_all([Product(**p) for p in SAMPLE_PRODUCTS])
        s.commit()
        logger.info("inserted %d sample products", len(SAMPLE_PRODUCTS))


@contextmanager
def unit_of_work(db: Session):
    """Commit on success; on any failure roll back, then re-raise.

    Raw SQLAlchemy errors are re-raised as StoreFailure variants.
    """
    try:
        yield db
        db.commit()
    except PosError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("unit of work rolled back after datastore error: %s", exc.__class__.__name__)
        raise translate_store_error(exc) from exc
    except Exception:
        db.rollback()
        raise


def begin_locked(db: Session) -> None:
    """Start the unit of work holding the write lock where FOR UPDATE is not available.

    SQLite ignores SELECT ... FOR UPDATE, so take its database write lock with
    BEGIN IMMEDIATE instead. Other backends lock rows per SELECT.
    """
    conn = db.connection()
    if conn.dialect.name != "sqlite":
        return
    if not conn.connection.dbapi_connection.in_transaction:
        conn.exec_driver_sql("BEGIN IMMEDIATE")
