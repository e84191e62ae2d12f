import os

# Must be set before papyros.app.db.session builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./papyros-test.db")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from papyros.app.db.base import Base  # noqa: E402
from papyros.app.db.models import models_v1  # noqa: F401,E402
from papyros.app.db.session import get_db, make_engine  # noqa: E402
from papyros.services import catalog, inventory, procurement  # noqa: E402
from papyros.services.procurement import PurchaseOrderLineInput  # noqa: E402


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Fresh SQLite file database per test.

    A file (not :memory:) so several sessions can hold their own connection,
    which the concurrency tests need.
    """
    eng = make_engine(f"sqlite:///{tmp_path / 'papyros.db'}")
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    from papyros.app.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


# ---------- FACTORIES ----------
@pytest.fixture
def make_product(db_session):
    """Register a product and bring it to ``stock`` through an adjustment."""

    def _make(code="P1", stock=0, *, price="1.00", cost="0.50", min_stock=0, active=True, name=None):
        catalog.create_product(
            db_session,
            code=code,
            name=name or f"Producto {code}",
            category="General",
            cost=cost,
            price=price,
            min_stock=min_stock,
        )
        if stock:
            inventory.adjust_stock(db_session, code, stock, "stock inicial")
        if not active:
            catalog.deactivate_product(db_session, code)
        return catalog.get_product(db_session, code)

    return _make


@pytest.fixture
def supplier(db_session):
    return procurement.create_supplier(
        db_session,
        name="Distribuidora Andina",
        tax_id="1020304050",
        contact_name="Ana Rojas",
        phone="555-0101",
        email="ventas@distribuidoraandina.com",
    )


@pytest.fixture
def make_purchase_order(db_session, supplier):
    def _make(*lines):
        lines = lines or (("P1", 20, "0.50"),)
        return procurement.create_purchase_order(
            db_session,
            supplier_id=supplier.id,
            lines=[PurchaseOrderLineInput(code, qty, cost) for code, qty, cost in lines],
        )

    return _make
