"""
Two sales racing for the same product.

The competing sale is committed from a second session right after the first
one has read (and validated against) the product rows, which is the window a
real concurrent request would hit. The first sale must then notice the
version bump, replay, and validate against the committed stock.
"""
import pytest
from sqlalchemy.orm.exc import StaleDataError

from papyros.app.core.config import settings
from papyros.app.core.errors import InsufficientStock, StockConflictError
from papyros.app.db.models.core_types import MovementKind, PaymentMethod
from papyros.services import catalog, ledger, sales
from papyros.services.sales import SaleLineInput


@pytest.fixture
def competing_sale(monkeypatch, session_factory):
    """Commit a sale of ``qty`` x P1 from another session once, mid-operation."""

    def _install(qty):
        real_find = catalog.find_by_codes
        state = {"done": False}

        def find_then_compete(db, codes, **kwargs):
            found = real_find(db, codes, **kwargs)
            if kwargs.get("lock") and not state["done"]:
                state["done"] = True
                other = session_factory()
                try:
                    sales.register_sale(other, [SaleLineInput("P1", qty, "1.00")], PaymentMethod.efectivo)
                finally:
                    other.close()
            return found

        monkeypatch.setattr(catalog, "find_by_codes", find_then_compete)
        return state

    return _install


def _stock(db, code):
    db.expire_all()
    return catalog.get_product(db, code).stock


def test_second_sale_sees_committed_stock_and_fails(db_session, make_product, competing_sale):
    make_product("P1", stock=5)
    competing_sale(4)

    with pytest.raises(InsufficientStock) as exc:
        sales.register_sale(db_session, [SaleLineInput("P1", 3, "1.00")], PaymentMethod.efectivo)

    assert exc.value.available == 1
    assert _stock(db_session, "P1") == 1

    [mv] = ledger.history(db_session, product_code="P1", kind=MovementKind.salida)
    assert mv.quantity == 4


def test_second_sale_replays_and_succeeds_when_stock_allows(db_session, make_product, competing_sale):
    make_product("P1", stock=5)
    competing_sale(1)

    sale = sales.register_sale(db_session, [SaleLineInput("P1", 3, "1.00")], PaymentMethod.efectivo)

    assert sale.id is not None
    assert _stock(db_session, "P1") == 1
    assert sorted(mv.quantity for mv in ledger.history(db_session, product_code="P1", kind=MovementKind.salida)) == [1, 3]
    assert ledger.net_quantity(db_session, "P1") == 1


def test_conflict_without_retries_is_reported(db_session, make_product, competing_sale, monkeypatch):
    monkeypatch.setattr(settings, "STOCK_CONFLICT_RETRIES", 0)
    make_product("P1", stock=5)
    competing_sale(1)

    with pytest.raises(StockConflictError) as exc:
        sales.register_sale(db_session, [SaleLineInput("P1", 3, "1.00")], PaymentMethod.efectivo)

    assert exc.value.extra["attempts"] == 1
    # only the competing sale landed
    assert _stock(db_session, "P1") == 4


def test_stale_product_write_is_detected(session_factory, make_product):
    """Two sessions holding the same product version: the later write loses."""
    make_product("P1", stock=5)

    a = session_factory()
    b = session_factory()
    try:
        pa = catalog.get_product(a, "P1")
        pb = catalog.get_product(b, "P1")

        pb.stock = 2
        b.commit()

        pa.stock = 4
        with pytest.raises(StaleDataError):
            a.commit()
        a.rollback()
    finally:
        a.close()
        b.close()

    check = session_factory()
    try:
        assert catalog.get_product(check, "P1").stock == 2
    finally:
        check.close()
