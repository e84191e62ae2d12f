from papyros.app.db.models.models_v1 import Product, Supplier
from papyros.app.db.seed import DEMO_PRODUCTS, run_seed
from papyros.services import catalog


def _product_payload(**overrides):
    payload = {
        "code": "P1",
        "name": "Lapicero azul",
        "category": "Escritura",
        "cost": "0.45",
        "price": "1.00",
        "min_stock": 2,
    }
    payload.update(overrides)
    return payload


def test_health(client):
    r = client.get("/v1/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


# ---------- PRODUCTS ----------
def test_create_and_get_product(client):
    r = client.post("/v1/products", json=_product_payload())
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["stock"] == 0
    assert body["price"] == 1.0
    assert body["active"] is True

    r = client.get("/v1/products/P1")
    assert r.status_code == 200
    assert r.json()["name"] == "Lapicero azul"


def test_create_product_errors(client):
    client.post("/v1/products", json=_product_payload())

    r = client.post("/v1/products", json=_product_payload())
    assert r.status_code == 409
    assert r.json()["error"] == "duplicate_code"

    r = client.post("/v1/products", json=_product_payload(code="P2", price="0.10"))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_price"

    r = client.get("/v1/products/NOPE")
    assert r.status_code == 404
    assert r.json()["product_code"] == "NOPE"


def test_update_and_deactivate_product(client, make_product):
    make_product("P1", stock=4)

    r = client.put(
        "/v1/products/P1",
        json={"name": "Lapicero negro", "category": "Escritura", "cost": "0.50", "price": "1.20", "min_stock": 1},
    )
    assert r.status_code == 200
    assert r.json()["name"] == "Lapicero negro"
    assert r.json()["stock"] == 4

    r = client.post("/v1/products/P1/deactivate")
    assert r.json()["active"] is False
    assert client.get("/v1/products").json() == []

    r = client.post("/v1/products/P1/reactivate")
    assert r.json()["active"] is True
    assert [p["code"] for p in client.get("/v1/products").json()] == ["P1"]


def test_list_products_low_stock(client, make_product):
    make_product("P1", stock=1, min_stock=2)
    make_product("P2", stock=10, min_stock=2)

    r = client.get("/v1/products", params={"low_stock": True})
    assert [p["code"] for p in r.json()] == ["P1"]


def test_adjust_stock_endpoint(client, make_product):
    make_product("P1", stock=3)

    r = client.post("/v1/products/P1/adjust-stock", json={"quantity": -3, "reason": "daño"})
    assert r.status_code == 200
    assert r.json() == {"code": "P1", "stock": 0}

    r = client.post("/v1/products/P1/adjust-stock", json={"quantity": -1, "reason": "daño"})
    assert r.status_code == 400
    assert r.json()["error"] == "negative_stock"

    r = client.post("/v1/products/P1/adjust-stock", json={"quantity": 0, "reason": "nada"})
    assert r.status_code == 400
    assert r.json()["error"] == "zero_adjustment"


def test_adjust_stock_endpoint_rejects_overlong_reason(client, make_product):
    make_product("P1", stock=3)

    r = client.post("/v1/products/P1/adjust-stock", json={"quantity": -1, "reason": "x" * 300})
    assert r.status_code == 422
    assert client.get("/v1/products/P1").json()["stock"] == 3


# ---------- SALES ----------
def test_register_sale_endpoint(client, make_product):
    make_product("P1", stock=10)

    r = client.post(
        "/v1/sales",
        json={"payment_method": "EFECTIVO", "lines": [{"product_code": "P1", "quantity": 5, "unit_price": "1.00"}]},
    )
    assert r.status_code == 201, r.text
    sale = r.json()
    assert sale["total"] == 5.0
    assert sale["status"] == "CONFIRMADA"
    assert sale["lines"][0]["product_name"] == "Producto P1"

    r = client.get(f"/v1/sales/{sale['id']}")
    assert r.status_code == 200
    assert r.json()["id"] == sale["id"]

    assert client.get("/v1/products/P1").json()["stock"] == 5


def test_register_sale_endpoint_errors(client, make_product):
    make_product("P1", stock=3)

    r = client.post(
        "/v1/sales",
        json={"payment_method": "EFECTIVO", "lines": [{"product_code": "P1", "quantity": 5, "unit_price": "1.00"}]},
    )
    assert r.status_code == 409
    assert r.json()["error"] == "insufficient_stock"
    assert r.json()["available"] == 3

    r = client.post("/v1/sales", json={"payment_method": "EFECTIVO", "lines": []})
    assert r.status_code == 400
    assert r.json()["error"] == "empty_order"

    r = client.post(
        "/v1/sales",
        json={"payment_method": "TARJETA", "lines": [{"product_code": "P1", "quantity": 0, "unit_price": "1.00"}]},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_quantity"

    r = client.post(
        "/v1/sales",
        json={"payment_method": "TARJETA", "lines": [{"product_code": "NOPE", "quantity": 1, "unit_price": "1.00"}]},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "product_not_found_or_inactive"

    assert client.get("/v1/sales/999").status_code == 404


def test_pos_helpers(client, make_product):
    make_product("P1", stock=4, name="Lapicero azul")

    r = client.get("/v1/sales/pos/search", params={"q": "lapi"})
    assert [(p["code"], p["available"]) for p in r.json()] == [("P1", 4)]

    r = client.post("/v1/sales/pos/validate-line", json={"product_code": "P1", "quantity": 3})
    assert r.status_code == 200
    assert r.json()["remaining_stock"] == 1

    r = client.post("/v1/sales/pos/validate-line", json={"product_code": "P1", "quantity": 9})
    assert r.status_code == 409


# ---------- PROCUREMENT / RECEPTIONS ----------
def test_supplier_purchase_order_and_reception_flow(client, make_product):
    make_product("P1")

    r = client.post(
        "/v1/suppliers",
        json={
            "name": "Distribuidora Andina",
            "tax_id": "1020304050",
            "contact_name": "Ana Rojas",
            "phone": "555-0101",
            "email": "ventas@distribuidoraandina.com",
        },
    )
    assert r.status_code == 201, r.text
    supplier_id = r.json()["id"]

    r = client.post(
        "/v1/purchase-orders",
        json={"supplier_id": supplier_id, "lines": [{"product_code": "P1", "quantity": 20, "unit_cost": "0.50"}]},
    )
    assert r.status_code == 201, r.text
    po = r.json()
    assert po["status"] == "EMITIDA"
    assert po["total"] == 10.0

    r = client.post(
        "/v1/receptions",
        json={"purchase_order_id": po["id"], "invoice_ref": "FACT-1", "lines": [{"product_code": "P1", "quantity": 20}]},
    )
    assert r.status_code == 201, r.text
    assert r.json()["lines"][0]["quantity"] == 20
    assert client.get(f"/v1/receptions/{r.json()['id']}").status_code == 200

    assert client.get("/v1/products/P1").json()["stock"] == 20

    r = client.post(f"/v1/purchase-orders/{po['id']}/close")
    assert r.json()["status"] == "CERRADA"

    r = client.post(f"/v1/purchase-orders/{po['id']}/cancel", json={"reason": "tarde"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_state_transition"


def test_reception_for_unknown_purchase_order(client, make_product):
    make_product("P1")

    r = client.post(
        "/v1/receptions",
        json={"purchase_order_id": 404, "invoice_ref": "FACT-9", "lines": [{"product_code": "P1", "quantity": 1}]},
    )
    assert r.status_code == 400
    assert r.json()["error"] == "purchase_order_not_found"

    assert client.get("/v1/purchase-orders/404").status_code == 404


def test_supplier_duplicate_and_not_found(client, supplier):
    r = client.post(
        "/v1/suppliers",
        json={
            "name": supplier.name,
            "tax_id": "999",
            "contact_name": "X",
            "phone": "1",
            "email": "compras@otroproveedor.com",
        },
    )
    assert r.status_code == 409
    assert client.get("/v1/suppliers/999").status_code == 404


def test_supplier_invalid_email_rejected(client):
    r = client.post(
        "/v1/suppliers",
        json={
            "name": "Papelera del Sur",
            "tax_id": "2030405060",
            "contact_name": "Luis Vera",
            "phone": "555-0199",
            "email": "pedidos@papelera..com",
        },
    )
    assert r.status_code == 422
    assert client.get("/v1/suppliers").json() == []


# ---------- LEDGER ----------
def test_stock_movements_endpoint(client, make_product):
    make_product("P1", stock=10)
    client.post("/v1/products/P1/adjust-stock", json={"quantity": -2, "reason": "rotura"})

    r = client.get("/v1/stock-movements", params={"product_code": "P1"})
    assert r.status_code == 200
    assert [(m["kind"], m["quantity"]) for m in r.json()] == [("SALIDA", 2), ("ENTRADA", 10)]

    r = client.get("/v1/stock-movements", params={"kind": "SALIDA"})
    assert [m["reason"] for m in r.json()] == ["AJUSTE: rotura"]


def test_unexpected_error_is_a_generic_500(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database exploded")

    monkeypatch.setattr(catalog, "search_products", boom)

    r = client.get("/v1/products")
    assert r.status_code == 500
    assert r.json()["error"] == "internal_error"
    assert "error_id" in r.json()


# ---------- SEED ----------
def test_run_seed_is_idempotent(db_session):
    run_seed(db_session)
    run_seed(db_session)

    assert db_session.query(Supplier).count() == 1
    assert db_session.query(Product).count() == len(DEMO_PRODUCTS)
    assert all(p.stock == 0 for p in db_session.query(Product))
