from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from papyros.app.core.logging_config import configure_logging
from papyros.app.db.models.models_v1 import Product, Supplier
from papyros.app.db.session import SessionLocal
from papyros.services import catalog, procurement

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    # code, name, category, cost, price, min_stock
    ("PROD001", "Lapicero azul", "Escritura", "0.45", "1.00", 10),
    ("PROD002", "Cuaderno A4", "Papeleria", "1.80", "2.50", 5),
    ("PROD003", "Resma papel bond", "Papeleria", "3.90", "5.20", 3),
]


def run_seed(db: Session) -> None:
    # 1) Default supplier
    supplier = db.scalar(select(Supplier).where(Supplier.name == "Proveedor General"))
    if not supplier:
        procurement.create_supplier(
            db,
            name="Proveedor General",
            tax_id="0000000000",
            contact_name="Contacto",
            phone="000-0000",
            email="compras@papyros.com.ec",
        )

    # 2) Demo catalog, stock stays at 0 until a reception comes in
    for code, name, category, cost, price, min_stock in DEMO_PRODUCTS:
        if db.get(Product, code) is None:
            catalog.create_product(
                db,
                code=code,
                name=name,
                category=category,
                cost=cost,
                price=price,
                min_stock=min_stock,
            )

    logger.info("Seed OK: supplier + %d products", len(DEMO_PRODUCTS))


if __name__ == "__main__":
    configure_logging()
    session = SessionLocal()
    try:
        run_seed(session)
    finally:
        session.close()
