"""Stock accessor and ledger reconciliation.

``Product.current_stock`` is a materialized view of the adjustment ledger. It is
moved with a single atomic UPDATE so concurrent movements never lose an update,
and :func:`reconcile` recomputes it from the ledger to detect drift.
"""

import logging

from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from florist.config import settings
from florist.models.inventory_adjustment import AdjustmentType, InventoryAdjustment
from florist.models.product import Product
from florist.services import store
from florist.services.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)


def _signed_quantity():
    return case(
        (InventoryAdjustment.adjustment_type == AdjustmentType.INCOMING, InventoryAdjustment.quantity),
        else_=-InventoryAdjustment.quantity,
    )


def adjust_stock(db: Session, product_id: str, delta: int) -> Product:
    stmt = update(Product).where(Product.id == product_id)
    if delta < 0 and not settings.ALLOW_NEGATIVE_STOCK:
        stmt = stmt.where(Product.current_stock + delta >= 0)
    stmt = stmt.values(
        current_stock=Product.current_stock + delta,
        version=Product.version + 1,
    ).execution_options(synchronize_session=False)

    with store.storage_errors("adjust stock"):
        result = db.execute(stmt)

    if result.rowcount == 0:
        product = db.get(Product, product_id, populate_existing=True)
        if product is None:
            raise NotFound("Product", product_id)
        raise ValidationError(
            f"Insufficient stock for {product.name}. Current: {product.current_stock}, requested change: {delta}"
        )

    product = db.get(Product, product_id, populate_existing=True)
    if product.current_stock < 0:
        logger.warning(
            "Stock for product %s (%s) is negative after change %+d: %d",
            product.id, product.name, delta, product.current_stock,
        )
    return product


def ledger_stock(db: Session, product_id: str) -> int:
    """Net stock implied by the adjustment ledger: incoming minus outgoing."""
    with store.storage_errors("sum adjustments"):
        total = (
            db.query(func.coalesce(func.sum(_signed_quantity()), 0))
            .filter(InventoryAdjustment.product_id == product_id)
            .scalar()
        )
    return int(total)


def reconcile(db: Session, apply: bool = False, only_drift: bool = False) -> list[dict]:
    """Compare every product's stored stock with its ledger.

    With ``apply`` the stored value of each drifting product is rewritten to the
    ledger value in one transaction, and only the corrected rows are returned.
    """
    with store.storage_errors("sum adjustments"):
        ledger = dict(
            db.query(InventoryAdjustment.product_id, func.sum(_signed_quantity()))
            .group_by(InventoryAdjustment.product_id)
            .all()
        )
    products = store.list_records(db, Product, order_by=Product.name)

    rows = []
    drifting = []
    for product in products:
        expected = int(ledger.get(product.id) or 0)
        drift = product.current_stock - expected
        if drift:
            logger.warning(
                "Stock drift for product %s (%s): stored %d, ledger %d",
                product.id, product.name, product.current_stock, expected,
            )
            drifting.append((product.id, expected))
        elif only_drift or apply:
            continue
        rows.append({
            "product_id": product.id,
            "name": product.name,
            "current_stock": product.current_stock,
            "ledger_stock": expected,
            "drift": drift,
        })

    if apply and drifting:
        with store.transaction(db, "reconcile") as tx:
            for product_id, expected in drifting:
                tx.step = f"reset stock of {product_id}"
                with store.storage_errors("reset stock"):
                    db.execute(
                        update(Product)
                        .where(Product.id == product_id)
                        .values(current_stock=expected, version=Product.version + 1)
                        .execution_options(synchronize_session=False)
                    )
        for row in rows:
            row["current_stock"] = row["ledger_stock"]
        logger.info("Reconciled stock for %d products", len(drifting))

    return rows
