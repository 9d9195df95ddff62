import logging

from sqlalchemy.orm import Session

from florist.config import settings
from florist.models.inventory_adjustment import AdjustmentType
from florist.models.product import Product
from florist.models.purchase import Purchase, PurchaseItem
from florist.schemas.purchase import PurchaseCreate
from florist.services import adjustment_service, stock_service, store
from florist.services.errors import DuplicateRecord, ValidationError

logger = logging.getLogger(__name__)


def _final_values(data: PurchaseCreate) -> list[float]:
    return [
        item.final_value if item.final_value is not None else round(item.unit_price * item.quantity, 2)
        for item in data.items
    ]


def _validate(db: Session, data: PurchaseCreate, final_values: list[float]) -> None:
    for item in data.items:
        if store.get(db, Product, item.product_id) is None:
            raise ValidationError(f"Product {item.product_id} not found")

    if settings.VALIDATE_PURCHASE_TOTALS:
        header = data.purchase
        expected = sum(final_values) + header.delivery_cost
        if abs(expected - header.total_amount) > settings.TOTALS_TOLERANCE:
            raise ValidationError(
                f"Total amount {header.total_amount:.2f} does not match items total "
                f"{sum(final_values):.2f} plus delivery cost {header.delivery_cost:.2f}"
            )


def create_purchase(
    db: Session, data: PurchaseCreate, idempotency_key: str | None = None
) -> tuple[Purchase, bool]:
    """Record a purchase: header, then per line item the item, the stock increase and the ledger entry.

    Everything is committed as one transaction. Returns the purchase and whether it
    was created by this call (False when the idempotency key was already used).
    """
    idempotency_key = store.clean_key(idempotency_key)
    if idempotency_key:
        existing = store.find_one(db, Purchase, idempotency_key=idempotency_key)
        if existing:
            logger.info("Purchase for idempotency key %s already recorded as %s", idempotency_key, existing.id)
            return existing, False

    final_values = _final_values(data)
    _validate(db, data, final_values)

    header = data.purchase
    try:
        with store.transaction(db, "purchase", idempotency_key) as tx:
            tx.step = "create purchase"
            purchase = store.put(db, Purchase(
                invoice_number=header.invoice_number,
                order_date=header.order_date,
                supplier=header.supplier,
                delivery_cost=header.delivery_cost,
                total_amount=header.total_amount,
                idempotency_key=idempotency_key,
            ))

            for index, (item, final_value) in enumerate(zip(data.items, final_values)):
                tx.step = f"item {index} ({item.product_id}): create item"
                store.put(db, PurchaseItem(
                    purchase_id=purchase.id,
                    product_id=item.product_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    final_value=final_value,
                ))
                tx.step = f"item {index} ({item.product_id}): adjust stock"
                stock_service.adjust_stock(db, item.product_id, item.quantity)
                tx.step = f"item {index} ({item.product_id}): record adjustment"
                adjustment_service.record_adjustment(
                    db,
                    product_id=item.product_id,
                    adjustment_date=header.order_date,
                    adjustment_type=AdjustmentType.INCOMING,
                    quantity=item.quantity,
                    reason=f"Purchase: {header.invoice_number}",
                )
    except DuplicateRecord:
        # a concurrent request with the same key committed first
        existing = store.find_one(db, Purchase, idempotency_key=idempotency_key) if idempotency_key else None
        if existing is None:
            raise
        logger.info("Purchase for idempotency key %s was recorded concurrently as %s", idempotency_key, existing.id)
        return existing, False

    db.refresh(purchase)
    logger.info("Recorded purchase %s (%s) with %d items", purchase.id, purchase.invoice_number, len(data.items))
    return purchase, True


def get_purchase(db: Session, purchase_id: str) -> Purchase | None:
    return store.get(db, Purchase, purchase_id)


def list_purchases(db: Session) -> list[Purchase]:
    return store.list_records(db, Purchase, order_by=(Purchase.order_date.desc(), Purchase.created_at.desc()))


def get_purchase_items(db: Session, purchase_id: str) -> list[PurchaseItem]:
    return store.list_records(db, PurchaseItem, purchase_id=purchase_id)


def delete_purchase(db: Session, purchase_id: str) -> bool:
    """Remove the purchase and its items. Stock and the adjustment ledger are left as they are."""
    with store.transaction(db, "delete purchase"):
        deleted = store.delete(db, Purchase, purchase_id)
    if deleted:
        logger.info("Deleted purchase %s; stock movements were not reversed", purchase_id)
    return deleted
