import logging

from sqlalchemy.orm import Session

from florist.models.inventory_adjustment import AdjustmentType
from florist.models.product import Product
from florist.models.sale import Sale, SaleItem
from florist.schemas.sale import SaleCreate
from florist.services import adjustment_service, stock_service, store
from florist.services.errors import DuplicateRecord, ValidationError

logger = logging.getLogger(__name__)


def create_sale(db: Session, data: SaleCreate, idempotency_key: str | None = None) -> tuple[Sale, bool]:
    """Record a sale and take each line item's quantity out of stock, in one transaction."""
    idempotency_key = store.clean_key(idempotency_key)
    if idempotency_key:
        existing = store.find_one(db, Sale, idempotency_key=idempotency_key)
        if existing:
            logger.info("Sale for idempotency key %s already recorded as %s", idempotency_key, existing.id)
            return existing, False

    for item in data.items:
        if store.get(db, Product, item.product_id) is None:
            raise ValidationError(f"Product {item.product_id} not found")

    header = data.sale
    try:
        with store.transaction(db, "sale", idempotency_key) as tx:
            tx.step = "create sale"
            sale = store.put(db, Sale(
                customer_name=header.customer_name,
                customer_contact=header.customer_contact,
                sale_date=header.sale_date,
                sale_amount=header.sale_amount,
                idempotency_key=idempotency_key,
            ))

            for index, item in enumerate(data.items):
                tx.step = f"item {index} ({item.product_id}): create item"
                store.put(db, SaleItem(sale_id=sale.id, product_id=item.product_id, quantity=item.quantity))
                tx.step = f"item {index} ({item.product_id}): adjust stock"
                stock_service.adjust_stock(db, item.product_id, -item.quantity)
                tx.step = f"item {index} ({item.product_id}): record adjustment"
                adjustment_service.record_adjustment(
                    db,
                    product_id=item.product_id,
                    adjustment_date=header.sale_date,
                    adjustment_type=AdjustmentType.OUTGOING,
                    quantity=item.quantity,
                    reason=f"Sale: {header.customer_name}",
                )
    except DuplicateRecord:
        existing = store.find_one(db, Sale, idempotency_key=idempotency_key) if idempotency_key else None
        if existing is None:
            raise
        logger.info("Sale for idempotency key %s was recorded concurrently as %s", idempotency_key, existing.id)
        return existing, False

    db.refresh(sale)
    logger.info("Recorded sale %s for %s with %d items", sale.id, sale.customer_name, len(data.items))
    return sale, True


def get_sale(db: Session, sale_id: str) -> Sale | None:
    return store.get(db, Sale, sale_id)


def list_sales(db: Session) -> list[Sale]:
    return store.list_records(db, Sale, order_by=(Sale.sale_date.desc(), Sale.created_at.desc()))


def get_sale_items(db: Session, sale_id: str) -> list[SaleItem]:
    return store.list_records(db, SaleItem, sale_id=sale_id)


def delete_sale(db: Session, sale_id: str) -> bool:
    """Remove the sale and its items. Stock and the adjustment ledger are left as they are."""
    with store.transaction(db, "delete sale"):
        deleted = store.delete(db, Sale, sale_id)
    if deleted:
        logger.info("Deleted sale %s; stock movements were not reversed", sale_id)
    return deleted
