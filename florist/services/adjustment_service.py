import logging
from datetime import datetime

from sqlalchemy.orm import Session

from florist.models.inventory_adjustment import AdjustmentType, InventoryAdjustment
from florist.models.product import Product
from florist.schemas.base import utcnow
from florist.schemas.inventory_adjustment import AdjustmentReason, InventoryAdjustmentCreate
from florist.services import stock_service, store
from florist.services.errors import DuplicateRecord, ValidationError

logger = logging.getLogger(__name__)


def record_adjustment(
    db: Session,
    product_id: str,
    adjustment_date: datetime,
    adjustment_type: AdjustmentType | str,
    quantity: int,
    reason: str,
    notes: str | None = None,
    idempotency_key: str | None = None,
) -> InventoryAdjustment:
    """Append one movement to the ledger. Existing entries are never touched."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError(f"Adjustment quantity must be a positive integer, got {quantity!r}")
    try:
        direction = AdjustmentType(adjustment_type)
    except ValueError:
        raise ValidationError(f"Adjustment type must be Incoming or Outgoing, got {adjustment_type!r}")
    if not reason or not reason.strip():
        raise ValidationError("Adjustment reason is required")

    adjustment = InventoryAdjustment(
        product_id=product_id,
        adjustment_date=adjustment_date,
        adjustment_type=direction,
        quantity=quantity,
        reason=reason,
        notes=notes,
        idempotency_key=idempotency_key,
    )
    return store.put(db, adjustment)


def _manual_reason(data: InventoryAdjustmentCreate) -> str:
    if data.reason == AdjustmentReason.OTHER:
        return data.notes or "Other"
    return data.reason.value


def create_inventory_adjustment(
    db: Session, data: InventoryAdjustmentCreate, idempotency_key: str | None = None
) -> tuple[InventoryAdjustment, bool]:
    """Manual adjustment: record the movement, then move the stock.

    Returns the adjustment and whether it was created by this call (False when the
    idempotency key was already used).
    """
    idempotency_key = store.clean_key(idempotency_key)
    if idempotency_key:
        existing = store.find_one(db, InventoryAdjustment, idempotency_key=idempotency_key)
        if existing:
            logger.info("Adjustment for idempotency key %s already recorded as %s", idempotency_key, existing.id)
            return existing, False

    if store.get(db, Product, data.product_id) is None:
        raise ValidationError(f"Product {data.product_id} not found")

    delta = data.quantity if data.adjustment_type == AdjustmentType.INCOMING else -data.quantity

    try:
        with store.transaction(db, "inventory adjustment", idempotency_key) as tx:
            tx.step = "record adjustment"
            adjustment = record_adjustment(
                db,
                product_id=data.product_id,
                adjustment_date=data.adjustment_date or utcnow(),
                adjustment_type=data.adjustment_type,
                quantity=data.quantity,
                reason=_manual_reason(data),
                notes=data.notes,
                idempotency_key=idempotency_key,
            )
            tx.step = "adjust stock"
            stock_service.adjust_stock(db, data.product_id, delta)
    except DuplicateRecord:
        existing = store.find_one(db, InventoryAdjustment, idempotency_key=idempotency_key) if idempotency_key else None
        if existing is None:
            raise
        logger.info("Adjustment for idempotency key %s was recorded concurrently as %s", idempotency_key, existing.id)
        return existing, False

    db.refresh(adjustment)
    logger.info(
        "Manual %s adjustment of %d for product %s (%s)",
        adjustment.adjustment_type.value, adjustment.quantity, adjustment.product_id, adjustment.reason,
    )
    return adjustment, True


def get_adjustment(db: Session, adjustment_id: str) -> InventoryAdjustment | None:
    return store.get(db, InventoryAdjustment, adjustment_id)


def list_adjustments(db: Session) -> list[InventoryAdjustment]:
    return store.list_records(
        db,
        InventoryAdjustment,
        order_by=(InventoryAdjustment.adjustment_date.desc(), InventoryAdjustment.created_at.desc()),
    )


def list_adjustments_for_product(db: Session, product_id: str) -> list[InventoryAdjustment]:
    return store.list_records(
        db,
        InventoryAdjustment,
        order_by=(InventoryAdjustment.adjustment_date.desc(), InventoryAdjustment.created_at.desc()),
        product_id=product_id,
    )
