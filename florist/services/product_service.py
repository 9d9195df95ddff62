import logging

from sqlalchemy.orm import Session

from florist.models.inventory_adjustment import AdjustmentType, InventoryAdjustment
from florist.models.product import Product
from florist.models.purchase import PurchaseItem
from florist.models.sale import SaleItem
from florist.models.supplier import Supplier, SupplierPrice
from florist.schemas.base import utcnow
from florist.schemas.product import ProductCreate, ProductUpdate, SupplierPriceCreate
from florist.services import adjustment_service, store
from florist.services.errors import ConcurrencyError, NotFound, ValidationError

logger = logging.getLogger(__name__)


def create_product(db: Session, data: ProductCreate) -> Product:
    for entry in data.suppliers:
        if store.get(db, Supplier, entry.supplier_id) is None:
            raise ValidationError(f"Supplier {entry.supplier_id} not found")

    now = utcnow()
    with store.transaction(db, "create product") as tx:
        tx.step = "create product"
        product = store.put(db, Product(name=data.name, current_stock=data.current_stock))

        # Keeps the ledger in step with the stored stock from the start
        if data.current_stock > 0:
            tx.step = "record initial stock"
            adjustment_service.record_adjustment(
                db,
                product_id=product.id,
                adjustment_date=now,
                adjustment_type=AdjustmentType.INCOMING,
                quantity=data.current_stock,
                reason="Initial stock",
            )

        for entry in data.suppliers:
            tx.step = f"record price from supplier {entry.supplier_id}"
            store.put(db, SupplierPrice(
                product_id=product.id,
                supplier_id=entry.supplier_id,
                price=entry.price,
                price_date=entry.price_date or now,
            ))

    db.refresh(product)
    logger.info("Created product %s (%s) with stock %d", product.id, product.name, product.current_stock)
    return product


def get_product(db: Session, product_id: str) -> Product | None:
    return store.get(db, Product, product_id)


def list_products(db: Session) -> list[Product]:
    return store.list_records(db, Product, order_by=Product.name)


def update_product(db: Session, product_id: str, data: ProductUpdate) -> Product | None:
    product = get_product(db, product_id)
    if not product:
        return None
    if data.version is not None and data.version != product.version:
        raise ConcurrencyError(
            f"Product {product_id} was modified (version {product.version}, expected {data.version})"
        )
    update_data = data.model_dump(exclude_unset=True, exclude={"version"}, exclude_none=True)
    with store.transaction(db, "update product"):
        for field, value in update_data.items():
            setattr(product, field, value)
        store.put(db, product)
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: str) -> bool:
    product = get_product(db, product_id)
    if not product:
        return False
    references = (
        store.count(db, PurchaseItem, product_id=product_id)
        + store.count(db, SaleItem, product_id=product_id)
        + store.count(db, InventoryAdjustment, product_id=product_id)
    )
    if references:
        raise ValidationError(f"Cannot delete product {product.name}: it is referenced by {references} records")
    with store.transaction(db, "delete product"):
        store.delete(db, Product, product_id)
    logger.info("Deleted product %s (%s)", product_id, product.name)
    return True


def add_supplier_price(db: Session, product_id: str, data: SupplierPriceCreate) -> SupplierPrice:
    """Append a price to the product's history with one supplier."""
    if get_product(db, product_id) is None:
        raise NotFound("Product", product_id)
    if store.get(db, Supplier, data.supplier_id) is None:
        raise NotFound("Supplier", data.supplier_id)
    with store.transaction(db, "add supplier price"):
        entry = store.put(db, SupplierPrice(
            product_id=product_id,
            supplier_id=data.supplier_id,
            price=data.price,
            price_date=data.price_date or utcnow(),
        ))
    db.refresh(entry)
    return entry


def get_supplier_prices(db: Session, product_id: str) -> list[dict]:
    """Price history grouped per supplier, oldest first; the last entry is the current price."""
    entries = store.list_records(
        db,
        SupplierPrice,
        order_by=(SupplierPrice.price_date, SupplierPrice.created_at),
        product_id=product_id,
    )
    grouped: dict[str, dict] = {}
    for entry in entries:
        group = grouped.setdefault(entry.supplier_id, {
            "supplier_id": entry.supplier_id,
            "supplier_name": entry.supplier.name,
            "price_history": [],
        })
        group["price_history"].append({"date": entry.price_date, "price": entry.price})
    for group in grouped.values():
        group["current_price"] = group["price_history"][-1]["price"]
    return list(grouped.values())


def get_product_detail(db: Session, product_id: str) -> dict | None:
    product = get_product(db, product_id)
    if not product:
        return None
    return {
        "product": product,
        "suppliers": get_supplier_prices(db, product_id),
        "adjustments": adjustment_service.list_adjustments_for_product(db, product_id),
    }
