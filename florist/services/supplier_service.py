import logging

from sqlalchemy.orm import Session

from florist.models.supplier import Supplier
from florist.schemas.supplier import SupplierCreate
from florist.services import store
from florist.services.errors import DuplicateRecord, ValidationError

logger = logging.getLogger(__name__)


def create_supplier(db: Session, data: SupplierCreate) -> Supplier:
    if store.find_one(db, Supplier, name=data.name):
        raise ValidationError(f"Supplier {data.name} already exists")
    try:
        with store.transaction(db, "create supplier"):
            supplier = store.put(db, Supplier(name=data.name))
    except DuplicateRecord:
        raise ValidationError(f"Supplier {data.name} already exists")
    db.refresh(supplier)
    logger.info("Created supplier %s (%s)", supplier.id, supplier.name)
    return supplier


def get_supplier(db: Session, supplier_id: str) -> Supplier | None:
    return store.get(db, Supplier, supplier_id)


def list_suppliers(db: Session) -> list[Supplier]:
    return store.list_records(db, Supplier, order_by=Supplier.name)


def delete_supplier(db: Session, supplier_id: str) -> bool:
    """Remove the supplier together with its price history."""
    with store.transaction(db, "delete supplier"):
        deleted = store.delete(db, Supplier, supplier_id)
    if deleted:
        logger.info("Deleted supplier %s", supplier_id)
    return deleted
