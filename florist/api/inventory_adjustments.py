from fastapi import APIRouter, Depends, Header, HTTPException, Response
from sqlalchemy.orm import Session

from florist.database import get_db
from florist.schemas.inventory_adjustment import (
    InventoryAdjustmentCreate,
    InventoryAdjustmentOut,
    StockReconciliationOut,
)
from florist.services import adjustment_service, product_service, stock_service

router = APIRouter(prefix="/inventory-adjustments", tags=["Inventory Adjustments"])


@router.post("", response_model=InventoryAdjustmentOut, status_code=201)
def create_inventory_adjustment(
    data: InventoryAdjustmentCreate,
    response: Response,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
):
    adjustment, created = adjustment_service.create_inventory_adjustment(db, data, idempotency_key=idempotency_key)
    if not created:
        response.status_code = 200
    return adjustment


@router.get("", response_model=list[InventoryAdjustmentOut])
def list_inventory_adjustments(db: Session = Depends(get_db)):
    return adjustment_service.list_adjustments(db)


@router.get("/reconcile", response_model=list[StockReconciliationOut])
def check_stock(only_drift: bool = False, db: Session = Depends(get_db)):
    """Compare stored stock with the stock implied by the adjustment ledger."""
    return stock_service.reconcile(db, only_drift=only_drift)


@router.post("/reconcile", response_model=list[StockReconciliationOut])
def reconcile_stock(db: Session = Depends(get_db)):
    """Reset drifting products to their ledger stock."""
    return stock_service.reconcile(db, apply=True)


@router.get("/product/{product_id}", response_model=list[InventoryAdjustmentOut])
def list_product_adjustments(product_id: str, db: Session = Depends(get_db)):
    if not product_service.get_product(db, product_id):
        raise HTTPException(404, "Product not found")
    return adjustment_service.list_adjustments_for_product(db, product_id)


@router.get("/{adjustment_id}", response_model=InventoryAdjustmentOut)
def get_inventory_adjustment(adjustment_id: str, db: Session = Depends(get_db)):
    adjustment = adjustment_service.get_adjustment(db, adjustment_id)
    if not adjustment:
        raise HTTPException(404, "Inventory adjustment not found")
    return adjustment
