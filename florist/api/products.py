from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from florist.database import get_db
from florist.schemas.inventory_adjustment import InventoryAdjustmentOut
from florist.schemas.product import (
    ProductCreate,
    ProductDetailOut,
    ProductOut,
    ProductSupplierOut,
    ProductUpdate,
    SupplierPriceCreate,
    SupplierPriceOut,
)
from florist.services import product_service

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("", response_model=ProductOut, status_code=201)
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    return product_service.create_product(db, data)


@router.get("", response_model=list[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return product_service.list_products(db)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    if not product:
        raise HTTPException(404, "Product not found")
    return product


@router.get("/{product_id}/detail", response_model=ProductDetailOut)
def get_product_detail(product_id: str, db: Session = Depends(get_db)):
    """Product with its supplier price history and stock movement history."""
    detail = product_service.get_product_detail(db, product_id)
    if not detail:
        raise HTTPException(404, "Product not found")
    return ProductDetailOut(
        product=ProductOut.model_validate(detail["product"]),
        suppliers=[ProductSupplierOut.model_validate(s) for s in detail["suppliers"]],
        adjustments=[InventoryAdjustmentOut.model_validate(a) for a in detail["adjustments"]],
    )


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(product_id: str, data: ProductUpdate, db: Session = Depends(get_db)):
    product = product_service.update_product(db, product_id, data)
    if not product:
        raise HTTPException(404, "Product not found")
    return product


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: str, db: Session = Depends(get_db)):
    if not product_service.delete_product(db, product_id):
        raise HTTPException(404, "Product not found")


@router.post("/{product_id}/prices", response_model=SupplierPriceOut, status_code=201)
def add_supplier_price(product_id: str, data: SupplierPriceCreate, db: Session = Depends(get_db)):
    return product_service.add_supplier_price(db, product_id, data)
