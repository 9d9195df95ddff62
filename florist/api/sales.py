from fastapi import APIRouter, Depends, Header, HTTPException, Response
from sqlalchemy.orm import Session

from florist.database import get_db
from florist.schemas.sale import SaleCreate, SaleItemOut, SaleOut, SaleWithItemsOut
from florist.services import sale_service

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.post("", response_model=SaleWithItemsOut, status_code=201)
def create_sale(
    data: SaleCreate,
    response: Response,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
):
    sale, created = sale_service.create_sale(db, data, idempotency_key=idempotency_key)
    if not created:
        response.status_code = 200
    return SaleWithItemsOut(
        sale=SaleOut.model_validate(sale),
        items=[SaleItemOut.model_validate(item) for item in sale.items],
    )


@router.get("", response_model=list[SaleOut])
def list_sales(db: Session = Depends(get_db)):
    return sale_service.list_sales(db)


@router.get("/{sale_id}", response_model=SaleOut)
def get_sale(sale_id: str, db: Session = Depends(get_db)):
    sale = sale_service.get_sale(db, sale_id)
    if not sale:
        raise HTTPException(404, "Sale not found")
    return sale


@router.get("/{sale_id}/items", response_model=list[SaleItemOut])
def get_sale_items(sale_id: str, db: Session = Depends(get_db)):
    if not sale_service.get_sale(db, sale_id):
        raise HTTPException(404, "Sale not found")
    return sale_service.get_sale_items(db, sale_id)


@router.delete("/{sale_id}", status_code=204)
def delete_sale(sale_id: str, db: Session = Depends(get_db)):
    if not sale_service.delete_sale(db, sale_id):
        raise HTTPException(404, "Sale not found")
