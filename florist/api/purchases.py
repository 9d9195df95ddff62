from fastapi import APIRouter, Depends, Header, HTTPException, Response
from sqlalchemy.orm import Session

from florist.database import get_db
from florist.schemas.purchase import PurchaseCreate, PurchaseItemOut, PurchaseOut, PurchaseWithItemsOut
from florist.services import purchase_service

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.post("", response_model=PurchaseWithItemsOut, status_code=201)
def create_purchase(
    data: PurchaseCreate,
    response: Response,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
):
    purchase, created = purchase_service.create_purchase(db, data, idempotency_key=idempotency_key)
    if not created:
        response.status_code = 200
    return PurchaseWithItemsOut(
        purchase=PurchaseOut.model_validate(purchase),
        items=[PurchaseItemOut.model_validate(item) for item in purchase.items],
    )


@router.get("", response_model=list[PurchaseOut])
def list_purchases(db: Session = Depends(get_db)):
    return purchase_service.list_purchases(db)


@router.get("/{purchase_id}", response_model=PurchaseOut)
def get_purchase(purchase_id: str, db: Session = Depends(get_db)):
    purchase = purchase_service.get_purchase(db, purchase_id)
    if not purchase:
        raise HTTPException(404, "Purchase not found")
    return purchase


@router.get("/{purchase_id}/items", response_model=list[PurchaseItemOut])
def get_purchase_items(purchase_id: str, db: Session = Depends(get_db)):
    if not purchase_service.get_purchase(db, purchase_id):
        raise HTTPException(404, "Purchase not found")
    return purchase_service.get_purchase_items(db, purchase_id)


@router.delete("/{purchase_id}", status_code=204)
def delete_purchase(purchase_id: str, db: Session = Depends(get_db)):
    if not purchase_service.delete_purchase(db, purchase_id):
        raise HTTPException(404, "Purchase not found")
