from datetime import datetime

from pydantic import Field

from florist.schemas.base import ApiModel, UtcDateTime


class PurchaseHeader(ApiModel):
    invoice_number: str = Field(min_length=1)
    order_date: UtcDateTime
    supplier: str = Field(min_length=1)
    delivery_cost: float = Field(default=0.0, ge=0)
    total_amount: float = Field(ge=0)


class PurchaseItemCreate(ApiModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    unit_price: float = Field(gt=0)
    final_value: float | None = Field(default=None, ge=0)  # unit_price * quantity when omitted


class PurchaseCreate(ApiModel):
    purchase: PurchaseHeader
    items: list[PurchaseItemCreate] = Field(min_length=1)


class PurchaseOut(ApiModel):
    id: str
    invoice_number: str
    order_date: UtcDateTime
    supplier: str
    delivery_cost: float
    total_amount: float
    created_at: datetime | None = None


class PurchaseItemOut(ApiModel):
    id: str
    purchase_id: str
    product_id: str
    quantity: int
    unit_price: float
    final_value: float


class PurchaseWithItemsOut(ApiModel):
    purchase: PurchaseOut
    items: list[PurchaseItemOut]
