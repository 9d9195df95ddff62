from datetime import datetime

from pydantic import Field

from florist.schemas.base import ApiModel, UtcDateTime


class SaleHeader(ApiModel):
    customer_name: str = Field(min_length=1)
    customer_contact: str = Field(min_length=1)
    sale_date: UtcDateTime
    sale_amount: float = Field(ge=0)


class SaleItemCreate(ApiModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)


class SaleCreate(ApiModel):
    sale: SaleHeader
    items: list[SaleItemCreate] = Field(min_length=1)


class SaleOut(ApiModel):
    id: str
    customer_name: str
    customer_contact: str
    sale_date: UtcDateTime
    sale_amount: float
    created_at: datetime | None = None


class SaleItemOut(ApiModel):
    id: str
    sale_id: str
    product_id: str
    quantity: int


class SaleWithItemsOut(ApiModel):
    sale: SaleOut
    items: list[SaleItemOut]
