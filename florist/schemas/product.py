from datetime import datetime

from pydantic import Field

from florist.schemas.base import ApiModel, UtcDateTime
from florist.schemas.inventory_adjustment import InventoryAdjustmentOut


class SupplierPriceCreate(ApiModel):
    supplier_id: str = Field(min_length=1)
    price: float = Field(ge=0)
    price_date: UtcDateTime | None = None  # defaults to now


class ProductCreate(ApiModel):
    name: str = Field(min_length=1)
    current_stock: int = Field(default=0, ge=0)
    suppliers: list[SupplierPriceCreate] = []


class ProductUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1)
    # Optimistic concurrency: reject the edit if the stored version moved on
    version: int | None = None


class ProductOut(ApiModel):
    id: str
    name: str
    current_stock: int
    version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PriceEntryOut(ApiModel):
    date: datetime
    price: float


class ProductSupplierOut(ApiModel):
    supplier_id: str
    supplier_name: str
    current_price: float
    price_history: list[PriceEntryOut]


class SupplierPriceOut(ApiModel):
    id: str
    product_id: str
    supplier_id: str
    price: float
    price_date: datetime


class ProductDetailOut(ApiModel):
    product: ProductOut
    suppliers: list[ProductSupplierOut]
    adjustments: list[InventoryAdjustmentOut]
