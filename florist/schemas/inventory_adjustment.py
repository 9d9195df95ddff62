from datetime import datetime
from enum import Enum as PyEnum

from pydantic import Field

from florist.models.inventory_adjustment import AdjustmentType
from florist.schemas.base import ApiModel, UtcDateTime


class AdjustmentReason(str, PyEnum):
    DAMAGED = "damaged"
    EXPIRED = "expired"
    LOST = "lost"
    OTHER = "other"


class InventoryAdjustmentCreate(ApiModel):
    product_id: str = Field(min_length=1)
    adjustment_date: UtcDateTime | None = None  # defaults to now
    adjustment_type: AdjustmentType
    quantity: int = Field(gt=0)
    reason: AdjustmentReason
    notes: str | None = None


class InventoryAdjustmentOut(ApiModel):
    id: str
    product_id: str
    adjustment_date: datetime
    adjustment_type: AdjustmentType
    quantity: int
    reason: str
    notes: str | None = None
    created_at: datetime | None = None


class StockReconciliationOut(ApiModel):
    product_id: str
    name: str
    current_stock: int
    ledger_stock: int
    drift: int  # current_stock - ledger_stock, measured before any correction
