from datetime import datetime

from pydantic import Field

from florist.schemas.base import ApiModel


class SupplierCreate(ApiModel):
    name: str = Field(min_length=1)


class SupplierOut(ApiModel):
    id: str
    name: str
    created_at: datetime | None = None
