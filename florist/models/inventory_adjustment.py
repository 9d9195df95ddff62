import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from florist.database import Base


class AdjustmentType(str, PyEnum):
    INCOMING = "Incoming"
    OUTGOING = "Outgoing"


class InventoryAdjustment(Base):
    """Immutable ledger entry for one stock movement. Never updated or deleted."""

    __tablename__ = "inventory_adjustments"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id: Mapped[str] = mapped_column(String, ForeignKey("products.id"), nullable=False, index=True)
    adjustment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    adjustment_type: Mapped[str] = mapped_column(
        Enum(AdjustmentType, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)  # always positive
    reason: Mapped[str] = mapped_column(String, nullable=False)  # "Purchase: INV-1", "Sale: Jane", "damaged"
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Set only for manual adjustments submitted with an Idempotency-Key
    idempotency_key: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
