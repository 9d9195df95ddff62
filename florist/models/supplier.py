import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from florist.database import Base


class Supplier(Base):
    __tablename__ = "suppliers"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    prices: Mapped[list["SupplierPrice"]] = relationship(
        "SupplierPrice", back_populates="supplier", cascade="all, delete-orphan"
    )


class SupplierPrice(Base):
    """One append-only entry in a supplier's price history for a product."""

    __tablename__ = "supplier_prices"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id: Mapped[str] = mapped_column(String, ForeignKey("products.id"), nullable=False, index=True)
    supplier_id: Mapped[str] = mapped_column(String, ForeignKey("suppliers.id"), nullable=False, index=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    price_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    product: Mapped["Product"] = relationship("Product", back_populates="prices")  # noqa: F821
    supplier: Mapped["Supplier"] = relationship("Supplier", back_populates="prices")
