import enum

from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Enum, Text, func
from sqlalchemy.orm import relationship

from backoffice.database import Base
from backoffice.models.product import Quantity


# Direction of a stock adjustment line
class AdjustmentType(str, enum.Enum):
    ADDITION = "addition"
    SUBTRACTION = "subtraction"


# Manual stock correction document (count differences, damage, found goods)
class Adjustment(Base):
    __tablename__ = "adjustments"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String, unique=True, nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    # Document level hint only; every item carries its own direction
    type = Column(Enum(AdjustmentType, native_enum=False), nullable=False, default=AdjustmentType.ADDITION)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    warehouse = relationship("Warehouse")
    items = relationship(
        "AdjustmentItem", back_populates="adjustment",
        cascade="all, delete-orphan", order_by="AdjustmentItem.id",
    )


class AdjustmentItem(Base):
    __tablename__ = "adjustment_items"

    id = Column(Integer, primary_key=True, index=True)
    adjustment_id = Column(Integer, ForeignKey("adjustments.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Quantity, nullable=False)
    type = Column(Enum(AdjustmentType, native_enum=False), nullable=False)
    # Stock before this document was applied; audit snapshot, never re-derived
    pre_stock = Column(Quantity, nullable=True)

    adjustment = relationship("Adjustment", back_populates="items")
    product = relationship("Product")
