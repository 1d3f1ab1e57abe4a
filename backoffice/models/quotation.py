from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, func
from sqlalchemy.orm import relationship

from backoffice.database import Base
from backoffice.models.product import Quantity, Money


# Price offer to a customer; never moves stock
class Quotation(Base):
    __tablename__ = "quotations"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String, unique=True, nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    total = Column(Money, nullable=False, default=Decimal("0"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("QuotationItem", back_populates="quotation", cascade="all, delete-orphan")


class QuotationItem(Base):
    __tablename__ = "quotation_items"

    id = Column(Integer, primary_key=True, index=True)
    quotation_id = Column(Integer, ForeignKey("quotations.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Quantity, nullable=False)
    price = Column(Money, nullable=False, default=Decimal("0"))

    quotation = relationship("Quotation", back_populates="items")
