from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, func
from sqlalchemy.orm import relationship

from backoffice.database import Base
from backoffice.models.product import Quantity, Money


# POS / invoice sale. Written by the sales flow; read here by the delete guards.
class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String, unique=True, nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    currency_id = Column(Integer, ForeignKey("currencies.id"), nullable=True, index=True)
    date = Column(Date, nullable=False)
    total = Column(Money, nullable=False, default=Decimal("0"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Quantity, nullable=False)
    price = Column(Money, nullable=False, default=Decimal("0"))

    sale = relationship("Sale", back_populates="items")
