# backoffice/models/product.py
from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, CheckConstraint, func
from sqlalchemy.orm import relationship

from backoffice.database import Base

# Quantities keep four decimal places, money two.
Quantity = Numeric(18, 4)
Money = Numeric(18, 2)


# Model Product
# A catalogue entry whose stock is owned by the stock ledger: after creation
# `stock` only moves through adjustments, purchases and the other documents.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    barcode = Column(String, unique=True, nullable=True, index=True)

    # Prices are never negative.
    cost = Column(Money, CheckConstraint("cost >= 0"), nullable=False, default=Decimal("0"))
    price = Column(Money, CheckConstraint("price >= 0"), nullable=False, default=Decimal("0"))

    # Stock data; no floor at zero here, see ALLOW_NEGATIVE_STOCK.
    stock = Column(Quantity, nullable=False, default=Decimal("0"), server_default="0")
    alert_quantity = Column(Quantity, nullable=False, default=Decimal("0"), server_default="0")

    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    unit = relationship("Unit")
    warehouse = relationship("Warehouse")
