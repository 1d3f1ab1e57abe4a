import enum
from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, Date, DateTime, Enum, Text, func
from sqlalchemy.orm import relationship

from backoffice.database import Base
from backoffice.models.product import Quantity, Money


# Lifecycle of a purchase; only RECEIVED puts goods on the shelf
class PurchaseStatus(str, enum.Enum):
    PENDING = "pending"
    ORDERED = "ordered"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


# Purchase from a supplier into a warehouse
class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    reference = Column(String, unique=True, nullable=False, index=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False, index=True)
    currency_id = Column(Integer, ForeignKey("currencies.id"), nullable=True, index=True)
    date = Column(Date, nullable=False, index=True)
    status = Column(Enum(PurchaseStatus, native_enum=False), nullable=False, default=PurchaseStatus.PENDING, index=True)
    payment_status = Column(Enum(PaymentStatus, native_enum=False), nullable=False, default=PaymentStatus.UNPAID, index=True)

    # Totals; due is always total - paid
    subtotal = Column(Money, nullable=False, default=Decimal("0"))
    tax_rate = Column(Money, nullable=False, default=Decimal("0"))
    tax_amount = Column(Money, nullable=False, default=Decimal("0"))
    discount = Column(Money, nullable=False, default=Decimal("0"))
    shipping = Column(Money, nullable=False, default=Decimal("0"))
    total = Column(Money, nullable=False, default=Decimal("0"))
    paid = Column(Money, nullable=False, default=Decimal("0"))
    due = Column(Money, nullable=False, default=Decimal("0"))

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    supplier = relationship("Supplier")
    warehouse = relationship("Warehouse")
    currency = relationship("Currency")
    items = relationship(
        "PurchaseItem", back_populates="purchase",
        cascade="all, delete-orphan", order_by="PurchaseItem.id",
    )
    returns = relationship("PurchaseReturn", back_populates="purchase")


class PurchaseItem(Base):
    __tablename__ = "purchase_items"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Quantity, nullable=False)
    unit_cost = Column(Money, nullable=False, default=Decimal("0"))
    discount = Column(Money, nullable=False, default=Decimal("0"))
    tax = Column(Money, nullable=False, default=Decimal("0"))
    subtotal = Column(Money, nullable=False, default=Decimal("0"))

    purchase = relationship("Purchase", back_populates="items")
    product = relationship("Product")


# Goods sent back to the supplier; blocks deleting the original purchase
class PurchaseReturn(Base):
    __tablename__ = "purchase_returns"

    id = Column(Integer, primary_key=True, index=True)
    purchase_id = Column(Integer, ForeignKey("purchases.id"), nullable=False, index=True)
    reference = Column(String, unique=True, nullable=False)
    date = Column(Date, nullable=False)
    total = Column(Money, nullable=False, default=Decimal("0"))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    purchase = relationship("Purchase", back_populates="returns")
