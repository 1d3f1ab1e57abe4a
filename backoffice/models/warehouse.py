from sqlalchemy import Column, Integer, String, DateTime, func

from backoffice.database import Base


# Physical stock location; documents and products point at it
class Warehouse(Base):
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    phone = Column(String, nullable=True)
    email = Column(String, unique=True, nullable=True)
    city = Column(String, nullable=True)
    country = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
