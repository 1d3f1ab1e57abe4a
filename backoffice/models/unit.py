from sqlalchemy import Column, Integer, String

from backoffice.database import Base


# Unit of measure shown next to product quantities (pcs, kg, ...)
class Unit(Base):
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    short_name = Column(String, nullable=True)
