from sqlalchemy import Column, Integer, String

from backoffice.database import Base


class Currency(Base):
    __tablename__ = "currencies"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(3), unique=True, nullable=False)  # ISO 4217
    name = Column(String, nullable=False)
    symbol = Column(String, nullable=True)
