from sqlalchemy import Column, Integer, String, DateTime, JSON, func

from backoffice.database import Base


# Audit trail of document mutations and master data changes
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    # Event timestamp and core action details
    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    status = Column(String(20), index=True)
    ip = Column(String(64), nullable=True)

    # JSON container for flexible context data (ids, references, stock deltas)
    meta = Column(JSON, nullable=True)
