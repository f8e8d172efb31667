"""
StationServiceLink Model - link between a station and a service it offers
"""
from datetime import datetime
from sqlalchemy import Column, DateTime, ForeignKey, Uuid

from app.db.database import Base


class StationServiceLink(Base):
    """Composite primary key: a service is linked to a station at most once"""

    __tablename__ = "spbu_services"

    spbu_id = Column(Uuid, ForeignKey("spbu.id", ondelete="CASCADE"), primary_key=True)
    service_id = Column(Uuid, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime, default=datetime.utcnow)
