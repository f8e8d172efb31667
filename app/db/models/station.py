"""
Station Model - a fuel station (SPBU)
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Float, Integer, Text, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from app.db.database import Base


class Station(Base):
    """Fuel station listed in the directory"""

    __tablename__ = "spbu"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    address = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    brand_id = Column(Uuid, ForeignKey("brands.id", ondelete="SET NULL"), nullable=True, index=True)
    rating = Column(Float, nullable=True)
    pump_count = Column(Integer, nullable=True)
    queue_count = Column(Integer, nullable=True)
    photo_url = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    brand = relationship("Brand")
    fuel_prices = relationship(
        "FuelPrice",
        back_populates="station",
        cascade="all, delete-orphan",
        order_by="FuelPrice.fuel_type",
    )
