"""
FuelPrice Model - current price per liter of one fuel type at one station
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.compat import ExactDecimal
from app.db.database import Base


class FuelPrice(Base):
    __tablename__ = "fuel_prices"
    __table_args__ = (
        UniqueConstraint("spbu_id", "fuel_type", name="uq_fuel_prices_spbu_fuel_type"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    spbu_id = Column(Uuid, ForeignKey("spbu.id", ondelete="CASCADE"), nullable=False, index=True)
    fuel_type = Column(String(50), nullable=False)
    price = Column(ExactDecimal, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    station = relationship("Station", back_populates="fuel_prices")
