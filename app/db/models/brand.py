"""
Brand Model - fuel retailer brand (Pertamina, Shell, ...)
"""
import uuid
from sqlalchemy import Column, String, Text, Uuid

from app.db.database import Base


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    logo_url = Column(Text, nullable=True)
