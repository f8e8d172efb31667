"""
Service Model - an amenity a station can offer (toilet, ATM, air pump, ...)
"""
import uuid
from sqlalchemy import Column, String, Text, Uuid

from app.db.database import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    icon_url = Column(Text, nullable=True)
