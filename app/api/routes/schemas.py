"""
Shared response schemas - models returned by more than one route module
"""
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from app.core.decimals import DecimalStr


class ServiceResponse(BaseModel):
    id: uuid.UUID
    name: str
    icon_url: Optional[str]

    model_config = {"from_attributes": True}


class StationResponse(BaseModel):
    id: uuid.UUID
    name: str
    address: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]
    brand_id: Optional[uuid.UUID]
    rating: Optional[float]
    pump_count: Optional[int]
    queue_count: Optional[int]
    photo_url: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class FuelPriceResponse(BaseModel):
    fuel_type: str
    price: DecimalStr
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class StationWithPricesResponse(StationResponse):
    fuel_prices: List[FuelPriceResponse]


class MessageResponse(BaseModel):
    message: str
